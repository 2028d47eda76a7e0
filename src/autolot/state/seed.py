"""Bundled reference vehicles merged into every catalog on load."""

from __future__ import annotations

import importlib.resources
import json
import logging

from autolot.exceptions import PersistenceError
from autolot.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)


def load_seed_records() -> list[VehicleRecord]:
    """Read the seed catalog shipped in package data."""
    _logger.debug("Loading seed catalog from package data")
    try:
        ref = importlib.resources.files("autolot").joinpath("data/seed_catalog.json")
        raw = json.loads(ref.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Seed catalog is missing or unreadable: {exc}", path="data/seed_catalog.json") from exc
    return [VehicleRecord.model_validate(item) for item in raw]
