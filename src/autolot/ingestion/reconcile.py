"""VIN-keyed reconciliation of imported listings against the catalog.

Both passes are pure: they read the records they are given and return
new tuples; persisting the outcome is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from autolot._constants import IMPORT_ID_PREFIX
from autolot._ids import new_record_id
from autolot.ingestion.candidates import to_vehicle_record
from autolot.ingestion.normalize import normalize_vin
from autolot.models.candidate import DedupResult, ImportCandidate, ReconcileResult
from autolot.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)


def _import_id() -> str:
    return new_record_id(IMPORT_ID_PREFIX)


def reconcile(
    existing: Iterable[VehicleRecord],
    candidates: Iterable[ImportCandidate],
    *,
    id_factory: Callable[[], str] = _import_id,
    strict: bool = False,
) -> ReconcileResult:
    """Split *candidates* into records to import and candidates to skip.

    A candidate is skipped when its VIN is already in *existing* or was
    accepted earlier in the same batch, or when it has no VIN at all.
    Accepted candidates receive a fresh id from *id_factory* and are
    normalized with :func:`~autolot.ingestion.candidates.to_vehicle_record`.
    """
    seen = {normalize_vin(record.vin) for record in existing}
    to_import: list[VehicleRecord] = []
    skipped: list[ImportCandidate] = []

    for candidate in candidates:
        vin = normalize_vin(candidate.vin)
        if not vin:
            _logger.warning("Skipping candidate without VIN: %s", candidate.label)
            skipped.append(candidate)
            continue
        if vin in seen:
            _logger.debug("Skipping candidate with known VIN %s", vin)
            skipped.append(candidate)
            continue
        to_import.append(to_vehicle_record(candidate, id_factory(), strict=strict))
        seen.add(vin)

    if skipped:
        _logger.info("Reconciled import batch: %d new, %d skipped", len(to_import), len(skipped))
    return ReconcileResult(to_import=tuple(to_import), skipped=tuple(skipped))


def deduplicate_existing(records: Iterable[VehicleRecord]) -> DedupResult:
    """Keep the first record per VIN, preserving catalog order."""
    seen: set[str] = set()
    unique: list[VehicleRecord] = []
    removed = 0
    for record in records:
        vin = normalize_vin(record.vin)
        if vin in seen:
            removed += 1
            continue
        seen.add(vin)
        unique.append(record)
    return DedupResult(unique=tuple(unique), removed_count=removed)
