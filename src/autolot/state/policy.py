"""Catalog merge policy.

Pure helpers deciding how persisted data, seed data and incoming records
combine. No I/O happens here.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

from autolot.ingestion.normalize import normalize_vin
from autolot.models.vehicle import VehicleRecord


def merge_seed(
    persisted: Sequence[VehicleRecord],
    seed: Sequence[VehicleRecord],
    retired: Collection[str] = frozenset(),
) -> tuple[list[VehicleRecord], list[VehicleRecord]]:
    """Combine the persisted catalog with the seed set.

    Returns ``(merged, missing)``. Seed records whose id is neither in
    *persisted* nor in *retired* (deleted by an operator) are appended in
    seed order, so an empty catalog becomes the full seed set. ``missing``
    is empty when nothing had to be added.
    """
    known = {record.id for record in persisted}
    missing = [record for record in seed if record.id not in known and record.id not in retired]
    return [*persisted, *missing], missing


def find_vin_conflict(
    records: Iterable[VehicleRecord],
    vin: str,
    *,
    ignore_id: str | None = None,
) -> VehicleRecord | None:
    """Return the first record other than *ignore_id* carrying *vin*."""
    wanted = normalize_vin(vin)
    if not wanted:
        return None
    for record in records:
        if record.id != ignore_id and normalize_vin(record.vin) == wanted:
            return record
    return None


def first_duplicate_vin(records: Iterable[VehicleRecord]) -> tuple[VehicleRecord, VehicleRecord] | None:
    """Return ``(first, duplicate)`` for the first repeated VIN in *records*."""
    seen: dict[str, VehicleRecord] = {}
    for record in records:
        vin = normalize_vin(record.vin)
        if vin in seen:
            return seen[vin], record
        seen[vin] = record
    return None
