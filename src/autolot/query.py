"""Inventory query engine.

Everything here is pure: functions take a sequence of records and return
new lists or values without touching their input.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from autolot.models.filters import FilterSet, Range, SortKey
from autolot.models.vehicle import Condition, VehicleRecord

_SORT_KEYS: dict[SortKey, tuple[Callable[[VehicleRecord], Any], bool]] = {
    SortKey.PRICE_LOW: (lambda r: r.price, False),
    SortKey.PRICE_HIGH: (lambda r: r.price, True),
    SortKey.YEAR_NEW: (lambda r: r.year, True),
    SortKey.YEAR_OLD: (lambda r: r.year, False),
    SortKey.MILEAGE_LOW: (lambda r: r.mileage, False),
}


def _matches_search(record: VehicleRecord, needle: str) -> bool:
    haystack = f"{record.make} {record.model} {record.year}".casefold()
    return needle in haystack


def _in_range(value: float, bounds: Range | None) -> bool:
    return bounds is None or bounds.contains(value)


def matches(record: VehicleRecord, filters: FilterSet) -> bool:
    """True when *record* satisfies every populated predicate of *filters*."""
    if filters.make is not None and record.make != filters.make:
        return False
    if filters.condition is not None and record.condition != filters.condition:
        return False
    if filters.body_type is not None and record.body_type != filters.body_type:
        return False
    if filters.transmission is not None and record.transmission != filters.transmission:
        return False
    if filters.fuel_type is not None and record.fuel_type != filters.fuel_type:
        return False
    return (
        _in_range(record.price, filters.price_range)
        and _in_range(record.year, filters.year_range)
        and _in_range(record.mileage, filters.mileage_range)
    )


def query(
    records: Iterable[VehicleRecord],
    filters: FilterSet | None = None,
    search_text: str = "",
    sort_key: SortKey | str = SortKey.PRICE_LOW,
) -> list[VehicleRecord]:
    """Return the available records matching *filters* and *search_text*, sorted.

    Search is a case-insensitive substring match against
    ``"{make} {model} {year}"``; the text is used as given, untrimmed.
    The sort is stable, so records that tie on the sort key keep their
    catalog order.
    """
    key = SortKey(sort_key)
    needle = search_text.casefold()

    result = [record for record in records if record.available]
    if needle:
        result = [record for record in result if _matches_search(record, needle)]
    if filters is not None and not filters.is_empty:
        result = [record for record in result if matches(record, filters)]

    key_func, reverse = _SORT_KEYS[key]
    # sorted() stays stable with reverse=True: ties keep input order.
    return sorted(result, key=key_func, reverse=reverse)


class InventoryStats(BaseModel):
    """Dashboard counters for the admin area."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    available: int = 0
    sold: int = 0
    new: int = 0
    used: int = 0
    total_value: float = 0.0
    """Sum of prices over every record, sold ones included."""
    average_price: float = 0.0
    """Mean price of available records."""


def inventory_stats(records: Sequence[VehicleRecord]) -> InventoryStats:
    available = [record for record in records if record.available]
    return InventoryStats(
        total=len(records),
        available=len(available),
        sold=len(records) - len(available),
        new=sum(1 for record in records if record.condition == Condition.NEW),
        used=sum(1 for record in records if record.condition == Condition.USED),
        total_value=sum(record.price for record in records),
        average_price=sum(record.price for record in available) / len(available) if available else 0.0,
    )


def featured(records: Iterable[VehicleRecord], limit: int = 3) -> list[VehicleRecord]:
    """First *limit* available records in catalog order."""
    result: list[VehicleRecord] = []
    for record in records:
        if len(result) >= limit:
            break
        if record.available:
            result.append(record)
    return result


def available_makes(records: Iterable[VehicleRecord]) -> list[str]:
    return sorted({record.make for record in records if record.available})
