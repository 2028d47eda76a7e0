"""Candidate → catalog record conversion.

Import is best-effort: numbers that do not parse become ``0`` and
unrecognized vocabulary falls back to a documented default, so a
messy listing never aborts a batch. ``strict=True`` turns unparseable
numbers into a :class:`~autolot.exceptions.ValidationError` instead.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from autolot._constants import BODY_TYPE_KEYWORDS, DEFAULT_BODY_TYPE, MIN_VEHICLE_YEAR
from autolot.exceptions import ValidationError
from autolot.ingestion.normalize import non_negative_or_zero, normalize_vin, safe_float, safe_int
from autolot.models.candidate import ImportCandidate
from autolot.models.vehicle import BodyType, Condition, FuelType, Transmission, VehicleRecord

_logger = logging.getLogger(__name__)


def classify_body_type(model: str, category: str | None = None) -> BodyType:
    """Map a source category, or failing that the model name, to a body type.

    >>> classify_body_type("Silverado 1500")
    <BodyType.TRUCK: 'truck'>
    """
    if category:
        try:
            return BodyType(category)
        except ValueError:
            pass
    text = " ".join(part.lower() for part in (model, category) if part)
    for body_type, keywords in BODY_TYPE_KEYWORDS:
        if any(re.search(rf"\b{re.escape(keyword)}\b", text) for keyword in keywords):
            return BodyType(body_type)
    return BodyType(DEFAULT_BODY_TYPE)


def classify_transmission(value: str | None) -> Transmission:
    if value and "manual" in value.lower():
        return Transmission.MANUAL
    return Transmission.AUTOMATIC


def classify_fuel_type(value: str | None) -> FuelType:
    if not value:
        return FuelType.GASOLINE
    lowered = value.lower()
    if "hybrid" in lowered:
        return FuelType.HYBRID
    if "electric" in lowered or lowered.strip() == "ev":
        return FuelType.ELECTRIC
    return FuelType.GASOLINE


def classify_condition(value: str | None) -> Condition:
    if value:
        try:
            return Condition(value)
        except ValueError:
            pass
    return Condition.USED


def _number(candidate: ImportCandidate, field: str, *, strict: bool) -> Any:
    value = getattr(candidate, field)
    if strict and value is not None and safe_float(value) is None:
        raise ValidationError(
            f"Candidate {candidate.label} has an unparseable {field}",
            errors={field: f"could not parse {value!r} as a number"},
        )
    return value


def to_vehicle_record(candidate: ImportCandidate, record_id: str, *, strict: bool = False) -> VehicleRecord:
    """Normalize *candidate* into a catalog record with id *record_id*."""
    price = safe_float(_number(candidate, "price", strict=strict))
    mileage = non_negative_or_zero(_number(candidate, "mileage", strict=strict))
    year = safe_int(_number(candidate, "year", strict=strict)) or 0
    if year < MIN_VEHICLE_YEAR:
        if strict:
            raise ValidationError(
                f"Candidate {candidate.label} has an invalid year",
                errors={"year": f"year must be {MIN_VEHICLE_YEAR} or later"},
            )
        _logger.debug("Candidate %s has year %r; storing %d", candidate.label, candidate.year, MIN_VEHICLE_YEAR)
        year = MIN_VEHICLE_YEAR

    data: dict[str, Any] = {
        "id": record_id,
        "make": candidate.make or "Unknown",
        "model": candidate.model or "Unknown",
        "year": year,
        "price": max(price or 0.0, 0.0),
        "mileage": mileage,
        "condition": classify_condition(candidate.condition),
        "body_type": classify_body_type(candidate.model, candidate.body_type),
        "transmission": classify_transmission(candidate.transmission),
        "fuel_type": classify_fuel_type(candidate.fuel_type),
        "exterior_color": candidate.exterior_color,
        "interior_color": candidate.interior_color,
        "engine": candidate.engine,
        "features": list(candidate.features),
        "images": list(candidate.images),
        "description": candidate.description,
        "available": True,
        "vin": normalize_vin(candidate.vin),
    }
    return VehicleRecord.validate_or_raise(data, message=f"Candidate {candidate.label} could not be normalized")
