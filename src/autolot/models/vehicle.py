"""Vehicle catalog models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from autolot._constants import MIN_VEHICLE_YEAR
from autolot.ingestion.normalize import normalize_vin, unique_texts
from autolot.models._base import AutolotBaseModel, LotEnum, _field_lookup


class Condition(LotEnum):
    NEW = "new"
    USED = "used"


class BodyType(LotEnum):
    SEDAN = "sedan"
    SUV = "suv"
    TRUCK = "truck"
    COUPE = "coupe"
    CONVERTIBLE = "convertible"
    HATCHBACK = "hatchback"


class Transmission(LotEnum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class FuelType(LotEnum):
    GASOLINE = "gasoline"
    HYBRID = "hybrid"
    ELECTRIC = "electric"


class VehicleDraft(AutolotBaseModel):
    """A vehicle as entered in the admin form, before it has a catalog id.

    Serialized with the storefront's keys (``type``, ``exterior``,
    ``interior``, ``fuelType``); the Supabase-style snake_case keys
    (``exterior_color``, ``fuel_type``) are accepted on input.
    """

    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: int = Field(ge=MIN_VEHICLE_YEAR)
    price: float = Field(ge=0)
    mileage: int = Field(default=0, ge=0)
    condition: Condition
    body_type: BodyType = Field(
        validation_alias=AliasChoices("type", "bodyType", "body_type"),
        serialization_alias="type",
    )
    transmission: Transmission = Transmission.AUTOMATIC
    fuel_type: FuelType = Field(
        default=FuelType.GASOLINE,
        validation_alias=AliasChoices("fuelType", "fuel_type"),
        serialization_alias="fuelType",
    )
    exterior_color: str = Field(
        default="",
        validation_alias=AliasChoices("exterior", "exteriorColor", "exterior_color"),
        serialization_alias="exterior",
    )
    interior_color: str = Field(
        default="",
        validation_alias=AliasChoices("interior", "interiorColor", "interior_color"),
        serialization_alias="interior",
    )
    engine: str = ""
    features: list[str] = Field(default_factory=list)
    """Ordered feature tags; blanks and repeats are dropped."""
    images: list[str] = Field(default_factory=list)
    """Ordered image URLs; the first one is shown as the thumbnail."""
    description: str = ""
    available: bool = True
    vin: str = Field(min_length=1)
    """Vehicle Identification Number, stored upper-case without spaces."""

    @field_validator("features", "images", mode="before")
    @classmethod
    def _unique_texts(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return unique_texts(value)
        return value

    @field_validator("vin", mode="before")
    @classmethod
    def _normalize_vin(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_vin(value)
        return value

    @property
    def title(self) -> str:
        """Display title, e.g. ``"2023 Toyota Camry"``."""
        return f"{self.year} {self.make} {self.model}"

    def to_storage(self) -> dict[str, Any]:
        """Dump using the storefront's keys, JSON-compatible."""
        return self.model_dump(mode="json", by_alias=True)


class VehicleRecord(VehicleDraft):
    """One inventory item owned by the catalog store."""

    id: str = Field(min_length=1)
    """Opaque catalog id, assigned once and never reused."""

    @classmethod
    def from_draft(cls, draft: VehicleDraft, record_id: str) -> VehicleRecord:
        return cls.model_validate({**draft.model_dump(), "id": record_id})

    def merged(self, fields: dict[str, Any]) -> VehicleRecord:
        """Return a re-validated copy with *fields* applied; ``id`` is kept."""
        lookup = _field_lookup(type(self))
        data = self.model_dump()
        data.update({lookup.get(key, key): value for key, value in fields.items() if lookup.get(key, key) != "id"})
        data["id"] = self.id
        return type(self).validate_or_raise(data, message=f"Invalid update for vehicle {self.id}")
