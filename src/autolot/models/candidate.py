"""Import candidate and reconciliation result models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from autolot.models._base import AutolotBaseModel
from autolot.models.vehicle import VehicleRecord


class ImportCandidate(AutolotBaseModel):
    """A listing proposed for import by an external source.

    Every descriptive field is kept as loosely typed as the source sends
    it; converting into the closed catalog vocabulary happens in
    :func:`autolot.ingestion.candidates.to_vehicle_record`.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {
        "exterior": "exterior_color",
        "interior": "interior_color",
        "fuelType": "fuel_type",
        "stockNumber": "stock_number",
    }

    external_id: str | None = Field(default=None, validation_alias=AliasChoices("id", "externalId", "external_id"))
    """Identifier assigned by the source (not a catalog id)."""
    make: str = ""
    model: str = ""
    year: Any = None
    price: Any = None
    mileage: Any = None
    vin: str = ""
    condition: str | None = None
    body_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("type", "category", "bodyType", "body_type"),
    )
    transmission: str | None = None
    fuel_type: str | None = None
    exterior_color: str = ""
    interior_color: str = ""
    engine: str = ""
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    description: str = ""
    source: str = "unknown"
    url: str | None = None
    stock_number: str | None = None

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original payload as received from the source."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        return {**values, "raw": dict(values)}

    @field_validator(
        "external_id",
        "make",
        "model",
        "vin",
        "condition",
        "body_type",
        "transmission",
        "fuel_type",
        "exterior_color",
        "interior_color",
        "engine",
        "description",
        "source",
        "url",
        "stock_number",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("features", "images", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            return [part for part in (item.strip() for item in value.split(",")) if part]
        if isinstance(value, (list, tuple)):
            return [str(item).strip() for item in value if item is not None and str(item).strip()]
        return []

    @property
    def label(self) -> str:
        return f"{self.year} {self.make} {self.model} (VIN {self.vin or '?'})"


class ReconcileResult(BaseModel):
    """Outcome of merging a candidate batch against the catalog."""

    model_config = ConfigDict(frozen=True)

    to_import: tuple[VehicleRecord, ...] = ()
    skipped: tuple[ImportCandidate, ...] = ()


class DedupResult(BaseModel):
    """Outcome of the remove-duplicates maintenance pass."""

    model_config = ConfigDict(frozen=True)

    unique: tuple[VehicleRecord, ...] = ()
    removed_count: int = 0
