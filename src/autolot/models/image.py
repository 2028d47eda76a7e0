"""Vehicle image model."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field, field_validator

from autolot.models._base import AutolotBaseModel


class VehicleImage(AutolotBaseModel):
    """An uploaded image attached to a catalog vehicle."""

    id: str
    vehicle_id: str
    image_url: str
    """Public URL served to the storefront."""
    image_path: str
    """Storage path relative to the images directory."""
    is_primary: bool = False
    sort_order: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("created_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
