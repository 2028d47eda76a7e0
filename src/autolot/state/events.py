"""Catalog change notifications.

Emitted by the store after each successful write so consumers can
re-read a fresh snapshot instead of reloading the whole page.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChangeKind(StrEnum):
    LOADED = "loaded"
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    REPLACED = "replaced"
    IMPORTED = "imported"
    IMAGES = "images"


class CatalogChange(BaseModel):
    """One committed change to the catalog."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    record_ids: tuple[str, ...] = ()
    version: int = Field(..., description="Catalog version after the change")
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
