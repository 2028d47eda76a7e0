"""Inventory filter and sort models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from autolot.models._base import AutolotBaseModel, LotEnum
from autolot.models.vehicle import BodyType, Condition, FuelType, Transmission


class SortKey(LotEnum):
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    YEAR_NEW = "year-new"
    YEAR_OLD = "year-old"
    MILEAGE_LOW = "mileage-low"


class Range(AutolotBaseModel):
    """Inclusive numeric range; either bound may be left open.

    Accepts ``{"min": 1, "max": 2}`` or a ``[min, max]`` pair. A missing
    bound means "no limit on that side".
    """

    min: float | None = None
    max: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, values: Any) -> Any:
        if isinstance(values, (list, tuple)):
            if len(values) != 2:
                raise ValueError("range must have exactly two bounds")
            return {"min": values[0], "max": values[1]}
        return values

    @model_validator(mode="after")
    def _ordered(self) -> Range:
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"range minimum {self.min} is greater than maximum {self.max}")
        return self

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        return not (self.max is not None and value > self.max)


class FilterSet(AutolotBaseModel):
    """Sparse set of conjunctive predicates over vehicle fields.

    Unset fields impose no constraint. ``condition="all"`` is the same
    as leaving the condition unset.
    """

    make: str | None = None
    condition: Condition | None = None
    body_type: BodyType | None = Field(
        default=None,
        validation_alias=AliasChoices("type", "bodyType", "body_type"),
        serialization_alias="type",
    )
    transmission: Transmission | None = None
    fuel_type: FuelType | None = None
    price_range: Range | None = None
    year_range: Range | None = None
    mileage_range: Range | None = None

    @field_validator("condition", mode="before")
    @classmethod
    def _all_means_any(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() == "all":
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)
