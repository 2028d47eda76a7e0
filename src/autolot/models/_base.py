"""Base model and enum for autolot data.

Every autolot model inherits from :class:`AutolotBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys used by the
  storefront (``fuelType``, ``priceRange``) map to snake_case fields.
* A ``model_validator(mode="before")`` that strips blank strings and
  ``None`` so the field default (or a "field required" error) applies.
* Frozen instances, so snapshots handed to consumers cannot be mutated.

Closed vocabularies inherit from :class:`LotEnum`, a ``StrEnum`` whose
``_missing_`` hook accepts any casing and surrounding whitespace.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum
from typing import Any, ClassVar, Self

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from autolot.exceptions import ValidationError

_SENTINELS = frozenset({"", "--"})
_FIELD_PREFIX = re.compile(r"^(\w+): (.+)$")


class LotEnum(StrEnum):
    """Base for closed string vocabularies.

    ``Condition(" Used ")`` resolves to ``Condition.USED``; values with no
    member still raise ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> LotEnum | None:
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for member in cls:
            if member.value == wanted:
                return member
        return None


class AutolotBaseModel(BaseModel):
    """Base for autolot models."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    """Legacy key → current key renames applied before validation."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        """Drop blank values and apply key aliases on *values*."""
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)

        cleaned: dict[str, Any] = {}
        for key, value in working.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        return AutolotBaseModel._clean_dict(values, aliases)

    @classmethod
    def validate_or_raise(cls, data: Any, *, message: str | None = None) -> Self:
        """Validate *data*, translating pydantic errors into :class:`ValidationError`."""
        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as exc:
            errors = field_errors(exc, cls)
            summary = message or f"Invalid {cls.__name__}: {', '.join(sorted(errors))}"
            raise ValidationError(summary, errors=errors) from exc


def _field_lookup(model_cls: type[BaseModel]) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name
        choices = info.validation_alias
        if isinstance(choices, AliasChoices):
            for choice in choices.choices:
                if isinstance(choice, str):
                    lookup[choice] = name
        elif isinstance(choices, str):
            lookup[choices] = name
    return lookup


def field_errors(exc: pydantic.ValidationError, model_cls: type[BaseModel]) -> dict[str, str]:
    """Map a pydantic error to ``{field_name: message}``, first error per field."""
    lookup = _field_lookup(model_cls)
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        key = lookup.get(str(loc[0]), str(loc[0])) if loc else "__root__"
        message = str(error.get("msg", "invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        # Model-level checks name their field as a "field: message" prefix.
        prefixed = _FIELD_PREFIX.match(message)
        if key == "__root__" and prefixed and prefixed.group(1) in lookup:
            key, message = lookup[prefixed.group(1)], prefixed.group(2)
        errors.setdefault(key, message)
    return errors
