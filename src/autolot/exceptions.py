"""Custom exception hierarchy for autolot."""

from __future__ import annotations

from collections.abc import Mapping


class AutolotError(Exception):
    """Base exception for all autolot errors."""


class AutolotConfigError(AutolotError):
    """Invalid or missing configuration."""


class ValidationError(AutolotError):
    """One or more fields are missing or out of range.

    ``errors`` maps field names to operator-facing messages so a form
    layer can show them next to the offending inputs.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Mapping[str, str] | None = None,
    ) -> None:
        self.errors: dict[str, str] = dict(errors or {})
        super().__init__(message)


class DuplicateVinError(ValidationError):
    """A record with the same VIN is already in the catalog."""

    def __init__(self, vin: str, *, existing_id: str) -> None:
        self.vin = vin
        self.existing_id = existing_id
        super().__init__(
            f"VIN {vin} is already used by vehicle {existing_id}",
            errors={"vin": f"VIN already exists in inventory (vehicle {existing_id})"},
        )


class NotFoundError(AutolotError):
    """Operation referenced a record id that does not exist."""

    def __init__(self, message: str, *, record_id: str = "") -> None:
        self.record_id = record_id
        super().__init__(message)


class PersistenceError(AutolotError):
    """Backing store read or write failed.

    The catalog snapshot is never modified when this is raised from a
    write, so the operation can simply be retried.
    """

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class SourceUnavailableError(AutolotError):
    """Import source could not be reached (network, non-200, bad JSON).

    Callers degrade to "no new vehicles found" rather than failing.
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)
