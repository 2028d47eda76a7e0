"""autolot - Dealership inventory catalog, search and import reconciliation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("autolot")
except PackageNotFoundError:
    __version__ = "0+local"

from autolot.client import Dealership, ImportPreview, ImportReport
from autolot.config import AutolotConfig
from autolot.exceptions import (
    AutolotConfigError,
    AutolotError,
    DuplicateVinError,
    NotFoundError,
    PersistenceError,
    SourceUnavailableError,
    ValidationError,
)
from autolot.ingestion.reconcile import deduplicate_existing, reconcile
from autolot.ingestion.source import HttpImportSource, ImportSource, SourceFilter
from autolot.models import (
    BodyType,
    Condition,
    ContactRequest,
    CreditApplication,
    FilterSet,
    FuelType,
    ImportCandidate,
    Range,
    SortKey,
    Transmission,
    VehicleDraft,
    VehicleImage,
    VehicleRecord,
)
from autolot.query import InventoryStats, query
from autolot.state.store import CatalogStore

__all__ = [
    "__version__",
    "AutolotConfig",
    "AutolotConfigError",
    "AutolotError",
    "BodyType",
    "CatalogStore",
    "Condition",
    "ContactRequest",
    "CreditApplication",
    "Dealership",
    "DuplicateVinError",
    "FilterSet",
    "FuelType",
    "HttpImportSource",
    "ImportCandidate",
    "ImportPreview",
    "ImportReport",
    "ImportSource",
    "InventoryStats",
    "NotFoundError",
    "PersistenceError",
    "Range",
    "SortKey",
    "SourceUnavailableError",
    "Transmission",
    "ValidationError",
    "VehicleDraft",
    "VehicleImage",
    "VehicleRecord",
    "deduplicate_existing",
    "query",
    "reconcile",
]
