"""Data models for the dealership catalog."""

from autolot.models._base import AutolotBaseModel, LotEnum
from autolot.models.candidate import DedupResult, ImportCandidate, ReconcileResult
from autolot.models.filters import FilterSet, Range, SortKey
from autolot.models.image import VehicleImage
from autolot.models.leads import ContactMethod, ContactRequest, CreditApplication
from autolot.models.vehicle import BodyType, Condition, FuelType, Transmission, VehicleDraft, VehicleRecord

__all__ = [
    "AutolotBaseModel",
    "BodyType",
    "Condition",
    "ContactMethod",
    "ContactRequest",
    "CreditApplication",
    "DedupResult",
    "FilterSet",
    "FuelType",
    "ImportCandidate",
    "LotEnum",
    "Range",
    "ReconcileResult",
    "SortKey",
    "Transmission",
    "VehicleDraft",
    "VehicleImage",
    "VehicleRecord",
]
