"""Catalog store.

This is the only component allowed to change the vehicle list. Every
write goes to the backend first; the in-memory snapshot is swapped only
after the backend accepted it, so a failed write leaves readers on the
previous, still-persisted catalog.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

import pydantic

from autolot._constants import CATALOG_ID_PREFIX
from autolot._ids import new_record_id
from autolot._storage import CatalogBackend, ImageBackend
from autolot.exceptions import DuplicateVinError, NotFoundError, PersistenceError
from autolot.models.image import VehicleImage
from autolot.models.vehicle import VehicleDraft, VehicleRecord
from autolot.state.events import CatalogChange, ChangeKind
from autolot.state.policy import find_vin_conflict, first_duplicate_vin, merge_seed

_logger = logging.getLogger(__name__)

ChangeListener = Callable[[CatalogChange], None]


class CatalogStore:
    """Owner of the vehicle catalog.

    Snapshots are tuples of frozen records; holding one never blocks or
    observes later writes.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        *,
        seed: Sequence[VehicleRecord] = (),
        enforce_unique_vin: bool = True,
        images: ImageBackend | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._backend = backend
        self._images = images
        self._seed = tuple(seed)
        self._seed_ids = frozenset(record.id for record in self._seed)
        self._retired: set[str] = set()
        self._enforce_unique_vin = enforce_unique_vin
        self._id_factory = id_factory or (lambda: new_record_id(CATALOG_ID_PREFIX))
        self._records: tuple[VehicleRecord, ...] = ()
        self._version = 0
        self._listeners: list[ChangeListener] = []

    @property
    def version(self) -> int:
        """Incremented after every committed change."""
        return self._version

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, callback: ChangeListener) -> Callable[[], None]:
        """Call *callback* after each committed change; returns an unsubscribe function."""
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def _notify(self, kind: ChangeKind, record_ids: Iterable[str]) -> None:
        change = CatalogChange(kind=kind, record_ids=tuple(record_ids), version=self._version)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.exception("Catalog listener %r failed for %s", listener, change.kind)

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _parse(self, raw: Sequence[Any]) -> list[VehicleRecord]:
        # Unreadable records abort the load; a later write must never drop them.
        records: list[VehicleRecord] = []
        for index, item in enumerate(raw):
            try:
                records.append(VehicleRecord.model_validate(item))
            except pydantic.ValidationError as exc:
                error = exc.errors()[0]
                location = ".".join(str(part) for part in error.get("loc", ()))
                raise PersistenceError(
                    f"Stored vehicle at position {index} is unreadable ({location}: {error.get('msg')})"
                ) from exc
        return records

    def _commit(self, records: Sequence[VehicleRecord], kind: ChangeKind, record_ids: Iterable[str]) -> None:
        payload = [record.to_storage() for record in records]
        try:
            self._backend.save_catalog(payload)
        except PersistenceError:
            raise
        except OSError as exc:
            raise PersistenceError(f"Could not save catalog: {exc}") from exc
        self._records = tuple(records)
        self._version += 1
        self._notify(kind, record_ids)

    def _retire(self, record_ids: Iterable[str]) -> None:
        """Persist seed ids that must not be re-seeded, ahead of the catalog write."""
        newly = {record_id for record_id in record_ids if record_id in self._seed_ids} - self._retired
        if not newly:
            return
        retired = self._retired | newly
        try:
            self._backend.save_retired_ids(retired)
        except OSError as exc:
            raise PersistenceError(f"Could not save retired ids: {exc}") from exc
        self._retired = retired

    def _require(self, record_id: str) -> VehicleRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise NotFoundError(f"Vehicle {record_id} not found", record_id=record_id)

    def _check_vin(self, records: Iterable[VehicleRecord], vin: str, *, ignore_id: str | None = None) -> None:
        if not self._enforce_unique_vin:
            return
        conflict = find_vin_conflict(records, vin, ignore_id=ignore_id)
        if conflict is not None:
            raise DuplicateVinError(vin, existing_id=conflict.id)

    def _check_batch(self, records: Sequence[VehicleRecord]) -> None:
        if not self._enforce_unique_vin:
            return
        duplicate = first_duplicate_vin(records)
        if duplicate is not None:
            first, second = duplicate
            raise DuplicateVinError(second.vin, existing_id=first.id)

    # ------------------------------------------------------------------
    # Catalog operations
    # ------------------------------------------------------------------

    def load(self) -> tuple[VehicleRecord, ...]:
        """Read the persisted catalog and merge in missing seed records.

        Only writes when seed records had to be added, so repeated loads
        against the same backend state are write-free.
        """
        try:
            raw = self._backend.load_catalog()
            self._retired = set(self._backend.load_retired_ids())
        except OSError as exc:
            raise PersistenceError(f"Could not load catalog: {exc}") from exc
        persisted = self._parse(raw)
        merged, missing = merge_seed(persisted, self._seed, self._retired)
        if missing:
            _logger.info("Adding %d seed vehicles to catalog of %d", len(missing), len(persisted))
            self._commit(merged, ChangeKind.LOADED, [record.id for record in missing])
        else:
            self._records = tuple(merged)
            self._version += 1
            self._notify(ChangeKind.LOADED, ())
        return self._records

    def snapshot(self) -> tuple[VehicleRecord, ...]:
        return self._records

    def get(self, record_id: str) -> VehicleRecord:
        return self._require(record_id)

    def add(self, draft: VehicleDraft | Mapping[str, Any]) -> VehicleRecord:
        """Store a new vehicle under a freshly generated id."""
        if not isinstance(draft, VehicleDraft):
            draft = VehicleDraft.validate_or_raise(draft)
        self._check_vin(self._records, draft.vin)
        record = VehicleRecord.from_draft(draft, self._id_factory())
        self._commit([*self._records, record], ChangeKind.ADDED, [record.id])
        _logger.info("Added vehicle %s (%s)", record.id, record.title)
        return record

    def update(self, record_id: str, fields: Mapping[str, Any]) -> VehicleRecord:
        """Apply *fields* to one vehicle; its id never changes."""
        current = self._require(record_id)
        updated = current.merged(dict(fields))
        if updated.vin != current.vin:
            self._check_vin(self._records, updated.vin, ignore_id=record_id)
        records = [updated if record.id == record_id else record for record in self._records]
        self._commit(records, ChangeKind.UPDATED, [record_id])
        _logger.info("Updated vehicle %s", record_id)
        return updated

    def delete(self, record_id: str) -> bool:
        """Remove a vehicle. Returns ``False`` (and writes nothing) when absent."""
        if not any(record.id == record_id for record in self._records):
            _logger.debug("Delete of unknown vehicle %s ignored", record_id)
            return False
        records = [record for record in self._records if record.id != record_id]
        self._retire([record_id])
        self._commit(records, ChangeKind.DELETED, [record_id])
        if self._images is not None:
            self._images.delete_vehicle_images(record_id)
        _logger.info("Deleted vehicle %s", record_id)
        return True

    def replace_all(self, records: Iterable[VehicleRecord]) -> tuple[VehicleRecord, ...]:
        """Overwrite the whole catalog in one write."""
        new_records = list(records)
        self._check_batch(new_records)
        kept = {record.id for record in new_records}
        self._retire(record.id for record in self._records if record.id not in kept)
        self._commit(new_records, ChangeKind.REPLACED, [record.id for record in new_records])
        _logger.info("Replaced catalog with %d vehicles", len(new_records))
        return self._records

    def extend(self, records: Iterable[VehicleRecord]) -> tuple[VehicleRecord, ...]:
        """Append a batch of already-identified records in one write."""
        batch = list(records)
        if not batch:
            return self._records
        combined = list(self._records)
        for record in batch:
            self._check_vin(combined, record.vin)
            combined.append(record)
        self._commit(combined, ChangeKind.IMPORTED, [record.id for record in batch])
        _logger.info("Imported %d vehicles", len(batch))
        return self._records

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def _require_images(self) -> ImageBackend:
        if self._images is None:
            raise PersistenceError("No image backend configured")
        return self._images

    def list_images(self, vehicle_id: str) -> list[VehicleImage]:
        return self._require_images().list_images(vehicle_id)

    def upload_image(
        self,
        vehicle_id: str,
        data: bytes,
        filename: str,
        *,
        is_primary: bool = False,
        sort_order: int | None = None,
    ) -> VehicleImage:
        """Attach an image to a vehicle; the first image always becomes primary."""
        images = self._require_images()
        self._require(vehicle_id)
        existing = images.list_images(vehicle_id)
        if not existing:
            is_primary = True
        if sort_order is None:
            sort_order = max((image.sort_order for image in existing), default=-1) + 1
        image = images.save_image(vehicle_id, data, filename, is_primary=is_primary, sort_order=sort_order)
        self._version += 1
        self._notify(ChangeKind.IMAGES, [vehicle_id])
        return image

    def delete_image(self, image_id: str) -> VehicleImage:
        removed = self._require_images().delete_image(image_id)
        self._version += 1
        self._notify(ChangeKind.IMAGES, [removed.vehicle_id])
        return removed

    def set_primary_image(self, vehicle_id: str, image_id: str) -> None:
        self._require(vehicle_id)
        self._require_images().set_primary(vehicle_id, image_id)
        self._version += 1
        self._notify(ChangeKind.IMAGES, [vehicle_id])

    def reorder_image(self, image_id: str, sort_order: int) -> None:
        self._require_images().set_sort_order(image_id, sort_order)
        self._version += 1
        self._notify(ChangeKind.IMAGES, ())
