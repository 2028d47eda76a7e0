"""Persistence bindings for the catalog and its images."""

from __future__ import annotations

import json
import logging
import os
import secrets
import tempfile
import time
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from autolot._constants import IMAGE_ID_PREFIX
from autolot._ids import new_record_id
from autolot.exceptions import NotFoundError, PersistenceError
from autolot.models.image import VehicleImage

_logger = logging.getLogger(__name__)

_INDEX_FILE = "index.json"


class CatalogBackend(Protocol):
    """Structural interface for catalog persistence.

    Records cross this boundary as JSON-compatible dicts in storefront
    key form; validation happens in the store.
    """

    def load_catalog(self) -> list[dict[str, Any]]:
        ...

    def save_catalog(self, records: Sequence[dict[str, Any]]) -> None:
        ...

    def load_retired_ids(self) -> set[str]:
        ...

    def save_retired_ids(self, ids: Iterable[str]) -> None:
        ...


class ImageBackend(Protocol):
    """Structural interface for the vehicle image sub-resource."""

    def list_images(self, vehicle_id: str) -> list[VehicleImage]:
        ...

    def save_image(
        self,
        vehicle_id: str,
        data: bytes,
        filename: str,
        *,
        is_primary: bool,
        sort_order: int,
    ) -> VehicleImage:
        ...

    def delete_image(self, image_id: str) -> VehicleImage:
        ...

    def delete_vehicle_images(self, vehicle_id: str) -> int:
        ...

    def set_primary(self, vehicle_id: str, image_id: str) -> None:
        ...

    def set_sort_order(self, image_id: str, sort_order: int) -> None:
        ...


def _atomic_write_text(path: Path, text: str) -> None:
    """Write *text* to *path* via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_json_list(path: Path) -> list[Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise PersistenceError(f"Could not read {path}: {exc}", path=str(path)) from exc
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"Stored data in {path} is not valid JSON: {exc}", path=str(path)) from exc
    if not isinstance(data, list):
        raise PersistenceError(f"Stored data in {path} is not a JSON list", path=str(path))
    return data


class JsonFileBackend:
    """Catalog in one JSON file, images in a local directory.

    Image files live at ``images_dir/<vehicle_id>/<epoch-ms>-<hex>.<ext>`` and
    their metadata in ``images_dir/index.json``. Every write replaces the
    target file atomically.
    """

    def __init__(
        self,
        catalog_path: str | os.PathLike[str],
        images_dir: str | os.PathLike[str],
        image_base_url: str = "/vehicle-images/",
    ) -> None:
        self._catalog_path = Path(catalog_path)
        self._images_dir = Path(images_dir)
        self._image_base_url = image_base_url if image_base_url.endswith("/") else f"{image_base_url}/"

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def load_catalog(self) -> list[dict[str, Any]]:
        return _read_json_list(self._catalog_path)

    def save_catalog(self, records: Sequence[dict[str, Any]]) -> None:
        try:
            _atomic_write_text(self._catalog_path, json.dumps(list(records), indent=2))
        except OSError as exc:
            raise PersistenceError(
                f"Could not write {self._catalog_path}: {exc}", path=str(self._catalog_path)
            ) from exc
        _logger.debug("Saved %d records to %s", len(records), self._catalog_path)

    @property
    def _retired_path(self) -> Path:
        return self._catalog_path.with_name(f"{self._catalog_path.stem}.retired.json")

    def load_retired_ids(self) -> set[str]:
        """Ids of seed vehicles an operator deleted; never re-seeded."""
        return {str(item) for item in _read_json_list(self._retired_path)}

    def save_retired_ids(self, ids: Iterable[str]) -> None:
        try:
            _atomic_write_text(self._retired_path, json.dumps(sorted(ids)))
        except OSError as exc:
            raise PersistenceError(f"Could not write {self._retired_path}: {exc}", path=str(self._retired_path)) from exc

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @property
    def _index_path(self) -> Path:
        return self._images_dir / _INDEX_FILE

    def _load_index(self) -> list[VehicleImage]:
        return [VehicleImage.model_validate(item) for item in _read_json_list(self._index_path)]

    def _save_index(self, images: Sequence[VehicleImage]) -> None:
        payload = [image.model_dump(mode="json", by_alias=True) for image in images]
        try:
            _atomic_write_text(self._index_path, json.dumps(payload, indent=2))
        except OSError as exc:
            raise PersistenceError(f"Could not write {self._index_path}: {exc}", path=str(self._index_path)) from exc

    @staticmethod
    def _ordered(images: Sequence[VehicleImage]) -> list[VehicleImage]:
        return sorted(images, key=lambda image: image.sort_order)

    def list_images(self, vehicle_id: str) -> list[VehicleImage]:
        return self._ordered([image for image in self._load_index() if image.vehicle_id == vehicle_id])

    def save_image(
        self,
        vehicle_id: str,
        data: bytes,
        filename: str,
        *,
        is_primary: bool,
        sort_order: int,
    ) -> VehicleImage:
        ext = Path(filename).suffix.lstrip(".").lower() or "jpg"
        relative = f"{vehicle_id}/{int(time.time() * 1000)}-{secrets.token_hex(3)}.{ext}"
        target = self._images_dir / relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise PersistenceError(f"Could not store image {target}: {exc}", path=str(target)) from exc

        image = VehicleImage(
            id=new_record_id(IMAGE_ID_PREFIX),
            vehicle_id=vehicle_id,
            image_url=f"{self._image_base_url}{relative}",
            image_path=relative,
            is_primary=is_primary,
            sort_order=sort_order,
        )
        index = self._load_index()
        if is_primary:
            index = [
                entry.model_copy(update={"is_primary": False}) if entry.vehicle_id == vehicle_id else entry
                for entry in index
            ]
        try:
            self._save_index([*index, image])
        except PersistenceError:
            target.unlink(missing_ok=True)
            raise
        return image

    def _find(self, index: Sequence[VehicleImage], image_id: str) -> VehicleImage:
        for image in index:
            if image.id == image_id:
                return image
        raise NotFoundError(f"Image {image_id} not found", record_id=image_id)

    def delete_image(self, image_id: str) -> VehicleImage:
        """Remove one image; the next image in order is promoted if it was primary."""
        index = self._load_index()
        removed = self._find(index, image_id)
        remaining = [image for image in index if image.id != image_id]
        if removed.is_primary:
            siblings = self._ordered([image for image in remaining if image.vehicle_id == removed.vehicle_id])
            if siblings:
                promoted = siblings[0].id
                remaining = [
                    image.model_copy(update={"is_primary": True}) if image.id == promoted else image
                    for image in remaining
                ]
        self._save_index(remaining)
        (self._images_dir / removed.image_path).unlink(missing_ok=True)
        return removed

    def delete_vehicle_images(self, vehicle_id: str) -> int:
        index = self._load_index()
        doomed = [image for image in index if image.vehicle_id == vehicle_id]
        if not doomed:
            return 0
        self._save_index([image for image in index if image.vehicle_id != vehicle_id])
        for image in doomed:
            (self._images_dir / image.image_path).unlink(missing_ok=True)
        return len(doomed)

    def set_primary(self, vehicle_id: str, image_id: str) -> None:
        index = self._load_index()
        target = self._find(index, image_id)
        if target.vehicle_id != vehicle_id:
            raise NotFoundError(f"Image {image_id} does not belong to vehicle {vehicle_id}", record_id=image_id)
        self._save_index(
            [
                image.model_copy(update={"is_primary": image.id == image_id})
                if image.vehicle_id == vehicle_id
                else image
                for image in index
            ]
        )

    def set_sort_order(self, image_id: str, sort_order: int) -> None:
        index = self._load_index()
        self._find(index, image_id)
        self._save_index(
            [image.model_copy(update={"sort_order": sort_order}) if image.id == image_id else image for image in index]
        )
