"""High-level dealership facade."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict

from autolot._storage import CatalogBackend, ImageBackend, JsonFileBackend
from autolot.config import AutolotConfig
from autolot.exceptions import AutolotError, SourceUnavailableError
from autolot.ingestion.reconcile import deduplicate_existing, reconcile
from autolot.ingestion.source import HttpImportSource, ImportSource, SourceFilter
from autolot.leads import LeadLog
from autolot.models.candidate import ImportCandidate
from autolot.models.filters import FilterSet, SortKey
from autolot.models.leads import ContactRequest, CreditApplication
from autolot.models.vehicle import VehicleDraft, VehicleRecord
from autolot.query import InventoryStats, featured, inventory_stats, query
from autolot.state.seed import load_seed_records
from autolot.state.store import CatalogStore

_logger = logging.getLogger(__name__)

_SOURCE_DOWN_NOTICE = "The import source is unavailable right now. No new vehicles were found."


class ImportPreview(BaseModel):
    """Listings offered for import after VIN reconciliation."""

    model_config = ConfigDict(frozen=True)

    candidates: tuple[ImportCandidate, ...] = ()
    """New listings, in source order."""
    skipped: tuple[ImportCandidate, ...] = ()
    """Listings whose VIN is already in the catalog."""
    fetched: int = 0
    notice: str | None = None


class ImportReport(BaseModel):
    """Outcome of an import run."""

    model_config = ConfigDict(frozen=True)

    imported: tuple[VehicleRecord, ...] = ()
    skipped: int = 0


class Dealership:
    """Catalog, query, import and lead intake behind one object.

    Usage::

        async with Dealership(AutolotConfig.from_env()) as lot:
            cars = lot.browse(FilterSet(make="Toyota"))
    """

    def __init__(
        self,
        config: AutolotConfig,
        *,
        backend: CatalogBackend | None = None,
        images: ImageBackend | None = None,
        source: ImportSource | None = None,
        seed: Sequence[VehicleRecord] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        json_backend = JsonFileBackend(config.catalog_path, config.images_dir, config.image_base_url)
        if seed is None:
            seed = load_seed_records() if config.seed_enabled else ()
        self._store = CatalogStore(
            backend or json_backend,
            seed=seed,
            enforce_unique_vin=config.enforce_unique_vin,
            images=images or json_backend,
        )
        self._leads = LeadLog(config.leads_path, self._store)
        self._source = source
        self._external_session = session is not None
        self._http_session = session

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Dealership:
        # No session is opened unless the catalog loaded.
        self._store.load()
        if self._source is None and self._config.import_endpoint:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._source = HttpImportSource(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    @property
    def store(self) -> CatalogStore:
        return self._store

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def browse(
        self,
        filters: FilterSet | Mapping[str, Any] | None = None,
        search_text: str = "",
        sort_key: SortKey | str = SortKey.PRICE_LOW,
    ) -> list[VehicleRecord]:
        if filters is not None and not isinstance(filters, FilterSet):
            filters = FilterSet.validate_or_raise(dict(filters))
        return query(self._store.snapshot(), filters, search_text, sort_key)

    def vehicle(self, record_id: str) -> VehicleRecord:
        return self._store.get(record_id)

    def stats(self) -> InventoryStats:
        return inventory_stats(self._store.snapshot())

    def featured(self, limit: int = 3) -> list[VehicleRecord]:
        return featured(self._store.snapshot(), limit)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def add_vehicle(self, draft: VehicleDraft | Mapping[str, Any]) -> VehicleRecord:
        return self._store.add(draft)

    def update_vehicle(self, record_id: str, fields: Mapping[str, Any]) -> VehicleRecord:
        return self._store.update(record_id, fields)

    def delete_vehicle(self, record_id: str) -> bool:
        return self._store.delete(record_id)

    def remove_duplicates(self) -> int:
        """Drop later records that repeat an earlier VIN; returns how many went."""
        result = deduplicate_existing(self._store.snapshot())
        if result.removed_count:
            self._store.replace_all(result.unique)
            _logger.info("Removed %d duplicate vehicles", result.removed_count)
        return result.removed_count

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def check_for_new_vehicles(self, source_filter: SourceFilter | None = None) -> ImportPreview:
        """Ask the import source for listings and keep the ones not yet in stock.

        An unreachable source yields an empty preview with a notice
        instead of an error.
        """
        if self._source is None:
            raise AutolotError("No import source configured")
        source_filter = source_filter or SourceFilter(url=self._config.import_source_url)
        try:
            candidates = await self._source.fetch_candidates(source_filter)
        except SourceUnavailableError as exc:
            _logger.warning("Import source unavailable, showing no new vehicles: %s", exc)
            return ImportPreview(notice=_SOURCE_DOWN_NOTICE)

        result = reconcile(self._store.snapshot(), candidates, id_factory=lambda: "preview")
        skipped_ids = {id(candidate) for candidate in result.skipped}
        fresh = [candidate for candidate in candidates if id(candidate) not in skipped_ids]
        return ImportPreview(candidates=tuple(fresh), skipped=result.skipped, fetched=len(candidates))

    def import_vehicles(
        self,
        candidates: Iterable[ImportCandidate],
        selected: Iterable[int] | None = None,
        *,
        strict: bool = False,
    ) -> ImportReport:
        """Import *candidates* (or the positions listed in *selected*).

        VINs are checked again against the current catalog, so a preview
        that went stale never produces duplicates.
        """
        batch = list(candidates)
        if selected is not None:
            wanted = set(selected)
            batch = [candidate for index, candidate in enumerate(batch) if index in wanted]
        result = reconcile(self._store.snapshot(), batch, strict=strict)
        self._store.extend(result.to_import)
        return ImportReport(imported=result.to_import, skipped=len(result.skipped))

    # ------------------------------------------------------------------
    # Leads
    # ------------------------------------------------------------------

    def submit_credit_application(self, application: CreditApplication | Mapping[str, Any]) -> str:
        return self._leads.record_credit_application(application)

    def submit_contact_request(self, request: ContactRequest | Mapping[str, Any]) -> str:
        return self._leads.record_contact_request(request)
