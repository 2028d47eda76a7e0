from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from autolot.client import Dealership
from autolot.config import AutolotConfig
from autolot.exceptions import AutolotError, PersistenceError, SourceUnavailableError
from autolot.ingestion.source import SourceFilter
from autolot.models.candidate import ImportCandidate
from autolot.models.filters import FilterSet


@dataclass
class FakeImportSource:
    listings: list[dict[str, Any]] = field(default_factory=list)
    unavailable: bool = False
    calls: list[SourceFilter] = field(default_factory=list)

    async def fetch_candidates(self, source_filter: SourceFilter) -> list[ImportCandidate]:
        self.calls.append(source_filter)
        if self.unavailable:
            raise SourceUnavailableError("scraper down", endpoint="fake")
        return [ImportCandidate.model_validate({"source": "fake", **item}) for item in self.listings]


@pytest.fixture
def config(tmp_path: Path) -> AutolotConfig:
    return AutolotConfig(
        catalog_path=str(tmp_path / "dealership_cars.json"),
        images_dir=str(tmp_path / "vehicle-images"),
        leads_path=str(tmp_path / "leads.jsonl"),
    )


_LISTINGS = [
    {"make": "Chevrolet", "model": "Tahoe", "year": "2023", "price": "$58,900", "vin": "1GNSKGKC5PR123456"},
    {"make": "Chevrolet", "model": "Silverado 1500", "year": "2024", "price": "$48,250", "vin": "1GCUDDED1RZ100001"},
    {"make": "Chevrolet", "model": "Equinox", "year": "2022", "price": "23,400", "mileage": "31,020", "vin": "3GNAXKEV7NL100002"},
    {"make": "Chevrolet", "model": "Silverado 1500", "year": "2024", "price": "$48,250", "vin": "1gcudded1rz100001"},
]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_browse_import_and_maintain(config: AutolotConfig, tmp_path: Path) -> None:
    source = FakeImportSource(listings=_LISTINGS)

    async with Dealership(config, source=source) as lot:
        assert [car.id for car in lot.browse(FilterSet(make="Toyota"))] == ["1"]
        assert [car.id for car in lot.featured()] == ["1", "2", "3"]
        assert lot.stats().total == 6

        preview = await lot.check_for_new_vehicles()
        assert preview.fetched == 4
        assert preview.notice is None
        assert [candidate.vin for candidate in preview.skipped] == ["1GNSKGKC5PR123456", "1gcudded1rz100001"]
        assert [candidate.model for candidate in preview.candidates] == ["Silverado 1500", "Equinox"]
        assert source.calls[0].url == config.import_source_url

        report = lot.import_vehicles(preview.candidates)
        assert report.skipped == 0
        assert [car.body_type for car in report.imported] == ["truck", "suv"]
        assert lot.stats().total == 8

        again = lot.import_vehicles(preview.candidates)
        assert again.imported == ()
        assert again.skipped == 2

        trucks = lot.browse({"type": "truck"}, sort_key="price-high")
        assert [car.model for car in trucks] == ["Silverado 1500", "F-150"]

        assert lot.delete_vehicle("3") is True
        assert all(car.id != "3" for car in lot.browse())

        lead_id = lot.submit_contact_request({"name": "Sam", "email": "sam@example.com", "message": "Hi", "carId": "5"})
        assert lead_id.startswith("lead_")

    async with Dealership(config, source=source) as lot:
        ids = [car.id for car in lot.store.snapshot()]
        assert "3" not in ids
        assert len(ids) == 7

    stored = json.loads((tmp_path / "dealership_cars.json").read_text(encoding="utf-8"))
    assert len(stored) == 7


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_unavailable_source_yields_empty_preview(config: AutolotConfig) -> None:
    async with Dealership(config, source=FakeImportSource(unavailable=True)) as lot:
        preview = await lot.check_for_new_vehicles(SourceFilter(url="https://dealer.example/new"))

    assert preview.candidates == ()
    assert preview.fetched == 0
    assert preview.notice is not None


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_import_selected_positions(config: AutolotConfig) -> None:
    async with Dealership(config, source=FakeImportSource(listings=_LISTINGS), seed=()) as lot:
        preview = await lot.check_for_new_vehicles()
        report = lot.import_vehicles(preview.candidates, selected=[1, 2])

        assert [car.model for car in report.imported] == ["Silverado 1500", "Equinox"]
        assert report.imported[1].mileage == 31020
        assert all(car.id.startswith("imp_") for car in report.imported)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_remove_duplicates(config: AutolotConfig) -> None:
    async with Dealership(config, seed=()) as lot:
        first = lot.add_vehicle(
            {"make": "Kia", "model": "Soul", "year": 2020, "price": 1, "condition": "used", "type": "hatchback", "vin": "V1"}
        )
        assert lot.remove_duplicates() == 0

    unchecked = AutolotConfig(
        catalog_path=config.catalog_path,
        images_dir=config.images_dir,
        leads_path=config.leads_path,
        enforce_unique_vin=False,
    )
    async with Dealership(unchecked, seed=()) as lot:
        lot.add_vehicle(
            {"make": "Kia", "model": "Soul", "year": 2021, "price": 2, "condition": "used", "type": "hatchback", "vin": "v1"}
        )
        assert len(lot.store.snapshot()) == 2

        assert lot.remove_duplicates() == 1
        assert [car.id for car in lot.store.snapshot()] == [first.id]


@pytest.mark.asyncio
async def test_check_without_source_raises(config: AutolotConfig) -> None:
    async with Dealership(config, seed=()) as lot:
        with pytest.raises(AutolotError):
            await lot.check_for_new_vehicles()


@pytest.mark.asyncio
async def test_failed_load_opens_no_http_session(config: AutolotConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    Path(config.catalog_path).write_text("{not json", encoding="utf-8")
    opened: list[object] = []

    def _session(*args: Any, **kwargs: Any) -> object:
        opened.append(object())
        return opened[-1]

    monkeypatch.setattr("autolot.client.aiohttp.ClientSession", _session)
    remote = AutolotConfig(
        catalog_path=config.catalog_path,
        images_dir=config.images_dir,
        leads_path=config.leads_path,
        import_endpoint="https://scraper.example/api/scrape",
    )

    with pytest.raises(PersistenceError):
        async with Dealership(remote):
            pass

    assert opened == []
