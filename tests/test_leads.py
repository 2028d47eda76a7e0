from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from autolot._storage import JsonFileBackend
from autolot.exceptions import NotFoundError, ValidationError
from autolot.leads import LeadLog
from autolot.state.seed import load_seed_records
from autolot.state.store import CatalogStore

_APPLICATION = {
    "firstName": "Dana",
    "lastName": "Reyes",
    "email": "dana@example.com",
    "phone": "214-555-0142",
    "ssn": "123 45 6789",
    "income": 72000,
    "employment": "Nurse",
    "address": "12 Elm St",
    "city": "Dallas",
    "state": "TX",
    "zipCode": "75201",
    "carId": "2",
}


def _lead_log(tmp_path: Path) -> LeadLog:
    store = CatalogStore(JsonFileBackend(tmp_path / "cars.json", tmp_path / "images"), seed=load_seed_records())
    store.load()
    return LeadLog(tmp_path / "leads" / "leads.jsonl", store)


def _entries(tmp_path: Path) -> list[dict[str, object]]:
    lines = (tmp_path / "leads" / "leads.jsonl").read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


def test_credit_application_is_appended(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    leads = _lead_log(tmp_path)

    with caplog.at_level(logging.DEBUG, logger="autolot.leads"):
        lead_id = leads.record_credit_application(_APPLICATION)

    entries = _entries(tmp_path)
    assert lead_id.startswith("lead_")
    assert entries[0]["id"] == lead_id
    assert entries[0]["kind"] == "credit"
    assert entries[0]["lead"]["ssn"] == "123-45-6789"  # type: ignore[index]
    assert entries[0]["lead"]["carId"] == "2"  # type: ignore[index]
    assert "123-45-6789" not in caplog.text
    assert "dana@example.com" not in caplog.text


def test_contact_requests_accumulate(tmp_path: Path) -> None:
    leads = _lead_log(tmp_path)

    leads.record_contact_request({"name": "Sam", "email": "sam@example.com", "message": "Still available?"})
    leads.record_contact_request({"name": "Ali", "email": "ali@example.com", "message": "Trade-in?", "carId": "6"})

    assert [entry["kind"] for entry in _entries(tmp_path)] == ["contact", "contact"]


def test_invalid_lead_is_not_recorded(tmp_path: Path) -> None:
    leads = _lead_log(tmp_path)

    with pytest.raises(ValidationError) as excinfo:
        leads.record_credit_application({**_APPLICATION, "income": -1, "email": "nope"})

    assert set(excinfo.value.errors) == {"income", "email"}
    assert not (tmp_path / "leads" / "leads.jsonl").exists()


def test_lead_for_unknown_vehicle_is_rejected(tmp_path: Path) -> None:
    leads = _lead_log(tmp_path)

    with pytest.raises(NotFoundError):
        leads.record_contact_request({"name": "Sam", "email": "sam@example.com", "message": "Hi", "carId": "zzz"})
