from __future__ import annotations

import itertools
from typing import Any

import pytest

from autolot.exceptions import ValidationError
from autolot.ingestion.candidates import classify_body_type, to_vehicle_record
from autolot.ingestion.reconcile import deduplicate_existing, reconcile
from autolot.models.candidate import ImportCandidate
from autolot.models.vehicle import BodyType, Condition, FuelType, Transmission, VehicleRecord


def _record(record_id: str, vin: str) -> VehicleRecord:
    return VehicleRecord.model_validate(
        {
            "id": record_id,
            "make": "Chevrolet",
            "model": "Malibu",
            "year": 2022,
            "price": 21000,
            "condition": "used",
            "type": "sedan",
            "vin": vin,
        }
    )


def _candidate(vin: str, **fields: Any) -> ImportCandidate:
    payload: dict[str, Any] = {"make": "Chevrolet", "model": "Equinox", "year": "2023", "price": "25000", "vin": vin}
    payload.update(fields)
    return ImportCandidate.model_validate(payload)


def _counter() -> Any:
    numbers = itertools.count(1)
    return lambda: f"imp_{next(numbers)}"


def test_reconcile_skips_known_and_repeated_vins() -> None:
    existing = [_record("1", "A"), _record("2", "B")]
    candidates = [_candidate("B"), _candidate("C"), _candidate("C", price="1")]

    result = reconcile(existing, candidates, id_factory=_counter())

    assert [record.vin for record in result.to_import] == ["C"]
    assert result.to_import[0].id == "imp_1"
    assert result.skipped == (candidates[0], candidates[2])


def test_reconcile_matches_vins_regardless_of_case_and_spacing() -> None:
    result = reconcile([_record("1", "1GNSKGKC5PR123456")], [_candidate(" 1gnskgkc5pr123456 ")])

    assert result.to_import == ()
    assert len(result.skipped) == 1


def test_reconcile_skips_candidates_without_vin() -> None:
    result = reconcile([], [_candidate(""), _candidate("D")], id_factory=_counter())

    assert [record.vin for record in result.to_import] == ["D"]
    assert len(result.skipped) == 1
    assert result.skipped[0].vin == ""


def test_reconcile_does_not_touch_inputs() -> None:
    existing = [_record("1", "A")]
    candidates = [_candidate("B")]

    reconcile(existing, candidates)

    assert [record.vin for record in existing] == ["A"]
    assert candidates[0].price == "25000"


def test_default_ids_use_import_prefix() -> None:
    result = reconcile([], [_candidate("E"), _candidate("F")])

    ids = [record.id for record in result.to_import]
    assert all(record_id.startswith("imp_") for record_id in ids)
    assert len(set(ids)) == 2


def test_deduplicate_existing_keeps_first_occurrence() -> None:
    records = [_record("1", "A"), _record("2", "B"), _record("3", "A"), _record("4", "C"), _record("5", "B")]

    result = deduplicate_existing(records)

    assert [record.vin for record in result.unique] == ["A", "B", "C"]
    assert [record.id for record in result.unique] == ["1", "2", "4"]
    assert result.removed_count == 2


def test_deduplicate_existing_without_duplicates() -> None:
    result = deduplicate_existing([_record("1", "A"), _record("2", "B")])
    assert result.removed_count == 0
    assert len(result.unique) == 2


def test_candidate_normalization_is_best_effort() -> None:
    candidate = _candidate(
        "1gcuyeed5pz123456",
        model="Silverado 1500",
        year="2023",
        price="$42,995",
        mileage="12,345 mi",
        transmission="10-Speed Manual",
        fuelType="Hybrid Gas/Electric",
        condition="Certified",
        features="Tow Package, Bluetooth, Tow Package, ",
        exterior="Summit White",
    )

    record = to_vehicle_record(candidate, "imp_x")

    assert record.id == "imp_x"
    assert record.vin == "1GCUYEED5PZ123456"
    assert record.price == pytest.approx(42995)
    assert record.mileage == 12345
    assert record.year == 2023
    assert record.body_type == BodyType.TRUCK
    assert record.transmission == Transmission.MANUAL
    assert record.fuel_type == FuelType.HYBRID
    assert record.condition == Condition.USED
    assert record.features == ["Tow Package", "Bluetooth"]
    assert record.exterior_color == "Summit White"
    assert record.available is True


def test_unparseable_numbers_default_to_zero() -> None:
    candidate = _candidate("G", price="Call for price", mileage="n/a", year="unknown")

    record = to_vehicle_record(candidate, "imp_g")

    assert record.price == 0
    assert record.mileage == 0
    assert record.year == 1900


def test_defaults_for_missing_vocabulary() -> None:
    record = to_vehicle_record(_candidate("H", model="Malibu"), "imp_h")

    assert record.body_type == BodyType.SEDAN
    assert record.transmission == Transmission.AUTOMATIC
    assert record.fuel_type == FuelType.GASOLINE
    assert record.condition == Condition.USED


def test_explicit_condition_and_electric_fuel() -> None:
    record = to_vehicle_record(_candidate("J", model="Bolt EUV", condition="NEW", fuel_type="EV"), "imp_j")

    assert record.condition == Condition.NEW
    assert record.fuel_type == FuelType.ELECTRIC
    assert record.body_type == BodyType.SUV


@pytest.mark.parametrize(
    ("model", "category", "expected"),
    [
        ("Colorado", None, BodyType.TRUCK),
        ("Tahoe", None, BodyType.SUV),
        ("Corvette Stingray", None, BodyType.COUPE),
        ("Spark", None, BodyType.HATCHBACK),
        ("Malibu", None, BodyType.SEDAN),
        ("Malibu", "SUV", BodyType.SUV),
        ("Anything", "Convertible", BodyType.CONVERTIBLE),
        ("Ram 2500", None, BodyType.TRUCK),
        ("Ramcharger", None, BodyType.SEDAN),
        ("Cruze Hatchback", None, BodyType.HATCHBACK),
    ],
)
def test_classify_body_type(model: str, category: str | None, expected: BodyType) -> None:
    assert classify_body_type(model, category) == expected


def test_strict_mode_rejects_unparseable_numbers() -> None:
    with pytest.raises(ValidationError) as excinfo:
        reconcile([], [_candidate("K", price="Call for price")], strict=True)

    assert "price" in excinfo.value.errors


def test_strict_mode_accepts_clean_candidates() -> None:
    result = reconcile([], [_candidate("L", mileage="1,200")], strict=True)
    assert result.to_import[0].mileage == 1200
