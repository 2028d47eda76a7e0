from __future__ import annotations

import math

import pytest

from autolot.config import AutolotConfig
from autolot.exceptions import AutolotConfigError
from autolot.ingestion.normalize import non_negative_or_zero, normalize_vin, safe_float, safe_int, unique_texts


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("$42,995", 42995.0),
        (" 12,345 mi ", 12345.0),
        ("18000 miles", 18000.0),
        ("USD 9,999.50", 9999.5),
        (31000, 31000.0),
        ("--", None),
        ("", None),
        ("Call for price", None),
        (None, None),
        (True, None),
        (math.nan, None),
        ("inf", None),
    ],
)
def test_safe_float(raw: object, expected: float | None) -> None:
    assert safe_float(raw) == expected


def test_safe_int_truncates() -> None:
    assert safe_int("2,023.9") == 2023
    assert safe_int("n/a") is None


def test_non_negative_or_zero() -> None:
    assert non_negative_or_zero("-5") == 0
    assert non_negative_or_zero(None) == 0
    assert non_negative_or_zero("8,500") == 8500


def test_normalize_vin() -> None:
    assert normalize_vin(" 1gn sk gkc5pr123456\n") == "1GNSKGKC5PR123456"
    assert normalize_vin(None) == ""


def test_unique_texts_keeps_first_occurrence() -> None:
    assert unique_texts(["AWD", "  awd", "AWD ", None, "", "Sunroof"]) == ["AWD", "awd", "Sunroof"]


def test_config_defaults() -> None:
    config = AutolotConfig()

    assert config.catalog_path == "dealership_cars.json"
    assert config.import_timeout == 30.0
    assert config.import_retries == 1
    assert config.enforce_unique_vin is True
    assert config.import_endpoint is None


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTOLOT_CATALOG_PATH", "/srv/lot/cars.json")
    monkeypatch.setenv("AUTOLOT_IMPORT_ENDPOINT", "https://scraper.example/api")
    monkeypatch.setenv("AUTOLOT_IMPORT_TIMEOUT", "7.5")
    monkeypatch.setenv("AUTOLOT_IMPORT_RETRIES", "0")
    monkeypatch.setenv("AUTOLOT_ENFORCE_UNIQUE_VIN", "off")
    monkeypatch.setenv("AUTOLOT_SEED_ENABLED", "no")

    config = AutolotConfig.from_env()

    assert config.catalog_path == "/srv/lot/cars.json"
    assert config.import_endpoint == "https://scraper.example/api"
    assert config.import_timeout == 7.5
    assert config.import_retries == 0
    assert config.enforce_unique_vin is False
    assert config.seed_enabled is False


def test_config_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTOLOT_IMPORT_TIMEOUT", "7.5")
    monkeypatch.setenv("AUTOLOT_SEED_ENABLED", "false")

    config = AutolotConfig.from_env(import_timeout=3.0, seed_enabled=True)

    assert config.import_timeout == 3.0
    assert config.seed_enabled is True


def test_config_unknown_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTOLOT_ENFORCE_UNIQUE_VIN", "maybe")
    assert AutolotConfig.from_env().enforce_unique_vin is True


def test_config_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTOLOT_IMPORT_TIMEOUT", "soon")
    with pytest.raises(AutolotConfigError):
        AutolotConfig.from_env()

    with pytest.raises(AutolotConfigError):
        AutolotConfig(import_timeout=0)
    with pytest.raises(AutolotConfigError):
        AutolotConfig(import_retries=-1)
