"""Tests for file and SQLite tariff sources."""

from __future__ import annotations

import copy
import json
import sqlite3
from pathlib import Path

import pytest

from motor_tariff.core.errors import ConfigValidationError
from motor_tariff.models.vehicle import ContractInput, VehicleInput
from motor_tariff.repositories.db_pool import ThreadLocalConnection
from motor_tariff.repositories.schema import initialize_schema
from motor_tariff.repositories.tariff_repository import TariffRepository
from motor_tariff.repositories.tariff_sources import DatabaseTariffSource, FileTariffSource
from motor_tariff.services.premium_service import PremiumAggregator
from motor_tariff.services.tariff_loader import load_tariff_document

TARIFF_PATH = Path(__file__).resolve().parents[1] / "config" / "tariff.yaml"

COVERAGES = [
    "damage",
    "collision",
    "glass_breakage",
    "passengers",
    "defense_and_recourse",
    "roadside_assistance",
]


def _price(document) -> dict:
    vehicle = VehicleInput(
        category=2,
        horse_power=12,
        fuel_type="diesel",
        sub_type="over3.5",
        original_value=15000000,
        market_value=9000000,
        max_weight=5000,
        passenger_option=3,
    )
    result = PremiumAggregator(document).compute_premium(vehicle, ContractInput(duration=7), COVERAGES)
    return result.to_dict()


def _seed_database(raw: dict, db_path: Path) -> None:
    pool = ThreadLocalConnection(str(db_path), create=True)
    try:
        TariffRepository(pool).save_document(raw)
    finally:
        pool.close()


def test_yaml_file_source(tariff) -> None:
    document = load_tariff_document(FileTariffSource(TARIFF_PATH))
    assert document.version == "2024.1"
    assert _price(document) == _price(tariff)


def test_json_file_source_prices_like_yaml(raw_tariff, tariff, tmp_path: Path) -> None:
    json_path = tmp_path / "tariff.json"
    json_path.write_text(json.dumps(raw_tariff), encoding="utf-8")

    document = load_tariff_document(FileTariffSource(json_path))

    assert _price(document) == _price(tariff)


def test_database_source_prices_like_yaml(raw_tariff, tariff, tmp_path: Path) -> None:
    db_path = tmp_path / "tariff.db"
    _seed_database(raw_tariff, db_path)

    source = DatabaseTariffSource.from_path(db_path)
    document = load_tariff_document(source)

    assert source.describe() == f"sqlite:{db_path}"
    assert document.version == tariff.version
    assert document.monthly_rates == tariff.monthly_rates
    assert document.packs == tariff.packs
    assert document.coverages == tariff.coverages
    assert _price(document) == _price(tariff)


def test_save_document_replaces_previous_tariff(raw_tariff, tmp_path: Path) -> None:
    db_path = tmp_path / "tariff.db"
    _seed_database(raw_tariff, db_path)
    raw_tariff["version"] = "2025.1"
    raw_tariff["constants"]["amounts"]["brown_card"] = 500
    _seed_database(raw_tariff, db_path)

    document = load_tariff_document(DatabaseTariffSource.from_path(db_path))

    assert document.version == "2025.1"
    assert document.brown_card_amount == 500


def test_missing_file_is_a_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="unable to read tariff file"):
        FileTariffSource(tmp_path / "missing.yaml").load()


def test_malformed_yaml_is_a_config_error(tmp_path: Path) -> None:
    broken = tmp_path / "tariff.yaml"
    broken.write_text("version: [unterminated\n", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        FileTariffSource(broken).load()


def test_non_mapping_file_is_a_config_error(tmp_path: Path) -> None:
    listing = tmp_path / "tariff.yaml"
    listing.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(ConfigValidationError, match="expected a mapping"):
        FileTariffSource(listing).load()


def test_missing_database_is_a_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="unable to read tariff database"):
        DatabaseTariffSource.from_path(tmp_path / "missing.db").load()


def test_empty_database_fails_validation(tmp_path: Path) -> None:
    db_path = tmp_path / "empty.db"
    pool = ThreadLocalConnection(str(db_path), create=True)
    initialize_schema(pool)
    pool.close()

    with pytest.raises(ConfigValidationError) as error:
        load_tariff_document(DatabaseTariffSource.from_path(db_path))
    assert "document: 'version' is a required property" in error.value.violations


def test_last_band_without_max_is_stored_as_unbounded(raw_tariff, tmp_path: Path) -> None:
    db_path = tmp_path / "tariff.db"
    del raw_tariff["base_rates"]["1"][-1]["max"]
    _seed_database(raw_tariff, db_path)

    document = load_tariff_document(DatabaseTariffSource.from_path(db_path))

    assert document.base_rate(1).bands[-1].max is None


def test_failed_save_keeps_previous_tariff(raw_tariff, tmp_path: Path) -> None:
    db_path = tmp_path / "tariff.db"
    _seed_database(raw_tariff, db_path)
    before = load_tariff_document(DatabaseTariffSource.from_path(db_path))

    broken = copy.deepcopy(raw_tariff)
    broken["version"] = "2025.1"
    broken["packs"]["essential"]["name"] = None
    with pytest.raises(sqlite3.IntegrityError):
        _seed_database(broken, db_path)

    after = load_tariff_document(DatabaseTariffSource.from_path(db_path))
    assert after.version == "2024.1"
    assert after.base_rates == before.base_rates
    assert after.packs == before.packs
