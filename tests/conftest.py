"""Shared fixtures: the bundled tariff document and sample vehicles."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from motor_tariff.models.tariff import TariffDocument
from motor_tariff.models.vehicle import ContractInput, VehicleInput
from motor_tariff.services.tariff_loader import build_tariff_document

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TARIFF_PATH = PROJECT_ROOT / "config" / "tariff.yaml"
SETTINGS_PATH = PROJECT_ROOT / "config" / "settings.yaml"


def load_raw_tariff() -> dict:
    with TARIFF_PATH.open("r", encoding="utf-8") as file:
        return yaml.safe_load(file)


@pytest.fixture
def raw_tariff() -> dict:
    return load_raw_tariff()


@pytest.fixture
def tariff() -> TariffDocument:
    return build_tariff_document(load_raw_tariff(), str(TARIFF_PATH))


@pytest.fixture
def car() -> VehicleInput:
    return VehicleInput(
        category=1,
        horse_power=10,
        original_value=Decimal("10000000"),
        market_value=Decimal("8000000"),
        max_weight=1400,
        passenger_option=2,
    )


@pytest.fixture
def year_contract() -> ContractInput:
    return ContractInput(duration=12, periodicity="month")
