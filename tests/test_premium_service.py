"""Tests for premium aggregation, proration and taxes."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import pytest

from motor_tariff.core.errors import IncompleteInputError, InvalidContractDetailsError, UnsupportedCoverageError
from motor_tariff.models.vehicle import ContractInput, VehicleInput
from motor_tariff.services.premium_service import PremiumAggregator


def test_civil_liability_only_for_a_year(tariff, year_contract) -> None:
    vehicle = VehicleInput(category=1, horse_power=10)

    result = PremiumAggregator(tariff).compute_premium(vehicle, year_contract, ["civil_liability"])

    assert result.base_premium == Decimal("40862")
    assert result.accessory_amount == Decimal("3000")
    assert result.taxes == Decimal("6141")
    assert result.fga == Decimal("1022")
    assert result.brown_card == Decimal("300")
    assert result.total == Decimal("51325")


def test_civil_liability_is_always_priced(tariff, car, year_contract) -> None:
    result = PremiumAggregator(tariff).compute_premium(car, year_contract, [])

    assert [item.coverage for item in result.coverages] == ["civil_liability"]
    assert result.total == Decimal("51325")


def test_several_coverages_for_a_year(tariff, car, year_contract) -> None:
    result = PremiumAggregator(tariff).compute_premium(
        car, year_contract, ["glass_breakage", "theft", "fire"]
    )

    assert [item.coverage for item in result.coverages] == [
        "civil_liability",
        "theft",
        "fire",
        "glass_breakage",
    ]
    assert result.base_premium == Decimal("76562")
    assert result.taxes == Decimal("11139")
    assert result.fga == Decimal("1022")
    assert result.total == Decimal("92023")


def test_six_month_contract_is_prorated(tariff, car) -> None:
    contract = ContractInput(duration=6, periodicity="month")

    result = PremiumAggregator(tariff).compute_premium(car, contract, ["civil_liability"])

    assert result.coverage("civil_liability").annual_premium == Decimal("40862")
    assert result.base_premium == Decimal("21453")
    assert result.taxes == Decimal("3423")
    assert result.fga == Decimal("536")
    assert result.total == Decimal("28712")


def test_full_year_proration_keeps_annual_premiums(tariff, car, year_contract) -> None:
    coverages = ["damage", "theft", "passengers", "defense_and_recourse", "roadside_assistance"]

    result = PremiumAggregator(tariff).compute_premium(car, year_contract, coverages)

    for item in result.coverages:
        assert item.prorated_premium == item.annual_premium
    assert result.base_premium == result.annual_premium


def test_proration_is_monotonic_in_duration(tariff, car) -> None:
    aggregator = PremiumAggregator(tariff)
    totals = [
        aggregator.compute_premium(car, ContractInput(duration=months), ["theft", "fire"]).total
        for months in range(1, 13)
    ]
    assert totals == sorted(totals)
    assert len(set(totals)) == 12


def test_durations_past_a_year_saturate(tariff, car, year_contract) -> None:
    aggregator = PremiumAggregator(tariff)
    year = aggregator.compute_premium(car, year_contract, ["theft"])
    longer = aggregator.compute_premium(car, ContractInput(duration=18), ["theft"])
    assert longer == year


@pytest.mark.parametrize(("days", "months"), [(1, 1), (30, 1), (31, 2), (45, 2), (365, 13)])
def test_day_contracts_count_started_months(tariff, days: int, months: int) -> None:
    assert PremiumAggregator(tariff).months_for(ContractInput(duration=days, periodicity="day")) == months


def test_day_contract_matches_month_contract(tariff, car) -> None:
    aggregator = PremiumAggregator(tariff)
    by_days = aggregator.compute_premium(car, ContractInput(duration=45, periodicity="day"), [])
    by_months = aggregator.compute_premium(car, ContractInput(duration=2, periodicity="month"), [])
    assert by_days == by_months
    assert by_days.base_premium == Decimal("7151")


def test_unknown_periodicity(tariff, car) -> None:
    with pytest.raises(InvalidContractDetailsError):
        PremiumAggregator(tariff).compute_premium(car, ContractInput(periodicity="week"), [])


def test_zero_duration(tariff, car) -> None:
    with pytest.raises(InvalidContractDetailsError):
        PremiumAggregator(tariff).compute_premium(car, ContractInput(duration=0), [])


def test_missing_inputs(tariff, car, year_contract) -> None:
    aggregator = PremiumAggregator(tariff)
    with pytest.raises(IncompleteInputError, match="Incomplete premium calculation data"):
        aggregator.compute_premium(None, year_contract, [])
    with pytest.raises(IncompleteInputError):
        aggregator.compute_premium(car, None, [])
    with pytest.raises(IncompleteInputError):
        aggregator.compute_premium(car, year_contract, None)


def test_unknown_coverage_fails_the_whole_request(tariff, car, year_contract) -> None:
    with pytest.raises(UnsupportedCoverageError) as error:
        PremiumAggregator(tariff).compute_premium(car, year_contract, ["theft", "flood"])
    assert error.value.coverage == "flood"


def test_coverage_codes_are_normalised(tariff, car, year_contract) -> None:
    aggregator = PremiumAggregator(tariff)
    assert aggregator.resolve_coverages([" Theft ", "theft", "ROADSIDE_ASSISTANCE", "damage"]) == [
        "civil_liability",
        "damage",
        "theft",
        "roadside_assistance",
    ]


def test_roadside_sees_the_full_selection(tariff, car, year_contract) -> None:
    result = PremiumAggregator(tariff).compute_premium(
        car, year_contract, ["roadside_assistance", "damage", "collision"]
    )
    assert result.coverage("roadside_assistance").annual_premium == Decimal("67000")


def test_computation_is_pure(tariff, car, year_contract) -> None:
    aggregator = PremiumAggregator(tariff)
    before = replace(car)
    first = aggregator.compute_premium(car, year_contract, ["damage", "glass_breakage"])
    second = aggregator.compute_premium(car, year_contract, ["damage", "glass_breakage"])
    assert first == second
    assert car == before


def test_result_serialises_amounts_as_strings(tariff, car, year_contract) -> None:
    payload = PremiumAggregator(tariff).compute_premium(car, year_contract, []).to_dict()
    assert payload["premiums"]["total_premium"] == "51325"
    assert payload["coverages"]["civil_liability"] == {
        "annual_premium": "40862",
        "prorated_premium": "40862",
    }
