"""Annual premium formulas per coverage."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Iterable

from motor_tariff.core.errors import RateNotFoundException, UnsupportedCoverageError
from motor_tariff.core.money import percent_of, to_decimal
from motor_tariff.core.validation import validate_category, validate_horse_power
from motor_tariff.models.tariff import (
    ADVANCE_ON_RECOURSE,
    CAPPED_DAMAGE,
    CIVIL_LIABILITY,
    COLLISION,
    DAMAGE,
    DEFENSE_AND_RECOURSE,
    FIRE,
    GLASS_BREAKAGE,
    PASSENGERS,
    ROADSIDE_ASSISTANCE,
    THEFT,
    TariffDocument,
    find_band,
)
from motor_tariff.models.vehicle import VehicleInput
from motor_tariff.services.rate_resolver import RateResolver

ZERO = Decimal("0")

Handler = Callable[[VehicleInput, frozenset], Decimal]


class CoverageCalculator:
    """Computes the annual premium of one coverage for one vehicle."""

    def __init__(self, tariff: TariffDocument, resolver: RateResolver | None = None):
        self._tariff = tariff
        self._resolver = resolver or RateResolver(tariff)
        self._handlers: dict[str, Handler] = {
            CIVIL_LIABILITY: self._civil_liability,
            DAMAGE: self._damage,
            COLLISION: self._collision,
            CAPPED_DAMAGE: self._capped_damage,
            THEFT: self._theft,
            FIRE: self._fire,
            GLASS_BREAKAGE: self._glass_breakage,
            ADVANCE_ON_RECOURSE: self._advance_on_recourse,
            PASSENGERS: self._passengers,
            DEFENSE_AND_RECOURSE: self._defense_and_recourse,
            ROADSIDE_ASSISTANCE: self._roadside_assistance,
        }

    def supports(self, coverage: str) -> bool:
        return coverage in self._handlers and self._tariff.coverage(coverage) is not None

    def premium_for(
        self,
        coverage: str,
        vehicle: VehicleInput,
        selected: Iterable[str] = (),
    ) -> Decimal:
        """Return the annual premium; ``selected`` is the full coverage selection."""
        if not self.supports(coverage):
            raise UnsupportedCoverageError(coverage)
        validate_category(vehicle.category)
        validate_horse_power(vehicle.horse_power)
        return self._handlers[coverage](vehicle, frozenset(selected))

    def _civil_liability(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        return self._resolver.civil_liability_premium(vehicle)

    def _category_percentage(self, coverage: str, vehicle: VehicleInput) -> Decimal:
        rates = self._tariff.coverage_table(coverage)
        rate = rates.get(str(vehicle.category))
        if rate is None:
            raise RateNotFoundException(
                f"No {coverage} rate configured for category {vehicle.category}"
            )
        return percent_of(vehicle.original_value, rate)

    def _damage(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        return self._category_percentage(DAMAGE, vehicle)

    def _collision(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        return self._category_percentage(COLLISION, vehicle)

    def _capped_damage(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        # min_premium is a floor on the premium.
        params = self._tariff.coverage_table(CAPPED_DAMAGE)
        premium = percent_of(self._resolver.rate_for(vehicle), params["rate"])
        return max(premium, to_decimal(params["min_premium"]))

    def _theft(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        return percent_of(vehicle.market_value, self._tariff.coverage_table(THEFT)["rate"])

    def _fire(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        return percent_of(vehicle.market_value, self._tariff.coverage_table(FIRE)["rate"])

    def _glass_breakage(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        band = find_band(self._tariff.coverage_table(GLASS_BREAKAGE), vehicle.horse_power)
        if band is None:
            raise RateNotFoundException(
                f"No glass breakage tier for {vehicle.horse_power} HP"
            )
        return band.value

    def _advance_on_recourse(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        params = self._tariff.coverage_table(ADVANCE_ON_RECOURSE)
        return percent_of(params["insured_capital"][0], params["rate"])

    def _passengers(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        # An option outside the table means no passenger cover.
        options = self._tariff.coverage_table(PASSENGERS)["options"]
        return to_decimal(options.get(str(vehicle.passenger_option), ZERO))

    def _defense_and_recourse(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        amounts = self._tariff.coverage_table(DEFENSE_AND_RECOURSE)["amount"]
        amount = amounts.get(str(vehicle.category))
        if amount is None:
            raise RateNotFoundException(
                f"No defense and recourse amount for category {vehicle.category}"
            )
        return amount

    def _roadside_assistance(self, vehicle: VehicleInput, selected: frozenset) -> Decimal:
        params = self._tariff.coverage_table(ROADSIDE_ASSISTANCE)
        tiers = params["tiers"]
        if vehicle.max_weight > params["heavy_weight_threshold"]:
            return tiers["heavy"]

        privileged = len(selected & set(params["privilege_coverages"]))
        if privileged == 0:
            return tiers["basic"]
        if privileged == 1:
            return tiers["privilege"]
        return tiers["vip"]
