"""Civil-liability base rate resolution."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from motor_tariff.core.errors import InvalidVehicleDetailsError, RateNotFoundException
from motor_tariff.core.money import round_cents, round_currency
from motor_tariff.core.validation import validate_category, validate_horse_power, validate_sub_type
from motor_tariff.models.tariff import (
    FlatRateTable,
    IndexedRateTable,
    RateTable,
    SubtypeRateTable,
    TariffDocument,
    find_band,
)
from motor_tariff.models.vehicle import DIESEL, VehicleInput

logger = logging.getLogger(__name__)

COMMERCIAL_CATEGORY = 2

# (diesel min, diesel max, gasoline min, gasoline max); None is unbounded.
DIESEL_EQUIVALENCE: tuple[tuple[int, int | None, int, int | None], ...] = (
    (0, 2, 0, 2),
    (3, 4, 3, 6),
    (5, 7, 7, 10),
    (8, 10, 11, 14),
    (11, 16, 15, 23),
    (17, None, 24, None),
)


def convert_diesel_power(horse_power: int) -> int:
    """Return the gasoline-equivalent fiscal power of a diesel engine.

    The midpoint of the equivalent gasoline band is used, rounded half up; the
    open top band maps to its lower boundary.
    """
    for diesel_min, diesel_max, gas_min, gas_max in DIESEL_EQUIVALENCE:
        if diesel_min <= horse_power and (diesel_max is None or horse_power <= diesel_max):
            if gas_max is None:
                return gas_min
            midpoint = (Decimal(gas_min + gas_max) / 2).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
            return int(midpoint)
    raise RateNotFoundException(f"Unable to convert diesel horsepower: {horse_power}")


def resolve_from_table(
    table: RateTable,
    category: int,
    horse_power: int,
    sub_type: str | None = None,
) -> Decimal:
    """Single dispatch over the rate table variants."""
    if isinstance(table, FlatRateTable):
        bands = table.bands
    elif isinstance(table, SubtypeRateTable):
        key = sub_type or table.default_sub_type
        if key is None:
            raise InvalidVehicleDetailsError(
                f"Vehicle type must be specified for category {category} vehicles"
            )
        if key not in table.bands_by_sub_type:
            allowed = ", ".join(table.bands_by_sub_type)
            raise InvalidVehicleDetailsError(
                f"Invalid vehicle type {key!r} for category {category}. Must be one of: {allowed}"
            )
        bands = table.bands_by_sub_type[key]
    elif isinstance(table, IndexedRateTable):
        key = sub_type or table.default_key
        if key not in table.rates:
            allowed = ", ".join(table.rates)
            raise InvalidVehicleDetailsError(
                f"Invalid vehicle class {key!r} for category {category}. Must be one of: {allowed}"
            )
        return table.rates[key]
    else:
        raise TypeError(f"Unsupported rate table: {type(table).__name__}")

    band = find_band(bands, horse_power)
    if band is None:
        raise RateNotFoundException(
            f"No RC rate found for category {category} with {horse_power} HP"
        )
    return band.value


class RateResolver:
    """Resolves base rates against an immutable tariff document."""

    def __init__(self, tariff: TariffDocument):
        self._tariff = tariff

    def resolve_rc_rate(
        self,
        category: int,
        horse_power: int,
        sub_type: str | None = None,
        fuel_type: str | None = None,
    ) -> Decimal:
        """Return the base civil-liability rate for a vehicle."""
        category = validate_category(category)
        horse_power = validate_horse_power(horse_power)
        sub_type = validate_sub_type(sub_type)
        if category == COMMERCIAL_CATEGORY and sub_type is None:
            raise InvalidVehicleDetailsError("Vehicle type must be specified for commercial vehicles")

        rated_power = horse_power
        if fuel_type is not None and fuel_type.strip().lower() == DIESEL:
            rated_power = convert_diesel_power(horse_power)

        rate = resolve_from_table(self._tariff.base_rate(category), category, rated_power, sub_type)
        logger.debug(
            "RC rate category=%s sub_type=%s hp=%s rated_hp=%s -> %s",
            category,
            sub_type,
            horse_power,
            rated_power,
            rate,
        )
        return rate

    def rate_for(self, vehicle: VehicleInput) -> Decimal:
        return self.resolve_rc_rate(
            vehicle.category,
            vehicle.horse_power,
            sub_type=vehicle.sub_type,
            fuel_type=DIESEL if vehicle.is_diesel else vehicle.fuel_type,
        )

    def civil_liability_premium(self, vehicle: VehicleInput) -> Decimal:
        """Base rate with the commercial-effort rate applied, in whole units."""
        discounted = round_cents(self.rate_for(vehicle) * self._tariff.commercial_rate)
        return round_currency(discounted)
