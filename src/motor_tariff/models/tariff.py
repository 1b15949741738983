"""Tariff document domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Union

from motor_tariff.core.errors import InvalidContractDetailsError, PathNotFoundError

FULL_YEAR_RATE = Decimal("100")

CIVIL_LIABILITY = "civil_liability"
DAMAGE = "damage"
COLLISION = "collision"
CAPPED_DAMAGE = "capped_damage"
THEFT = "theft"
FIRE = "fire"
GLASS_BREAKAGE = "glass_breakage"
ADVANCE_ON_RECOURSE = "advance_on_recourse"
PASSENGERS = "passengers"
DEFENSE_AND_RECOURSE = "defense_and_recourse"
ROADSIDE_ASSISTANCE = "roadside_assistance"

# Pricing order of a quote; roadside assistance depends on the others and goes last.
COVERAGE_ORDER: tuple[str, ...] = (
    CIVIL_LIABILITY,
    DAMAGE,
    COLLISION,
    CAPPED_DAMAGE,
    THEFT,
    FIRE,
    GLASS_BREAKAGE,
    ADVANCE_ON_RECOURSE,
    PASSENGERS,
    DEFENSE_AND_RECOURSE,
    ROADSIDE_ASSISTANCE,
)


@dataclass(frozen=True)
class RateBand:
    """Horsepower interval, inclusive on both ends; ``max=None`` is unbounded."""

    min: int
    max: int | None
    value: Decimal

    def covers(self, horse_power: int) -> bool:
        return self.min <= horse_power and (self.max is None or horse_power <= self.max)


def find_band(bands: tuple[RateBand, ...], horse_power: int) -> RateBand | None:
    """Return the first band covering horse_power."""
    for band in bands:
        if band.covers(horse_power):
            return band
    return None


@dataclass(frozen=True)
class FlatRateTable:
    """One band list for the whole category."""

    bands: tuple[RateBand, ...]


@dataclass(frozen=True)
class SubtypeRateTable:
    """Band lists keyed by vehicle sub-type (weight, seats, usage)."""

    bands_by_sub_type: Mapping[str, tuple[RateBand, ...]]
    default_sub_type: str | None = None


@dataclass(frozen=True)
class IndexedRateTable:
    """Flat rate per vehicle sub-class, independent of horsepower."""

    rates: Mapping[str, Decimal]
    default_key: str


RateTable = Union[FlatRateTable, SubtypeRateTable, IndexedRateTable]


@dataclass(frozen=True)
class CategoryLayout:
    """Expected shape of one category's base rate table."""

    kind: str
    sub_types: tuple[str, ...] = ()
    default_sub_type: str | None = None


# Category 2 has no default sub-type: commercial vehicles must declare one.
CATEGORY_LAYOUTS: dict[int, CategoryLayout] = {
    1: CategoryLayout(kind="flat"),
    2: CategoryLayout(kind="by_sub_type", sub_types=("tourism", "under3.5", "over3.5")),
    3: CategoryLayout(
        kind="by_sub_type",
        sub_types=("under3.5", "over3.5"),
        default_sub_type="under3.5",
    ),
    4: CategoryLayout(
        kind="by_sub_type",
        sub_types=("under9_seats", "over9_seats"),
        default_sub_type="under9_seats",
    ),
    5: CategoryLayout(kind="indexed", default_sub_type="scooters_under_125"),
}


@dataclass(frozen=True)
class CoverageDefinition:
    code: str
    required: bool = False
    mandatory: bool | None = None


@dataclass(frozen=True)
class PackDefinition:
    code: str
    name: str
    description: str
    coverages: tuple[str, ...]


@dataclass(frozen=True)
class TariffRates:
    taxes: Decimal
    fga: Decimal
    commercial: Decimal


@dataclass(frozen=True)
class FixedAmounts:
    accessories: Decimal
    brown_card: Decimal


@dataclass(frozen=True)
class Periodicity:
    day: str
    month: str


@dataclass(frozen=True)
class TariffDocument:
    """Validated, read-only tariff configuration."""

    version: str
    currency: str
    periodicity: Periodicity
    rates: TariffRates
    amounts: FixedAmounts
    monthly_rates: Mapping[int, Decimal]
    coverages: Mapping[str, CoverageDefinition]
    coverage_rates: Mapping[str, Any]
    base_rates: Mapping[int, RateTable]
    packs: Mapping[str, PackDefinition] = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def get(self, path: str) -> Any:
        """Return the value at a dot-separated path of the validated document."""
        value: Any = self.raw
        for key in path.split("."):
            if isinstance(value, Mapping) and key in value:
                value = value[key]
            else:
                raise PathNotFoundError(path)
        return value

    def has(self, path: str) -> bool:
        try:
            self.get(path)
        except PathNotFoundError:
            return False
        return True

    def monthly_rate(self, duration: int) -> Decimal:
        """Proration percentage for a duration in months; saturates past a year."""
        if duration < 1:
            raise InvalidContractDetailsError("Contract duration must be at least 1 month.")
        if duration > 12:
            return FULL_YEAR_RATE
        return self.monthly_rates[duration]

    def base_rate(self, category: int) -> RateTable:
        try:
            return self.base_rates[category]
        except KeyError:
            raise PathNotFoundError(f"base_rates.{category}") from None

    def coverage(self, name: str) -> CoverageDefinition | None:
        return self.coverages.get(name)

    def coverage_table(self, name: str) -> Any:
        try:
            return self.coverage_rates[name]
        except KeyError:
            raise PathNotFoundError(f"coverage_rates.{name}") from None

    def required_coverages(self) -> tuple[str, ...]:
        return tuple(code for code, definition in self.coverages.items() if definition.required)

    def pack(self, code: str) -> PackDefinition | None:
        return self.packs.get(code)

    @property
    def tax_rate(self) -> Decimal:
        return self.rates.taxes

    @property
    def fga_rate(self) -> Decimal:
        return self.rates.fga

    @property
    def commercial_rate(self) -> Decimal:
        return self.rates.commercial

    @property
    def accessory_amount(self) -> Decimal:
        return self.amounts.accessories

    @property
    def brown_card_amount(self) -> Decimal:
        return self.amounts.brown_card
