"""Premium aggregation: proration, taxes, levies and fixed fees."""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Iterable

from motor_tariff.core.errors import (
    IncompleteInputError,
    InvalidContractDetailsError,
    UnsupportedCoverageError,
)
from motor_tariff.core.money import percent_of, round_currency
from motor_tariff.core.validation import validate_coverage_ids, validate_duration
from motor_tariff.models.premium import CoveragePremium, PremiumResult
from motor_tariff.models.tariff import CIVIL_LIABILITY, COVERAGE_ORDER, TariffDocument
from motor_tariff.models.vehicle import ContractInput, VehicleInput
from motor_tariff.services.coverage_calculator import CoverageCalculator
from motor_tariff.services.rate_resolver import RateResolver

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


class PremiumAggregator:
    """Prices a full coverage selection against one tariff document."""

    def __init__(self, tariff: TariffDocument, calculator: CoverageCalculator | None = None):
        self._tariff = tariff
        self._calculator = calculator or CoverageCalculator(tariff, RateResolver(tariff))

    @property
    def tariff(self) -> TariffDocument:
        return self._tariff

    def months_for(self, contract: ContractInput) -> int:
        """Contract length in months; day contracts round up to started months."""
        duration = validate_duration(contract.duration)
        periodicity = str(contract.periodicity or "").strip().lower()
        if periodicity == self._tariff.periodicity.month.lower():
            return duration
        if periodicity == self._tariff.periodicity.day.lower():
            return max(1, math.ceil(duration / DAYS_PER_MONTH))
        raise InvalidContractDetailsError(
            f"Unsupported periodicity {contract.periodicity!r}; expected "
            f"{self._tariff.periodicity.month!r} or {self._tariff.periodicity.day!r}"
        )

    def prorate(self, annual_premium: Decimal, months: int) -> Decimal:
        return round_currency(percent_of(annual_premium, self._tariff.monthly_rate(months)))

    def resolve_coverages(self, coverages: Iterable[str]) -> list[str]:
        """Required coverages plus the selection, in pricing order."""
        requested = set(validate_coverage_ids(coverages))
        unknown = sorted(code for code in requested if not self._calculator.supports(code))
        if unknown:
            raise UnsupportedCoverageError(unknown[0])
        requested.update(self._tariff.required_coverages())
        return [code for code in COVERAGE_ORDER if code in requested]

    def compute_premium(
        self,
        vehicle: VehicleInput | None,
        contract: ContractInput | None,
        coverages: Iterable[str] | None,
    ) -> PremiumResult:
        """Price the vehicle for the contract term and coverage selection."""
        if vehicle is None or contract is None or coverages is None:
            raise IncompleteInputError("Incomplete premium calculation data")

        months = self.months_for(contract)
        selected = self.resolve_coverages(coverages)

        items: list[CoveragePremium] = []
        for code in selected:
            annual = self._calculator.premium_for(code, vehicle, selected)
            items.append(
                CoveragePremium(
                    coverage=code,
                    annual_premium=annual,
                    prorated_premium=self.prorate(annual, months),
                )
            )

        annual_premium = sum((item.annual_premium for item in items), Decimal("0"))
        base_premium = sum((item.prorated_premium for item in items), Decimal("0"))
        accessory_amount = self._tariff.accessory_amount
        taxes = round_currency((base_premium + accessory_amount) * self._tariff.tax_rate)

        civil_liability = next((item for item in items if item.coverage == CIVIL_LIABILITY), None)
        fga = Decimal("0")
        if civil_liability is not None:
            fga = round_currency(civil_liability.prorated_premium * self._tariff.fga_rate)

        brown_card = self._tariff.brown_card_amount
        total = base_premium + accessory_amount + taxes + fga + brown_card

        logger.debug(
            "Premium computed coverages=%s months=%s base=%s total=%s",
            ",".join(selected),
            months,
            base_premium,
            total,
        )
        return PremiumResult(
            coverages=tuple(items),
            annual_premium=annual_premium,
            base_premium=base_premium,
            accessory_amount=accessory_amount,
            taxes=taxes,
            fga=fga,
            brown_card=brown_card,
            total=total,
        )
