"""Quote generation: request parsing, pack resolution and quote metadata."""

from __future__ import annotations

import hashlib
import logging
import secrets
import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Mapping

from motor_tariff.core.config import QuoteConfig
from motor_tariff.core.errors import IncompleteInputError, InvalidContractDetailsError, UnknownPackError
from motor_tariff.core.validation import (
    validate_category,
    validate_coverage_ids,
    validate_duration,
    validate_fuel_type,
    validate_horse_power,
    validate_money,
    validate_periodicity,
    validate_positive_int,
    validate_sub_type,
)
from motor_tariff.models.premium import Quote
from motor_tariff.models.vehicle import ContractInput, VehicleInput
from motor_tariff.services.premium_service import PremiumAggregator

logger = logging.getLogger(__name__)

MIN_REFERENCE_LENGTH = 6


def _pick(raw: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    """Return the first present key; requests may use snake_case or camelCase."""
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return default


def parse_vehicle(raw: Mapping[str, Any]) -> VehicleInput:
    """Build a validated VehicleInput from a plain mapping."""
    if not isinstance(raw, Mapping):
        raise IncompleteInputError("Vehicle details are required.")
    return VehicleInput(
        category=validate_category(_pick(raw, "category")),
        horse_power=validate_horse_power(_pick(raw, "horse_power", "horsePower")),
        fuel_type=validate_fuel_type(_pick(raw, "fuel_type", "fuelType", default="gasoline")),
        sub_type=validate_sub_type(_pick(raw, "sub_type", "subType", "subCategory", "vehicleType")),
        seat_count=validate_positive_int(_pick(raw, "seat_count", "seatCount", default=5), "Seat count", 1),
        original_value=validate_money(_pick(raw, "original_value", "originalValue"), "Original value"),
        market_value=validate_money(_pick(raw, "market_value", "marketValue"), "Market value"),
        max_weight=validate_positive_int(_pick(raw, "max_weight", "maxWeight", default=0), "Max weight"),
        passenger_option=validate_positive_int(
            _pick(raw, "passenger_option", "passengerOption", default=1),
            "Passenger option",
        ),
    )


def parse_contract(raw: Mapping[str, Any]) -> ContractInput:
    """Build a validated ContractInput from a plain mapping."""
    if not isinstance(raw, Mapping):
        raise IncompleteInputError("Contract details are required.")

    effective = _pick(raw, "effective_date", "startDate")
    if isinstance(effective, str):
        try:
            effective = date.fromisoformat(effective)
        except ValueError:
            raise InvalidContractDetailsError("Invalid date format. Use YYYY-MM-DD") from None
    elif isinstance(effective, datetime):
        effective = effective.date()
    elif effective is not None and not isinstance(effective, date):
        raise InvalidContractDetailsError("Invalid date format. Use YYYY-MM-DD")

    return ContractInput(
        duration=validate_duration(_pick(raw, "duration", default=12)),
        periodicity=validate_periodicity(_pick(raw, "periodicity", default="month")),
        effective_date=effective,
    )


def generate_reference_number(
    prefix: str = "SIM",
    length: int = 12,
    include_year: bool = True,
    now: datetime | None = None,
) -> str:
    """Return ``prefix + year + hash`` truncated to ``length`` characters."""
    if length < MIN_REFERENCE_LENGTH:
        raise ValueError(f"Reference number length must be at least {MIN_REFERENCE_LENGTH} characters")

    year = str((now or datetime.now(timezone.utc)).year) if include_year else ""
    remaining = length - len(prefix) - len(year)
    if remaining < 1:
        raise ValueError("Reference number length leaves no room for the unique part")

    seed = f"{time.perf_counter_ns()}{secrets.token_hex(4)}"
    unique = hashlib.sha256(seed.encode("utf-8")).hexdigest().upper()
    return f"{prefix}{year}{unique[:remaining]}"


class QuoteService:
    """Wraps premium computation with packs, references and validity."""

    def __init__(
        self,
        aggregator: PremiumAggregator,
        config: QuoteConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        self._aggregator = aggregator
        self._config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def quote(
        self,
        vehicle: VehicleInput,
        contract: ContractInput,
        pack_code: str | None = None,
        coverages: Iterable[str] | None = None,
    ) -> Quote:
        """Price a pack and/or an explicit coverage list."""
        if pack_code is None and coverages is None:
            raise IncompleteInputError("A pack code or a coverage selection is required.")

        requested: list[str] = []
        pack_info: dict[str, str] | None = None
        if pack_code is not None:
            pack = self._aggregator.tariff.pack(pack_code)
            if pack is None:
                raise UnknownPackError(pack_code)
            requested.extend(pack.coverages)
            pack_info = {"code": pack.code, "name": pack.name, "description": pack.description}
        if coverages is not None:
            requested.extend(validate_coverage_ids(coverages))

        premium = self._aggregator.compute_premium(vehicle, contract, requested)
        issued_at = self._clock()
        reference = generate_reference_number(
            prefix=self._config.reference_prefix,
            length=self._config.reference_length,
            now=issued_at,
        )
        logger.info("Quote %s priced at %s", reference, premium.total)

        return Quote(
            reference=reference,
            premium=premium,
            currency=self._aggregator.tariff.currency,
            tariff_version=self._aggregator.tariff.version,
            issued_at=issued_at,
            valid_until=issued_at + timedelta(days=self._config.validity_days),
            pack=pack_info,
            coverages_requested=tuple(validate_coverage_ids(requested)),
        )

    def quote_from_request(self, request: Mapping[str, Any]) -> Quote:
        """Price a plain request mapping with vehicle, contract and package/coverages."""
        if not isinstance(request, Mapping):
            raise IncompleteInputError("Quote request must be a mapping.")
        vehicle_raw = request.get("vehicle")
        contract_raw = request.get("contract")
        if vehicle_raw is None or contract_raw is None:
            raise IncompleteInputError("Incomplete premium calculation data")

        return self.quote(
            parse_vehicle(vehicle_raw),
            parse_contract(contract_raw),
            pack_code=_pick(request, "package", "pack"),
            coverages=request.get("coverages"),
        )
