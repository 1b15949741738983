"""Vehicle and contract input models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

DIESEL = "diesel"
GASOLINE = "gasoline"


@dataclass
class VehicleInput:
    """Vehicle attributes needed to price a contract."""

    category: int
    horse_power: int
    fuel_type: str = GASOLINE
    sub_type: str | None = None
    seat_count: int = 5
    original_value: Decimal = Decimal("0")
    market_value: Decimal = Decimal("0")
    max_weight: int = 0
    passenger_option: int = 1

    @property
    def is_diesel(self) -> bool:
        return self.fuel_type.strip().lower() == DIESEL


@dataclass
class ContractInput:
    """Contract term for proration."""

    duration: int = 12
    periodicity: str = "month"
    effective_date: date | None = None
