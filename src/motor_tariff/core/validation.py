"""Input validation rules for vehicle, contract and coverage requests."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from motor_tariff.core.errors import (
    IncompleteInputError,
    InvalidContractDetailsError,
    InvalidVehicleDetailsError,
)

SUPPORTED_CATEGORIES = (1, 2, 3, 4, 5)
SUPPORTED_FUEL_TYPES = ("gasoline", "diesel", "hybrid", "electric")
SUPPORTED_PERIODICITIES = ("month", "day")


def _whole_number(value: Any) -> int:
    """int() without truncation; booleans and fractional numbers are rejected."""
    if isinstance(value, bool):
        raise TypeError(f"not an integer: {value!r}")
    if isinstance(value, (float, Decimal)) and value != int(value):
        raise ValueError(f"not an integer: {value!r}")
    return int(value)


def validate_category(category: Any) -> int:
    """Validate vehicle category range 1-5."""
    try:
        value = _whole_number(category)
    except (TypeError, ValueError, ArithmeticError):
        raise InvalidVehicleDetailsError(f"Unsupported vehicle category: {category!r}") from None
    if value not in SUPPORTED_CATEGORIES:
        raise InvalidVehicleDetailsError(f"Unsupported vehicle category: {value}")
    return value


def validate_horse_power(horse_power: Any) -> int:
    """Fiscal horsepower must be a non-negative integer."""
    try:
        value = _whole_number(horse_power)
    except (TypeError, ValueError, ArithmeticError):
        raise InvalidVehicleDetailsError(f"Horse power must be an integer: {horse_power!r}") from None
    if value < 0:
        raise InvalidVehicleDetailsError("Horse power cannot be negative")
    return value


def validate_fuel_type(fuel_type: Any) -> str:
    normalized = str(fuel_type or "").strip().lower()
    if normalized == "essence":
        normalized = "gasoline"
    if normalized not in SUPPORTED_FUEL_TYPES:
        raise InvalidVehicleDetailsError(f"Unsupported fuel type: {fuel_type!r}")
    return normalized


def validate_sub_type(sub_type: Any) -> str | None:
    """Empty sub-types are treated as unspecified."""
    if sub_type is None:
        return None
    normalized = str(sub_type).strip()
    return normalized or None


def validate_money(value: Any, field_name: str) -> Decimal:
    """Declared values are non-negative decimals."""
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidVehicleDetailsError(f"{field_name} must be a number.") from None
    if not amount.is_finite() or amount < 0:
        raise InvalidVehicleDetailsError(f"{field_name} cannot be negative.")
    return amount


def validate_positive_int(value: Any, field_name: str, minimum: int = 0) -> int:
    try:
        number = _whole_number(value)
    except (TypeError, ValueError, ArithmeticError):
        raise InvalidVehicleDetailsError(f"{field_name} must be an integer.") from None
    if number < minimum:
        raise InvalidVehicleDetailsError(f"{field_name} must be at least {minimum}.")
    return number


def validate_duration(duration: Any) -> int:
    try:
        value = _whole_number(duration)
    except (TypeError, ValueError, ArithmeticError):
        raise InvalidContractDetailsError(f"Contract duration must be an integer: {duration!r}") from None
    if value < 1:
        raise InvalidContractDetailsError("Contract duration must be at least 1.")
    return value


def validate_periodicity(periodicity: Any) -> str:
    normalized = str(periodicity or "").strip().lower()
    if normalized not in SUPPORTED_PERIODICITIES:
        raise InvalidContractDetailsError(
            f"Periodicity must be one of: {', '.join(SUPPORTED_PERIODICITIES)}"
        )
    return normalized


def validate_coverage_ids(coverages: Iterable[Any] | None) -> list[str]:
    """Normalize coverage identifiers, keeping first occurrence order."""
    if coverages is None:
        raise IncompleteInputError("Coverage selection is required.")
    normalized: list[str] = []
    for coverage in coverages:
        code = str(coverage).strip().lower()
        if code and code not in normalized:
            normalized.append(code)
    return normalized
