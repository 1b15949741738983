"""Decimal rounding helpers for currency amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, str]

UNIT = Decimal("1")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_cents(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_currency(value: Number) -> Decimal:
    """Round to whole currency units, halves away from zero."""
    return to_decimal(value).quantize(UNIT, rounding=ROUND_HALF_UP)


def percent_of(amount: Number, rate: Number) -> Decimal:
    """amount x rate / 100, unrounded."""
    return to_decimal(amount) * to_decimal(rate) / HUNDRED
