"""Premium calculation output models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class CoveragePremium:
    coverage: str
    annual_premium: Decimal
    prorated_premium: Decimal


@dataclass(frozen=True)
class PremiumResult:
    """Premium breakdown for one vehicle, contract and coverage set."""

    coverages: tuple[CoveragePremium, ...]
    annual_premium: Decimal
    base_premium: Decimal
    accessory_amount: Decimal
    taxes: Decimal
    fga: Decimal
    brown_card: Decimal
    total: Decimal

    def coverage(self, code: str) -> CoveragePremium | None:
        for item in self.coverages:
            if item.coverage == code:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "premiums": {
                "annual_premium": str(self.annual_premium),
                "base_premium": str(self.base_premium),
                "accessory_amount": str(self.accessory_amount),
                "taxes": str(self.taxes),
                "fga": str(self.fga),
                "brown_card": str(self.brown_card),
                "total_premium": str(self.total),
            },
            "coverages": {
                item.coverage: {
                    "annual_premium": str(item.annual_premium),
                    "prorated_premium": str(item.prorated_premium),
                }
                for item in self.coverages
            },
        }


@dataclass(frozen=True)
class Quote:
    """Priced premium wrapped with reference and validity metadata."""

    reference: str
    premium: PremiumResult
    currency: str
    tariff_version: str
    issued_at: datetime
    valid_until: datetime
    pack: dict[str, str] | None = None
    coverages_requested: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "pack": self.pack,
            "coverages_requested": list(self.coverages_requested),
            **self.premium.to_dict(),
            "metadata": {
                "issued_at": self.issued_at.isoformat(),
                "valid_until": self.valid_until.isoformat(),
                "currency": self.currency,
                "tariff_version": self.tariff_version,
            },
        }
