"""Application dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from motor_tariff.core.config import AppConfig, TariffSourceConfig, load_config
from motor_tariff.models.tariff import TariffDocument
from motor_tariff.repositories.tariff_sources import DatabaseTariffSource, FileTariffSource
from motor_tariff.services.premium_service import PremiumAggregator
from motor_tariff.services.quote_service import QuoteService
from motor_tariff.services.tariff_loader import TariffSource, load_tariff_document


@dataclass
class ServiceContainer:
    """Wires the tariff document and the pricing services."""

    config: AppConfig
    tariff: TariffDocument
    premium_service: PremiumAggregator
    quote_service: QuoteService


def build_tariff_source(config: TariffSourceConfig) -> TariffSource:
    if config.source == "database":
        return DatabaseTariffSource.from_path(config.path)
    return FileTariffSource(config.path)


def build_container(config_path: Path | None = None) -> ServiceContainer:
    """Load settings and the tariff once, then build services around them."""
    config = load_config(config_path)
    tariff = load_tariff_document(build_tariff_source(config.tariff))
    premium_service = PremiumAggregator(tariff)

    return ServiceContainer(
        config=config,
        tariff=tariff,
        premium_service=premium_service,
        quote_service=QuoteService(premium_service, config.quote),
    )
