"""Configuration loader for tariff source, logging and quote settings."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CONFIG_REL_PATH = Path("config/settings.yaml")
DEFAULT_TARIFF_REL_PATH = Path("config/tariff.yaml")
CONFIG_PATH_ENV = "MOTOR_TARIFF_CONFIG_PATH"
SOURCE_PATH_ENV = "MOTOR_TARIFF_SOURCE_PATH"
SOURCE_KINDS = ("file", "database")
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class TariffSourceConfig:
    source: str
    path: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    format: str


@dataclass(frozen=True)
class QuoteConfig:
    reference_prefix: str
    reference_length: int
    validity_days: int


@dataclass(frozen=True)
class AppConfig:
    tariff: TariffSourceConfig
    logging: LoggingConfig
    quote: QuoteConfig


def _project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[3]


def resolve_default_config_path() -> Path:
    """Resolve settings path for source and installed execution."""
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    candidates = [
        Path.cwd() / DEFAULT_CONFIG_REL_PATH,
        _project_root() / DEFAULT_CONFIG_REL_PATH,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


def _resolve_relative(path_value: str, base_dir: Path) -> str:
    """Resolve a relative path against the settings file, then the project root."""
    path = Path(path_value)
    if path.is_absolute():
        return str(path)
    for root in (base_dir.parent, base_dir, Path.cwd(), _project_root()):
        candidate = root / path
        if candidate.exists():
            return str(candidate)
    return str(base_dir.parent / path)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the app configuration from YAML."""
    path = config_path or resolve_default_config_path()
    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file) or {}

    tariff_raw = raw.get("tariff") or {}
    source = str(tariff_raw.get("source", "file")).strip().lower()
    if source not in SOURCE_KINDS:
        raise RuntimeError(f"tariff.source must be one of: {', '.join(SOURCE_KINDS)}")

    source_path = os.getenv(SOURCE_PATH_ENV) or str(tariff_raw.get("path", DEFAULT_TARIFF_REL_PATH))
    logging_raw = raw.get("logging") or {}
    quote_raw = raw.get("quote") or {}

    return AppConfig(
        tariff=TariffSourceConfig(
            source=source,
            path=_resolve_relative(source_path, path.resolve().parent),
        ),
        logging=LoggingConfig(
            level=str(logging_raw.get("level", "INFO")).upper(),
            format=str(logging_raw.get("format", DEFAULT_LOG_FORMAT)),
        ),
        quote=QuoteConfig(
            reference_prefix=str(quote_raw.get("reference_prefix", "SIM")),
            reference_length=int(quote_raw.get("reference_length", 16)),
            validity_days=int(quote_raw.get("validity_days", 7)),
        ),
    )


def configure_logging(config: LoggingConfig) -> None:
    """Configure root logging once for command-line entry points."""
    level = logging.getLevelName(config.level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=config.format)
