"""Command-line entry point."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

import yaml

from motor_tariff.core.config import TariffSourceConfig, configure_logging, load_config
from motor_tariff.core.container import build_container, build_tariff_source
from motor_tariff.core.errors import ConfigValidationError, EngineError
from motor_tariff.services.tariff_loader import load_tariff_document

DATABASE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="motor-tariff", description="Motor insurance premium engine.")
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to settings.yaml. Defaults to MOTOR_TARIFF_CONFIG_PATH or config/settings.yaml.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Price a quote request and print it as JSON.")
    quote.add_argument("--request", required=True, help="YAML or JSON quote request file.")

    validate = subparsers.add_parser("validate", help="Validate a tariff document.")
    validate.add_argument(
        "--tariff",
        default=None,
        help="Tariff file or SQLite database. Defaults to the configured tariff source.",
    )
    return parser


def _read_request(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as file:
        if path.suffix.lower() == ".json":
            return json.load(file)
        return yaml.safe_load(file) or {}


def _source_config(tariff_path: str) -> TariffSourceConfig:
    kind = "database" if Path(tariff_path).suffix.lower() in DATABASE_SUFFIXES else "file"
    return TariffSourceConfig(source=kind, path=tariff_path)


def _quote(args: argparse.Namespace, settings_path: Path | None) -> int:
    container = build_container(settings_path)
    request = _read_request(Path(args.request))
    quote = container.quote_service.quote_from_request(request)
    print(json.dumps(quote.to_dict(), indent=2, ensure_ascii=False))
    return 0


def _validate(args: argparse.Namespace, settings_path: Path | None) -> int:
    source_config = _source_config(args.tariff) if args.tariff else load_config(settings_path).tariff
    try:
        document = load_tariff_document(build_tariff_source(source_config))
    except ConfigValidationError as error:
        print(f"[ERROR] tariff invalid: {source_config.path}", file=sys.stderr)
        for violation in error.violations:
            print(f"  - {violation}", file=sys.stderr)
        return 1
    print(f"[INFO] tariff valid: {source_config.path} (version {document.version})")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Dispatch a sub-command and return the process exit code."""
    args = _build_parser().parse_args(argv)
    settings_path = Path(args.settings) if args.settings else None
    try:
        configure_logging(load_config(settings_path).logging)
        if args.command == "quote":
            return _quote(args, settings_path)
        return _validate(args, settings_path)
    except (EngineError, OSError, ValueError, yaml.YAMLError) as error:
        print(f"[ERROR] {error}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
