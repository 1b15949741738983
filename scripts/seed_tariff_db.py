"""Write a YAML/JSON tariff document into the SQLite tariff schema."""

from __future__ import annotations

import argparse
from pathlib import Path

from motor_tariff.repositories.db_pool import ThreadLocalConnection
from motor_tariff.repositories.tariff_repository import TariffRepository
from motor_tariff.repositories.tariff_sources import FileTariffSource
from motor_tariff.services.tariff_loader import validate_tariff_document


def main() -> None:
    """Validate the tariff file, then store it in the target database."""
    parser = argparse.ArgumentParser(description="Seed the motor tariff SQLite database.")
    parser.add_argument(
        "--tariff",
        default="config/tariff.yaml",
        help="Tariff document to import (YAML or JSON).",
    )
    parser.add_argument(
        "--db",
        default="data/tariff.db",
        help="SQLite database to write.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Replace the tariff stored in an existing database.",
    )
    args = parser.parse_args()

    target_path = Path(args.db)
    if target_path.exists() and not args.force:
        print(f"[INFO] database already exists: {target_path}")
        return

    raw = FileTariffSource(args.tariff).load()
    violations = validate_tariff_document(raw)
    if violations:
        for violation in violations:
            print(f"[ERROR] {violation}")
        raise SystemExit(1)

    pool = ThreadLocalConnection(str(target_path), create=True)
    try:
        TariffRepository(pool).save_document(raw)
    finally:
        pool.close()
    print(f"[INFO] tariff {raw['version']} written: {target_path}")


if __name__ == "__main__":
    main()
