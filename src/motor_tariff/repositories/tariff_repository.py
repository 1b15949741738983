"""Tariff persistence in the relational schema."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Mapping

from motor_tariff.models.tariff import CATEGORY_LAYOUTS
from motor_tariff.repositories.db_pool import ThreadLocalConnection
from motor_tariff.repositories.schema import clear_tariff, initialize_schema

NUMERIC_SETTING_PREFIXES = ("rates.", "amounts.")


def _dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=float)


def _load_json(value: str | None) -> Any:
    if value is None:
        return None
    return json.loads(value, parse_float=Decimal)


def _rate_text(value: Any) -> str:
    return str(Decimal(str(value)))


class TariffRepository:
    """Reads and writes a tariff document as rows."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    def save_document(self, raw: Mapping[str, Any]) -> None:
        """Replace the stored tariff with a raw document in one transaction."""
        constants = raw["constants"]
        settings: list[tuple[str, str]] = [
            ("version", str(raw["version"])),
            ("periodicity.day", str(constants["periodicity"]["day"])),
            ("periodicity.month", str(constants["periodicity"]["month"])),
        ]
        if raw.get("currency"):
            settings.append(("currency", str(raw["currency"])))
        for key, value in constants["rates"].items():
            settings.append((f"rates.{key}", _rate_text(value)))
        for key, value in constants["amounts"].items():
            settings.append((f"amounts.{key}", _rate_text(value)))

        monthly_rates = [(int(month), _rate_text(rate)) for month, rate in raw["monthly_rates"].items()]
        base_rates = self._base_rate_rows(raw["base_rates"])

        coverage_rates = raw.get("coverage_rates") or {}
        coverages = []
        for position, (code, definition) in enumerate(raw["coverages"].items()):
            definition = definition or {}
            mandatory = definition.get("mandatory")
            coverages.append(
                (
                    code,
                    position,
                    int(bool(definition.get("required", False))),
                    None if mandatory is None else int(bool(mandatory)),
                    _dump_json(coverage_rates[code]) if code in coverage_rates else None,
                )
            )

        packs = [
            (code, pack["name"], pack.get("description") or "", _dump_json(list(pack["coverages"])))
            for code, pack in (raw.get("packs") or {}).items()
        ]

        initialize_schema(self._pool)
        with self._pool.connection as connection:
            clear_tariff(connection)
            connection.executemany("INSERT INTO tariff_settings (key, value) VALUES (?, ?)", settings)
            connection.executemany("INSERT INTO tariff_monthly_rates (month, rate) VALUES (?, ?)", monthly_rates)
            connection.executemany(
                """
                INSERT INTO tariff_base_rates (category, sub_type, min_hp, max_hp, rate)
                VALUES (?, ?, ?, ?, ?)
                """,
                base_rates,
            )
            connection.executemany(
                """
                INSERT INTO tariff_coverages (code, position, is_required, is_mandatory, params)
                VALUES (?, ?, ?, ?, ?)
                """,
                coverages,
            )
            connection.executemany(
                "INSERT INTO tariff_packs (code, name, description, coverages) VALUES (?, ?, ?, ?)",
                packs,
            )

    @staticmethod
    def _base_rate_rows(base_rates: Mapping[Any, Any]) -> list[tuple[Any, ...]]:
        rows: list[tuple[Any, ...]] = []
        for key, table in base_rates.items():
            category = int(key)
            layout = CATEGORY_LAYOUTS.get(category)
            if layout is None or layout.kind == "flat":
                for band in table:
                    rows.append((category, None, band["min"], band.get("max"), _rate_text(band["value"])))
            elif layout.kind == "by_sub_type":
                for sub_type, bands in table.items():
                    for band in bands:
                        rows.append(
                            (category, sub_type, band["min"], band.get("max"), _rate_text(band["value"]))
                        )
            else:
                for sub_type, rate in table.items():
                    rows.append((category, sub_type, None, None, _rate_text(rate)))
        return rows

    def load_document(self) -> dict[str, Any]:
        """Assemble the stored rows back into a raw tariff document."""
        settings = {
            row["key"]: row["value"]
            for row in self._pool.fetchall("SELECT key, value FROM tariff_settings")
        }

        document: dict[str, Any] = {}
        constants: dict[str, Any] = {"periodicity": {}, "rates": {}, "amounts": {}}
        for key, value in settings.items():
            if key in ("version", "currency"):
                document[key] = value
                continue
            section, _, name = key.partition(".")
            if section not in constants or not name:
                continue
            if key.startswith(NUMERIC_SETTING_PREFIXES):
                constants[section][name] = Decimal(value)
            else:
                constants[section][name] = value
        if settings:
            document["constants"] = constants

        monthly_rows = self._pool.fetchall("SELECT month, rate FROM tariff_monthly_rates ORDER BY month")
        if monthly_rows:
            document["monthly_rates"] = {row["month"]: Decimal(row["rate"]) for row in monthly_rows}

        base_rows = self._pool.fetchall(
            """
            SELECT category, sub_type, min_hp, max_hp, rate
            FROM tariff_base_rates
            ORDER BY category, id
            """
        )
        if base_rows:
            document["base_rates"] = self._assemble_base_rates(base_rows)

        coverage_rows = self._pool.fetchall(
            """
            SELECT code, is_required, is_mandatory, params
            FROM tariff_coverages
            ORDER BY position
            """
        )
        if coverage_rows:
            document["coverages"] = {
                row["code"]: {
                    "required": bool(row["is_required"]),
                    "mandatory": None if row["is_mandatory"] is None else bool(row["is_mandatory"]),
                }
                for row in coverage_rows
            }
            document["coverage_rates"] = {
                row["code"]: _load_json(row["params"])
                for row in coverage_rows
                if row["params"] is not None
            }

        pack_rows = self._pool.fetchall("SELECT code, name, description, coverages FROM tariff_packs")
        if pack_rows:
            document["packs"] = {
                row["code"]: {
                    "name": row["name"],
                    "description": row["description"] or "",
                    "coverages": _load_json(row["coverages"]),
                }
                for row in pack_rows
            }
        return document

    @staticmethod
    def _assemble_base_rates(rows: list[Any]) -> dict[str, Any]:
        base_rates: dict[str, Any] = {}
        for row in rows:
            category = int(row["category"])
            layout = CATEGORY_LAYOUTS.get(category)
            rate = Decimal(row["rate"])
            key = str(category)
            if layout is None or layout.kind == "flat":
                base_rates.setdefault(key, []).append(
                    {"min": row["min_hp"], "max": row["max_hp"], "value": rate}
                )
            elif layout.kind == "by_sub_type":
                table = base_rates.setdefault(key, {})
                table.setdefault(row["sub_type"], []).append(
                    {"min": row["min_hp"], "max": row["max_hp"], "value": rate}
                )
            else:
                base_rates.setdefault(key, {})[row["sub_type"]] = rate
        return base_rates
