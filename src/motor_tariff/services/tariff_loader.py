"""Tariff document validation and construction.

A raw document (plain mappings, lists and numbers as produced by a
``TariffSource``) is checked in full before anything is built: its shape
against ``TARIFF_SCHEMA``, then the rules spanning several fields. Every
violation is collected so a broken document reports all of its problems at
once, and a document that fails validation is never partially exposed.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Protocol

from jsonschema import Draft7Validator

from motor_tariff.core.errors import ConfigValidationError
from motor_tariff.models.tariff import (
    CATEGORY_LAYOUTS,
    CIVIL_LIABILITY,
    COVERAGE_ORDER,
    FULL_YEAR_RATE,
    GLASS_BREAKAGE,
    CoverageDefinition,
    FixedAmounts,
    FlatRateTable,
    IndexedRateTable,
    PackDefinition,
    Periodicity,
    RateBand,
    RateTable,
    SubtypeRateTable,
    TariffDocument,
    TariffRates,
)
from motor_tariff.services.tariff_schema import MONTHS, TARIFF_SCHEMA

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "XOF"

_SCHEMA_VALIDATOR = Draft7Validator(TARIFF_SCHEMA)


class TariffSource(Protocol):
    """Anything that can produce a raw tariff document."""

    def load(self) -> Mapping[str, Any]:
        ...

    def describe(self) -> str:
        ...


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return False


def _plain(value: Any) -> Any:
    """Copy with string keys and lists, the shape JSON Schema expects."""
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _format_path(path: Iterable[Any]) -> str:
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered or "document"


def _band_violations(bands: Any, path: str) -> list[str]:
    """Bands must start at 0, be contiguous and end unbounded."""
    if not isinstance(bands, list) or not bands:
        return []
    for band in bands:
        # Malformed bands are already reported by the schema.
        if not isinstance(band, dict) or not _is_int(band.get("min")):
            return []
        if band.get("max") is not None and not _is_int(band["max"]):
            return []

    violations: list[str] = []
    expected: Any = 0
    for index, band in enumerate(bands):
        band_path = f"{path}[{index}]"
        if expected is None:
            violations.append(f"{band_path}: band follows an unbounded band")
            return violations
        lower = band["min"]
        upper = band.get("max")
        if lower != expected:
            violations.append(f"{band_path}: band starts at {lower}, expected {expected}")
        if upper is not None and upper < lower:
            violations.append(f"{band_path}: max {upper} is below min {lower}")
        expected = None if upper is None else upper + 1

    if expected is not None:
        violations.append(f"{path}: last band must be unbounded (max: null)")
    return violations


def _monthly_rate_violations(rates: Any) -> list[str]:
    if not isinstance(rates, dict):
        return []
    violations: list[str] = []
    previous: Decimal | None = None
    for month in MONTHS:
        value = rates.get(month)
        if not _is_number(value):
            continue
        current = Decimal(str(value))
        if previous is not None and current < previous:
            violations.append(f"monthly_rates.{month}: proration rates must not decrease with duration")
        previous = current

    full_year = rates.get(MONTHS[-1])
    if _is_number(full_year) and Decimal(str(full_year)) != FULL_YEAR_RATE:
        violations.append("monthly_rates.12: a full year must prorate at 100")
    return violations


def _cross_field_violations(document: dict[str, Any]) -> list[str]:
    violations: list[str] = []

    base_rates = document.get("base_rates")
    if isinstance(base_rates, dict):
        for category, layout in CATEGORY_LAYOUTS.items():
            table = base_rates.get(str(category))
            path = f"base_rates.{category}"
            if layout.kind == "flat":
                violations.extend(_band_violations(table, path))
            elif layout.kind == "by_sub_type" and isinstance(table, dict):
                for sub_type in layout.sub_types:
                    violations.extend(_band_violations(table.get(sub_type), f"{path}.{sub_type}"))

    violations.extend(_monthly_rate_violations(document.get("monthly_rates")))

    coverages = document.get("coverages")
    declared = {code for code in coverages if code in COVERAGE_ORDER} if isinstance(coverages, dict) else set()

    coverage_rates = document.get("coverage_rates")
    if isinstance(coverage_rates, dict):
        violations.extend(
            _band_violations(coverage_rates.get(GLASS_BREAKAGE), f"coverage_rates.{GLASS_BREAKAGE}")
        )
        for code in COVERAGE_ORDER:
            if code in declared and code != CIVIL_LIABILITY and code not in coverage_rates:
                violations.append(f"coverage_rates.{code}: required section is missing")

    packs = document.get("packs")
    if isinstance(packs, dict):
        for code, pack in packs.items():
            if not isinstance(pack, dict) or not isinstance(pack.get("coverages"), list):
                continue
            for coverage in pack["coverages"]:
                if coverage not in declared:
                    violations.append(f"packs.{code}.coverages: unknown coverage {coverage!r}")
    return violations


def validate_tariff_document(raw: Any) -> list[str]:
    """Return every violation of a raw tariff document, schema errors first."""
    document = _plain(raw)
    violations = [
        f"{_format_path(error.absolute_path)}: {error.message}"
        for error in _SCHEMA_VALIDATOR.iter_errors(document)
    ]
    if isinstance(document, dict):
        violations.extend(_cross_field_violations(document))
    return violations


def _freeze(value: Any) -> Any:
    """Deep copy into read-only containers with Decimal numbers and string keys."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(key): _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if _is_number(value):
        return Decimal(str(value))
    return value


def _build_bands(raw_bands: tuple[Mapping[str, Any], ...]) -> tuple[RateBand, ...]:
    return tuple(
        RateBand(
            min=int(band["min"]),
            max=None if band.get("max") is None else int(band["max"]),
            value=band["value"],
        )
        for band in raw_bands
    )


def _build_rate_table(category: int, raw_table: Any) -> RateTable:
    layout = CATEGORY_LAYOUTS[category]
    if layout.kind == "flat":
        return FlatRateTable(bands=_build_bands(raw_table))
    if layout.kind == "by_sub_type":
        return SubtypeRateTable(
            bands_by_sub_type=MappingProxyType(
                {sub_type: _build_bands(raw_table[sub_type]) for sub_type in layout.sub_types}
            ),
            default_sub_type=layout.default_sub_type,
        )
    return IndexedRateTable(rates=raw_table, default_key=str(layout.default_sub_type))


def build_tariff_document(raw: Mapping[str, Any], source: str | None = None) -> TariffDocument:
    """Validate a raw document and build the typed, read-only TariffDocument."""
    violations = validate_tariff_document(raw)
    if violations:
        raise ConfigValidationError(violations, source)

    frozen = _freeze(raw)
    constants = frozen["constants"]

    coverages: dict[str, CoverageDefinition] = {}
    raw_coverages = frozen["coverages"]
    for code in COVERAGE_ORDER:
        if code not in raw_coverages:
            continue
        definition = raw_coverages[code] or {}
        coverages[code] = CoverageDefinition(
            code=code,
            required=bool(definition.get("required", False)),
            mandatory=definition.get("mandatory"),
        )

    coverage_rates = dict(frozen["coverage_rates"])
    if GLASS_BREAKAGE in coverage_rates:
        coverage_rates[GLASS_BREAKAGE] = _build_bands(coverage_rates[GLASS_BREAKAGE])

    packs: dict[str, PackDefinition] = {}
    for code, pack in (frozen.get("packs") or {}).items():
        packs[code] = PackDefinition(
            code=code,
            name=pack["name"],
            description=str(pack.get("description") or ""),
            coverages=tuple(pack["coverages"]),
        )

    return TariffDocument(
        version=str(frozen["version"]),
        currency=str(frozen.get("currency") or DEFAULT_CURRENCY),
        periodicity=Periodicity(
            day=constants["periodicity"]["day"],
            month=constants["periodicity"]["month"],
        ),
        rates=TariffRates(
            taxes=constants["rates"]["taxes"],
            fga=constants["rates"]["fga"],
            commercial=constants["rates"]["commercial"],
        ),
        amounts=FixedAmounts(
            accessories=constants["amounts"]["accessories"],
            brown_card=constants["amounts"]["brown_card"],
        ),
        monthly_rates=MappingProxyType(
            {int(month): rate for month, rate in frozen["monthly_rates"].items()}
        ),
        coverages=MappingProxyType(coverages),
        coverage_rates=MappingProxyType(coverage_rates),
        base_rates=MappingProxyType(
            {
                category: _build_rate_table(category, frozen["base_rates"][str(category)])
                for category in CATEGORY_LAYOUTS
            }
        ),
        packs=MappingProxyType(packs),
        raw=frozen,
    )


def load_tariff_document(source: TariffSource) -> TariffDocument:
    """Read a tariff source once and return the validated document."""
    description = source.describe()
    raw = source.load()
    document = build_tariff_document(raw, description)
    logger.info("Loaded tariff version %s from %s", document.version, description)
    return document
