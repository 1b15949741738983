"""JSON Schema (draft 7) describing the shape of a raw tariff document.

Keys are compared as strings, so documents are normalised before checking.
Rules that span several fields (band contiguity, proration order, pack
references) are checked in ``tariff_loader``.
"""

from __future__ import annotations

from typing import Any

from motor_tariff.models.tariff import (
    ADVANCE_ON_RECOURSE,
    CAPPED_DAMAGE,
    CATEGORY_LAYOUTS,
    CIVIL_LIABILITY,
    COLLISION,
    COVERAGE_ORDER,
    DAMAGE,
    DEFENSE_AND_RECOURSE,
    FIRE,
    GLASS_BREAKAGE,
    PASSENGERS,
    ROADSIDE_ASSISTANCE,
    THEFT,
)

MONTHS = tuple(str(month) for month in range(1, 13))
ROADSIDE_TIERS = ("basic", "privilege", "vip", "heavy")

AMOUNT = {"type": "number", "minimum": 0}
TEXT = {"type": "string", "minLength": 1}

RATE_BAND = {
    "type": "object",
    "required": ["min", "value"],
    "properties": {
        "min": {"type": "integer", "minimum": 0},
        "max": {"type": ["integer", "null"], "minimum": 0},
        "value": AMOUNT,
    },
    "additionalProperties": False,
}

RATE_BANDS = {"type": "array", "minItems": 1, "items": RATE_BAND}

NUMBER_MAP = {"type": "object", "minProperties": 1, "additionalProperties": AMOUNT}


def _numbers(*names: str) -> dict[str, Any]:
    return {
        "type": "object",
        "required": list(names),
        "properties": {name: AMOUNT for name in names},
    }


def _rate_with(**extra: Any) -> dict[str, Any]:
    schema = _numbers("rate")
    schema["properties"].update(extra)
    schema["required"].extend(extra)
    return schema


COVERAGE_RATES = {
    "type": "object",
    "properties": {
        DAMAGE: NUMBER_MAP,
        COLLISION: NUMBER_MAP,
        CAPPED_DAMAGE: _numbers("rate", "min_premium"),
        THEFT: _numbers("rate"),
        FIRE: _numbers("rate"),
        GLASS_BREAKAGE: RATE_BANDS,
        ADVANCE_ON_RECOURSE: _rate_with(
            insured_capital={"type": "array", "minItems": 1, "items": AMOUNT},
        ),
        PASSENGERS: {
            "type": "object",
            "required": ["options"],
            "properties": {"options": NUMBER_MAP},
        },
        DEFENSE_AND_RECOURSE: {
            "type": "object",
            "required": ["amount"],
            "properties": {"amount": NUMBER_MAP},
        },
        ROADSIDE_ASSISTANCE: {
            "type": "object",
            "required": ["heavy_weight_threshold", "privilege_coverages", "tiers"],
            "properties": {
                "heavy_weight_threshold": AMOUNT,
                "privilege_coverages": {
                    "type": "array",
                    "items": {"enum": list(COVERAGE_ORDER)},
                },
                "tiers": _numbers(*ROADSIDE_TIERS),
            },
        },
    },
    "propertyNames": {"enum": [code for code in COVERAGE_ORDER if code != CIVIL_LIABILITY]},
}


def _base_rate_schema() -> dict[str, Any]:
    properties: dict[str, Any] = {}
    for category, layout in CATEGORY_LAYOUTS.items():
        if layout.kind == "flat":
            properties[str(category)] = RATE_BANDS
        elif layout.kind == "by_sub_type":
            properties[str(category)] = {
                "type": "object",
                "required": list(layout.sub_types),
                "properties": {sub_type: RATE_BANDS for sub_type in layout.sub_types},
                "additionalProperties": False,
            }
        else:
            properties[str(category)] = dict(NUMBER_MAP, required=[layout.default_sub_type])
    return {
        "type": "object",
        "required": list(properties),
        "properties": properties,
        "additionalProperties": False,
    }


TARIFF_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["version", "constants", "monthly_rates", "coverages", "coverage_rates", "base_rates"],
    "properties": {
        "version": {"type": ["string", "number"]},
        "currency": TEXT,
        "constants": {
            "type": "object",
            "required": ["periodicity", "rates", "amounts"],
            "properties": {
                "periodicity": {
                    "type": "object",
                    "required": ["day", "month"],
                    "properties": {"day": TEXT, "month": TEXT},
                },
                "rates": _numbers("taxes", "fga", "commercial"),
                "amounts": _numbers("accessories", "brown_card"),
            },
        },
        "monthly_rates": {
            "type": "object",
            "required": list(MONTHS),
            "properties": {month: AMOUNT for month in MONTHS},
            "additionalProperties": False,
        },
        "coverages": {
            "type": "object",
            "required": [CIVIL_LIABILITY],
            "propertyNames": {"enum": list(COVERAGE_ORDER)},
            "additionalProperties": {
                "type": ["object", "null"],
                "properties": {
                    "required": {"type": "boolean"},
                    "mandatory": {"type": ["boolean", "null"]},
                },
            },
        },
        "coverage_rates": COVERAGE_RATES,
        "base_rates": _base_rate_schema(),
        "packs": {
            "type": ["object", "null"],
            "additionalProperties": {
                "type": "object",
                "required": ["name", "coverages"],
                "properties": {
                    "name": TEXT,
                    "description": {"type": ["string", "null"]},
                    "coverages": {"type": "array", "minItems": 1, "items": {"type": "string"}},
                },
            },
        },
    },
}
