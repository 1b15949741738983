"""Tariff database schema management."""

from __future__ import annotations

import sqlite3

from motor_tariff.repositories.db_pool import ThreadLocalConnection


def initialize_schema(pool: ThreadLocalConnection) -> None:
    """Create tariff tables and indexes if they do not exist."""
    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS tariff_settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS tariff_monthly_rates (
            month INTEGER PRIMARY KEY,
            rate TEXT NOT NULL
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS tariff_base_rates (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            category INTEGER NOT NULL,
            sub_type TEXT,
            min_hp INTEGER,
            max_hp INTEGER,
            rate TEXT NOT NULL
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS tariff_coverages (
            code TEXT PRIMARY KEY,
            position INTEGER NOT NULL,
            is_required INTEGER NOT NULL DEFAULT 0,
            is_mandatory INTEGER,
            params TEXT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS tariff_packs (
            code TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            coverages TEXT NOT NULL
        )
        """
    )

    pool.execute(
        "CREATE INDEX IF NOT EXISTS idx_tariff_base_rates_category "
        "ON tariff_base_rates(category, sub_type, min_hp)"
    )


def clear_tariff(connection: sqlite3.Connection) -> None:
    """Remove all tariff rows; runs inside the caller's transaction."""
    for table in (
        "tariff_settings",
        "tariff_monthly_rates",
        "tariff_base_rates",
        "tariff_coverages",
        "tariff_packs",
    ):
        connection.execute(f"DELETE FROM {table}")
    connection.execute("DELETE FROM sqlite_sequence WHERE name = 'tariff_base_rates'")
