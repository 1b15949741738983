"""Tariff sources: YAML/JSON files and the SQLite tariff schema."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Mapping

import yaml

from motor_tariff.core.errors import ConfigValidationError
from motor_tariff.repositories.db_pool import ThreadLocalConnection
from motor_tariff.repositories.tariff_repository import TariffRepository


class FileTariffSource:
    """Reads a tariff document from a YAML or JSON file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def describe(self) -> str:
        return str(self._path)

    def load(self) -> Mapping[str, Any]:
        try:
            with self._path.open("r", encoding="utf-8") as file:
                if self._path.suffix.lower() == ".json":
                    raw = json.load(file)
                else:
                    raw = yaml.safe_load(file)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as error:
            raise ConfigValidationError([f"unable to read tariff file: {error}"], self.describe()) from error

        if not isinstance(raw, Mapping):
            raise ConfigValidationError(["document: expected a mapping"], self.describe())
        return raw


class DatabaseTariffSource:
    """Reads a tariff document stored in the SQLite tariff tables."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool
        self._repository = TariffRepository(pool)

    @classmethod
    def from_path(cls, db_path: str | Path) -> "DatabaseTariffSource":
        return cls(ThreadLocalConnection(str(db_path)))

    def describe(self) -> str:
        return f"sqlite:{self._pool.db_path}"

    def load(self) -> Mapping[str, Any]:
        try:
            return self._repository.load_document()
        except (OSError, sqlite3.Error) as error:
            raise ConfigValidationError(
                [f"unable to read tariff database: {error}"], self.describe()
            ) from error
        finally:
            self._pool.close()
