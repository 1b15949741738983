"""Per-thread SQLite connections for the tariff database."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any, Iterable

Params = tuple[Any, ...]


class ThreadLocalConnection:
    """One SQLite connection per thread, read-only unless ``create`` is set."""

    def __init__(self, db_path: str, create: bool = False):
        self._db_path = db_path
        self._create = create
        self._local = threading.local()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        path = Path(self._db_path)
        if self._create:
            path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(str(path), check_same_thread=False)
        elif path.exists():
            connection = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro",
                uri=True,
                check_same_thread=False,
            )
        else:
            raise FileNotFoundError(f"Tariff database not found: {path}")
        connection.row_factory = sqlite3.Row
        return connection

    @property
    def connection(self) -> sqlite3.Connection:
        current = getattr(self._local, "connection", None)
        if current is None:
            current = self._connect()
            self._local.connection = current
        return current

    def close(self) -> None:
        current = getattr(self._local, "connection", None)
        if current is not None:
            current.close()
            self._local.connection = None

    def execute(self, statement: str, params: Params = ()) -> None:
        """Run one write statement in its own transaction."""
        with self.connection as connection:
            connection.execute(statement, params)

    def executemany(self, statement: str, rows: Iterable[Params]) -> None:
        with self.connection as connection:
            connection.executemany(statement, rows)

    def fetchall(self, query: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.connection.execute(query, params).fetchall()
