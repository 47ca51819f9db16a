from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

import pytest

from pathkv.models import ConnectionParams
from pathkv.repository import SQLiteRepository

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PATHKV_DATABASE_TYPE", "PATHKV_DATABASE_URL", "PATHKV_DATABASE_USER", "PATHKV_DATABASE_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repo() -> Iterator[SQLiteRepository]:
    repository = SQLiteRepository()
    repository.init(ConnectionParams(url=":memory:"))
    yield repository
    repository.close()


@pytest.fixture
def db_file(tmp_path: Path) -> str:
    return str(tmp_path / "data" / "repository.db")


class FlakyConnection:
    """Wraps a sqlite3 connection; the Nth INSERT (or close) raises OperationalError."""

    def __init__(self, conn: sqlite3.Connection, fail_on_insert: int = 0, *, fail_on_close: bool = False) -> None:
        self._conn = conn
        self._fail_on_insert = fail_on_insert
        self._fail_on_close = fail_on_close
        self.inserts = 0

    def execute(self, sql: str, params: Any = ()) -> sqlite3.Cursor:
        if sql.startswith("INSERT"):
            self.inserts += 1
            if self.inserts == self._fail_on_insert:
                msg = "disk I/O error"
                raise sqlite3.OperationalError(msg)
        return self._conn.execute(sql, params)

    def commit(self) -> None:
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
        if self._fail_on_close:
            msg = "database is locked"
            raise sqlite3.OperationalError(msg)
