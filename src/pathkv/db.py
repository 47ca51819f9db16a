"""DB connection: sqlite3 (default) or libsql (Turso)."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pathkv.errors import RepositoryConnectionError

if TYPE_CHECKING:
    from pathkv.models import ConnectionParams

logger = logging.getLogger("pathkv.db")

MEMORY_URL = ":memory:"
_SQLITE_SCHEME = "sqlite:///"
_REMOTE_SCHEMES = ("libsql://", "http://", "https://", "ws://", "wss://")


def is_remote(url: str) -> bool:
    return url.startswith(_REMOTE_SCHEMES)


def sqlite_path(url: str) -> str:
    """Strip an optional sqlite:/// prefix, leaving a file path or :memory:."""
    if url.startswith(_SQLITE_SCHEME):
        return url[len(_SQLITE_SCHEME):] or MEMORY_URL
    return url or MEMORY_URL


def connect_sqlite(url: str) -> sqlite3.Connection:
    """Open a local SQLite database (file or in-memory).

    File databases get WAL mode. The parent directory is created if missing.
    """
    path = sqlite_path(url)
    try:
        if path == MEMORY_URL:
            return sqlite3.connect(MEMORY_URL)
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn
    except (sqlite3.Error, OSError) as exc:
        msg = f"Cannot open sqlite database {path}: {exc}"
        raise RepositoryConnectionError(msg) from exc


def connect_libsql(url: str, auth_token: str = "") -> Any:
    """Connect to a remote libSQL / Turso database.

    Requires the optional dependency: pip install 'pathkv[libsql]'.
    The returned object is sqlite3.Connection-compatible.
    """
    try:
        import libsql  # type: ignore[import-not-found]
    except ImportError as exc:
        msg = "libsql is not installed (pip install 'pathkv[libsql]')"
        raise RepositoryConnectionError(msg) from exc
    try:
        return libsql.connect(url, auth_token=auth_token)
    except Exception as exc:
        msg = f"Cannot connect to {url}: {exc}"
        raise RepositoryConnectionError(msg) from exc


def get_conn(params: ConnectionParams) -> Any:
    """Return a database connection for the given params.

    Remote URLs (libsql://, https://, ...) go through libsql with
    params.password as the auth token; everything else is local SQLite.
    Raises RepositoryConnectionError on failure.
    """
    if is_remote(params.url):
        logger.info("connecting to libsql %s", params.url)
        return connect_libsql(params.url, auth_token=params.password)
    logger.info("opening sqlite %s", sqlite_path(params.url))
    return connect_sqlite(params.url)
