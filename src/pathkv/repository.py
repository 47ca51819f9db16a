"""Hierarchical key/value store persisted in one flat SQL table.

Keys are slash-delimited paths (``/services/svcA``). The tree is never stored
explicitly: every row carries its parent path, and writing a deep key first
materialises any missing ancestors as empty placeholder rows.

    repository(id VARCHAR(36) PRIMARY KEY, key TEXT, value TEXT, parent TEXT)

Error policy: connection bootstrap failures raise RepositoryConnectionError.
Statement faults inside get / get_children_keys / is_existed / persist /
delete are logged on the ``pathkv.repository`` logger and mapped to "", [],
False or a no-op. get() therefore cannot tell "absent", "present but empty"
and "lookup failed" apart; the log record is the only signal.

Consistency: every statement commits on its own and persist() is a
read-then-write sequence with no transaction around it. A fault midway
through persist() leaves the ancestors written so far in place, and
concurrent writers of overlapping paths can produce duplicate key rows.
Intended for a single connection with a single writer.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from pathkv.db import connect_libsql, get_conn, is_remote
from pathkv.errors import RepositoryClosedError, RepositoryConnectionError, RepositoryError
from pathkv.models import SEPARATOR, ConnectionParams, Node, ancestors, child_name

if TYPE_CHECKING:
    from types import TracebackType

    from pathkv.config import PathKVConfig

logger = logging.getLogger("pathkv.repository")

TABLE = "repository"

_DROP_TABLE = f"DROP TABLE IF EXISTS {TABLE}"
_CREATE_TABLE = (
    f"CREATE TABLE {{if_not_exists}}{TABLE}"
    "(id VARCHAR(36) PRIMARY KEY, key TEXT, value TEXT, parent TEXT)"
)
_CREATE_INDEXES = (
    f"CREATE INDEX IF NOT EXISTS {TABLE}_key_idx ON {TABLE}(key)",
    f"CREATE INDEX IF NOT EXISTS {TABLE}_parent_idx ON {TABLE}(parent)",
)
_SELECT_VALUE = f"SELECT value FROM {TABLE} WHERE key = ?"
_SELECT_CHILDREN = f"SELECT key FROM {TABLE} WHERE parent = ?"
_SELECT_EXISTS = f"SELECT 1 FROM {TABLE} WHERE key = ? LIMIT 1"
_INSERT = f"INSERT INTO {TABLE} VALUES(?, ?, ?, ?)"
_UPDATE = f"UPDATE {TABLE} SET value = ? WHERE key = ?"
_DELETE = f"DELETE FROM {TABLE} WHERE key = ?"


class PersistRepository(ABC):
    """Path-keyed persistence contract shared by every backing store."""

    type: ClassVar[str] = ""

    @abstractmethod
    def init(self, params: ConnectionParams) -> None:
        """Connect and prepare the backing table."""

    @abstractmethod
    def get(self, key: str) -> str:
        """Value stored at key, or "" when absent, empty or unreadable."""

    @abstractmethod
    def get_children_keys(self, key: str) -> list[str]:
        """Names of the direct children of key (unordered)."""

    @abstractmethod
    def is_existed(self, key: str) -> bool:
        """True when a node with exactly this key exists."""

    @abstractmethod
    def persist(self, key: str, value: str) -> None:
        """Write value at key, creating missing ancestors as placeholders."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the node at key. Children are left in place."""

    @abstractmethod
    def close(self) -> None:
        """Release the backing connection."""

    def __enter__(self) -> PersistRepository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class SQLRepository(PersistRepository):
    """Adjacency-list tree over a single DB-API connection."""

    # Driver exceptions treated as per-statement faults (logged, not raised).
    errors: ClassVar[tuple[type[Exception], ...]] = (sqlite3.Error,)

    def __init__(self) -> None:
        self._conn: Any = None
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _connect(self, params: ConnectionParams) -> Any:
        """Open the driver connection. Raises RepositoryConnectionError."""
        return get_conn(params)

    def init(self, params: ConnectionParams) -> None:
        """Connect and create the repository table.

        With params.recreate (the default) any existing table is dropped
        first, destroying its data. An existing connection is closed before
        reconnecting. Connection and DDL failures propagate.
        """
        if self._conn is not None:
            self.close()
        conn = self._connect(params)
        try:
            if params.recreate:
                conn.execute(_DROP_TABLE)
                conn.execute(_CREATE_TABLE.format(if_not_exists=""))
            else:
                conn.execute(_CREATE_TABLE.format(if_not_exists="IF NOT EXISTS "))
            for statement in _CREATE_INDEXES:
                conn.execute(statement)
            conn.commit()
        except self.errors as exc:
            conn.close()
            msg = f"Cannot create {TABLE} table: {exc}"
            raise RepositoryError(msg) from exc
        self._conn = conn
        self._closed = False
        logger.info("%s repository ready (recreate=%s)", self.type, params.recreate)

    def close(self) -> None:
        if self._conn is None:
            self._closed = True
            return
        conn, self._conn = self._conn, None
        self._closed = True
        try:
            conn.close()
        except self.errors:
            logger.exception("failed to release %s connection", self.type)

    @property
    def closed(self) -> bool:
        return self._closed

    def _connection(self) -> Any:
        if self._conn is None:
            if self._closed:
                msg = f"{self.type} repository is closed"
                raise RepositoryClosedError(msg)
            msg = f"{self.type} repository is not initialised; call init() first"
            raise RepositoryError(msg)
        return self._conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, key: str) -> str:
        conn = self._connection()
        try:
            row = conn.execute(_SELECT_VALUE, (key,)).fetchone()
        except self.errors:
            logger.exception("get %s data by key %s failed", self.type, key)
            return ""
        if row is None or row[0] is None:
            return ""
        return str(row[0])

    def get_children_keys(self, key: str) -> list[str]:
        conn = self._connection()
        try:
            rows = conn.execute(_SELECT_CHILDREN, (key,)).fetchall()
        except self.errors:
            logger.exception("get children %s data by key %s failed", self.type, key)
            return []
        return [child_name(child_key) for (child_key,) in rows if child_key]

    def is_existed(self, key: str) -> bool:
        self._connection()
        try:
            return self._exists(key)
        except self.errors:
            logger.exception("check %s existence of key %s failed", self.type, key)
            return False

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def persist(self, key: str, value: str) -> None:
        """Write value at key, materialising missing ancestors first.

        Ancestors that already exist keep their value. The leaf is inserted
        under its nearest ancestor (or ``/``) when absent, otherwise its value
        is updated in place and its parent left untouched.
        """
        self._connection()
        parent = SEPARATOR
        try:
            for prefix, prefix_parent in ancestors(key):
                if not self._exists(prefix):
                    logger.debug("creating placeholder %s under %s", prefix, prefix_parent)
                    self._insert(Node.create(prefix, "", prefix_parent))
                parent = prefix
            if self._exists(key):
                self._update(key, value)
            else:
                self._insert(Node.create(key, value, parent))
        except self.errors:
            logger.exception("persist %s data to key %s failed", self.type, key)

    def delete(self, key: str) -> None:
        conn = self._connection()
        try:
            conn.execute(_DELETE, (key,))
            conn.commit()
        except self.errors:
            logger.exception("delete %s data by key %s failed", self.type, key)

    # ------------------------------------------------------------------
    # Internal (statement faults propagate to the caller above)
    # ------------------------------------------------------------------

    def _exists(self, key: str) -> bool:
        return self._conn.execute(_SELECT_EXISTS, (key,)).fetchone() is not None

    def _insert(self, node: Node) -> None:
        self._conn.execute(_INSERT, node.as_row())
        self._conn.commit()

    def _update(self, key: str, value: str) -> None:
        self._conn.execute(_UPDATE, (value, key))
        self._conn.commit()


class SQLiteRepository(SQLRepository):
    """Local SQLite file or in-memory database (stdlib sqlite3)."""

    type = "sqlite"

    def _connect(self, params: ConnectionParams) -> Any:
        if is_remote(params.url):
            msg = f"sqlite repository cannot open remote url {params.url} (use type = \"libsql\")"
            raise RepositoryConnectionError(msg)
        return get_conn(params)


class LibSQLRepository(SQLRepository):
    """Remote libSQL / Turso database; params.password is the auth token."""

    type = "libsql"
    # libsql reports statement failures as ValueError / RuntimeError.
    errors = (sqlite3.Error, ValueError, RuntimeError)

    def _connect(self, params: ConnectionParams) -> Any:
        return connect_libsql(params.url, auth_token=params.password)


_REPOSITORIES: dict[str, type[SQLRepository]] = {
    SQLiteRepository.type: SQLiteRepository,
    LibSQLRepository.type: LibSQLRepository,
}


def repository_types() -> list[str]:
    return sorted(_REPOSITORIES)


def create_repository(type_name: str) -> PersistRepository:
    """Instantiate an (unconnected) repository by registry name."""
    try:
        cls = _REPOSITORIES[type_name.lower()]
    except KeyError:
        msg = f"Unknown repository type: {type_name!r} (known: {', '.join(repository_types())})"
        raise ValueError(msg) from None
    return cls()


def open_repository(cfg: PathKVConfig, *, recreate: bool | None = None) -> PersistRepository:
    """Create and initialise the repository described by cfg.

    recreate overrides cfg.repository.recreate when given.
    """
    repo = create_repository(cfg.database.type)
    repo.init(ConnectionParams(
        url=cfg.database.resolved_url,
        user=cfg.database.user,
        password=cfg.database.password,
        recreate=cfg.repository.recreate if recreate is None else recreate,
    ))
    return repo
