"""Hierarchical key/value namespace persisted in a single flat SQL table.

Keys are slash-delimited paths, like a filesystem or a ZooKeeper tree:

    repository(id, key, value, parent)

    /services           ""        parent "/"
    /services/svcA      "cfg1"    parent "/services"
    /services/svcB      "cfg2"    parent "/services"

Usage:
    repo = create_repository("sqlite")
    repo.init(ConnectionParams(url=":memory:"))
    repo.persist("/services/svcA", "cfg1")   # also creates /services
    repo.get_children_keys("/services")      # ["svcA"]

Children are found through the parent column; no tree is stored.
"""

from pathkv.config import PathKVConfig, init_config, load_config
from pathkv.errors import RepositoryClosedError, RepositoryConnectionError, RepositoryError
from pathkv.models import ConnectionParams, Node
from pathkv.repository import (
    LibSQLRepository,
    PersistRepository,
    SQLiteRepository,
    SQLRepository,
    create_repository,
    open_repository,
)

__all__ = [
    "ConnectionParams",
    "LibSQLRepository",
    "Node",
    "PathKVConfig",
    "PersistRepository",
    "RepositoryClosedError",
    "RepositoryConnectionError",
    "RepositoryError",
    "SQLRepository",
    "SQLiteRepository",
    "create_repository",
    "init_config",
    "load_config",
    "open_repository",
]
