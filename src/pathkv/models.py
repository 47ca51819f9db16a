"""Data models and path helpers for the repository table."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

SEPARATOR = "/"


def new_node_id() -> str:
    """Generate a row id: a 36-char UUID4 string."""
    return str(uuid.uuid4())


def split_path(key: str) -> list[str]:
    """Split a key into its non-empty path segments.

    Leading, trailing and doubled separators collapse away:
    ``split_path("//a/b/")`` → ``["a", "b"]``.
    """
    return [segment for segment in key.split(SEPARATOR) if segment]


def ancestors(key: str) -> list[tuple[str, str]]:
    """Return ``(prefix, parent)`` pairs for every ancestor of key, root first.

    The last segment (the key itself) is excluded:
    ``ancestors("/a/b/c")`` → ``[("/a", "/"), ("/a/b", "/a")]``.
    """
    pairs: list[tuple[str, str]] = []
    prefix = ""
    parent = SEPARATOR
    for segment in split_path(key)[:-1]:
        prefix = prefix + SEPARATOR + segment
        pairs.append((prefix, parent))
        parent = prefix
    return pairs


def parent_of(key: str) -> str:
    """Parent path of key as stored in the parent column (``/`` for top level)."""
    pairs = ancestors(key)
    return pairs[-1][0] if pairs else SEPARATOR


def child_name(key: str) -> str:
    """Last segment of a stored key: everything after the final separator."""
    return key[key.rfind(SEPARATOR) + 1:]


def join_path(parent: str, name: str) -> str:
    if parent.endswith(SEPARATOR):
        return parent + name
    return parent + SEPARATOR + name


@dataclass
class Node:
    """One row of the repository table."""

    id: str
    key: str
    value: str = ""     # "" for placeholder ancestors
    parent: str = SEPARATOR

    @classmethod
    def create(cls, key: str, value: str, parent: str) -> Node:
        return cls(id=new_node_id(), key=key, value=value, parent=parent)

    @property
    def name(self) -> str:
        return child_name(self.key)

    def as_row(self) -> tuple[str, str, str, str]:
        """Column order of ``INSERT INTO repository VALUES(?, ?, ?, ?)``."""
        return (self.id, self.key, self.value, self.parent)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "key": self.key, "value": self.value, "parent": self.parent}


@dataclass
class ConnectionParams:
    """What the connection factory needs to open the backing store."""

    url: str                    # file path, ":memory:", or libsql://...
    user: str = ""
    password: str = ""          # libsql auth token
    recreate: bool = True       # drop and recreate the table on bootstrap
