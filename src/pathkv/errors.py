"""Exceptions raised by pathkv.

Only connection bootstrap and use-after-close surface as exceptions.
Statement faults inside repository operations are logged and mapped to
empty results instead (see pathkv.repository).
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for pathkv errors."""


class RepositoryConnectionError(RepositoryError):
    """The backing connection could not be established."""


class RepositoryClosedError(RepositoryError):
    """An operation was attempted on a repository after close()."""
