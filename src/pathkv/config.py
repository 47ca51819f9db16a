"""PathKVConfig: project-local config for the path-keyed repository.

Default layout (all relative to the project root):

    pathkv.toml           # project config
    .env                  # optional: PATHKV_DATABASE_URL, PATHKV_DATABASE_PASSWORD
    .pathkv/
        repository.db     # local SQLite store (default)

pathkv.toml example:

    [pathkv]
    name = "my-project"

    [database]
    type = "sqlite"                   # sqlite | libsql
    url = ".pathkv/repository.db"     # file path, ":memory:", or libsql://...
    user = ""
    password = ""                     # libsql auth token (or PATHKV_DATABASE_PASSWORD)

    [repository]
    recreate = false                  # drop + recreate the table on every open
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pathkv.db import MEMORY_URL, is_remote, sqlite_path

_CONFIG_FILENAME = "pathkv.toml"
_DEFAULT_TYPE = "sqlite"
_DEFAULT_URL = ".pathkv/repository.db"

# Environment overrides (process env wins over .env, .env wins over pathkv.toml)
_ENV_TYPE = "PATHKV_DATABASE_TYPE"
_ENV_URL = "PATHKV_DATABASE_URL"
_ENV_USER = "PATHKV_DATABASE_USER"
_ENV_PASSWORD = "PATHKV_DATABASE_PASSWORD"


@dataclass
class DatabaseConfig:
    type: str = _DEFAULT_TYPE
    url: str = _DEFAULT_URL
    user: str = ""
    password: str = ""   # libsql auth token
    _root: Path = field(default_factory=Path, repr=False)

    @property
    def resolved_url(self) -> str:
        """url with relative sqlite paths anchored at the project root."""
        if is_remote(self.url):
            return self.url
        path = sqlite_path(self.url)
        if path == MEMORY_URL or Path(path).is_absolute():
            return path
        return str(self._root / path)


@dataclass
class RepositoryConfig:
    recreate: bool = False


@dataclass
class PathKVConfig:
    """Resolved configuration for a pathkv project."""

    root: Path                      # directory that contains pathkv.toml
    name: str = ""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)

    @property
    def config_path(self) -> Path:
        return self.root / _CONFIG_FILENAME


def _load_env(root: Path) -> dict[str, str]:
    """Parse a simple KEY=VALUE .env file (no external dependency)."""
    env_file = root / ".env"
    if not env_file.exists():
        return {}
    env: dict[str, str] = {}
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            env[k.strip()] = v.strip().strip('"').strip("'")
    return env


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(root: Path | str | None = None) -> PathKVConfig:
    """Load pathkv.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    env = {**_load_env(root_path), **{k: v for k, v in os.environ.items() if k.startswith("PATHKV_")}}

    section = raw.get("pathkv", {})
    db_section = raw.get("database", {})
    repo_section = raw.get("repository", {})

    return PathKVConfig(
        root=root_path,
        name=section.get("name", root_path.name),
        database=DatabaseConfig(
            type=str(env.get(_ENV_TYPE) or db_section.get("type", _DEFAULT_TYPE)),
            url=str(env.get(_ENV_URL) or db_section.get("url", _DEFAULT_URL)),
            user=str(env.get(_ENV_USER) or db_section.get("user", "")),
            password=str(env.get(_ENV_PASSWORD) or db_section.get("password", "")),
            _root=root_path,
        ),
        repository=RepositoryConfig(
            recreate=_as_bool(repo_section.get("recreate", False)),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for pathkv.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, name: str | None = None) -> Path:
    """Write a default pathkv.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"pathkv.toml already exists at {config_path}"
        raise FileExistsError(msg)

    project_name = name or root.name
    content = f"""\
[pathkv]
name = "{project_name}"

[database]
type = "{_DEFAULT_TYPE}"
url = "{_DEFAULT_URL}"
# user = ""
# password = ""   # libsql auth token; or set PATHKV_DATABASE_PASSWORD in .env

[repository]
# Drop and recreate the repository table every time it is opened.
# `pathkv init` always recreates it regardless of this setting.
recreate = false
"""
    root.mkdir(parents=True, exist_ok=True)
    config_path.write_text(content)
    return config_path
