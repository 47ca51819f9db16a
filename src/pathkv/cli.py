"""pathkv CLI — hierarchical key/value store backed by one SQL table.

Commands:
    pathkv init [NAME]         create pathkv.toml and (re)create the table
    pathkv get KEY             print the value stored at KEY
    pathkv ls KEY              list direct children of KEY
    pathkv put KEY VALUE       write VALUE at KEY (creates missing ancestors)
    pathkv rm KEY              delete KEY (children are kept)
    pathkv exists KEY          exit 0 if KEY exists, 1 otherwise
    pathkv tree [KEY]          print the subtree below KEY
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click

from pathkv.config import PathKVConfig, init_config, load_config
from pathkv.errors import RepositoryError
from pathkv.models import SEPARATOR, join_path
from pathkv.repository import open_repository

if TYPE_CHECKING:
    from pathkv.repository import PersistRepository

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg(root: Path | None = None) -> PathKVConfig:
    try:
        return load_config(root)
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _open(cfg: PathKVConfig, *, recreate: bool | None = None) -> PersistRepository:
    try:
        return open_repository(cfg, recreate=recreate)
    except (RepositoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def _walk(repo: PersistRepository, key: str, depth: int, max_depth: int) -> None:
    if max_depth and depth >= max_depth:
        return
    for name in sorted(repo.get_children_keys(key)):
        child = join_path(key, name)
        # "/" and keys ending in "/" list themselves as an unnamed child
        if not name or child == key:
            continue
        value = repo.get(child)
        click.echo(f"{'  ' * depth}{name}" + (f" = {value}" if value else ""))
        _walk(repo, child, depth + 1, max_depth)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="pathkv")
@click.option("--verbose", "-v", is_flag=True, help="Log repository activity to stderr")
def cli(verbose: bool) -> None:
    """pathkv — hierarchical key/value store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


# ---------------------------------------------------------------------------
# pathkv init
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name", required=False)
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
def init(name: str | None, root: str) -> None:
    """Create pathkv.toml and an empty repository table.

    Any existing repository table is dropped.
    """
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, name=name)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("pathkv.toml already exists — skipping init")

    cfg = _load_cfg(root_path)
    with _open(cfg, recreate=True):
        pass
    click.echo(f"Repository: {cfg.database.type} {cfg.database.resolved_url}")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("key")
def get(key: str) -> None:
    """Print the value stored at KEY (empty line if unset)."""
    with _open(_load_cfg()) as repo:
        click.echo(repo.get(key))


@cli.command("ls")
@click.argument("key", default=SEPARATOR)
def ls_cmd(key: str) -> None:
    """List the direct children of KEY."""
    with _open(_load_cfg()) as repo:
        for name in sorted(repo.get_children_keys(key)):
            click.echo(name)


@cli.command()
@click.argument("key")
def exists(key: str) -> None:
    """Exit 0 if KEY exists, 1 otherwise."""
    with _open(_load_cfg()) as repo:
        found = repo.is_existed(key)
    if not found:
        raise SystemExit(1)


@cli.command()
@click.argument("key", default=SEPARATOR)
@click.option("--depth", "-d", default=0, show_default=True, help="Max depth (0 = unlimited)")
def tree(key: str, depth: int) -> None:
    """Print the subtree below KEY, one node per line."""
    with _open(_load_cfg()) as repo:
        _walk(repo, key, 0, depth)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("key")
@click.argument("value")
def put(key: str, value: str) -> None:
    """Write VALUE at KEY, creating missing ancestors."""
    with _open(_load_cfg()) as repo:
        repo.persist(key, value)


@cli.command("rm")
@click.argument("key")
def rm_cmd(key: str) -> None:
    """Delete KEY. Its children are not removed."""
    with _open(_load_cfg()) as repo:
        repo.delete(key)
