from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pathkv.config import init_config, load_config
from pathkv.repository import open_repository

if TYPE_CHECKING:
    from pathlib import Path


def test_defaults_without_config_file(tmp_path: Path) -> None:
    cfg = load_config(tmp_path)
    assert cfg.root == tmp_path
    assert cfg.name == tmp_path.name
    assert cfg.database.type == "sqlite"
    assert cfg.database.resolved_url == str(tmp_path / ".pathkv" / "repository.db")
    assert cfg.repository.recreate is False


def test_init_config_round_trip(tmp_path: Path) -> None:
    path = init_config(tmp_path, name="demo")
    assert path == tmp_path / "pathkv.toml"
    cfg = load_config(tmp_path)
    assert cfg.name == "demo"
    assert cfg.config_path == path


def test_init_config_refuses_to_overwrite(tmp_path: Path) -> None:
    init_config(tmp_path)
    with pytest.raises(FileExistsError):
        init_config(tmp_path)


def test_load_config_walks_upward(tmp_path: Path) -> None:
    init_config(tmp_path, name="outer")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert load_config(nested).root == tmp_path


def test_toml_values(tmp_path: Path) -> None:
    (tmp_path / "pathkv.toml").write_text(
        '[database]\ntype = "libsql"\nurl = "libsql://db.turso.io"\npassword = "secret"\n'
        "[repository]\nrecreate = true\n",
    )
    cfg = load_config(tmp_path)
    assert cfg.database.type == "libsql"
    assert cfg.database.resolved_url == "libsql://db.turso.io"
    assert cfg.database.password == "secret"
    assert cfg.repository.recreate is True


def test_dotenv_and_process_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    init_config(tmp_path)
    (tmp_path / ".env").write_text('PATHKV_DATABASE_URL=":memory:"\nPATHKV_DATABASE_PASSWORD=from-dotenv\n')
    cfg = load_config(tmp_path)
    assert cfg.database.resolved_url == ":memory:"
    assert cfg.database.password == "from-dotenv"

    monkeypatch.setenv("PATHKV_DATABASE_PASSWORD", "from-process")
    assert load_config(tmp_path).database.password == "from-process"


def test_absolute_sqlite_url_is_kept(tmp_path: Path) -> None:
    target = tmp_path / "elsewhere" / "store.db"
    (tmp_path / "pathkv.toml").write_text(f'[database]\nurl = "sqlite:///{target}"\n')
    assert load_config(tmp_path).database.resolved_url == str(target)


def test_open_repository_from_config(tmp_path: Path) -> None:
    init_config(tmp_path)
    cfg = load_config(tmp_path)
    with open_repository(cfg, recreate=True) as repo:
        repo.persist("/services/svcA", "cfg1")
    with open_repository(cfg) as repo:
        assert repo.get("/services/svcA") == "cfg1"
    assert (tmp_path / ".pathkv" / "repository.db").exists()
