"""Functional tests for configuration loading and DSN resolution."""

from __future__ import annotations

import json

import pytest

import rundown.db as rundown_db
from rundown.config import DEFAULT_DSN, load_config

_ENV_KEYS = (
    "TEST_DATABASE_URL",
    "DATABASE_URL",
    "RUNDOWN_STORAGE_BACKEND",
    "RUNDOWN_MAX_PROJECTS",
    "RUNDOWN_SEED_EXAMPLE_ITEM",
    "AUTO_APPLY_MIGRATIONS",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults_without_any_source(clean_env):
    cfg = load_config()
    assert cfg.database.dsn == DEFAULT_DSN
    assert cfg.storage.backend == "referential"
    assert cfg.storage.max_projects == 50


def test_test_database_url_wins_over_database_url(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite+pysqlite:///prod.db")
    clean_env.setenv("TEST_DATABASE_URL", "sqlite+pysqlite:///test.db")
    assert load_config().database.dsn == "sqlite+pysqlite:///test.db"


def test_env_overrides_config_file_and_json(clean_env, tmp_path):
    (tmp_path / "rundown_config.json").write_text(
        json.dumps({"database": {"dsn": "sqlite+pysqlite:///json.db"}, "storage": {"backend": "embedded"}}),
        encoding="utf-8",
    )
    assert load_config().database.dsn == "sqlite+pysqlite:///json.db"
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "database.url").write_text("sqlite+pysqlite:///file.db\n", encoding="utf-8")
    assert load_config().database.dsn == "sqlite+pysqlite:///file.db"
    clean_env.setenv("DATABASE_URL", "sqlite+pysqlite:///env.db")
    cfg = load_config()
    assert cfg.database.dsn == "sqlite+pysqlite:///env.db"
    assert cfg.storage.backend == "embedded"


def test_db_package_leaves_dsn_resolution_to_config():
    assert not hasattr(rundown_db, "database_url")
    assert set(rundown_db.__all__) == {"build_engine", "apply_migrations"}
