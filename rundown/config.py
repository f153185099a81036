"""Configuration loading for the rundown service.

Rules:
- Primary source: `rundown_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_RUNDOWN_CONFIG = Path("rundown_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
STORAGE_BACKENDS = ("embedded", "referential")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable override is ignored
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _flag(text: Optional[str]) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str = Field(default=DEFAULT_DSN)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v.strip()


class StorageConfig(BaseModel):
    backend: str = Field(default="referential")
    max_projects: int = Field(default=50, gt=0)
    seed_example_item: bool = Field(default=True)

    @field_validator("backend")
    @classmethod
    def backend_must_be_known(cls, v: str) -> str:
        value = str(v).strip().lower()
        if value not in STORAGE_BACKENDS:
            raise ValueError(f"storage.backend must be one of {list(STORAGE_BACKENDS)}")
        return value


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    auto_apply_migrations: bool = Field(default=True)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) rundown_config.json at project root (primary base)
    4) Defaults: in-memory SQLite, referential backend, 50 projects
    """

    base = _read_json_file(ROOT_RUNDOWN_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DSN
    )
    backend = (
        _env("RUNDOWN_STORAGE_BACKEND")
        or _read_config_file("storage.backend")
        or _base("storage.backend", "referential")
    )
    max_projects_text = (
        _env("RUNDOWN_MAX_PROJECTS")
        or _read_config_file("storage.max_projects")
        or _base("storage.max_projects", "50")
    )
    seed_text = (
        _env("RUNDOWN_SEED_EXAMPLE_ITEM")
        or _read_config_file("storage.seed_example_item")
        or _base("storage.seed_example_item", "true")
    )
    auto_apply_text = _env("AUTO_APPLY_MIGRATIONS") or _base("auto_apply_migrations", "1")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn),
            storage=StorageConfig(
                backend=str(backend),
                max_projects=int(str(max_projects_text).strip()),
                seed_example_item=_flag(seed_text),
            ),
            auto_apply_migrations=_flag(auto_apply_text),
        )
        return cfg
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "StorageConfig",
    "load_config",
]
