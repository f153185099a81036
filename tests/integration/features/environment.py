"""Behave environment hooks for rundown integration scenarios.

Scenarios drive the HTTP API in-process through FastAPI's TestClient, so no
server or external database is needed. Each scenario gets a fresh app over
its own in-memory SQLite database. The backend under test comes from
``RUNDOWN_STORAGE_BACKEND`` (default ``referential``); run the suite twice to
cover both.
"""

from __future__ import annotations

import os

from fastapi.testclient import TestClient

from rundown.config import AppConfig, DatabaseConfig, StorageConfig
from rundown.main import create_app


def _scenario_config() -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(dsn="sqlite+pysqlite:///:memory:"),
        storage=StorageConfig(
            backend=os.environ.get("RUNDOWN_STORAGE_BACKEND", "referential"),
            max_projects=int(os.environ.get("RUNDOWN_MAX_PROJECTS", "50")),
            seed_example_item=False,
        ),
        auto_apply_migrations=True,
    )


def before_scenario(context, scenario) -> None:
    context.client = TestClient(create_app(config=_scenario_config()))
    context.vars = {}
    context.last_response = None


def after_scenario(context, scenario) -> None:
    client = getattr(context, "client", None)
    if client is not None:
        client.close()
