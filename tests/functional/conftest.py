"""Functional test fixtures.

Every test gets its own in-memory SQLite engine with the packaged migrations
applied, so no state leaks between tests. Store-level fixtures are
parametrized over both backends; the HTTP client wires a fresh app around
the same engine.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from rundown.config import AppConfig, DatabaseConfig, StorageConfig
from rundown.db.base import build_engine
from rundown.db.migrations_runner import apply_migrations
from rundown.logic.events import BufferedChangeNotifier
from rundown.logic.repository_embedded import EmbeddedCollectionStore
from rundown.logic.repository_referential import ReferentialCollectionStore
from rundown.logic.rundown_service import RundownService
from rundown.main import create_app

BACKENDS = ("embedded", "referential")
_STORE_CLASSES = {
    "embedded": EmbeddedCollectionStore,
    "referential": ReferentialCollectionStore,
}


@pytest.fixture
def engine():
    eng = build_engine("sqlite+pysqlite:///:memory:")
    apply_migrations(eng)
    yield eng
    eng.dispose()


@pytest.fixture(params=BACKENDS)
def backend(request) -> str:
    return request.param


@pytest.fixture
def store(engine, backend):
    return _STORE_CLASSES[backend](engine)


@pytest.fixture
def referential_store(engine):
    return ReferentialCollectionStore(engine)


@pytest.fixture
def notifier():
    return BufferedChangeNotifier()


@pytest.fixture
def service(store, notifier):
    """Service without the seeded example item so lists start empty."""
    return RundownService(store, notifier, seed_example_item=False)


@pytest.fixture
def app_config(backend) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(dsn="sqlite+pysqlite:///:memory:"),
        storage=StorageConfig(backend=backend, max_projects=50, seed_example_item=False),
        auto_apply_migrations=True,
    )


@pytest.fixture
def client(app_config):
    app = create_app(config=app_config)
    with TestClient(app) as test_client:
        yield test_client
