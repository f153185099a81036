"""FastAPI application factory for the rundown service."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from rundown.config import AppConfig, load_config
from rundown.db.base import build_engine
from rundown.db.migrations_runner import apply_migrations
from rundown.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_rundown_error,
    handle_unexpected_error,
)
from rundown.http.request_id import RequestIdMiddleware
from rundown.logging_setup import configure_logging
from rundown.logic.collection_store import OrderedCollectionStore
from rundown.logic.errors import RundownError
from rundown.logic.events import BufferedChangeNotifier, ChangeNotifier
from rundown.logic.repository_embedded import EmbeddedCollectionStore
from rundown.logic.repository_referential import ReferentialCollectionStore
from rundown.logic.rundown_service import RundownService
from rundown.routes import api_router
from rundown.routes.test_support import router as test_support_router

logger = logging.getLogger(__name__)

_STORES = {
    EmbeddedCollectionStore.backend: EmbeddedCollectionStore,
    ReferentialCollectionStore.backend: ReferentialCollectionStore,
}


def build_store(backend: str, engine: Engine) -> OrderedCollectionStore:
    try:
        store_cls = _STORES[backend]
    except KeyError:
        raise ValueError(f"unknown storage backend {backend!r}") from None
    return store_cls(engine)


def _health_check(engine: Engine, backend: str):
    def check() -> dict:
        try:
            with engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return {"status": "ok", "db": True, "backend": backend}
        except SQLAlchemyError:
            logger.error("health_check_db_failed", exc_info=True)
            return {"status": "degraded", "db": False, "backend": backend}

    return check


def create_app(
    config: Optional[AppConfig] = None,
    engine: Optional[Engine] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> FastAPI:
    """Build the app with an explicitly wired engine, store and service.

    Migrations run here rather than on a startup hook so a TestClient built
    without a context manager still sees the schema.
    """
    configure_logging()
    cfg = config or load_config()
    db_engine = engine or build_engine(cfg.database.dsn)
    if cfg.auto_apply_migrations:
        apply_migrations(db_engine)
    else:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations")

    store = build_store(cfg.storage.backend, db_engine)
    change_notifier = notifier if notifier is not None else BufferedChangeNotifier()
    service = RundownService(
        store,
        change_notifier,
        max_projects=cfg.storage.max_projects,
        seed_example_item=cfg.storage.seed_example_item,
    )

    app = FastAPI(title="Rundown Service")
    app.state.config = cfg
    app.state.engine = db_engine
    app.state.notifier = change_notifier
    app.state.service = service

    app.add_exception_handler(RundownError, handle_rundown_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")
    app.include_router(test_support_router)

    health_check = _health_check(db_engine, store.backend)

    @app.get("/health")
    def health():
        return health_check()

    logger.info("app_created backend=%s max_projects=%s", store.backend, cfg.storage.max_projects)
    return app


__all__ = ["create_app", "build_store"]
