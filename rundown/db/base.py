"""SQLAlchemy engine construction.

Both storage backends run on plain SQLAlchemy Core connections; no ORM models
are defined. Stores receive an ``Engine`` explicitly, so there is no module
level singleton: each call to ``build_engine`` returns a fresh engine. The
URL comes from ``rundown.config.load_config``.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """Return a new SQLAlchemy Engine for ``url``.

    In-memory SQLite URLs get a StaticPool so every connection handed out by
    the engine sees the same database, across threads too (TestClient runs
    handlers in a worker thread).
    """
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite") and ":memory:" in url:
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    engine = create_engine(url, **kwargs)
    logger.info("db.engine_built dialect=%s", engine.dialect.name)
    return engine
