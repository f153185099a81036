"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from ``rundown/db/migrations``. Skips
rollback files and records applied filenames in a ``schema_migrations`` table
of the target database, so every fresh engine (including each in-memory
SQLite test database) gets its own schema exactly once.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable
from datetime import datetime, timezone

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine, Connection
import logging

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Rollback scripts are never applied in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _split_statements(sql: str) -> Iterable[str]:
    """Yield executable statements from a multi-statement file.

    pysqlite refuses several statements in one execute(), so files are split
    on ';'. Comment lines are dropped before splitting so a ';' inside a
    comment never ends a statement. BEGIN/COMMIT are skipped because the
    runner already holds a transaction.
    """
    body = "\n".join(ln for ln in sql.splitlines() if not ln.strip().startswith("--"))
    for chunk in body.split(";"):
        stmt = chunk.strip()
        if not stmt:
            continue
        if stmt.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        yield stmt


def _ensure_journal(conn: Connection) -> set[str]:
    conn.exec_driver_sql(
        "CREATE TABLE IF NOT EXISTS schema_migrations ("
        "filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
    )
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).scalars().all()
    return {str(r) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir is not None else MIGRATIONS_DIR
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", str(root))
        return []

    applied_now: list[str] = []
    with engine.begin() as conn:
        applied = _ensure_journal(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            for stmt in _split_statements(sql):
                conn.exec_driver_sql(stmt)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :ts)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds
                    "ts": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            applied_now.append(fname)
    if applied_now:
        logger.info("migrations_applied files=%s", applied_now)
    return applied_now
