"""Database bootstrap utilities for the rundown service.

Exposes engine construction and the migrations runner that applies the SQL
files shipped in ``rundown/db/migrations``.
"""

from rundown.db.base import build_engine
from rundown.db.migrations_runner import apply_migrations

__all__ = [
    "build_engine",
    "apply_migrations",
]
