"""Central mapping of rundown error codes to HTTP statuses.

Single source of truth for the problem+json handler; routes never hardcode
statuses for domain failures.
"""

from __future__ import annotations

ERROR_STATUS_MAP = {
    "PARENT_NOT_FOUND": 404,
    "INDEX_OUT_OF_RANGE": 422,
    "NAME_CONFLICT": 409,
    "CAPACITY_EXCEEDED": 409,
    "PULL_FAILED": 409,
    "PUSH_FAILED": 409,
    "VALIDATION_ERROR": 422,
}

DEFAULT_STATUS = 500


def status_for(code: str) -> int:
    return ERROR_STATUS_MAP.get(code, DEFAULT_STATUS)


__all__ = ["ERROR_STATUS_MAP", "status_for"]
