"""Error taxonomy for ordered-collection operations.

Every failure the core can report is a ``RundownError`` subclass carrying a
stable ``code``. The core raises them; the HTTP layer converts them into
problem+json responses (see ``rundown.http.error_mapping``). Nothing here is
retried automatically.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RundownError(Exception):
    code = "RUNDOWN_ERROR"
    title = "Rundown error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.context}


class ParentNotFound(RundownError):
    """Identifier does not resolve to an existing project, item or element."""

    code = "PARENT_NOT_FOUND"
    title = "Not Found"


class IndexOutOfRange(RundownError):
    """Position argument is not an int or falls outside the valid range."""

    code = "INDEX_OUT_OF_RANGE"
    title = "Index Out Of Range"

    def __init__(
        self,
        message: str,
        *,
        position: Any = None,
        lower: Optional[int] = None,
        upper: Optional[int] = None,
        **context: Any,
    ) -> None:
        super().__init__(message, position=position, lower=lower, upper=upper, **context)


class NameConflict(RundownError):
    code = "NAME_CONFLICT"
    title = "Conflict"


class CapacityExceeded(RundownError):
    code = "CAPACITY_EXCEEDED"
    title = "Conflict"


class ValidationError(RundownError):
    """Missing or malformed payload fields (e.g. element template without type)."""

    code = "VALIDATION_ERROR"
    title = "Invalid Request"


class PartialWriteError(RundownError):
    """Base for failures after which the sibling list may already be modified.

    Callers must re-read the list instead of assuming a no-op.
    """

    reread = True

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reread"] = True
        return data


class PullFailed(PartialWriteError):
    code = "PULL_FAILED"
    title = "Pull Failed"


class PushFailed(PartialWriteError):
    code = "PUSH_FAILED"
    title = "Push Failed"


__all__ = [
    "RundownError",
    "ParentNotFound",
    "IndexOutOfRange",
    "NameConflict",
    "CapacityExceeded",
    "ValidationError",
    "PartialWriteError",
    "PullFailed",
    "PushFailed",
]
