"""Test support routes.

Test-only endpoints used by integration scenarios to observe the change
notifications buffered by the app's notifier.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/__test__/events", summary="Test-only buffered change notifications", include_in_schema=False)
def get_events(request: Request, clear: bool = True):
    notifier = request.app.state.notifier
    reader = getattr(notifier, "get_buffered_events", None)
    if reader is None:
        logger.warning("test_events_unavailable notifier=%s", type(notifier).__name__)
        return {"events": []}
    return {"events": reader(clear=clear)}


__all__ = ["router"]
