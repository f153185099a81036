"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that turn domain errors,
HTTP errors and request validation failures into application/problem+json
responses.
"""

from __future__ import annotations

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse

from rundown.http.error_mapping import status_for
from rundown.logic.errors import RundownError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


async def handle_rundown_error(request: Request, exc: RundownError) -> JSONResponse:  # noqa: D401
    status = status_for(exc.code)
    problem = {
        "title": exc.title,
        "status": status,
        "detail": exc.message,
        **exc.to_dict(),
    }
    problem.pop("message", None)
    logger.info(
        "problem code=%s status=%s method=%s path=%s",
        exc.code,
        status,
        request.method,
        request.url.path,
    )
    return JSONResponse(problem, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(getattr(exc, "detail", None), dict):
        detail = dict(exc.detail)
    else:
        detail = {"title": "Error", "status": status, "detail": str(getattr(exc, "detail", ""))}
    headers = getattr(exc, "headers", None)
    return JSONResponse(
        detail,
        status_code=status,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=dict(headers) if isinstance(headers, dict) else None,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "code": "VALIDATION_ERROR",
        "errors": [
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))}
            for err in exc.errors()
        ],
    }
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"title": "Internal Server Error", "status": 500}, status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_rundown_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
