"""Shared route dependencies."""

from __future__ import annotations

from fastapi import Request

from rundown.logic.rundown_service import RundownService


def get_service(request: Request) -> RundownService:
    return request.app.state.service


__all__ = ["get_service"]
