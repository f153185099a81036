"""APIRouter registration for the rundown service."""

from __future__ import annotations

from fastapi import APIRouter

from rundown.routes.elements import router as elements_router
from rundown.routes.items import router as items_router
from rundown.routes.projects import router as projects_router

api_router = APIRouter()
api_router.include_router(projects_router)
api_router.include_router(items_router)
api_router.include_router(elements_router)

__all__ = ["api_router"]
