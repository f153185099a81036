"""Pydantic request bodies for the project, item and element routes.

Position fields are typed ``Any`` on purpose: they reach the reorder engine
untouched so that non-integers fail with ``IndexOutOfRange`` rather than
being coerced by the body parser.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProjectCreateModel(BaseModel):
    name: Any = None
    overwrite: bool = False
    settings: dict[str, Any] | None = None


class ProjectRenameModel(BaseModel):
    new_name: Any = None


class ItemCreateModel(BaseModel):
    index: Any = None
    name: Any = None
    expanded: bool = True
    options: bool = False
    elements: list[dict[str, Any]] = Field(default_factory=list)


class ElementCreateModel(BaseModel):
    index: Any = None
    template: dict[str, Any] | None = None


class RenameModel(BaseModel):
    name: Any = None


class PositionModel(BaseModel):
    index: Any = None


class MoveModel(BaseModel):
    from_index: Any = None
    to_index: Any = None


class PasteModel(BaseModel):
    index: Any = None
    entry: dict[str, Any] | None = None


__all__ = [
    "ProjectCreateModel",
    "ProjectRenameModel",
    "ItemCreateModel",
    "ElementCreateModel",
    "RenameModel",
    "PositionModel",
    "MoveModel",
    "PasteModel",
]
