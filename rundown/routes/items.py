"""Item endpoints.

Ordering routes are scoped to the owning project; read, rename and delete
address an item directly by id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rundown.logic.kinds import ITEM
from rundown.logic.rundown_service import RundownService
from rundown.models.requests import (
    ItemCreateModel,
    MoveModel,
    PasteModel,
    PositionModel,
    RenameModel,
)
from rundown.routes.deps import get_service

router = APIRouter(tags=["Items"])


@router.post("/projects/{project_id}/items", status_code=201, summary="Create an item", operation_id="createItem")
def create_item(project_id: str, body: ItemCreateModel, service: RundownService = Depends(get_service)):
    payload = {
        "name": body.name,
        "expanded": body.expanded,
        "options": body.options,
        "elements": body.elements,
    }
    return service.create_member(ITEM, project_id, body.index, payload)


@router.put("/projects/{project_id}/items/up", summary="Move an item up", operation_id="moveItemUp")
def move_item_up(project_id: str, body: PositionModel, service: RundownService = Depends(get_service)):
    return service.move_up(ITEM, project_id, body.index)


@router.put("/projects/{project_id}/items/down", summary="Move an item down", operation_id="moveItemDown")
def move_item_down(project_id: str, body: PositionModel, service: RundownService = Depends(get_service)):
    return service.move_down(ITEM, project_id, body.index)


@router.put("/projects/{project_id}/items/move", summary="Move an item to a position", operation_id="moveItem")
def move_item(project_id: str, body: MoveModel, service: RundownService = Depends(get_service)):
    return service.move(ITEM, project_id, body.from_index, body.to_index)


@router.put("/projects/{project_id}/items/cut", summary="Cut an item", operation_id="cutItem")
def cut_item(project_id: str, body: PositionModel, service: RundownService = Depends(get_service)):
    return service.cut(ITEM, project_id, body.index)


@router.put("/projects/{project_id}/items/paste", summary="Paste an item", operation_id="pasteItem")
def paste_item(project_id: str, body: PasteModel, service: RundownService = Depends(get_service)):
    return service.paste(ITEM, project_id, body.index, body.entry)


@router.get("/items/{item_id}", summary="Get an item", operation_id="getItem")
def get_item(item_id: str, service: RundownService = Depends(get_service)):
    return service.get_member(ITEM, item_id)


@router.put("/items/{item_id}", summary="Rename an item", operation_id="renameItem")
def rename_item(item_id: str, body: RenameModel, service: RundownService = Depends(get_service)):
    return service.rename_member(ITEM, item_id, body.name)


@router.delete("/items/{item_id}", summary="Delete an item and its elements", operation_id="deleteItem")
def delete_item(item_id: str, service: RundownService = Depends(get_service)):
    return service.delete_member(ITEM, item_id)


__all__ = ["router"]
