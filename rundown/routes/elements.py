"""Element endpoints, scoped to the owning item for ordering."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rundown.logic.kinds import ELEMENT
from rundown.logic.rundown_service import RundownService
from rundown.models.requests import (
    ElementCreateModel,
    MoveModel,
    PasteModel,
    PositionModel,
    RenameModel,
)
from rundown.routes.deps import get_service

router = APIRouter(tags=["Elements"])


@router.post("/items/{item_id}/elements", status_code=201, summary="Create an element", operation_id="createElement")
def create_element(item_id: str, body: ElementCreateModel, service: RundownService = Depends(get_service)):
    return service.create_member(ELEMENT, item_id, body.index, body.template)


@router.put("/items/{item_id}/elements/up", summary="Move an element up", operation_id="moveElementUp")
def move_element_up(item_id: str, body: PositionModel, service: RundownService = Depends(get_service)):
    return service.move_up(ELEMENT, item_id, body.index)


@router.put("/items/{item_id}/elements/down", summary="Move an element down", operation_id="moveElementDown")
def move_element_down(item_id: str, body: PositionModel, service: RundownService = Depends(get_service)):
    return service.move_down(ELEMENT, item_id, body.index)


@router.put("/items/{item_id}/elements/move", summary="Move an element to a position", operation_id="moveElement")
def move_element(item_id: str, body: MoveModel, service: RundownService = Depends(get_service)):
    return service.move(ELEMENT, item_id, body.from_index, body.to_index)


@router.put("/items/{item_id}/elements/cut", summary="Cut an element", operation_id="cutElement")
def cut_element(item_id: str, body: PositionModel, service: RundownService = Depends(get_service)):
    return service.cut(ELEMENT, item_id, body.index)


@router.put("/items/{item_id}/elements/paste", summary="Paste an element", operation_id="pasteElement")
def paste_element(item_id: str, body: PasteModel, service: RundownService = Depends(get_service)):
    return service.paste(ELEMENT, item_id, body.index, body.entry)


@router.get("/elements/{element_id}", summary="Get an element", operation_id="getElement")
def get_element(element_id: str, service: RundownService = Depends(get_service)):
    return service.get_member(ELEMENT, element_id)


@router.put("/elements/{element_id}", summary="Rename an element", operation_id="renameElement")
def rename_element(element_id: str, body: RenameModel, service: RundownService = Depends(get_service)):
    return service.rename_member(ELEMENT, element_id, body.name)


@router.delete("/elements/{element_id}", summary="Delete an element", operation_id="deleteElement")
def delete_element(element_id: str, service: RundownService = Depends(get_service)):
    return service.delete_member(ELEMENT, element_id)


__all__ = ["router"]
