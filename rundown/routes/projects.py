"""Project endpoints: list, create, prompt, read, rename, delete."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from rundown.logic.rundown_service import RundownService
from rundown.models.requests import ProjectCreateModel, ProjectRenameModel
from rundown.routes.deps import get_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/projects", summary="List projects", operation_id="listProjects", tags=["Projects"])
def list_projects(service: RundownService = Depends(get_service)):
    return {"projects": service.list_projects()}


@router.post(
    "/projects",
    status_code=201,
    summary="Create a project",
    operation_id="createProject",
    tags=["Projects"],
)
def create_project(body: ProjectCreateModel, service: RundownService = Depends(get_service)):
    project = service.create_project(body.name, overwrite=body.overwrite, settings=body.settings)
    logger.info("project_created project_id=%s overwrite=%s", project["project_id"], body.overwrite)
    return project


# Declared before /projects/{project_id} so "prompt" is not read as an id
@router.get(
    "/projects/prompt",
    summary="Check whether a project name is taken",
    operation_id="promptProjectName",
    tags=["Projects"],
)
def prompt_project_name(name: str = Query(...), service: RundownService = Depends(get_service)):
    match = service.project_name_exists(name)
    if match is None:
        return {"exists": False, "project_id": None, "name": name}
    return {"exists": True, **match}


@router.get("/projects/{project_id}", summary="Get a populated project", operation_id="getProject", tags=["Projects"])
def get_project(project_id: str, service: RundownService = Depends(get_service)):
    return service.get_project(project_id)


@router.post(
    "/projects/{project_id}/rename",
    summary="Rename a project",
    operation_id="renameProject",
    tags=["Projects"],
)
def rename_project(project_id: str, body: ProjectRenameModel, service: RundownService = Depends(get_service)):
    return service.rename_project(project_id, body.new_name)


@router.delete("/projects/{project_id}", summary="Delete a project", operation_id="deleteProject", tags=["Projects"])
def delete_project(project_id: str, service: RundownService = Depends(get_service)):
    return service.delete_project(project_id)


__all__ = ["router"]
