# sitewright/routes/projects.py
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from sitewright.core.errors import ModelTransportError, ProjectNotFoundError
from sitewright.models.chat import CreateProjectRequest
from sitewright.models.file_tree import tree_to_json
from sitewright.services.bootstrap import generate_initial_project, generate_title

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/projects", status_code=201)
def create_project(req: CreateProjectRequest, request: Request):
    state = request.app.state
    client = state.client_factory(state.settings.base_model)
    try:
        files, overview = generate_initial_project(client, req.prompt, state.settings.entry_file)
    except ModelTransportError as ex:
        logger.error("initial generation failed: %s", ex)
        raise HTTPException(status_code=502, detail=f"Model call failed: {ex}") from ex

    title = generate_title(client, req.prompt)
    project = state.store.create_project(req.user_id, title, req.prompt, files)
    state.store.create_project_message(project.id, overview, "ASSISTANT", files)
    project = state.store.get_project(project.id)
    state.notifier.emit_project_update(project)
    return project.to_dict()


@router.get("/api/projects/{project_id}")
def get_project(project_id: str, request: Request):
    try:
        return request.app.state.store.get_project(project_id).to_dict()
    except ProjectNotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex)) from ex


@router.get("/api/projects/{project_id}/files")
def get_project_files(project_id: str, request: Request):
    try:
        files = request.app.state.store.get_current_project_files(project_id)
    except ProjectNotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex)) from ex
    return tree_to_json(files)
