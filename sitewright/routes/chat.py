# sitewright/routes/chat.py
from __future__ import annotations

import functools
import logging
from concurrent.futures import Future
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from sitewright.core.errors import ModelTransportError, ProjectNotFoundError
from sitewright.models.chat import ChatRequest, Message
from sitewright.models.file_tree import FileSystemTree
from sitewright.services.coerce import clean_messages, split_prompt
from sitewright.services.notifier import ProjectNotifier
from sitewright.services.orchestrator import Orchestrator
from sitewright.services.projects import InMemoryProjectStore
from sitewright.services.stream import StreamWriter

logger = logging.getLogger(__name__)

router = APIRouter()


def _public_error(ex: Exception) -> str:
    if isinstance(ex, ModelTransportError):
        return f"Model call failed: {ex}"
    return f"Project update failed: {type(ex).__name__}"


def _log_background_failure(project_id: str, future: Future) -> None:
    if future.cancelled():
        logger.warning("chat run for project %s was cancelled", project_id)
        return
    ex = future.exception()
    if ex is not None:
        logger.exception("chat task for project %s failed", project_id, exc_info=ex)


def process_chat(
    orchestrator: Orchestrator,
    store: InMemoryProjectStore,
    notifier: ProjectNotifier,
    project_id: str,
    history: List[Message],
    prompt: str,
    files: FileSystemTree,
    writer: StreamWriter,
    mode: str = "agent",
    is_initial_generation: bool = False,
) -> Optional[str]:
    """
    Run one change request to completion and persist it.

    Returns the saved explanation, or None when the run failed; a failed run
    leaves the stored project untouched and ends the stream with an error.
    The concluding turn is finished with "stop" only after the save succeeds.
    """
    try:
        try:
            if mode == "plan":
                result = orchestrator.run_plan(history, prompt, files, writer, hold_finish=True)
            else:
                result = orchestrator.run(history, prompt, files, writer, hold_finish=True)
        except Exception as ex:
            logger.exception("chat run for project %s failed; discarding changes", project_id)
            writer.error(_public_error(ex))
            writer.finish("error")
            return None

        try:
            store.create_project_update_messages(
                project_id, prompt, result.files, result.explanation, is_initial_generation
            )
            project = store.get_project(project_id)
        except ProjectNotFoundError as ex:
            logger.error("project %s disappeared before its update was saved", project_id)
            writer.error(str(ex))
            writer.finish("error")
            return None
        writer.finish("stop", usage=result.final_usage)
    finally:
        writer.close()

    notifier.emit_project_update(project)
    logger.info("project %s updated: %d change(s), %d error(s), %d step(s)",
                project_id, len(result.changes), len(result.errors), result.steps)
    return result.explanation


@router.post("/api/chat")
def chat(req: ChatRequest, request: Request):
    state = request.app.state
    messages = clean_messages(req.messages)
    history, prompt = split_prompt(messages)
    if not prompt.strip():
        raise HTTPException(status_code=422, detail="last message must be a non-empty user message")

    try:
        files = state.store.get_current_project_files(req.project_id)
    except ProjectNotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex)) from ex

    writer = StreamWriter()
    orchestrator = Orchestrator(state.settings, state.client_factory, state.formatter)
    future = state.executor.submit(
        process_chat,
        orchestrator,
        state.store,
        state.notifier,
        req.project_id,
        history,
        prompt,
        files,
        writer,
        req.mode,
        len(messages) == 1,
    )
    future.add_done_callback(functools.partial(_log_background_failure, req.project_id))
    return StreamingResponse(
        writer.iter_lines(),
        media_type="text/plain; charset=utf-8",
        headers={"x-vercel-ai-data-stream": "v1", "Cache-Control": "no-cache"},
    )
