from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from starlette.requests import Request

from api.features.canvas_graph.canvas_sessions import canvas_state, require_canvas
from api.platform.observability.request_logging import http_context
from planning_canvas.smart_logger import SmartLogger

router = APIRouter()


@router.post("/{project_id}/undo")
async def undo(project_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.undo()
    SmartLogger.log(
        "INFO",
        "Undo applied." if changed else "Undo ignored: history is empty.",
        category="api.canvas.history.undo",
        params={**http_context(request), "history": canvas.history.depth()},
    )
    return {"changed": changed, "canvas": canvas_state(project_id, canvas)}


@router.post("/{project_id}/redo")
async def redo(project_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.redo()
    SmartLogger.log(
        "INFO",
        "Redo applied." if changed else "Redo ignored: nothing to redo.",
        category="api.canvas.history.redo",
        params={**http_context(request), "history": canvas.history.depth()},
    )
    return {"changed": changed, "canvas": canvas_state(project_id, canvas)}
