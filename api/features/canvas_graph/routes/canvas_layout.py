from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from starlette.requests import Request

from api.features.canvas_graph.canvas_contracts import GraphPayload
from api.features.canvas_graph.canvas_sessions import canvas_state, require_canvas
from api.platform.observability.request_logging import http_context
from planning_canvas.smart_logger import SmartLogger

router = APIRouter()


@router.post("/{project_id}/layout/reset")
async def reset_layout(project_id: str, request: Request) -> dict[str, Any]:
    """Restore the baseline layout, or realign by node type when none was saved."""
    canvas = require_canvas(project_id)
    canvas.reset_layout()
    SmartLogger.log("INFO", "Layout reset.", category="api.canvas.layout.reset", params=http_context(request))
    return {"changed": True, "canvas": canvas_state(project_id, canvas)}


@router.post("/{project_id}/graph/replace")
async def replace_graph(project_id: str, body: GraphPayload, request: Request) -> dict[str, Any]:
    """Replace the whole canvas (e.g. a freshly generated outline); becomes the new baseline."""
    canvas = require_canvas(project_id)
    nodes, edges = body.to_graph()
    canvas.replace_all(nodes, edges)
    SmartLogger.log(
        "INFO",
        "Canvas replaced.",
        category="api.canvas.graph.replace",
        params={**http_context(request), "inputs": {"nodes": len(nodes), "edges": len(edges)}},
    )
    return {"changed": True, "canvas": canvas_state(project_id, canvas)}


@router.post("/{project_id}/graph/append")
async def append_graph(project_id: str, body: GraphPayload, request: Request) -> dict[str, Any]:
    """Append a graph to the right of the existing canvas."""
    canvas = require_canvas(project_id)
    nodes, edges = body.to_graph()
    canvas.append_all(nodes, edges)
    SmartLogger.log(
        "INFO",
        "Graph appended.",
        category="api.canvas.graph.append",
        params={**http_context(request), "inputs": {"nodes": len(nodes), "edges": len(edges)}},
    )
    return {"changed": True, "canvas": canvas_state(project_id, canvas)}
