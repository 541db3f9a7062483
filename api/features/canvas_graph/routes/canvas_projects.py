from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from starlette.requests import Request

from api.features.canvas_graph.canvas_contracts import LoadProjectRequest
from api.features.canvas_graph.canvas_sessions import canvas_state, close_canvas, open_canvas, require_canvas
from api.platform.observability.request_logging import http_context
from planning_canvas.graph_model import validate_graph
from planning_canvas.smart_logger import SmartLogger

router = APIRouter()


@router.put("/{project_id}")
async def load_project(project_id: str, body: LoadProjectRequest, request: Request) -> dict[str, Any]:
    """
    PUT /api/canvas/{project_id} - open a canvas from a saved (nodes, edges) pair.
    Resets undo/redo history and saves the loaded positions as the baseline layout.
    """
    nodes, edges = body.to_graph()
    SmartLogger.log(
        "INFO",
        "Canvas load requested: replacing in-memory canvas with the saved graph.",
        category="api.canvas.project.load",
        params={**http_context(request), "inputs": {"nodes": len(nodes), "edges": len(edges), "name": body.name}},
    )
    validate_graph(nodes, edges)
    canvas = open_canvas(project_id)
    canvas.load_project(project_id, body.name, nodes, edges)
    return canvas_state(project_id, canvas)


@router.get("/{project_id}")
async def get_project(project_id: str, request: Request) -> dict[str, Any]:
    """GET /api/canvas/{project_id} - current nodes, edges, undo/redo availability and summary."""
    canvas = require_canvas(project_id)
    SmartLogger.log(
        "INFO",
        "Canvas state requested.",
        category="api.canvas.project.get",
        params={**http_context(request), "nodes": len(canvas.nodes), "edges": len(canvas.edges)},
    )
    return canvas_state(project_id, canvas)


@router.delete("/{project_id}")
async def close_project(project_id: str, request: Request) -> dict[str, Any]:
    """DELETE /api/canvas/{project_id} - drop the in-memory canvas (persistence is untouched)."""
    if not close_canvas(project_id):
        SmartLogger.log(
            "WARNING",
            "Canvas close ignored: project is not open.",
            category="api.canvas.project.close.not_found",
            params=http_context(request),
        )
        raise HTTPException(status_code=404, detail=f"Canvas {project_id} is not open")
    SmartLogger.log("INFO", "Canvas closed.", category="api.canvas.project.close", params=http_context(request))
    return {"status": "closed", "projectId": project_id}
