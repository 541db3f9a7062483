from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from starlette.requests import Request

from api.features.canvas_graph.canvas_contracts import (
    AddNodeRequest,
    ConnectRequest,
    MeasuredHeightRequest,
    MoveNodeRequest,
    SelectionRequest,
    UpdateNodeDataRequest,
)
from api.features.canvas_graph.canvas_sessions import canvas_state, require_canvas
from api.platform.observability.request_logging import http_context, summarize_for_log
from planning_canvas.smart_logger import SmartLogger

router = APIRouter()


def _changed(project_id: str, canvas, changed: bool, **extra: Any) -> dict[str, Any]:
    return {"changed": changed, **extra, "canvas": canvas_state(project_id, canvas)}


# ==========================================
# Nodes
# ==========================================

@router.post("/{project_id}/nodes")
async def add_node(project_id: str, body: AddNodeRequest, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    node_id = canvas.add_node(body.type, body.position.to_position())
    node = canvas.model.get_node(node_id)
    SmartLogger.log(
        "INFO",
        "Node added: placed at the nearest free position.",
        category="api.canvas.nodes.add",
        params={
            **http_context(request),
            "inputs": {"type": body.type, "position": body.position.model_dump()},
            "result": {"node_id": node_id, "position": node.position.to_dict()},
        },
    )
    return _changed(project_id, canvas, True, nodeId=node_id)


@router.patch("/{project_id}/nodes/{node_id}/data")
async def update_node_data(
    project_id: str, node_id: str, body: UpdateNodeDataRequest, request: Request
) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.update_node_data(node_id, body.data)
    SmartLogger.log(
        "INFO",
        "Node data merged." if changed else "Node data update ignored: unknown node.",
        category="api.canvas.nodes.update",
        params={**http_context(request), "inputs": summarize_for_log(body.data), "changed": changed},
    )
    return _changed(project_id, canvas, changed)


@router.delete("/{project_id}/nodes/{node_id}")
async def delete_node(project_id: str, node_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.delete_node(node_id)
    SmartLogger.log(
        "INFO",
        "Node deleted with its edges." if changed else "Node delete ignored: unknown node.",
        category="api.canvas.nodes.delete",
        params={**http_context(request), "changed": changed},
    )
    return _changed(project_id, canvas, changed)


@router.post("/{project_id}/nodes/{node_id}/move")
async def move_node(project_id: str, node_id: str, body: MoveNodeRequest, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.move_node(node_id, body.position.to_position())
    SmartLogger.log(
        "INFO",
        "Node drag completed." if changed else "Node move ignored: unknown node.",
        category="api.canvas.nodes.move",
        params={**http_context(request), "inputs": body.position.model_dump(), "changed": changed},
    )
    return _changed(project_id, canvas, changed)


@router.post("/{project_id}/nodes/{node_id}/toggle-expanded")
async def toggle_expanded(project_id: str, node_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.toggle_expanded(node_id)
    SmartLogger.log(
        "INFO",
        "Node expand state toggled.",
        category="api.canvas.nodes.toggle_expanded",
        params={**http_context(request), "changed": changed},
    )
    return _changed(project_id, canvas, changed)


@router.post("/{project_id}/nodes/{node_id}/toggle-completed")
async def toggle_completed(project_id: str, node_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.toggle_completed(node_id)
    SmartLogger.log(
        "INFO",
        "Node completion toggled.",
        category="api.canvas.nodes.toggle_completed",
        params={**http_context(request), "changed": changed},
    )
    return _changed(project_id, canvas, changed)


@router.post("/{project_id}/nodes/{node_id}/height")
async def set_measured_height(
    project_id: str, node_id: str, body: MeasuredHeightRequest, request: Request
) -> dict[str, Any]:
    """Rendered height reported by the frontend; feeds overlap and spacing."""
    canvas = require_canvas(project_id)
    changed = canvas.set_measured_height(node_id, body.height)
    return {"changed": changed, "nodeId": node_id, "height": canvas.layout.measured_heights.get(node_id)}


# ==========================================
# Selection
# ==========================================

@router.post("/{project_id}/selection")
async def set_selection(project_id: str, body: SelectionRequest, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    canvas.select(body.nodeIds, body.edgeIds)
    return _changed(project_id, canvas, True)


@router.post("/{project_id}/selection/delete")
async def delete_selected(project_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.delete_selected()
    SmartLogger.log(
        "INFO",
        "Selection deleted." if changed else "Delete selection ignored: nothing selected.",
        category="api.canvas.selection.delete",
        params={**http_context(request), "changed": changed},
    )
    return _changed(project_id, canvas, changed)


# ==========================================
# Edges
# ==========================================

@router.post("/{project_id}/edges")
async def connect(project_id: str, body: ConnectRequest, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    edge_id = canvas.connect(body.source, body.target)
    SmartLogger.log(
        "INFO",
        "Edge created.",
        category="api.canvas.edges.connect",
        params={**http_context(request), "inputs": body.model_dump(), "edge_id": edge_id},
    )
    return _changed(project_id, canvas, True, edgeId=edge_id)


@router.delete("/{project_id}/edges/{edge_id}")
async def disconnect(project_id: str, edge_id: str, request: Request) -> dict[str, Any]:
    canvas = require_canvas(project_id)
    changed = canvas.disconnect(edge_id)
    SmartLogger.log(
        "INFO",
        "Edge removed." if changed else "Edge removal ignored: unknown edge.",
        category="api.canvas.edges.disconnect",
        params={**http_context(request), "changed": changed},
    )
    return _changed(project_id, canvas, changed)
