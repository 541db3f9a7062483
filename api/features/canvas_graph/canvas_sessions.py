"""
Canvas Sessions (in-memory)

Business capability: one CanvasController per open project, kept for the life of
the API process.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException

from api.platform.env import get_canvas_settings
from planning_canvas.controller import CanvasController

# Open canvases (feature-local, in-memory)
_canvases: dict[str, CanvasController] = {}


def get_canvas(project_id: str) -> Optional[CanvasController]:
    return _canvases.get(project_id)


def open_canvas(project_id: str) -> CanvasController:
    """Return the controller for project_id, creating an empty one if needed."""
    canvas = _canvases.get(project_id)
    if canvas is None:
        canvas = CanvasController(get_canvas_settings())
        _canvases[project_id] = canvas
    return canvas


def require_canvas(project_id: str) -> CanvasController:
    canvas = _canvases.get(project_id)
    if canvas is None:
        raise HTTPException(status_code=404, detail=f"Canvas {project_id} is not open")
    return canvas


def close_canvas(project_id: str) -> bool:
    canvas = _canvases.pop(project_id, None)
    if canvas is None:
        return False
    canvas.clear()
    return True


def close_all_canvases() -> None:
    for project_id in list(_canvases):
        close_canvas(project_id)


def open_canvas_count() -> int:
    return len(_canvases)


def canvas_state(project_id: str, canvas: CanvasController) -> dict[str, Any]:
    """Response body shared by every mutating canvas route."""
    return {
        "projectId": project_id,
        "name": canvas.project_name,
        **canvas.to_dict(),
        "canUndo": canvas.history.can_undo,
        "canRedo": canvas.history.can_redo,
        "summary": canvas.project_summary(),
        "featureStatus": canvas.feature_status_counts(),
    }
