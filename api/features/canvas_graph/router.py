"""
Canvas Graph API (feature router)

- Open a project canvas from its saved graph and read it back
- Node / edge mutations with overlap-free placement
- Undo / redo over structural changes
- Layout reset and bulk replace / append
"""

from __future__ import annotations

from fastapi import APIRouter

from .routes.canvas_history import router as canvas_history_router
from .routes.canvas_layout import router as canvas_layout_router
from .routes.canvas_nodes import router as canvas_nodes_router
from .routes.canvas_projects import router as canvas_projects_router

router = APIRouter(prefix="/api/canvas", tags=["canvas-graph"])

router.include_router(canvas_projects_router)
router.include_router(canvas_nodes_router)
router.include_router(canvas_history_router)
router.include_router(canvas_layout_router)
