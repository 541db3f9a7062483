from __future__ import annotations

from fastapi import APIRouter
from starlette.requests import Request

from api.features.canvas_graph.canvas_sessions import open_canvas_count
from api.platform.observability.request_logging import http_context
from planning_canvas.smart_logger import SmartLogger

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(request: Request):
    """Health check endpoint."""
    open_canvases = open_canvas_count()
    SmartLogger.log(
        "INFO",
        "Health check OK.",
        category="api.health.ok",
        params={**http_context(request), "open_canvases": open_canvases},
    )
    return {
        "status": "healthy",
        "open_canvases": open_canvases,
        "logger": getattr(SmartLogger, "impl_source", "unknown"),
    }
