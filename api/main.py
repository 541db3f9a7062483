"""
FastAPI Backend for the Planning Canvas

Provides REST APIs for:
- Opening a project canvas and reading its graph
- Node / edge mutations with undo/redo and overlap-free layout
- Smart import of planning documents into a live canvas
"""

from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware

from api.features.canvas_graph.canvas_sessions import close_all_canvases, open_canvas_count
from api.platform.env import API_RELOAD, get_api_host, get_api_port, get_cors_origins
from api.platform.observability.request_logging import (
    RequestTimer,
    http_context,
    new_request_id,
    set_request_id,
)
from planning_canvas.smart_logger import SmartLogger
from planning_canvas.types import CanvasInvariantError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Drop in-memory canvases on shutdown."""
    SmartLogger.log(
        "INFO",
        "Starting API (lifespan init)",
        category="api.lifespan",
        params={
            "logger_impl": getattr(SmartLogger, "impl_source", "unknown"),
        },
    )
    yield
    SmartLogger.log("INFO", "API stopping", category="api.lifespan", params={"open_canvases": open_canvas_count()})
    close_all_canvases()


app = FastAPI(
    title="Planning Canvas API",
    description="API for the visual project-planning canvas",
    version="1.0.0",
    lifespan=lifespan,
)

_cors_origins = get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials="*" not in _cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Request Correlation + Narrative Logging
# -----------------------------------------------------------------------------

@app.middleware("http")
async def _request_id_middleware(request: Request, call_next):
    """
    Assign a request_id to every inbound HTTP request and emit start/end logs.
    """
    rid = request.headers.get("x-request-id") or new_request_id()
    set_request_id(rid)
    timer = RequestTimer()

    SmartLogger.log(
        "INFO",
        "HTTP request received: starting route execution.",
        category="api.http.start",
        params=http_context(request),
    )

    try:
        response: Response = await call_next(request)
        SmartLogger.log(
            "INFO",
            "HTTP request completed.",
            category="api.http.end",
            params={
                **http_context(request),
                "result": {
                    "status_code": response.status_code,
                    "duration_ms": timer.ms(),
                },
            },
        )
        response.headers["X-Request-Id"] = rid
        return response
    except Exception as e:
        SmartLogger.log(
            "ERROR",
            "HTTP request failed: route raised an exception.",
            category="api.http.error",
            params={
                **http_context(request),
                "error": {"type": type(e).__name__, "message": str(e)},
                "duration_ms": timer.ms(),
            },
        )
        raise
    finally:
        # Avoid leaking request_id into unrelated async contexts.
        set_request_id(None)


@app.exception_handler(CanvasInvariantError)
async def _canvas_invariant_handler(request: Request, exc: CanvasInvariantError):
    """Malformed graph input (unknown type, dangling edge, duplicate id) is a client error."""
    SmartLogger.log(
        "WARNING",
        "Canvas mutation rejected: graph input violates an invariant.",
        category="api.canvas.invalid",
        params={**http_context(request), "error": str(exc)},
    )
    return JSONResponse(status_code=400, content={"detail": str(exc)})


"""
Feature routers (business capabilities)
"""
from api.features.health.router import router as health_router
from api.features.canvas_graph.router import router as canvas_graph_router
from api.features.ingestion.router import router as ingestion_router

app.include_router(health_router)
app.include_router(canvas_graph_router)
app.include_router(ingestion_router)


if __name__ == "__main__":
    import uvicorn

    HOST = get_api_host()
    PORT = get_api_port()

    SmartLogger.log("INFO", "Starting API", category="api.main", params={"host": HOST, "port": PORT})
    uvicorn.run("api.main:app", host=HOST, port=PORT, reload=API_RELOAD)
