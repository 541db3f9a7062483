"""
Shared environment variable getters for the API process.

Parsing rules (truthy handling, stripping, fallbacks) live in
planning_canvas.settings so the engine and the API read settings the same way.
"""

from __future__ import annotations

from planning_canvas.settings import CanvasSettings, env_first, env_flag, env_int, env_str

__all__ = [
    "env_str",
    "env_first",
    "env_flag",
    "get_api_host",
    "get_api_port",
    "get_cors_origins",
    "get_canvas_settings",
    "API_RELOAD",
]


def get_api_host(default: str = "0.0.0.0") -> str:
    return env_str("API_HOST", default) or default


def get_api_port(default: int = 8000) -> int:
    return env_int("API_PORT", default)


def get_cors_origins(default: str = "*") -> list[str]:
    """Comma-separated API_CORS_ORIGINS (supports legacy 'CORS_ORIGINS')."""
    raw = env_first(["API_CORS_ORIGINS", "CORS_ORIGINS"], default=default) or default
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_canvas_settings() -> CanvasSettings:
    """Engine tunables for newly opened canvases (CANVAS_* variables)."""
    return CanvasSettings.from_env()


# Uvicorn auto-reload when started via `python -m api.main`
API_RELOAD = env_flag("API_RELOAD", True)
