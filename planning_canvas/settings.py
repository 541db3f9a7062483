"""
Planning Canvas — configuration

Centralizes env parsing rules (truthy handling, stripping, fallbacks) so the
engine and the API read settings the same way.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def env_str(key: str, default: str | None = None, *, strip: bool = True) -> str | None:
    """Read an environment variable as string with optional stripping."""
    val = os.getenv(key)
    if val is None:
        return default
    if strip:
        val = val.strip()
    return val if val != "" else default


def env_first(keys: Iterable[str], default: str | None = None, *, strip: bool = True) -> str | None:
    """Return the first non-empty environment variable value from keys."""
    for key in keys:
        val = env_str(key, None, strip=strip)
        if val is not None:
            return val
    return default


def env_flag(key: str, default: bool = False) -> bool:
    """Read an environment variable as a boolean flag."""
    val = (os.getenv(key) or "").strip().lower()
    if not val:
        return default
    return val in _TRUE_VALUES


def env_int(key: str, default: int) -> int:
    val = env_str(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def env_float(key: str, default: float) -> float:
    val = env_str(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class CanvasSettings:
    """Tunables for history, matching and layout."""

    history_limit: int = 20
    match_threshold: float = 0.6
    node_width: float = 320
    node_gap: float = 10
    search_step: float = 60
    search_rings: int = 6
    column_bucket: float = 100
    min_vertical_gap: float = 0

    @classmethod
    def from_env(cls) -> "CanvasSettings":
        return cls(
            history_limit=max(1, env_int("CANVAS_HISTORY_LIMIT", cls.history_limit)),
            match_threshold=env_float("CANVAS_MATCH_THRESHOLD", cls.match_threshold),
            node_width=env_float("CANVAS_NODE_WIDTH", cls.node_width),
            node_gap=env_float("CANVAS_NODE_GAP", cls.node_gap),
            search_step=env_float("CANVAS_SEARCH_STEP", cls.search_step),
            search_rings=max(0, env_int("CANVAS_SEARCH_RINGS", cls.search_rings)),
            column_bucket=env_float("CANVAS_COLUMN_BUCKET", cls.column_bucket),
            min_vertical_gap=env_float("CANVAS_MIN_VERTICAL_GAP", cls.min_vertical_gap),
        )
