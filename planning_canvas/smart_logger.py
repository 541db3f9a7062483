from __future__ import annotations

import importlib
import importlib.util
import json
import logging
import os
import traceback
from pathlib import Path
from types import ModuleType
from typing import Protocol

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_ROOT_LOGGER = "planning_canvas"


class _SmartLoggerLike(Protocol):
    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 100,
    ) -> None: ...


def _logger_class_from(module: ModuleType, origin: str) -> type[_SmartLoggerLike]:
    cls = getattr(module, "SmartLogger", None)
    if cls is None:
        raise ImportError(f"`SmartLogger` not found in {origin}")
    if not callable(getattr(cls, "log", None)):
        raise TypeError(f"`SmartLogger.log` missing or not callable in {origin}")
    return cls


def _import_private_logger(target: str) -> tuple[type[_SmartLoggerLike], str]:
    """Load a private SmartLogger from a .py file path or a dotted module path."""
    path = Path(target)
    if path.is_file():
        spec = importlib.util.spec_from_file_location("private_smart_logger", str(path))
        if spec is None or spec.loader is None:
            raise ImportError(f"Failed to create import spec from file: {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return _logger_class_from(module, str(path)), f"PRIVATE_LOGGER_PATH(file)={path}"
    module = importlib.import_module(target)
    return _logger_class_from(module, target), f"PRIVATE_LOGGER_PATH(module)={target}"


class _StdlibLogger:
    """Default implementation: one stdlib logger per dotted category under `planning_canvas`."""

    _configured = False

    @classmethod
    def _ensure_configured(cls) -> None:
        if cls._configured:
            return
        root = logging.getLogger(_ROOT_LOGGER)
        min_level = (os.getenv("SMART_LOGGER_MIN_LEVEL") or "INFO").strip().upper()
        root.setLevel(_LEVELS.get(min_level, logging.INFO))
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
            root.addHandler(handler)
        cls._configured = True

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 100,
    ) -> None:
        cls._ensure_configured()
        name = f"{_ROOT_LOGGER}.{category}" if category else _ROOT_LOGGER
        text = message
        if params:
            inline = json.dumps(params, ensure_ascii=False, default=str)
            if len(inline) > max_inline_chars:
                inline = inline[:max_inline_chars] + "..."
            text = f"{message} {inline}"
        logging.getLogger(name).log(_LEVELS.get(level.upper(), logging.INFO), text)


def _resolve_impl() -> tuple[type[_SmartLoggerLike], str]:
    """
    Returns (SmartLoggerClass, source_description)
    """
    private = (os.getenv("PRIVATE_LOGGER_PATH") or "").strip()
    if private:
        return _import_private_logger(private)
    return _StdlibLogger, "stdlib(logging)"


_IMPL, _IMPL_SOURCE = _resolve_impl()


class SmartLogger:
    """
    Project-wide logger entry point for the engine and the API.

    Always import and use this class:
        from planning_canvas.smart_logger import SmartLogger
        SmartLogger.log("INFO", "message", category="canvas.history.undo", params={...})
    """

    impl_source: str = _IMPL_SOURCE

    @classmethod
    def log(
        cls,
        level: str,
        message: str,
        category: str | None = None,
        params: dict | None = None,
        max_inline_chars: int = 200,
    ) -> None:
        try:
            _IMPL.log(level, message, category=category, params=params, max_inline_chars=max_inline_chars)
        except Exception:
            # Logging must never break a canvas operation.
            cat = f"[{category}] " if category else ""
            print(f"{level}: {cat}{message}")
            print(f"LOGGER_ERROR: {traceback.format_exc()}")
