"""
Planning Canvas — graph state engine
"""

from .types import (
    NodeType,
    FeaturePriority,
    FeatureStatus,
    FeatureEffort,
    TechCategory,
    TargetTool,
    NoteColorTag,
    CanvasInvariantError,
    Position,
    CanvasNode,
    CanvasEdge,
    HistoryEntry,
    ExistingNodeSummary,
    ExtractedItem,
    NodeMatch,
    MatchResult,
    NodeFieldUpdate,
    SmartImportSummary,
    SmartImportResult,
)
from .settings import CanvasSettings
from .graph_model import GraphModel
from .history import HistoryManager
from .layout import LayoutEngine
from .fuzzy_matcher import normalize, levenshtein, similarity, match_extracted_to_existing
from .merge import build_field_update, build_field_updates
from .canvas_generator import generate_canvas, GenerateCanvasInput
from .document_parser import parse_document, parse_document_to_canvas
from .import_planner import plan_smart_import
from .controller import CanvasController

__all__ = [
    "NodeType",
    "FeaturePriority",
    "FeatureStatus",
    "FeatureEffort",
    "TechCategory",
    "TargetTool",
    "NoteColorTag",
    "CanvasInvariantError",
    "Position",
    "CanvasNode",
    "CanvasEdge",
    "HistoryEntry",
    "ExistingNodeSummary",
    "ExtractedItem",
    "NodeMatch",
    "MatchResult",
    "NodeFieldUpdate",
    "SmartImportSummary",
    "SmartImportResult",
    "CanvasSettings",
    "GraphModel",
    "HistoryManager",
    "LayoutEngine",
    "normalize",
    "levenshtein",
    "similarity",
    "match_extracted_to_existing",
    "build_field_update",
    "build_field_updates",
    "generate_canvas",
    "GenerateCanvasInput",
    "parse_document",
    "parse_document_to_canvas",
    "plan_smart_import",
    "CanvasController",
]
