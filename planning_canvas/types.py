"""
Planning Canvas — type definitions
Node/edge records, import-time views and per-type default data.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ==========================================
# Enums
# ==========================================

class NodeType(str, Enum):
    IDEA = "idea"
    FEATURE = "feature"
    SCREEN = "screen"
    TECH_STACK = "techStack"
    PROMPT = "prompt"
    NOTE = "note"


class FeaturePriority(str, Enum):
    MUST = "Must"
    SHOULD = "Should"
    NICE = "Nice"


class FeatureStatus(str, Enum):
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    BUILT = "Built"
    BROKEN = "Broken"
    BLOCKED = "Blocked"


class FeatureEffort(str, Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"


class TechCategory(str, Enum):
    FRONTEND = "Frontend"
    BACKEND = "Backend"
    DATABASE = "Database"
    AUTH = "Auth"
    HOSTING = "Hosting"
    OTHER = "Other"


class TargetTool(str, Enum):
    CLAUDE = "Claude"
    BOLT = "Bolt"
    CURSOR = "Cursor"
    LOVABLE = "Lovable"
    REPLIT = "Replit"
    OTHER = "Other"


class NoteColorTag(str, Enum):
    SLATE = "Slate"
    AMBER = "Amber"
    EMERALD = "Emerald"
    SKY = "Sky"
    ROSE = "Rose"


# Canonical column order for type-based realignment
NODE_TYPE_ORDER: List[NodeType] = [
    NodeType.IDEA,
    NodeType.FEATURE,
    NodeType.SCREEN,
    NodeType.TECH_STACK,
    NodeType.PROMPT,
    NodeType.NOTE,
]


class CanvasInvariantError(ValueError):
    """Raised for programmer errors: unknown node types, dangling edges, duplicate ids."""


def coerce_node_type(value: Any) -> NodeType:
    """Map a raw type label onto NodeType, raising CanvasInvariantError when unknown."""
    if isinstance(value, NodeType):
        return value
    try:
        return NodeType(value)
    except ValueError:
        raise CanvasInvariantError(f"Unknown node type: {value!r}") from None


# ==========================================
# Default data per node type
# ==========================================

DEFAULT_NODE_DATA: Dict[NodeType, Dict[str, Any]] = {
    NodeType.IDEA: {
        "appName": "",
        "description": "",
        "targetUser": "",
        "coreProblem": "",
        "expanded": False,
        "completed": False,
    },
    NodeType.FEATURE: {
        "featureName": "",
        "description": "",
        "priority": FeaturePriority.MUST.value,
        "status": FeatureStatus.PLANNED.value,
        "expanded": False,
        "completed": False,
    },
    NodeType.SCREEN: {
        "screenName": "",
        "description": "",
        "keyElements": "",
        "expanded": False,
        "completed": False,
    },
    NodeType.TECH_STACK: {
        "category": TechCategory.FRONTEND.value,
        "toolName": "",
        "notes": "",
        "expanded": False,
        "completed": False,
    },
    NodeType.PROMPT: {
        "promptText": "",
        "targetTool": TargetTool.CLAUDE.value,
        "resultNotes": "",
        "expanded": False,
        "completed": False,
    },
    NodeType.NOTE: {
        "title": "",
        "body": "",
        "colorTag": NoteColorTag.SLATE.value,
        "expanded": False,
        "completed": False,
    },
}

# The user's chosen name lives in this field; import never overwrites it.
PRIMARY_NAME_FIELDS: Dict[NodeType, str] = {
    NodeType.IDEA: "appName",
    NodeType.FEATURE: "featureName",
    NodeType.SCREEN: "screenName",
    NodeType.TECH_STACK: "toolName",
    NodeType.PROMPT: "promptText",
    NodeType.NOTE: "title",
}


def default_data(node_type: NodeType) -> Dict[str, Any]:
    """Fresh copy of the default data record for a node type."""
    return copy.deepcopy(DEFAULT_NODE_DATA[coerce_node_type(node_type)])


# ==========================================
# Graph records
# ==========================================

@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass
class CanvasNode:
    id: str
    type: NodeType
    position: Position
    data: Dict[str, Any] = field(default_factory=dict)
    z_index: Optional[int] = None
    selected: bool = False

    def __post_init__(self):
        self.type = coerce_node_type(self.type)

    @property
    def expanded(self) -> bool:
        return bool(self.data.get("expanded"))

    @property
    def name(self) -> str:
        return str(self.data.get(PRIMARY_NAME_FIELDS[self.type]) or "")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "position": self.position.to_dict(),
            "data": copy.deepcopy(self.data),
        }
        if self.z_index is not None:
            out["zIndex"] = self.z_index
        if self.selected:
            out["selected"] = True
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CanvasNode":
        position = raw.get("position") or {}
        return cls(
            id=str(raw["id"]),
            type=coerce_node_type(raw.get("type")),
            position=Position(x=float(position.get("x", 0)), y=float(position.get("y", 0))),
            data=copy.deepcopy(dict(raw.get("data") or {})),
            z_index=raw.get("zIndex"),
            selected=bool(raw.get("selected", False)),
        )


@dataclass
class CanvasEdge:
    id: str
    source: str
    target: str
    selected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "source": self.source, "target": self.target}
        if self.selected:
            out["selected"] = True
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CanvasEdge":
        return cls(
            id=str(raw["id"]),
            source=str(raw["source"]),
            target=str(raw["target"]),
            selected=bool(raw.get("selected", False)),
        )


@dataclass
class HistoryEntry:
    """Alias-free snapshot of the full graph (undo/redo unit)"""
    nodes: List[CanvasNode]
    edges: List[CanvasEdge]


# ==========================================
# Import-time views
# ==========================================

@dataclass
class ExistingNodeSummary:
    id: str
    type: NodeType
    name: str
    populated_fields: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.type = coerce_node_type(self.type)


@dataclass
class ExtractedItem:
    name: str
    type: str  # extraction label, mapped onto NodeType by the matcher


@dataclass
class NodeMatch:
    extracted_name: str
    existing_node_id: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extractedName": self.extracted_name,
            "existingNodeId": self.existing_node_id,
            "confidence": self.confidence,
        }


@dataclass
class MatchResult:
    matches: List[NodeMatch] = field(default_factory=list)
    unmatched: List[ExtractedItem] = field(default_factory=list)


@dataclass
class NodeFieldUpdate:
    node_id: str
    node_type: NodeType
    fields_to_fill: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.node_type = coerce_node_type(self.node_type)


@dataclass
class SmartImportSummary:
    nodes_updated: int = 0
    fields_filled_total: int = 0
    nodes_created: int = 0
    nodes_skipped: int = 0
    match_details: List[NodeMatch] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodesUpdated": self.nodes_updated,
            "fieldsFilledTotal": self.fields_filled_total,
            "nodesCreated": self.nodes_created,
            "nodesSkipped": self.nodes_skipped,
            "matchDetails": [m.to_dict() for m in self.match_details],
        }


@dataclass
class SmartImportResult:
    updates: List[NodeFieldUpdate] = field(default_factory=list)
    new_nodes: List[CanvasNode] = field(default_factory=list)
    new_edges: List[CanvasEdge] = field(default_factory=list)
    summary: SmartImportSummary = field(default_factory=SmartImportSummary)
    mode: str = "smart"
