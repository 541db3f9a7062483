"""
Planning Canvas — canvas generation
Builds a starter graph (idea, features, screens, tech stack, prompts) laid out
in type columns, used by document import for items with no existing match.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .types import (
    CanvasEdge,
    CanvasNode,
    FeatureEffort,
    FeaturePriority,
    FeatureStatus,
    NodeType,
    Position,
    TargetTool,
    TechCategory,
)

GENERATED_COLUMN_X = [0, 360, 720, 1080, 1440]
ROW_SPACING = 250


@dataclass
class TechStackItem:
    tool_name: str
    category: str = TechCategory.OTHER.value
    notes: str = ""


@dataclass
class PromptItem:
    text: str
    target_tool: Optional[str] = None


@dataclass
class GenerateCanvasInput:
    description: str = ""
    target_user: str = ""
    core_problem: str = ""
    app_name: str = ""
    features: List[str] = field(default_factory=list)
    screens: List[str] = field(default_factory=list)
    tool: str = TargetTool.CLAUDE.value
    features_detailed: List[Dict[str, Any]] = field(default_factory=list)
    screens_detailed: List[Dict[str, Any]] = field(default_factory=list)
    tech_stack: List[TechStackItem] = field(default_factory=list)
    prompts: List[PromptItem] = field(default_factory=list)
    skip_idea_node: bool = False


def _normalize_choice(value: Any, enum_cls, default: str) -> str:
    allowed = {member.value for member in enum_cls}
    return value if value in allowed else default


def center_positions(count: int, column_x: float, total_height: float) -> List[Position]:
    """`count` rows spaced ROW_SPACING apart, centred inside `total_height`."""
    if count == 0:
        return []
    column_height = (count - 1) * ROW_SPACING
    start_y = (total_height - column_height) / 2
    return [Position(column_x, start_y + i * ROW_SPACING) for i in range(count)]


def _feature_data(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "featureName": item["featureName"],
        "summary": item.get("summary") or "",
        "problem": item.get("problem") or "",
        "userStory": item.get("userStory") or "",
        "acceptanceCriteria": list(item.get("acceptanceCriteria") or []),
        "priority": _normalize_choice(item.get("priority"), FeaturePriority, FeaturePriority.MUST.value),
        "status": _normalize_choice(item.get("status"), FeatureStatus, FeatureStatus.PLANNED.value),
        "effort": _normalize_choice(item.get("effort"), FeatureEffort, FeatureEffort.M.value),
        "dependencies": list(item.get("dependencies") or []),
        "risks": item.get("risks") or "",
        "metrics": item.get("metrics") or "",
        "notes": item.get("notes") or "",
        "expanded": False,
        "completed": False,
        "tags": [],
        "estimatedHours": None,
        "version": 1,
    }


def _screen_data(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "screenName": item["screenName"],
        "purpose": item.get("purpose") or "",
        "keyElements": list(item.get("keyElements") or []),
        "userActions": list(item.get("userActions") or []),
        "states": list(item.get("states") or []),
        "navigation": item.get("navigation") or "",
        "dataSources": list(item.get("dataSources") or []),
        "wireframeUrl": item.get("wireframeUrl") or "",
        "notes": item.get("notes") or "",
        "expanded": False,
        "completed": False,
        "tags": [],
        "estimatedHours": None,
        "version": 1,
    }


def generate_canvas(data: GenerateCanvasInput) -> Tuple[List[CanvasNode], List[CanvasEdge]]:
    """
    Generate nodes and edges for a project outline.

    Edges: idea -> each feature and tech stack entry, feature[i] ->
    screen[i % screens], each screen -> first prompt, prompts chained in order.

    Returns:
        (nodes, edges)
    """
    features = [f for f in data.features if f]
    screens = [s for s in data.screens if s]
    tech_stack = [t for t in data.tech_stack if t.tool_name]
    prompts = [p for p in data.prompts if p.text]
    detailed_features = [f for f in data.features_detailed if f.get("featureName")]
    detailed_screens = [s for s in data.screens_detailed if s.get("screenName")]

    feature_source = detailed_features or [{"featureName": name} for name in features]
    screen_source = detailed_screens or [{"screenName": name} for name in screens]

    max_items = max(len(feature_source), len(screen_source), len(tech_stack), len(prompts), 1)
    total_height = (max_items - 1) * ROW_SPACING
    token = uuid.uuid4().hex[:8]

    idea_id = f"idea-{token}"
    idea_node = CanvasNode(
        id=idea_id,
        type=NodeType.IDEA,
        position=center_positions(1, GENERATED_COLUMN_X[0], total_height)[0],
        data={
            "appName": data.app_name,
            "description": data.description,
            "targetUser": data.target_user,
            "coreProblem": data.core_problem,
            "expanded": False,
            "completed": False,
            "projectArchitecture": "",
            "corePatterns": [],
            "constraints": [],
            "tags": [],
            "estimatedHours": None,
            "version": 1,
        },
    )

    feature_positions = center_positions(len(feature_source), GENERATED_COLUMN_X[1], total_height)
    feature_nodes = [
        CanvasNode(id=f"feature-{token}-{i}", type=NodeType.FEATURE, position=pos, data=_feature_data(item))
        for i, (item, pos) in enumerate(zip(feature_source, feature_positions))
    ]

    screen_positions = center_positions(len(screen_source), GENERATED_COLUMN_X[2], total_height)
    screen_nodes = [
        CanvasNode(id=f"screen-{token}-{i}", type=NodeType.SCREEN, position=pos, data=_screen_data(item))
        for i, (item, pos) in enumerate(zip(screen_source, screen_positions))
    ]

    tech_positions = center_positions(len(tech_stack), GENERATED_COLUMN_X[3], total_height)
    tech_nodes = [
        CanvasNode(
            id=f"techStack-{token}-{i}",
            type=NodeType.TECH_STACK,
            position=pos,
            data={
                "category": _normalize_choice(item.category, TechCategory, TechCategory.OTHER.value),
                "toolName": item.tool_name,
                "notes": item.notes or "",
                "expanded": False,
                "completed": False,
                "version": "",
                "rationale": "",
                "configurationNotes": "",
                "integrationWith": [],
                "tags": [],
                "estimatedHours": None,
            },
        )
        for i, (item, pos) in enumerate(zip(tech_stack, tech_positions))
    ]

    prompt_positions = center_positions(len(prompts), GENERATED_COLUMN_X[4], total_height)
    prompt_nodes = [
        CanvasNode(
            id=f"prompt-{token}-{i}",
            type=NodeType.PROMPT,
            position=pos,
            data={
                "promptText": item.text,
                "targetTool": item.target_tool or data.tool,
                "resultNotes": "",
                "expanded": False,
                "completed": False,
                "tags": [],
                "estimatedHours": None,
            },
        )
        for i, (item, pos) in enumerate(zip(prompts, prompt_positions))
    ]

    nodes: List[CanvasNode] = []
    if not data.skip_idea_node:
        nodes.append(idea_node)
    nodes += feature_nodes + screen_nodes + tech_nodes + prompt_nodes

    edges: List[CanvasEdge] = []

    def link(source: CanvasNode, target: CanvasNode) -> None:
        edges.append(CanvasEdge(id=f"e-{source.id}-{target.id}", source=source.id, target=target.id))

    if not data.skip_idea_node:
        for node in feature_nodes + tech_nodes:
            link(idea_node, node)

    if screen_nodes:
        for i, node in enumerate(feature_nodes):
            link(node, screen_nodes[i % len(screen_nodes)])

    if prompt_nodes:
        for node in screen_nodes:
            link(node, prompt_nodes[0])
        for current, following in zip(prompt_nodes, prompt_nodes[1:]):
            link(current, following)

    return nodes, edges
