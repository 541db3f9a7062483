"""
Canvas Graph Contracts (DTOs)

Business capability: wire shapes for canvas nodes/edges and canvas mutations.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from planning_canvas.types import CanvasEdge, CanvasNode, Position


class PositionModel(BaseModel):
    x: float = 0.0
    y: float = 0.0

    def to_position(self) -> Position:
        return Position(self.x, self.y)


class NodeModel(BaseModel):
    """Canvas node as exchanged with the frontend / persistence layer."""

    id: str
    type: str  # idea, feature, screen, techStack, prompt, note
    position: PositionModel = Field(default_factory=PositionModel)
    data: Dict[str, Any] = Field(default_factory=dict)
    zIndex: Optional[int] = None
    selected: bool = False

    def to_node(self) -> CanvasNode:
        return CanvasNode.from_dict(self.model_dump())


class EdgeModel(BaseModel):
    id: str
    source: str
    target: str
    selected: bool = False

    def to_edge(self) -> CanvasEdge:
        return CanvasEdge.from_dict(self.model_dump())


class GraphPayload(BaseModel):
    """Full or partial graph (replace / append)."""

    nodes: List[NodeModel] = Field(default_factory=list)
    edges: List[EdgeModel] = Field(default_factory=list)

    def to_graph(self) -> tuple[list[CanvasNode], list[CanvasEdge]]:
        return [n.to_node() for n in self.nodes], [e.to_edge() for e in self.edges]


class LoadProjectRequest(GraphPayload):
    """Saved project handed back by the persistence layer."""

    name: str = ""


class AddNodeRequest(BaseModel):
    type: str
    position: PositionModel = Field(default_factory=PositionModel)


class UpdateNodeDataRequest(BaseModel):
    data: Dict[str, Any]


class MoveNodeRequest(BaseModel):
    position: PositionModel


class MeasuredHeightRequest(BaseModel):
    height: float = Field(gt=0)


class SelectionRequest(BaseModel):
    nodeIds: List[str] = Field(default_factory=list)
    edgeIds: List[str] = Field(default_factory=list)


class ConnectRequest(BaseModel):
    source: str
    target: str
