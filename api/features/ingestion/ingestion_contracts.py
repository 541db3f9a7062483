"""
Ingestion Contracts (DTOs)

Business capability: reconciling imported planning documents with a live canvas.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from api.features.canvas_graph.canvas_contracts import EdgeModel, NodeModel
from planning_canvas.types import ExtractedItem, NodeFieldUpdate


class ExtractedItemModel(BaseModel):
    """Item pulled out of a document by the extraction step."""

    name: str
    type: str  # idea, feature, screen, techStack (tech_stack accepted)

    def to_item(self) -> ExtractedItem:
        return ExtractedItem(name=self.name, type=self.type)


class MatchRequest(BaseModel):
    extracted: List[ExtractedItemModel] = Field(default_factory=list)
    threshold: Optional[float] = Field(None, ge=0, le=1)


class DocumentImportRequest(BaseModel):
    """Raw document text plus optional per-item field records from the extractor."""

    text: str
    featuresDetailed: List[Dict[str, Any]] = Field(default_factory=list)
    screensDetailed: List[Dict[str, Any]] = Field(default_factory=list)


class FieldUpdateModel(BaseModel):
    nodeId: str
    nodeType: str
    fieldsToFill: Dict[str, Any] = Field(default_factory=dict)

    def to_update(self) -> NodeFieldUpdate:
        return NodeFieldUpdate(node_id=self.nodeId, node_type=self.nodeType, fields_to_fill=dict(self.fieldsToFill))


class ApplyImportRequest(BaseModel):
    """Caller-resolved smart import: gap-filling updates plus new nodes/edges."""

    updates: List[FieldUpdateModel] = Field(default_factory=list)
    newNodes: List[NodeModel] = Field(default_factory=list)
    newEdges: List[EdgeModel] = Field(default_factory=list)
