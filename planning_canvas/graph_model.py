"""
Planning Canvas — graph model
Owns the node/edge collections and exposes the atomic mutation primitives.
History and layout are layered on top by the controller.
"""

import copy
import uuid
from typing import Any, Dict, Iterable, List, Optional, Set

from .merge import get_populated_fields
from .types import (
    CanvasEdge,
    CanvasInvariantError,
    CanvasNode,
    ExistingNodeSummary,
    FeatureStatus,
    HistoryEntry,
    NodeType,
    Position,
    coerce_node_type,
    default_data,
)

# Node types offered to the import matcher
MATCHABLE_NODE_TYPES = (NodeType.IDEA, NodeType.FEATURE, NodeType.SCREEN, NodeType.TECH_STACK)


def validate_graph(
    nodes: Iterable[CanvasNode],
    edges: Iterable[CanvasEdge],
    existing_ids: Optional[Set[str]] = None,
) -> None:
    """
    Check structural invariants of a (partial) graph before it is applied.

    Args:
        nodes: nodes about to be added
        edges: edges about to be added
        existing_ids: ids of nodes already on the canvas that edges may point to
            and new nodes must not collide with

    Raises:
        CanvasInvariantError: unknown type, duplicate node id, or dangling edge
    """
    known: Set[str] = set(existing_ids or ())
    seen: Set[str] = set()
    for node in nodes:
        node.type = coerce_node_type(node.type)
        if node.id in seen or node.id in known:
            raise CanvasInvariantError(f"Duplicate node id: {node.id}")
        seen.add(node.id)
    known |= seen
    for edge in edges:
        if edge.source not in known or edge.target not in known:
            raise CanvasInvariantError(
                f"Edge {edge.id} references a missing node ({edge.source} -> {edge.target})"
            )


class GraphModel:
    """Node and edge collections of one open canvas"""

    def __init__(self):
        self.nodes: List[CanvasNode] = []
        self.edges: List[CanvasEdge] = []

    # ==========================================
    # Lookup
    # ==========================================

    def get_node(self, node_id: str) -> Optional[CanvasNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[CanvasEdge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def has_selection(self) -> bool:
        return any(n.selected for n in self.nodes) or any(e.selected for e in self.edges)

    def _new_node_id(self, node_type: NodeType) -> str:
        taken = self.node_ids()
        while True:
            candidate = f"{node_type.value}-{uuid.uuid4().hex[:12]}"
            if candidate not in taken:
                return candidate

    def _new_edge_id(self, source_id: str, target_id: str) -> str:
        taken = {e.id for e in self.edges}
        while True:
            candidate = f"e-{source_id}-{target_id}-{uuid.uuid4().hex[:8]}"
            if candidate not in taken:
                return candidate

    # ==========================================
    # Mutations
    # ==========================================

    def add_node(self, node_type: Any, position: Position, data: Optional[Dict[str, Any]] = None) -> str:
        """
        Append a node with the type's default data.

        Args:
            node_type: NodeType or its string label
            position: initial canvas position
            data: optional fields merged over the defaults

        Returns:
            the freshly generated, type-prefixed node id
        """
        node_type = coerce_node_type(node_type)
        record = default_data(node_type)
        if data:
            record.update(copy.deepcopy(data))
        node = CanvasNode(
            id=self._new_node_id(node_type),
            type=node_type,
            position=Position(position.x, position.y),
            data=record,
        )
        self.nodes.append(node)
        return node.id

    def update_node_data(self, node_id: str, partial: Dict[str, Any]) -> bool:
        """Shallow-merge `partial` into one node's data; other nodes are untouched."""
        node = self.get_node(node_id)
        if node is None:
            return False
        node.data = {**node.data, **partial}
        return True

    def move_node(self, node_id: str, position: Position) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.position = Position(position.x, position.y)
        return True

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge incident to it."""
        if self.get_node(node_id) is None:
            return False
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        return True

    def set_selection(self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()) -> None:
        selected_nodes = set(node_ids)
        selected_edges = set(edge_ids)
        for node in self.nodes:
            node.selected = node.id in selected_nodes
        for edge in self.edges:
            edge.selected = edge.id in selected_edges

    def delete_selected(self) -> bool:
        """
        Remove selected nodes, selected edges and edges incident to removed nodes.

        Returns:
            False when nothing was selected (nothing changed)
        """
        if not self.has_selection():
            return False
        removed = {n.id for n in self.nodes if n.selected}
        self.nodes = [n for n in self.nodes if not n.selected]
        self.edges = [
            e for e in self.edges
            if not e.selected and e.source not in removed and e.target not in removed
        ]
        return True

    def connect(self, source_id: str, target_id: str) -> str:
        """Add a directed edge. Self-loops and parallel edges are allowed."""
        ids = self.node_ids()
        if source_id not in ids or target_id not in ids:
            raise CanvasInvariantError(f"Cannot connect missing node(s): {source_id} -> {target_id}")
        edge = CanvasEdge(id=self._new_edge_id(source_id, target_id), source=source_id, target=target_id)
        self.edges.append(edge)
        return edge.id

    def disconnect(self, edge_id: str) -> bool:
        if self.get_edge(edge_id) is None:
            return False
        self.edges = [e for e in self.edges if e.id != edge_id]
        return True

    def replace_all(self, nodes: List[CanvasNode], edges: List[CanvasEdge]) -> None:
        validate_graph(nodes, edges)
        self.nodes = list(nodes)
        self.edges = list(edges)

    def append_all(self, nodes: List[CanvasNode], edges: List[CanvasEdge]) -> None:
        validate_graph(nodes, edges, existing_ids=self.node_ids())
        self.nodes = self.nodes + list(nodes)
        self.edges = self.edges + list(edges)

    # ==========================================
    # Snapshots
    # ==========================================

    def snapshot(self) -> HistoryEntry:
        """Deep copy of the live graph; later mutations never reach it."""
        return HistoryEntry(nodes=copy.deepcopy(self.nodes), edges=copy.deepcopy(self.edges))

    def restore(self, entry: HistoryEntry) -> None:
        self.nodes = entry.nodes
        self.edges = entry.edges

    # ==========================================
    # Read models
    # ==========================================

    def project_summary(self) -> Dict[str, Any]:
        by_type: Dict[str, int] = {}
        for node in self.nodes:
            by_type[node.type.value] = by_type.get(node.type.value, 0) + 1
        return {"totalNodes": len(self.nodes), "byType": by_type, "totalEdges": len(self.edges)}

    def feature_status_counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in FeatureStatus}
        for node in self.nodes:
            if node.type == NodeType.FEATURE:
                status = str(node.data.get("status") or FeatureStatus.PLANNED.value)
                counts[status] = counts.get(status, 0) + 1
        return counts

    def existing_node_summaries(self) -> List[ExistingNodeSummary]:
        """Import-time view of the nodes the matcher may reconcile against."""
        return [
            ExistingNodeSummary(
                id=node.id,
                type=node.type,
                name=node.name,
                populated_fields=get_populated_fields(node.data),
            )
            for node in self.nodes
            if node.type in MATCHABLE_NODE_TYPES
        ]
