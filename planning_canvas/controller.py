"""
Planning Canvas — controller
Public surface of the engine for one open project: graph mutations wrapped
with history and layout, undo/redo, bulk replace/append and smart import.
"""

import copy
from typing import Any, Dict, Iterable, List, Optional

from .document_parser import parse_document
from .graph_model import GraphModel, validate_graph
from .history import HistoryManager
from .import_planner import plan_smart_import
from .layout import LayoutEngine
from .settings import CanvasSettings
from .smart_logger import SmartLogger
from .types import (
    CanvasEdge,
    CanvasInvariantError,
    CanvasNode,
    ExistingNodeSummary,
    HistoryEntry,
    NodeFieldUpdate,
    NodeType,
    Position,
    SmartImportResult,
    coerce_node_type,
)

# New nodes of these types are linked to the existing idea on smart import
AUTO_LINK_TYPES = (NodeType.FEATURE, NodeType.TECH_STACK)


class CanvasController:
    """
    State container for one open canvas.

    Structural mutations (add, delete, connect, disconnect, drag end, bulk
    replace/append, smart import, completion toggles, layout reset) push exactly
    one history entry before changing anything. In-place field edits, selection,
    expand/collapse and measured heights do not.
    """

    def __init__(self, settings: Optional[CanvasSettings] = None):
        self.settings = settings or CanvasSettings()
        self.model = GraphModel()
        self.history = HistoryManager(self.model, capacity=self.settings.history_limit)
        self.layout = LayoutEngine(self.settings)
        self.project_id: Optional[str] = None
        self.project_name: str = ""

    @property
    def nodes(self) -> List[CanvasNode]:
        return self.model.nodes

    @property
    def edges(self) -> List[CanvasEdge]:
        return self.model.edges

    def _log(self, level: str, message: str, category: str, **params: Any) -> None:
        SmartLogger.log(level, message, category=f"canvas.{category}", params={"project_id": self.project_id, **params})

    def _place(self, node_id: str, position: Position) -> None:
        """
        Overlap resolution at `position`, then column auto-spacing. Spacing can
        push the placed node into a neighbour when its column already held a
        collision, so the node is resolved once more from where it ended up.
        """
        self.layout.resolve_overlap(self.model.nodes, node_id, Position(position.x, position.y))
        self.layout.auto_space(self.model.nodes)
        self.layout.resolve_overlap(self.model.nodes, node_id)

    # ==========================================
    # Node / edge operations
    # ==========================================

    def add_node(self, node_type: Any, position: Position) -> str:
        """
        Add a node of `node_type` near `position`.

        The node lands on the nearest overlap-free grid point around the
        requested position, then columns are re-spaced.

        Returns:
            the new node id
        """
        node_type = coerce_node_type(node_type)
        self.history.push_history()
        node_id = self.model.add_node(node_type, position)
        self._place(node_id, position)
        self._log("DEBUG", "Node added.", "nodes.add", node_id=node_id, node_type=node_type.value)
        return node_id

    def update_node_data(self, node_id: str, partial: Dict[str, Any]) -> bool:
        """In-place field edit; no history entry."""
        return self.model.update_node_data(node_id, partial)

    def move_node(self, node_id: str, position: Position) -> bool:
        """Drag end: record history, then place the node without overlap."""
        if self.model.get_node(node_id) is None:
            return False
        self.history.push_history()
        self.model.move_node(node_id, position)
        self._place(node_id, position)
        self._log("DEBUG", "Node moved.", "nodes.move", node_id=node_id, target=position.to_dict())
        return True

    def delete_node(self, node_id: str) -> bool:
        if self.model.get_node(node_id) is None:
            return False
        self.history.push_history()
        self.model.delete_node(node_id)
        self._log("DEBUG", "Node deleted.", "nodes.delete", node_id=node_id)
        return True

    def select(self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()) -> None:
        self.model.set_selection(node_ids, edge_ids)

    def delete_selected(self) -> bool:
        if not self.model.has_selection():
            self._log("DEBUG", "Delete selected ignored: nothing is selected.", "nodes.delete_selected")
            return False
        self.history.push_history()
        before = len(self.model.nodes), len(self.model.edges)
        self.model.delete_selected()
        self._log(
            "DEBUG",
            "Selection deleted.",
            "nodes.delete_selected",
            nodes_removed=before[0] - len(self.model.nodes),
            edges_removed=before[1] - len(self.model.edges),
        )
        return True

    def connect(self, source_id: str, target_id: str) -> str:
        ids = self.model.node_ids()
        if source_id not in ids or target_id not in ids:
            raise CanvasInvariantError(f"Cannot connect missing node(s): {source_id} -> {target_id}")
        self.history.push_history()
        edge_id = self.model.connect(source_id, target_id)
        self._log("DEBUG", "Edge added.", "edges.connect", edge_id=edge_id)
        return edge_id

    def disconnect(self, edge_id: str) -> bool:
        if self.model.get_edge(edge_id) is None:
            return False
        self.history.push_history()
        self.model.disconnect(edge_id)
        self._log("DEBUG", "Edge removed.", "edges.disconnect", edge_id=edge_id)
        return True

    def toggle_expanded(self, node_id: str) -> bool:
        """
        Flip a node's expanded flag and shift the nodes below it in its column.

        Collapsing reverses the shift recorded when the node was expanded.
        """
        node = self.model.get_node(node_id)
        if node is None:
            return False
        node.data = {**node.data, "expanded": not node.expanded}
        self.layout.apply_expand_toggle(self.model.nodes, node)
        self._log("DEBUG", "Node expand state toggled.", "nodes.toggle_expanded", node_id=node_id, expanded=node.expanded)
        return True

    def toggle_completed(self, node_id: str) -> bool:
        node = self.model.get_node(node_id)
        if node is None:
            return False
        self.history.push_history()
        self.model.update_node_data(node_id, {"completed": not bool(node.data.get("completed"))})
        return True

    def set_measured_height(self, node_id: str, height: float) -> bool:
        if self.model.get_node(node_id) is None:
            return False
        return self.layout.set_measured_height(node_id, height)

    # ==========================================
    # History
    # ==========================================

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # ==========================================
    # Bulk operations
    # ==========================================

    def replace_all(self, nodes: List[CanvasNode], edges: List[CanvasEdge]) -> None:
        """Swap in a whole graph; the spaced result becomes the baseline layout."""
        nodes = copy.deepcopy(nodes)
        edges = copy.deepcopy(edges)
        validate_graph(nodes, edges)
        self.history.push_history()
        self.layout.auto_space(nodes)
        self.model.replace_all(nodes, edges)
        self.layout.save_baseline(nodes, edges)
        self.layout.expand_shifts = {}
        self._log("INFO", "Canvas replaced.", "graph.replace", nodes=len(nodes), edges=len(edges))

    def append_all(self, nodes: List[CanvasNode], edges: List[CanvasEdge]) -> None:
        """Add a graph to the right of the existing canvas."""
        nodes = copy.deepcopy(nodes)
        edges = copy.deepcopy(edges)
        validate_graph(nodes, edges, existing_ids=self.model.node_ids())
        self.history.push_history()
        self.layout.offset_incoming(self.model.nodes, nodes)
        self.layout.auto_space(nodes)
        self.model.append_all(nodes, edges)
        self.layout.expand_shifts = {}
        self._log("INFO", "Graph appended.", "graph.append", nodes=len(nodes), edges=len(edges))

    def smart_import(
        self,
        updates: List[NodeFieldUpdate],
        new_nodes: List[CanvasNode],
        new_edges: List[CanvasEdge],
    ) -> Dict[str, int]:
        """
        Apply a reconciled import as one undoable step.

        Field updates are merged into their nodes (unknown ids are skipped),
        new nodes are placed to the right of the canvas and spaced, and every
        new feature/tech stack node is linked from the existing idea node.

        Returns:
            counts of updated nodes, created nodes and created edges
        """
        new_nodes = copy.deepcopy(new_nodes)
        new_edges = copy.deepcopy(new_edges)
        validate_graph(new_nodes, new_edges, existing_ids=self.model.node_ids())
        self.history.push_history()

        updated = 0
        for update in updates:
            if self.model.update_node_data(update.node_id, dict(update.fields_to_fill)):
                updated += 1

        existing = list(self.model.nodes)
        self.layout.offset_incoming(existing, new_nodes)
        self.layout.auto_space(new_nodes)

        idea = next((n for n in existing if n.type == NodeType.IDEA), None)
        auto_edges: List[CanvasEdge] = []
        if idea is not None:
            auto_edges = [
                CanvasEdge(id=f"e-{idea.id}-{node.id}", source=idea.id, target=node.id)
                for node in new_nodes
                if node.type in AUTO_LINK_TYPES
            ]

        self.model.append_all(new_nodes, new_edges + auto_edges)
        self.layout.expand_shifts = {}

        counts = {
            "nodesUpdated": updated,
            "nodesCreated": len(new_nodes),
            "edgesCreated": len(new_edges) + len(auto_edges),
        }
        self._log("INFO", "Smart import applied.", "import.apply", **counts)
        return counts

    def import_document(
        self,
        text: str,
        features_detailed: Optional[List[Dict[str, Any]]] = None,
        screens_detailed: Optional[List[Dict[str, Any]]] = None,
    ) -> SmartImportResult:
        """Parse a document, reconcile it with the live canvas and apply it."""
        parsed = parse_document(text)
        plan = plan_smart_import(
            parsed,
            self.existing_node_summaries(),
            features_detailed=features_detailed,
            screens_detailed=screens_detailed,
            threshold=self.settings.match_threshold,
        )
        self.smart_import(plan.updates, plan.new_nodes, plan.new_edges)
        return plan

    def reset_layout(self) -> None:
        self.history.push_history()
        nodes, edges = self.layout.reset_layout(self.model.nodes, self.model.edges)
        self.model.nodes = nodes
        self.model.edges = edges
        self._log(
            "INFO",
            "Layout reset.",
            "layout.reset",
            source="baseline" if self.layout.baseline is not None and self.layout.baseline.nodes else "type_columns",
        )

    # ==========================================
    # Project lifecycle
    # ==========================================

    def load_project(
        self,
        project_id: str,
        name: str,
        nodes: List[CanvasNode],
        edges: List[CanvasEdge],
    ) -> None:
        nodes = copy.deepcopy(nodes)
        edges = copy.deepcopy(edges)
        validate_graph(nodes, edges)
        self.project_id = project_id
        self.project_name = name
        self.model.replace_all(nodes, edges)
        self.history.clear()
        self.layout.clear()
        self.layout.save_baseline(nodes, edges)
        self._log("INFO", "Project loaded.", "project.load", nodes=len(nodes), edges=len(edges))

    def clear(self) -> None:
        self._log("INFO", "Canvas cleared.", "project.clear")
        self.project_id = None
        self.project_name = ""
        self.model.replace_all([], [])
        self.history.clear()
        self.layout.clear()

    # ==========================================
    # Read models
    # ==========================================

    def snapshot(self) -> HistoryEntry:
        """Deep-copied (nodes, edges) pair for the persistence collaborator."""
        return self.model.snapshot()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.model.nodes],
            "edges": [e.to_dict() for e in self.model.edges],
        }

    def existing_node_summaries(self) -> List[ExistingNodeSummary]:
        return self.model.existing_node_summaries()

    def project_summary(self) -> Dict[str, Any]:
        return self.model.project_summary()

    def feature_status_counts(self) -> Dict[str, int]:
        return self.model.feature_status_counts()
