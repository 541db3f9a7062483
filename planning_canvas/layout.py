"""
Planning Canvas — layout engine
Overlap resolution, column auto-spacing, type-based realignment and the
expand/collapse shift bookkeeping. Never touches history.
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .settings import CanvasSettings
from .smart_logger import SmartLogger
from .types import CanvasEdge, CanvasNode, HistoryEntry, NodeType, NODE_TYPE_ORDER, Position

# (collapsed, expanded) heights per node type, in canvas units
NODE_HEIGHTS: Dict[NodeType, Tuple[float, float]] = {
    NodeType.IDEA: (220, 520),
    NodeType.FEATURE: (220, 520),
    NodeType.SCREEN: (220, 520),
    NodeType.TECH_STACK: (200, 480),
    NodeType.PROMPT: (240, 560),
    NodeType.NOTE: (240, 560),
}
DEFAULT_HEIGHTS: Tuple[float, float] = (220, 520)

COLUMN_X = [0, 360, 720, 1080, 1440, 1800]
ROW_SPACING = 250
APPEND_OFFSET_X = 380
FRONT_Z_INDEX = 1000
MEASURED_HEIGHT_TOLERANCE = 10


@dataclass
class ExpandShift:
    """Nodes pushed down when a node was expanded, and by how much."""
    affected_ids: List[str] = field(default_factory=list)
    delta: float = 0.0


class LayoutEngine:
    """Positions nodes so they stay orderly and non-overlapping"""

    def __init__(self, settings: Optional[CanvasSettings] = None):
        self.settings = settings or CanvasSettings()
        self.measured_heights: Dict[str, float] = {}
        self.expand_shifts: Dict[str, ExpandShift] = {}
        self.baseline: Optional[HistoryEntry] = None

    def clear(self) -> None:
        self.measured_heights = {}
        self.expand_shifts = {}
        self.baseline = None

    # ==========================================
    # Geometry
    # ==========================================

    def node_height(self, node: CanvasNode, expanded: Optional[bool] = None) -> float:
        """
        Effective height of a node.

        A measured height reported by the renderer wins; otherwise the height
        comes from the (type, expanded) table.

        Args:
            node: the node
            expanded: evaluate as if the node had this expanded state
        """
        measured = self.measured_heights.get(node.id)
        if measured:
            return measured
        if expanded is None:
            expanded = node.expanded
        collapsed_h, expanded_h = NODE_HEIGHTS.get(node.type, DEFAULT_HEIGHTS)
        return expanded_h if expanded else collapsed_h

    def _box(self, node: CanvasNode, position: Position) -> Tuple[float, float, float, float]:
        half_gap = self.settings.node_gap / 2
        return (
            position.x - half_gap,
            position.y - half_gap,
            position.x + self.settings.node_width + half_gap,
            position.y + self.node_height(node) + half_gap,
        )

    def nodes_overlap(
        self,
        a: CanvasNode,
        b: CanvasNode,
        a_position: Optional[Position] = None,
    ) -> bool:
        """Axis-aligned bounding-box test, boxes inflated by half the node gap."""
        ax1, ay1, ax2, ay2 = self._box(a, a_position or a.position)
        bx1, by1, bx2, by2 = self._box(b, b.position)
        return ax1 < bx2 and ax2 > bx1 and ay1 < by2 and ay2 > by1

    def column_key(self, x: float) -> float:
        bucket = self.settings.column_bucket
        return math.floor(x / bucket + 0.5) * bucket

    # ==========================================
    # Overlap resolution
    # ==========================================

    def resolve_overlap(
        self,
        nodes: List[CanvasNode],
        moved_id: str,
        target: Optional[Position] = None,
    ) -> bool:
        """
        Place `moved_id` at `target` (default: its current position) or, if that
        overlaps, at the nearest free point of the surrounding grid rings.

        Rings are Chebyshev rings of radius 1..search_rings around the target on
        a search_step grid. The first ring holding a free point wins; inside it
        the point closest to the target (Euclidean) is taken, earliest on ties.

        Returns:
            False when no free slot was found; the node then stays where it is.
        """
        moved = next((n for n in nodes if n.id == moved_id), None)
        if moved is None:
            return False

        base = target or moved.position
        others = [n for n in nodes if n.id != moved.id]

        def is_free(pos: Position) -> bool:
            return not any(self.nodes_overlap(moved, other, a_position=pos) for other in others)

        if is_free(base):
            moved.position = Position(base.x, base.y)
            return True

        step = self.settings.search_step
        best: Optional[Position] = None
        best_dist = math.inf
        for radius in range(1, self.settings.search_rings + 1):
            for dx in range(-radius, radius + 1):
                for dy in range(-radius, radius + 1):
                    if abs(dx) != radius and abs(dy) != radius:
                        continue
                    candidate = Position(base.x + dx * step, base.y + dy * step)
                    if not is_free(candidate):
                        continue
                    dist = math.hypot(candidate.x - base.x, candidate.y - base.y)
                    if dist < best_dist:
                        best_dist = dist
                        best = candidate
            if best is not None:
                break

        if best is None:
            SmartLogger.log(
                "WARNING",
                "No overlap-free slot within search bound; keeping overlapping position.",
                category="canvas.layout.resolve_overlap",
                params={"node_id": moved_id, "rings": self.settings.search_rings},
            )
            return False

        moved.position = best
        return True

    # ==========================================
    # Column auto-spacing
    # ==========================================

    def auto_space(self, nodes: List[CanvasNode], min_gap: Optional[float] = None) -> None:
        """
        Push nodes down inside each x-column so no node starts above the bottom
        of the node before it plus `min_gap`.
        """
        if min_gap is None:
            min_gap = self.settings.min_vertical_gap

        columns: Dict[float, List[CanvasNode]] = {}
        for node in nodes:
            columns.setdefault(self.column_key(node.position.x), []).append(node)

        for bucket in columns.values():
            bucket.sort(key=lambda n: n.position.y)
            for prev, current in zip(bucket, bucket[1:]):
                min_y = prev.position.y + self.node_height(prev) + min_gap
                if current.position.y < min_y:
                    current.position = Position(current.position.x, min_y)

    def offset_incoming(self, existing: List[CanvasNode], incoming: List[CanvasNode]) -> None:
        """Shift incoming nodes to the right of the existing canvas, top-aligned with it."""
        if not existing:
            return
        offset_x = max(n.position.x for n in existing) + APPEND_OFFSET_X
        offset_y = min(n.position.y for n in existing)
        for node in incoming:
            node.position = Position(node.position.x + offset_x, node.position.y + offset_y)

    # ==========================================
    # Realignment
    # ==========================================

    def align_by_type(self, nodes: List[CanvasNode]) -> None:
        """One column per node type in canonical order, evenly spaced rows."""
        grouped: Dict[NodeType, List[CanvasNode]] = {}
        for node in nodes:
            grouped.setdefault(node.type, []).append(node)

        max_count = max([1] + [len(grouped.get(t, [])) for t in NODE_TYPE_ORDER])
        start_y = -((max_count - 1) * ROW_SPACING) / 2

        for i, node_type in enumerate(NODE_TYPE_ORDER):
            x = COLUMN_X[i] if i < len(COLUMN_X) else i * 420
            for j, node in enumerate(grouped.get(node_type, [])):
                node.position = Position(x, start_y + j * ROW_SPACING)

    def save_baseline(self, nodes: List[CanvasNode], edges: List[CanvasEdge]) -> None:
        self.baseline = HistoryEntry(nodes=copy.deepcopy(nodes), edges=copy.deepcopy(edges))

    def reset_layout(
        self,
        nodes: List[CanvasNode],
        edges: List[CanvasEdge],
    ) -> Tuple[List[CanvasNode], List[CanvasEdge]]:
        """
        Baseline layout verbatim when one was saved, otherwise a type-aligned copy
        of the given graph.
        """
        if self.baseline is not None and self.baseline.nodes:
            return copy.deepcopy(self.baseline.nodes), copy.deepcopy(self.baseline.edges)
        aligned = copy.deepcopy(nodes)
        self.align_by_type(aligned)
        return aligned, edges

    # ==========================================
    # Expand / collapse
    # ==========================================

    def apply_expand_toggle(self, nodes: List[CanvasNode], target: CanvasNode) -> None:
        """
        React to `target` having just flipped its expanded flag.

        Expanding pushes every node below it in the same column down by the
        height delta and records which nodes moved. Collapsing moves exactly
        those recorded nodes back up; nodes deleted in between are skipped.
        """
        if target.expanded:
            target.z_index = FRONT_Z_INDEX
        elif target.z_index is not None:
            target.z_index = 0

        was_expanded = not target.expanded
        delta = self.node_height(target) - self.node_height(target, expanded=was_expanded)
        if delta == 0:
            return

        if target.expanded:
            column = self.column_key(target.position.x)
            affected: List[str] = []
            for node in nodes:
                if node.id == target.id:
                    continue
                if self.column_key(node.position.x) == column and node.position.y > target.position.y:
                    node.position = Position(node.position.x, node.position.y + delta)
                    affected.append(node.id)
            self.expand_shifts[target.id] = ExpandShift(affected_ids=affected, delta=delta)
            return

        shift = self.expand_shifts.pop(target.id, None)
        if shift is None:
            return
        affected_ids = set(shift.affected_ids)
        for node in nodes:
            if node.id in affected_ids:
                node.position = Position(node.position.x, node.position.y - shift.delta)

    # ==========================================
    # Measured heights
    # ==========================================

    def set_measured_height(self, node_id: str, height: float) -> bool:
        """Record a rendered height; changes under the tolerance are ignored."""
        current = self.measured_heights.get(node_id)
        if current and abs(current - height) < MEASURED_HEIGHT_TOLERANCE:
            return False
        self.measured_heights[node_id] = height
        return True
