"""
Planning Canvas — undo/redo history
Snapshot stacks (past / future) around a GraphModel.
"""

from typing import List

from .graph_model import GraphModel
from .smart_logger import SmartLogger
from .types import HistoryEntry

MAX_HISTORY = 20


class HistoryManager:
    """
    Bounded undo/redo over full-graph snapshots.

    `past` holds at most `capacity` entries (oldest dropped first); `future` is
    cleared whenever a new entry is pushed. Entries are deep copies, so later
    mutation of the live graph cannot corrupt them.
    """

    def __init__(self, model: GraphModel, capacity: int = MAX_HISTORY):
        """
        Args:
            model: the live graph this history wraps
            capacity: maximum depth of the undo stack
        """
        self.model = model
        self.capacity = max(1, capacity)
        self.past: List[HistoryEntry] = []
        self.future: List[HistoryEntry] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def push_history(self) -> None:
        """Snapshot the live graph onto `past`; call once per logical action, before mutating."""
        self.past = self.past[-(self.capacity - 1):] if self.capacity > 1 else []
        self.past.append(self.model.snapshot())
        self.future = []

    def undo(self) -> bool:
        if not self.past:
            SmartLogger.log("DEBUG", "Undo ignored: history is empty.", category="canvas.history.undo")
            return False
        previous = self.past.pop()
        self.future.insert(0, self.model.snapshot())
        self.model.restore(previous)
        return True

    def redo(self) -> bool:
        if not self.future:
            SmartLogger.log("DEBUG", "Redo ignored: nothing to redo.", category="canvas.history.redo")
            return False
        following = self.future.pop(0)
        self.past.append(self.model.snapshot())
        del self.past[:-self.capacity]
        self.model.restore(following)
        return True

    def clear(self) -> None:
        self.past = []
        self.future = []

    def depth(self) -> dict:
        return {"past": len(self.past), "future": len(self.future)}
