"""
Canvas Graph feature - route modules.

Business capability oriented grouping:
- canvas projects (load / state / close)
- canvas nodes (add, edit, move, expand, complete, select, connect)
- canvas history (undo / redo)
- canvas layout (reset layout, replace / append graph)
"""

