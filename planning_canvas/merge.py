"""
Planning Canvas — merge strategy
Non-destructive field updates for existing nodes matched during import:
only empty fields are filled, user-entered content is never overwritten.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .fuzzy_matcher import map_extracted_type
from .types import (
    ExistingNodeSummary,
    NodeFieldUpdate,
    NodeMatch,
    NodeType,
    PRIMARY_NAME_FIELDS,
    SmartImportSummary,
    coerce_node_type,
)

# Never written by import
PROTECTED_FIELDS = frozenset({"expanded", "completed", "version", "tags", "estimatedHours"})

# The user's chosen name is always kept on the node types import can match
PRIMARY_NAME_FIELD_SET = frozenset(
    PRIMARY_NAME_FIELDS[t] for t in (NodeType.IDEA, NodeType.FEATURE, NodeType.SCREEN, NodeType.TECH_STACK)
)


def is_field_empty(value: Any) -> bool:
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True
    return False


def get_populated_fields(data: Mapping[str, Any]) -> List[str]:
    """Keys of `data` that hold a non-empty value."""
    return [key for key, value in data.items() if not is_field_empty(value)]


def build_field_update(
    node_id: str,
    node_type: NodeType,
    populated_fields: Iterable[str],
    extracted_data: Mapping[str, Any],
) -> Optional[NodeFieldUpdate]:
    """
    Build the gap-filling update for one matched node.

    A field is filled only when it is not protected, not the node's primary
    name, not already populated on the node, and the extracted value is
    non-empty.

    Args:
        node_id: existing node id
        node_type: existing node type
        populated_fields: data keys already holding a value on the node
        extracted_data: candidate field values from the import

    Returns:
        NodeFieldUpdate, or None when nothing qualifies
    """
    populated = set(populated_fields)
    fields_to_fill: Dict[str, Any] = {}

    for key, value in extracted_data.items():
        if key in PROTECTED_FIELDS or key in PRIMARY_NAME_FIELD_SET:
            continue
        if key in populated:
            continue
        if is_field_empty(value):
            continue
        fields_to_fill[key] = value

    if not fields_to_fill:
        return None
    return NodeFieldUpdate(node_id=node_id, node_type=node_type, fields_to_fill=fields_to_fill)


def _node_type_for(label: Any) -> NodeType:
    """Extraction labels such as "tech_stack" first, then canvas node types."""
    return map_extracted_type(label) or coerce_node_type(label)


def build_field_updates(
    matches: Iterable[NodeMatch],
    existing: Iterable[ExistingNodeSummary],
    extracted_data: Mapping[Tuple[str, str], Mapping[str, Any]],
) -> Tuple[List[NodeFieldUpdate], SmartImportSummary]:
    """
    Build updates for every match and tally the import summary.

    Args:
        matches: accepted matches from the fuzzy matcher
        existing: the summaries the matches were computed against
        extracted_data: extracted field values keyed by (node type, extracted
            item name); names are compared case-insensitively

    Returns:
        (updates, summary); matches that yield no update count as skipped;
        `nodes_created` is left for the caller to fill in
    """
    by_id = {node.id: node for node in existing}
    data_by_key = {
        (_node_type_for(node_type), name.lower()): data
        for (node_type, name), data in extracted_data.items()
    }

    matches = list(matches)
    updates: List[NodeFieldUpdate] = []
    fields_filled = 0
    for match in matches:
        node = by_id.get(match.existing_node_id)
        if node is None:
            continue
        data = data_by_key.get((coerce_node_type(node.type), match.extracted_name.lower()), {})
        update = build_field_update(node.id, node.type, node.populated_fields, data)
        if update is not None:
            updates.append(update)
            fields_filled += len(update.fields_to_fill)

    summary = SmartImportSummary(
        nodes_updated=len(updates),
        fields_filled_total=fields_filled,
        nodes_skipped=len(matches) - len(updates),
        match_details=matches,
    )
    return updates, summary
