"""
Planning Canvas — smart import planning
Turns an extracted document into the inputs of CanvasController.smart_import:
field updates for nodes that already exist, new nodes/edges for the rest.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from .canvas_generator import GenerateCanvasInput, TechStackItem, generate_canvas
from .document_parser import ParsedDocument
from .fuzzy_matcher import MATCH_THRESHOLD, match_extracted_to_existing
from .merge import build_field_updates
from .types import ExistingNodeSummary, ExtractedItem, NodeType, SmartImportResult


def extracted_items_for(parsed: ParsedDocument) -> List[ExtractedItem]:
    """Idea (when named) first, then features, screens and tech stack entries."""
    items: List[ExtractedItem] = []
    if parsed.app_name:
        items.append(ExtractedItem(name=parsed.app_name, type=NodeType.IDEA.value))
    items += [ExtractedItem(name=name, type=NodeType.FEATURE.value) for name in parsed.features]
    items += [ExtractedItem(name=name, type=NodeType.SCREEN.value) for name in parsed.screens]
    items += [ExtractedItem(name=t.tool_name, type=NodeType.TECH_STACK.value) for t in parsed.tech_stack]
    return items


def _names_of(items: Sequence[ExtractedItem], node_type: NodeType) -> List[str]:
    return [item.name for item in items if item.type == node_type.value]


def _records_for(names: Sequence[str], detailed: Sequence[Dict[str, Any]], name_field: str) -> List[Dict[str, Any]]:
    """Detailed record per name, falling back to a bare {name_field: name} record."""
    by_name = {str(record.get(name_field, "")).lower(): record for record in detailed}
    return [dict(by_name.get(name.lower()) or {name_field: name}) for name in names]


def plan_smart_import(
    parsed: ParsedDocument,
    existing: Sequence[ExistingNodeSummary],
    features_detailed: Optional[List[Dict[str, Any]]] = None,
    screens_detailed: Optional[List[Dict[str, Any]]] = None,
    threshold: float = MATCH_THRESHOLD,
) -> SmartImportResult:
    """
    Reconcile an extracted document with the nodes already on the canvas.

    Args:
        parsed: extracted document
        existing: summaries of the live canvas nodes
        features_detailed: optional per-feature field records (keyed by
            `featureName`) supplied by the extraction collaborator
        screens_detailed: same for screens (keyed by `screenName`)
        threshold: similarity threshold for matching

    Returns:
        SmartImportResult ready to hand to CanvasController.smart_import
    """
    features_detailed = features_detailed or []
    screens_detailed = screens_detailed or []

    extracted = extracted_items_for(parsed)
    result = match_extracted_to_existing(extracted, existing, threshold=threshold)

    # Candidate field values per matched (type, name)
    extracted_data: Dict[Tuple[str, str], Dict[str, Any]] = {}
    if parsed.app_name:
        extracted_data[(NodeType.IDEA.value, parsed.app_name)] = {
            "description": parsed.description,
            "targetUser": parsed.target_user,
            "coreProblem": parsed.core_problem,
            "appName": parsed.app_name,
        }
    for item in features_detailed:
        if item.get("featureName"):
            extracted_data[(NodeType.FEATURE.value, item["featureName"])] = dict(item)
    for item in screens_detailed:
        if item.get("screenName"):
            extracted_data[(NodeType.SCREEN.value, item["screenName"])] = dict(item)
    for tech in parsed.tech_stack:
        extracted_data.setdefault(
            (NodeType.TECH_STACK.value, tech.tool_name),
            {"notes": tech.notes, "category": tech.category},
        )

    updates, summary = build_field_updates(result.matches, existing, extracted_data)

    unmatched_features = _names_of(result.unmatched, NodeType.FEATURE)
    unmatched_screens = _names_of(result.unmatched, NodeType.SCREEN)
    unmatched_tech_names = _names_of(result.unmatched, NodeType.TECH_STACK)
    unmatched_tech: List[TechStackItem] = []
    for name in unmatched_tech_names:
        original = next((t for t in parsed.tech_stack if t.tool_name == name), None)
        unmatched_tech.append(original or TechStackItem(tool_name=name))

    has_existing_idea = any(node.type == NodeType.IDEA for node in existing)
    new_nodes, new_edges = generate_canvas(
        GenerateCanvasInput(
            app_name=parsed.app_name,
            description=parsed.description,
            target_user=parsed.target_user,
            core_problem=parsed.core_problem,
            features_detailed=_records_for(unmatched_features, features_detailed, "featureName"),
            screens_detailed=_records_for(unmatched_screens, screens_detailed, "screenName"),
            tool=parsed.tool,
            tech_stack=unmatched_tech,
            skip_idea_node=has_existing_idea,
        )
    )

    summary.nodes_created = len(new_nodes)
    return SmartImportResult(updates=updates, new_nodes=new_nodes, new_edges=new_edges, summary=summary)
