"""
Planning Canvas — merge strategy tests
"""

from planning_canvas.merge import (
    build_field_update,
    build_field_updates,
    get_populated_fields,
    is_field_empty,
)
from planning_canvas.types import ExistingNodeSummary, NodeMatch, NodeType


def test_is_field_empty():
    assert is_field_empty(None)
    assert is_field_empty("")
    assert is_field_empty([])
    assert not is_field_empty("x")
    assert not is_field_empty(0)
    assert not is_field_empty(False)
    assert not is_field_empty(["a"])


def test_get_populated_fields():
    data = {"featureName": "Login", "summary": "", "tags": [], "expanded": False}
    assert get_populated_fields(data) == ["featureName", "expanded"]


def test_fills_only_missing_fields():
    update = build_field_update("f1", NodeType.FEATURE, ["summary"], {"summary": "X", "problem": "Y"})

    assert update is not None
    assert update.node_id == "f1"
    assert update.node_type == NodeType.FEATURE
    assert update.fields_to_fill == {"problem": "Y"}


def test_returns_none_when_nothing_qualifies():
    assert build_field_update("f1", "feature", ["summary"], {"summary": "X", "problem": ""}) is None
    assert build_field_update("f1", "feature", [], {}) is None


def test_protected_and_name_fields_are_never_written():
    extracted = {
        "featureName": "Renamed",
        "expanded": True,
        "completed": True,
        "version": 3,
        "tags": ["import"],
        "estimatedHours": 5,
        "notes": "kept",
    }
    update = build_field_update("f1", "feature", [], extracted)
    assert update.fields_to_fill == {"notes": "kept"}


def test_build_field_updates_tallies_summary():
    existing = [
        ExistingNodeSummary(id="i1", type="idea", name="TaskFlow", populated_fields=["appName"]),
        ExistingNodeSummary(id="f1", type="feature", name="Login", populated_fields=["featureName", "summary"]),
    ]
    matches = [
        NodeMatch(extracted_name="taskflow", existing_node_id="i1", confidence=1.0),
        NodeMatch(extracted_name="Login", existing_node_id="f1", confidence=1.0),
    ]
    extracted = {
        ("idea", "TaskFlow"): {"description": "Tracks tasks", "targetUser": "Teams"},
        ("feature", "Login"): {"summary": "Other summary"},
    }

    updates, summary = build_field_updates(matches, existing, extracted)

    assert [u.node_id for u in updates] == ["i1"]
    assert updates[0].fields_to_fill == {"description": "Tracks tasks", "targetUser": "Teams"}
    assert summary.nodes_updated == 1
    assert summary.fields_filled_total == 2
    assert summary.nodes_skipped == 1
    assert summary.nodes_created == 0
    assert summary.to_dict()["matchDetails"][0]["existingNodeId"] == "i1"


def test_build_field_updates_keys_by_type():
    existing = [ExistingNodeSummary(id="s1", type="screen", name="Dashboard")]
    matches = [NodeMatch(extracted_name="Dashboard", existing_node_id="s1", confidence=1.0)]
    extracted = {
        ("feature", "Dashboard"): {"summary": "feature data"},
        ("screen", "Dashboard"): {"purpose": "screen data"},
    }

    updates, _ = build_field_updates(matches, existing, extracted)
    assert updates[0].fields_to_fill == {"purpose": "screen data"}


def test_build_field_updates_accepts_extraction_labels():
    existing = [ExistingNodeSummary(id="t1", type="techStack", name="React", populated_fields=["toolName"])]
    matches = [NodeMatch(extracted_name="React", existing_node_id="t1", confidence=1.0)]
    extracted = {("tech_stack", "React"): {"notes": "UI layer"}}

    updates, summary = build_field_updates(matches, existing, extracted)

    assert updates[0].node_type == NodeType.TECH_STACK
    assert updates[0].fields_to_fill == {"notes": "UI layer"}
    assert summary.nodes_updated == 1


def test_prompt_and_note_text_are_fillable():
    prompt = build_field_update("p1", "prompt", [], {"promptText": "Build login"})
    note = build_field_update("n1", "note", [], {"title": "Imported"})

    assert prompt.fields_to_fill == {"promptText": "Build login"}
    assert note.fields_to_fill == {"title": "Imported"}
