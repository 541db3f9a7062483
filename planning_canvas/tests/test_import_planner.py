"""
Planning Canvas — smart import planning tests
"""

import pytest

from planning_canvas.document_parser import parse_document
from planning_canvas.import_planner import extracted_items_for, plan_smart_import
from planning_canvas.types import ExistingNodeSummary, NodeType

PLAN = """
App Name: TaskFlow
Target User: Small teams
Core Problem: Missed deadlines

## Features
- User Authentication
- Kanban Board
- Reminders

## Screens
- Dashboard

## Tech Stack
- Frontend: React
- Supabase
"""


@pytest.fixture
def existing():
    return [
        ExistingNodeSummary(id="i1", type="idea", name="TaskFlow", populated_fields=["appName", "expanded"]),
        ExistingNodeSummary(
            id="f1", type="feature", name="User Authentication", populated_fields=["featureName", "summary"]
        ),
    ]


def test_extracted_items_order():
    items = extracted_items_for(parse_document(PLAN))
    assert [(i.type, i.name) for i in items][:2] == [("idea", "TaskFlow"), ("feature", "User Authentication")]
    assert items[-1].type == "techStack"


def test_plan_fills_idea_gaps_and_creates_the_rest(existing):
    plan = plan_smart_import(parse_document(PLAN), existing)

    assert plan.mode == "smart"
    assert [u.node_id for u in plan.updates] == ["i1"]
    assert plan.updates[0].fields_to_fill == {"targetUser": "Small teams", "coreProblem": "Missed deadlines"}

    created = sorted((n.type.value, n.name) for n in plan.new_nodes)
    assert created == [
        ("feature", "Kanban Board"),
        ("feature", "Reminders"),
        ("screen", "Dashboard"),
        ("techStack", "React"),
        ("techStack", "Supabase"),
    ]
    assert all(n.type != NodeType.IDEA for n in plan.new_nodes)

    summary = plan.summary
    assert summary.nodes_updated == 1
    assert summary.fields_filled_total == 2
    assert summary.nodes_skipped == 1
    assert summary.nodes_created == 5
    assert len(summary.match_details) == 2


def test_plan_uses_detailed_feature_records(existing):
    plan = plan_smart_import(
        parse_document(PLAN),
        existing,
        features_detailed=[
            {"featureName": "User Authentication", "summary": "Overwrite attempt", "problem": "Password reuse"},
            {"featureName": "Kanban Board", "priority": "Should"},
        ],
    )

    by_node = {u.node_id: u.fields_to_fill for u in plan.updates}
    assert by_node["f1"] == {"problem": "Password reuse"}

    new_features = [n for n in plan.new_nodes if n.type == NodeType.FEATURE]
    assert [(n.name, n.data["priority"]) for n in new_features] == [("Kanban Board", "Should"), ("Reminders", "Must")]


def test_plan_on_empty_canvas_creates_idea():
    plan = plan_smart_import(parse_document(PLAN), [])

    assert plan.updates == []
    ideas = [n for n in plan.new_nodes if n.type == NodeType.IDEA]
    assert len(ideas) == 1
    assert ideas[0].data["appName"] == "TaskFlow"
    assert plan.summary.nodes_created == len(plan.new_nodes)


def test_plan_respects_threshold(existing):
    existing.append(ExistingNodeSummary(id="s1", type="screen", name="Dashbord"))

    strict = plan_smart_import(parse_document(PLAN), existing, threshold=0.95)
    loose = plan_smart_import(parse_document(PLAN), existing, threshold=0.6)

    assert "s1" not in {m.existing_node_id for m in strict.summary.match_details}
    assert "s1" in {m.existing_node_id for m in loose.summary.match_details}
