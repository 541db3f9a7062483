"""
Planning Canvas — layout engine tests
"""

import pytest

from planning_canvas.layout import FRONT_Z_INDEX, LayoutEngine
from planning_canvas.settings import CanvasSettings
from planning_canvas.types import CanvasNode, HistoryEntry, Position


def _node(node_id, node_type="feature", x=0.0, y=0.0, **data):
    return CanvasNode(id=node_id, type=node_type, position=Position(x, y), data=dict(data))


def _assert_no_overlap(layout, nodes, node_id):
    moved = next(n for n in nodes if n.id == node_id)
    for other in nodes:
        if other.id != node_id:
            assert not layout.nodes_overlap(moved, other), f"{node_id} overlaps {other.id}"


@pytest.fixture
def layout():
    return LayoutEngine()


def test_node_height_by_type_and_expanded(layout):
    node = _node("t", "techStack")
    assert layout.node_height(node) == 200
    assert layout.node_height(node, expanded=True) == 480

    node.data["expanded"] = True
    assert layout.node_height(node) == 480


def test_measured_height_overrides_table(layout):
    node = _node("n")
    assert layout.set_measured_height("n", 333) is True
    assert layout.node_height(node) == 333
    assert layout.node_height(node, expanded=True) == 333


def test_measured_height_ignores_small_changes(layout):
    layout.set_measured_height("n", 300)
    assert layout.set_measured_height("n", 305) is False
    assert layout.measured_heights["n"] == 300
    assert layout.set_measured_height("n", 320) is True


def test_resolve_overlap_accepts_free_target(layout):
    nodes = [_node("a"), _node("b", x=1000)]
    assert layout.resolve_overlap(nodes, "b", Position(1000, 500)) is True
    assert nodes[1].position == Position(1000, 500)


def test_resolve_overlap_moves_to_nearest_free_slot(layout):
    nodes = [_node("a"), _node("b")]
    assert layout.resolve_overlap(nodes, "b") is True

    _assert_no_overlap(layout, nodes, "b")
    # Nearest free grid point straight above: 4 rings of 60 clears a 220-high box plus gap
    assert nodes[1].position == Position(0, -240)


def test_resolve_overlap_keeps_position_when_search_exhausted():
    layout = LayoutEngine(CanvasSettings(search_rings=1))
    nodes = [_node("a"), _node("b", x=5, y=5)]

    assert layout.resolve_overlap(nodes, "b") is False
    assert nodes[1].position == Position(5, 5)


def test_resolve_overlap_unknown_node(layout):
    assert layout.resolve_overlap([_node("a")], "ghost") is False


def test_auto_space_pushes_column_down(layout):
    nodes = [_node("a", y=0), _node("b", y=100), _node("c", y=150), _node("far", x=720, y=50)]
    layout.auto_space(nodes)

    by_id = {n.id: n for n in nodes}
    assert by_id["a"].position.y == 0
    assert by_id["b"].position.y == 220
    assert by_id["c"].position.y == 440
    assert by_id["far"].position.y == 50


def test_auto_space_groups_nearby_x_into_one_column(layout):
    nodes = [_node("a", x=0, y=0), _node("b", x=30, y=10)]
    layout.auto_space(nodes, min_gap=20)
    assert nodes[1].position == Position(30, 240)


def test_offset_incoming(layout):
    existing = [_node("a", x=0, y=-100), _node("b", x=720, y=50)]
    incoming = [_node("c", x=0, y=0), _node("d", x=360, y=250)]

    layout.offset_incoming(existing, incoming)

    assert incoming[0].position == Position(1100, -100)
    assert incoming[1].position == Position(1460, 150)


def test_align_by_type_uses_canonical_columns(layout):
    nodes = [
        _node("n1", "note"),
        _node("f1", "feature"),
        _node("i1", "idea"),
        _node("f2", "feature"),
        _node("f3", "feature"),
    ]
    layout.align_by_type(nodes)

    by_id = {n.id: n.position for n in nodes}
    assert by_id["i1"] == Position(0, -250)
    assert [by_id[f] for f in ("f1", "f2", "f3")] == [
        Position(360, -250),
        Position(360, 0),
        Position(360, 250),
    ]
    assert by_id["n1"] == Position(1800, -250)


def test_reset_layout_prefers_baseline(layout):
    nodes = [_node("a", x=10, y=10)]
    layout.save_baseline(nodes, [])
    nodes[0].position = Position(500, 500)

    restored, _ = layout.reset_layout(nodes, [])
    assert restored[0].position == Position(10, 10)
    assert restored[0] is not layout.baseline.nodes[0]


def test_reset_layout_without_baseline_aligns(layout):
    layout.baseline = HistoryEntry(nodes=[], edges=[])
    nodes = [_node("s", "screen", x=5, y=5)]

    aligned, _ = layout.reset_layout(nodes, [])
    assert aligned[0].position == Position(720, 0)
    assert nodes[0].position == Position(5, 5)


def test_expand_then_collapse_reverses_shift(layout):
    target = _node("a", y=0)
    below = _node("b", y=300)
    other_column = _node("c", x=720, y=300)
    above = _node("d", y=-300)
    nodes = [target, below, other_column, above]

    target.data["expanded"] = True
    layout.apply_expand_toggle(nodes, target)

    assert target.z_index == FRONT_Z_INDEX
    assert below.position.y == 600
    assert other_column.position.y == 300
    assert above.position.y == -300
    assert layout.expand_shifts["a"].affected_ids == ["b"]

    target.data["expanded"] = False
    layout.apply_expand_toggle(nodes, target)

    assert target.z_index == 0
    assert below.position.y == 300
    assert "a" not in layout.expand_shifts


def test_collapse_skips_deleted_nodes(layout):
    target = _node("a", y=0)
    nodes = [target, _node("b", y=300), _node("c", y=600)]

    target.data["expanded"] = True
    layout.apply_expand_toggle(nodes, target)
    nodes = [n for n in nodes if n.id != "b"]

    target.data["expanded"] = False
    layout.apply_expand_toggle(nodes, target)
    assert nodes[1].position.y == 600


def test_expand_with_measured_height_does_not_shift(layout):
    target = _node("a", y=0)
    below = _node("b", y=300)
    layout.set_measured_height("a", 400)

    target.data["expanded"] = True
    layout.apply_expand_toggle([target, below], target)

    assert below.position.y == 300
    assert layout.expand_shifts == {}
    assert target.z_index == FRONT_Z_INDEX


def test_column_key_rounds_to_bucket(layout):
    assert layout.column_key(0) == 0
    assert layout.column_key(49) == 0
    assert layout.column_key(50) == 100
    assert layout.column_key(-49) == 0
    assert layout.column_key(360) == 400
