"""
Planning Canvas API — canvas graph routes
"""

import pytest
from fastapi.testclient import TestClient

from api.features.canvas_graph.canvas_sessions import close_all_canvases
from api.main import app

PROJECT = {
    "name": "TaskFlow",
    "nodes": [
        {"id": "i1", "type": "idea", "position": {"x": 0, "y": 0}, "data": {"appName": "TaskFlow"}},
        {"id": "f1", "type": "feature", "position": {"x": 360, "y": 0}, "data": {"featureName": "Login"}},
        {"id": "f2", "type": "feature", "position": {"x": 360, "y": 300}, "data": {"featureName": "Search"}},
    ],
    "edges": [{"id": "e1", "source": "i1", "target": "f1"}],
}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    close_all_canvases()


@pytest.fixture
def project(client):
    response = client.put("/api/canvas/p1", json=PROJECT)
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-Id": "req_test"})
    assert response.headers["X-Request-Id"] == "req_test"


def test_load_and_get_project(client, project):
    assert project["name"] == "TaskFlow"
    assert project["canUndo"] is False
    assert project["summary"]["totalNodes"] == 3

    state = client.get("/api/canvas/p1").json()
    assert [n["id"] for n in state["nodes"]] == ["i1", "f1", "f2"]
    assert state["edges"] == [{"id": "e1", "source": "i1", "target": "f1"}]


def test_unknown_project_is_404(client):
    assert client.get("/api/canvas/nope").status_code == 404
    assert client.post("/api/canvas/nope/undo").status_code == 404
    assert client.delete("/api/canvas/nope").status_code == 404


def test_load_rejects_dangling_edge(client):
    body = {"nodes": PROJECT["nodes"], "edges": [{"id": "x", "source": "i1", "target": "ghost"}]}
    response = client.put("/api/canvas/p1", json=body)
    assert response.status_code == 400
    assert "ghost" in response.json()["detail"]
    assert client.get("/api/canvas/p1").status_code == 404


def test_add_node_and_undo(client, project):
    response = client.post("/api/canvas/p1/nodes", json={"type": "note", "position": {"x": -600, "y": 0}})
    assert response.status_code == 200
    body = response.json()
    assert body["nodeId"].startswith("note-")
    assert body["canvas"]["canUndo"] is True
    assert len(body["canvas"]["nodes"]) == 4

    undone = client.post("/api/canvas/p1/undo").json()
    assert undone["changed"] is True
    assert len(undone["canvas"]["nodes"]) == 3
    assert undone["canvas"]["canRedo"] is True

    redone = client.post("/api/canvas/p1/redo").json()
    assert len(redone["canvas"]["nodes"]) == 4


def test_add_node_unknown_type_is_400(client, project):
    response = client.post("/api/canvas/p1/nodes", json={"type": "diagram", "position": {"x": 0, "y": 0}})
    assert response.status_code == 400
    assert client.get("/api/canvas/p1").json()["canUndo"] is False


def test_add_node_missing_type_is_422(client, project):
    assert client.post("/api/canvas/p1/nodes", json={"position": {"x": 0, "y": 0}}).status_code == 422


def test_update_node_data(client, project):
    response = client.patch("/api/canvas/p1/nodes/f1/data", json={"data": {"status": "Built"}})
    body = response.json()
    assert body["changed"] is True
    f1 = next(n for n in body["canvas"]["nodes"] if n["id"] == "f1")
    assert f1["data"] == {"featureName": "Login", "status": "Built"}
    assert body["canvas"]["canUndo"] is False

    missing = client.patch("/api/canvas/p1/nodes/ghost/data", json={"data": {"x": 1}})
    assert missing.status_code == 200
    assert missing.json()["changed"] is False


def test_delete_node_cascades(client, project):
    body = client.delete("/api/canvas/p1/nodes/f1").json()
    assert body["changed"] is True
    assert [n["id"] for n in body["canvas"]["nodes"]] == ["i1", "f2"]
    assert body["canvas"]["edges"] == []


def test_move_node(client, project):
    body = client.post("/api/canvas/p1/nodes/f2/move", json={"position": {"x": 1500, "y": 900}}).json()
    f2 = next(n for n in body["canvas"]["nodes"] if n["id"] == "f2")
    assert f2["position"] == {"x": 1500, "y": 900}


def test_toggle_expanded_and_completed(client, project):
    body = client.post("/api/canvas/p1/nodes/f1/toggle-expanded").json()
    nodes = {n["id"]: n for n in body["canvas"]["nodes"]}
    assert nodes["f1"]["data"]["expanded"] is True
    assert nodes["f1"]["zIndex"] == 1000
    assert nodes["f2"]["position"]["y"] == 600
    assert body["canvas"]["canUndo"] is False

    body = client.post("/api/canvas/p1/nodes/f1/toggle-completed").json()
    nodes = {n["id"]: n for n in body["canvas"]["nodes"]}
    assert nodes["f1"]["data"]["completed"] is True
    assert body["canvas"]["canUndo"] is True


def test_measured_height(client, project):
    body = client.post("/api/canvas/p1/nodes/f1/height", json={"height": 410}).json()
    assert body == {"changed": True, "nodeId": "f1", "height": 410}
    assert client.post("/api/canvas/p1/nodes/f1/height", json={"height": 0}).status_code == 422


def test_selection_delete(client, project):
    empty = client.post("/api/canvas/p1/selection/delete").json()
    assert empty["changed"] is False
    assert empty["canvas"]["canUndo"] is False

    client.post("/api/canvas/p1/selection", json={"nodeIds": ["f2"], "edgeIds": ["e1"]})
    body = client.post("/api/canvas/p1/selection/delete").json()
    assert body["changed"] is True
    assert [n["id"] for n in body["canvas"]["nodes"]] == ["i1", "f1"]
    assert body["canvas"]["edges"] == []


def test_connect_and_disconnect(client, project):
    body = client.post("/api/canvas/p1/edges", json={"source": "f1", "target": "f2"}).json()
    edge_id = body["edgeId"]
    assert any(e["id"] == edge_id for e in body["canvas"]["edges"])

    body = client.delete(f"/api/canvas/p1/edges/{edge_id}").json()
    assert body["changed"] is True
    assert [e["id"] for e in body["canvas"]["edges"]] == ["e1"]

    assert client.post("/api/canvas/p1/edges", json={"source": "f1", "target": "ghost"}).status_code == 400


def test_reset_layout_restores_loaded_positions(client, project):
    client.post("/api/canvas/p1/nodes/f2/move", json={"position": {"x": 1500, "y": 900}})
    body = client.post("/api/canvas/p1/layout/reset").json()
    f2 = next(n for n in body["canvas"]["nodes"] if n["id"] == "f2")
    assert f2["position"] == {"x": 360, "y": 300}


def test_replace_and_append_graph(client, project):
    replaced = client.post(
        "/api/canvas/p1/graph/replace",
        json={"nodes": [{"id": "s1", "type": "screen", "position": {"x": 0, "y": 0}}], "edges": []},
    ).json()
    assert [n["id"] for n in replaced["canvas"]["nodes"]] == ["s1"]

    appended = client.post(
        "/api/canvas/p1/graph/append",
        json={"nodes": [{"id": "n1", "type": "note", "position": {"x": 0, "y": 0}}], "edges": []},
    ).json()
    n1 = next(n for n in appended["canvas"]["nodes"] if n["id"] == "n1")
    assert n1["position"] == {"x": 380, "y": 0}


def test_append_duplicate_id_is_400(client, project):
    response = client.post(
        "/api/canvas/p1/graph/append",
        json={"nodes": [{"id": "f1", "type": "feature"}], "edges": []},
    )
    assert response.status_code == 400


def test_close_project(client, project):
    assert client.delete("/api/canvas/p1").json() == {"status": "closed", "projectId": "p1"}
    assert client.get("/api/canvas/p1").status_code == 404
