"""
Planning Canvas — configuration tests
"""

from planning_canvas.settings import CanvasSettings, env_first, env_flag, env_int, env_str


def test_defaults():
    settings = CanvasSettings()
    assert settings.history_limit == 20
    assert settings.match_threshold == 0.6


def test_from_env(monkeypatch):
    monkeypatch.setenv("CANVAS_HISTORY_LIMIT", "5")
    monkeypatch.setenv("CANVAS_MATCH_THRESHOLD", " 0.75 ")
    monkeypatch.setenv("CANVAS_SEARCH_RINGS", "lots")
    monkeypatch.delenv("CANVAS_NODE_WIDTH", raising=False)

    settings = CanvasSettings.from_env()
    assert settings.history_limit == 5
    assert settings.match_threshold == 0.75
    assert settings.search_rings == 6
    assert settings.node_width == 320


def test_history_limit_is_at_least_one(monkeypatch):
    monkeypatch.setenv("CANVAS_HISTORY_LIMIT", "0")
    assert CanvasSettings.from_env().history_limit == 1


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("PC_EMPTY", "   ")
    monkeypatch.setenv("PC_FLAG", "Yes")
    monkeypatch.setenv("PC_NUM", "12")
    monkeypatch.delenv("PC_MISSING", raising=False)

    assert env_str("PC_EMPTY", "fallback") == "fallback"
    assert env_first(["PC_MISSING", "PC_EMPTY", "PC_NUM"]) == "12"
    assert env_flag("PC_FLAG") is True
    assert env_flag("PC_MISSING", default=True) is True
    assert env_int("PC_NUM", 0) == 12
