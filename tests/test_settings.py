"""Tests for loading, saving and layering user settings."""

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import text2music  # noqa: E402


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    text2music.save_settings({"instrument": "vln", "precise": True}, path)
    assert text2music.load_settings(path) == {"instrument": "vln", "precise": True}


def test_load_missing_file_returns_empty(tmp_path):
    assert text2music.load_settings(tmp_path / "nope.json") == {}


def test_load_invalid_json_logs_error(tmp_path, caplog):
    """Corrupt files are reported and treated as empty."""

    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.ERROR):
        assert text2music.load_settings(path) == {}
    assert "Could not load settings" in caplog.text


def test_load_non_object_is_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    assert text2music.load_settings(path) == {}


def test_save_failure_is_logged(tmp_path, caplog):
    """Saving into a directory path fails without raising."""

    with caplog.at_level(logging.ERROR):
        text2music.save_settings({"precise": True}, tmp_path)
    assert "Could not save settings" in caplog.text


def test_resolve_settings_layers():
    """Overrides beat saved values, which beat defaults; ``None`` is skipped."""

    merged = text2music.resolve_settings(
        {"instrument": "vln", "precise": True, "colour": "red"},
        {"instrument": "flt", "precise": None},
    )
    assert merged["instrument"] == "flt"
    assert merged["precise"] is True
    assert merged["min_similarity"] == text2music.DEFAULT_SETTINGS["min_similarity"]
    assert "colour" not in merged


def test_settings_file_env_override(monkeypatch, tmp_path):
    """``TEXT2MUSIC_SETTINGS_FILE`` changes the default location on import."""

    import importlib

    target = tmp_path / "custom.json"
    monkeypatch.setenv("TEXT2MUSIC_SETTINGS_FILE", str(target))
    module = importlib.reload(text2music)
    try:
        assert module.DEFAULT_SETTINGS_FILE == target
    finally:
        monkeypatch.delenv("TEXT2MUSIC_SETTINGS_FILE")
        importlib.reload(text2music)
