"""Tests for runtime configuration loading."""

import json
from pathlib import Path

from scriptnav.config_runtime import DEFAULTS, load_runtime_config


def _write_config(root, data):
    path = root / ".scriptnav" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data))


def test_defaults(tmp_path):
    cfg = load_runtime_config(tmp_path)

    assert cfg["cache"]["capacity"] == DEFAULTS["cache"]["capacity"] == 500
    assert cfg["resolve"]["extensions"] == [".js", ".cjs", ".mjs", ".ts", ".tsx", ".jsx", ".json"]
    assert cfg["resolve"]["prefer_nearest_dependency"] is True
    assert cfg["paths"]["dependency_dir"] == "node_modules"
    assert cfg["cache"]["dir"] == str((tmp_path / ".scriptnav").resolve())


def test_defaults_are_not_mutated(tmp_path, monkeypatch):
    monkeypatch.setenv("SCRIPTNAV_CACHE_CAPACITY", "7")

    load_runtime_config(tmp_path)

    assert DEFAULTS["cache"]["capacity"] == 500


def test_config_file_overrides_defaults(tmp_path):
    _write_config(tmp_path, {"cache": {"capacity": 50}, "resolve": {"search_limit": 3}})

    cfg = load_runtime_config(tmp_path)

    assert cfg["cache"]["capacity"] == 50
    assert cfg["resolve"]["search_limit"] == 3


def test_wrong_type_in_file_is_ignored(tmp_path, log_records):
    _write_config(tmp_path, {"cache": {"capacity": "many"}, "unknown": {"x": 1}})

    cfg = load_runtime_config(tmp_path)

    assert cfg["cache"]["capacity"] == 500
    assert any("wrong type" in r["message"] for r in log_records)


def test_malformed_file_falls_back_to_defaults(tmp_path, log_records):
    _write_config(tmp_path, "{nope")

    cfg = load_runtime_config(tmp_path)

    assert cfg["cache"]["capacity"] == 500
    assert any("Could not load config" in r["message"] for r in log_records)


def test_environment_beats_file(tmp_path, monkeypatch):
    _write_config(tmp_path, {"cache": {"capacity": 50}})
    monkeypatch.setenv("SCRIPTNAV_CACHE_CAPACITY", "25")
    monkeypatch.setenv("SCRIPTNAV_CACHE_PERSIST", "off")
    monkeypatch.setenv("SCRIPTNAV_RESOLVE_EXTENSIONS", ".ts, .js")
    monkeypatch.setenv("SCRIPTNAV_RESOLVE_PREFER_NEAREST_DEPENDENCY", "false")

    cfg = load_runtime_config(tmp_path)

    assert cfg["cache"]["capacity"] == 25
    assert cfg["cache"]["persist"] is False
    assert cfg["resolve"]["extensions"] == [".ts", ".js"]
    assert cfg["resolve"]["prefer_nearest_dependency"] is False


def test_invalid_environment_value_keeps_previous(tmp_path, monkeypatch, log_records):
    monkeypatch.setenv("SCRIPTNAV_CACHE_CAPACITY", "lots")
    monkeypatch.setenv("SCRIPTNAV_CACHE_PERSIST", "maybe")

    cfg = load_runtime_config(tmp_path)

    assert cfg["cache"]["capacity"] == 500
    assert cfg["cache"]["persist"] is True
    assert sum("Invalid value" in r["message"] for r in log_records) == 2


def test_non_positive_capacity_reset(tmp_path, monkeypatch):
    monkeypatch.setenv("SCRIPTNAV_CACHE_CAPACITY", "0")

    assert load_runtime_config(tmp_path)["cache"]["capacity"] == 500


def test_absolute_cache_dir_kept(tmp_path, monkeypatch):
    target = tmp_path / "state"
    monkeypatch.setenv("SCRIPTNAV_CACHE_DIR", str(target))

    assert Path(load_runtime_config(tmp_path)["cache"]["dir"]) == target


def test_non_string_extensions_in_file_reset(tmp_path, log_records):
    _write_config(tmp_path, {"resolve": {"extensions": [1, ".ts"]}})

    cfg = load_runtime_config(tmp_path)

    assert cfg["resolve"]["extensions"] == DEFAULTS["resolve"]["extensions"]
    assert any("resolve.extensions" in r["message"] for r in log_records)


def test_empty_extensions_from_environment_reset(tmp_path, monkeypatch):
    monkeypatch.setenv("SCRIPTNAV_RESOLVE_EXTENSIONS", " , ")

    cfg = load_runtime_config(tmp_path)

    assert cfg["resolve"]["extensions"] == DEFAULTS["resolve"]["extensions"]


def test_non_positive_search_limit_reset(tmp_path, log_records):
    _write_config(tmp_path, {"resolve": {"search_limit": 0}})

    cfg = load_runtime_config(tmp_path)

    assert cfg["resolve"]["search_limit"] == DEFAULTS["resolve"]["search_limit"]
    assert any("search_limit must be positive" in r["message"] for r in log_records)
