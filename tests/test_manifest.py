"""Tests for ManifestEntry and the package.json field helpers."""

import pytest

from scriptnav.exceptions import ManifestParseError
from scriptnav.manifest import (
    ManifestEntry,
    bin_basename,
    bin_entry_for,
    entry_field,
    name_matches,
    parse_manifest,
)


class TestParseManifest:
    def test_raw_and_tree_come_from_same_text(self):
        text = '{"name": "pkg", "scripts": {"lint": "eslint ."}}'
        entry = parse_manifest("/ws/package.json", text)

        assert entry.raw == {"name": "pkg", "scripts": {"lint": "eslint ."}}
        node = entry.find("scripts", "lint")
        assert text[node.offset : node.offset + node.length] == '"eslint ."'
        assert entry.digest

    def test_digest_tracks_content(self):
        a = parse_manifest("/a", '{"name": "a"}')
        b = parse_manifest("/b", '{"name": "a"}')
        c = parse_manifest("/c", '{"name": "c"}')

        assert a.digest == b.digest
        assert a.digest != c.digest

    def test_non_object_root_rejected(self):
        with pytest.raises(ManifestParseError):
            parse_manifest("/ws/package.json", "[1, 2]")

    def test_invalid_json_rejected(self):
        with pytest.raises(ManifestParseError):
            parse_manifest("/ws/package.json", '{"name": ')

    def test_round_trip_through_dict(self):
        entry = parse_manifest("/ws/package.json", '{"name": "pkg", "bin": "./cli.js"}')

        restored = ManifestEntry.from_dict(entry.to_dict())

        assert restored == entry

    def test_from_dict_rejects_non_object_tree(self):
        data = parse_manifest("/ws/package.json", '{"a": [1]}').to_dict()
        data["tree"] = data["tree"]["children"][0]["value"]

        with pytest.raises(ValueError):
            ManifestEntry.from_dict(data)


class TestFieldAccessors:
    def test_scripts_drop_non_string_values(self):
        entry = parse_manifest("/p", '{"scripts": {"a": "x", "b": 1, "c": null}}')

        assert entry.scripts == {"a": "x"}

    def test_missing_or_mistyped_fields(self):
        entry = parse_manifest("/p", '{"name": 3, "scripts": [], "bin": 7}')

        assert entry.name is None
        assert entry.scripts == {}
        assert entry.bin is None
        assert entry.main is None

    def test_main_falls_back_to_module(self):
        assert entry_field({"module": "esm.js"}) == "esm.js"
        assert entry_field({"main": "cjs.js", "module": "esm.js"}) == "cjs.js"
        assert entry_field({"main": ""}) is None


class TestBinHelpers:
    def test_string_bin(self):
        assert bin_entry_for({"bin": "./cli.js"}, "anything") == "./cli.js"

    def test_exact_key_preferred(self):
        raw = {"bin": {"other": "./other.js", "tool": "./tool.js"}}

        assert bin_entry_for(raw, "tool") == "./tool.js"

    def test_first_entry_when_no_key_matches(self):
        raw = {"bin": {"first": "./first.js", "second": "./second.js"}}

        assert bin_entry_for(raw, "missing") == "./first.js"

    def test_no_bin(self):
        assert bin_entry_for({}, "tool") is None
        assert bin_entry_for({"bin": {}}, "tool") is None

    def test_bin_basename(self):
        assert bin_basename({"bin": "./bin/cli.js"}) == "cli.js"
        assert bin_basename({"bin": ".\\bin\\cli.js"}) == "cli.js"
        assert bin_basename({"bin": {"x": "./x.js"}}) is None

    @pytest.mark.parametrize(
        "name,cmd,expected",
        [
            ("mytool", "mytool", True),
            ("@mytool", "mytool", True),
            ("@scope/mytool", "mytool", True),
            ("mytool-extra", "mytool", False),
            (None, "mytool", False),
        ],
    )
    def test_name_matches(self, name, cmd, expected):
        assert name_matches(name, cmd) is expected
