"""Tests for extension and index-file probing."""

import os

from scriptnav.fs import LocalFileSystem
from scriptnav.probe import probe, probe_candidates


def test_candidate_order():
    assert probe_candidates("/p/x", [".js", ".ts"]) == [
        "/p/x",
        "/p/x.js",
        "/p/x.ts",
        os.path.join("/p/x", "index.js"),
        os.path.join("/p/x", "index.ts"),
    ]


def test_exact_file_wins(make_files, tmp_path):
    make_files(tmp_path, {"tool": "", "tool.js": ""})

    assert probe(str(tmp_path / "tool"), LocalFileSystem()) == str(tmp_path / "tool")


def test_first_extension_in_list_order(make_files, tmp_path):
    make_files(tmp_path, {"mod.ts": "", "mod.mjs": ""})

    found = probe(str(tmp_path / "mod"), LocalFileSystem(), [".js", ".mjs", ".ts"])

    assert found == str(tmp_path / "mod.mjs")


def test_directory_falls_through_to_index(make_files, tmp_path):
    make_files(tmp_path, {"pkg/index.cjs": ""})

    found = probe(str(tmp_path / "pkg"), LocalFileSystem())

    assert found == os.path.join(str(tmp_path / "pkg"), "index.cjs")


def test_nothing_found(tmp_path):
    assert probe(str(tmp_path / "missing"), LocalFileSystem()) is None


def test_unlisted_extension_is_not_tried(make_files, tmp_path):
    make_files(tmp_path, {"style.css": ""})

    assert probe(str(tmp_path / "style"), LocalFileSystem()) is None


def test_candidate_error_only_rules_out_that_candidate(tmp_path):
    class FlakyFs(LocalFileSystem):
        def is_file(self, path):
            if str(path).endswith(".js"):
                raise PermissionError(path)
            return str(path).endswith(".ts")

    found = probe(str(tmp_path / "a"), FlakyFs(), [".js", ".ts"])

    assert found == str(tmp_path / "a") + ".ts"
