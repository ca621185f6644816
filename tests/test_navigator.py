"""Tests for the workspace session: snapshot restore followed by a rescan."""

import json

from scriptnav.config_runtime import load_runtime_config
from scriptnav.navigator import Navigator


def test_start_rescans_after_restore(project):
    Navigator(project).reindex()
    (project / "package.json").write_text(json.dumps({"name": "renamed"}))
    (project / "packages" / "app" / "package.json").unlink()

    navigator = Navigator(project)
    count = navigator.start()

    assert count == 1
    assert navigator.index.get(str(project / "package.json")).name == "renamed"
    assert str(project / "packages" / "app" / "package.json") not in navigator.index


def test_unparseable_manifest_keeps_restored_entry(project):
    Navigator(project).reindex()
    (project / "package.json").write_text("{ broken")

    navigator = Navigator(project)
    navigator.start()

    assert navigator.index.get(str(project / "package.json")).name == "proj"


def test_start_without_restore_ignores_snapshot(project, make_files):
    Navigator(project).reindex()
    snapshot = project / ".scriptnav" / "cache.json"
    data = json.loads(snapshot.read_text())
    outside = str(project.parent / "elsewhere" / "package.json")
    data[outside] = next(iter(data.values())) | {"location": outside}
    snapshot.write_text(json.dumps(data))

    restored = Navigator(project)
    restored.start()
    fresh = Navigator(project)
    fresh.start(restore=False)

    assert outside in restored.index
    assert outside not in fresh.index


def test_persistence_can_be_disabled(project):
    config = load_runtime_config(project)
    navigator = Navigator(project, config=config, persist=False)

    assert navigator.reindex() == 2
    assert not (project / ".scriptnav" / "cache.json").exists()
