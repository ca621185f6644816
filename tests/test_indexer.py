"""Tests for the manifest indexer: full scans and change events."""

import json

from scriptnav.fs import FileEvent, FileEventKind, LocalFileSystem
from scriptnav.indexer import ManifestIndexer


class RecordingFs(LocalFileSystem):
    """Local disk, but watch() hands the sink back to the test instead of starting a thread."""

    def __init__(self):
        self.sink = None
        self.stopped = False

    def watch(self, root, filename, sink):
        self.sink = sink
        fs = self

        class Handle:
            def stop(self):
                fs.stopped = True

        return Handle()


class TestBuildFull:
    """One-time workspace scan."""

    def test_indexes_workspace_manifests_only(self, project, index):
        count = ManifestIndexer(project, index).build_full()

        assert count == 2
        assert sorted(index.keys()) == sorted([
            str(project / "package.json"),
            str(project / "packages" / "app" / "package.json"),
        ])
        assert not any("node_modules" in key for key in index.keys())

    def test_entries_carry_parsed_content(self, project, index):
        ManifestIndexer(project, index).build_full()

        entry = index.get(str(project / "package.json"))
        assert entry.name == "proj"
        assert entry.scripts["lint"] == "eslint ."

    def test_unparseable_manifest_is_skipped(self, make_files, tmp_path, index, log_records):
        make_files(tmp_path, {
            "good/package.json": {"name": "good"},
            "bad/package.json": '{"name": ',
        })

        assert ManifestIndexer(tmp_path, index).build_full() == 1
        assert any(
            r["level"].name == "WARNING" and "Failed to parse" in r["message"]
            for r in log_records
        )

    def test_jsonc_manifest_accepted(self, make_files, tmp_path, index):
        make_files(tmp_path, {"package.json": '{\n  // comment\n  "name": "c",\n}'})

        ManifestIndexer(tmp_path, index).build_full()

        assert index.get(str(tmp_path / "package.json")).name == "c"


class TestEvents:
    """Created / changed / deleted handling."""

    def test_changed_reparses(self, project, index):
        indexer = ManifestIndexer(project, index)
        indexer.build_full()
        path = project / "package.json"
        path.write_text(json.dumps({"name": "renamed"}))

        indexer.dispatch(FileEvent(FileEventKind.CHANGED, str(path)))

        assert index.get(str(path)).name == "renamed"

    def test_failed_reparse_keeps_previous_entry(self, project, index):
        indexer = ManifestIndexer(project, index)
        indexer.build_full()
        path = project / "package.json"
        path.write_text("{ broken")

        assert indexer.on_changed(path) is False
        assert index.get(str(path)).name == "proj"

    def test_deleted_removes_entry(self, project, index):
        indexer = ManifestIndexer(project, index)
        indexer.build_full()
        path = str(project / "packages" / "app" / "package.json")

        indexer.dispatch(FileEvent(FileEventKind.DELETED, path))

        assert path not in index

    def test_unreadable_path_is_logged(self, tmp_path, index, log_records):
        indexer = ManifestIndexer(tmp_path, index)

        assert indexer.on_created(tmp_path / "gone" / "package.json") is False
        assert any("Failed to read" in r["message"] for r in log_records)

    def test_dependency_dir_events_are_ignored(self, project, index):
        indexer = ManifestIndexer(project, index)
        path = str(project / "node_modules" / "mytool" / "package.json")

        indexer.dispatch(FileEvent(FileEventKind.CREATED, path))

        assert len(index) == 0

    def test_other_file_names_are_ignored(self, project, index):
        indexer = ManifestIndexer(project, index)

        indexer.dispatch(FileEvent(FileEventKind.CREATED, str(project / "lib" / "x.js")))

        assert len(index) == 0

    def test_events_apply_in_delivery_order(self, make_files, tmp_path, index):
        make_files(tmp_path, {"a/package.json": {"name": "a"}})
        path = str(tmp_path / "a" / "package.json")
        fs = RecordingFs()
        indexer = ManifestIndexer(tmp_path, index, fs=fs)
        indexer.subscribe()

        fs.sink(FileEvent(FileEventKind.CREATED, path))
        fs.sink(FileEvent(FileEventKind.DELETED, path))
        assert indexer.process_pending() == 2
        assert path not in index

        fs.sink(FileEvent(FileEventKind.DELETED, path))
        fs.sink(FileEvent(FileEventKind.CREATED, path))
        assert indexer.process_pending() == 2
        assert index.get(path).name == "a"

    def test_nothing_pending(self, tmp_path, index):
        indexer = ManifestIndexer(tmp_path, index, fs=RecordingFs())

        assert indexer.process_pending() == 0
        assert indexer.process_pending(timeout=0.01) == 0

    def test_unsubscribe_stops_watch(self, tmp_path, index):
        fs = RecordingFs()
        indexer = ManifestIndexer(tmp_path, index, fs=fs)
        indexer.subscribe()
        indexer.unsubscribe()

        assert fs.stopped is True


class TestPathologicalManifests:
    def test_deeply_nested_manifest_is_skipped(self, make_files, tmp_path, index, log_records):
        make_files(tmp_path, {
            "ok/package.json": {"name": "ok"},
            "deep/package.json": '{"a": ' * 600 + "1" + "}" * 600,
        })

        assert ManifestIndexer(tmp_path, index).build_full() == 1
        assert str(tmp_path / "deep" / "package.json") not in index
        assert any("Failed to parse" in r["message"] for r in log_records)

    def test_nested_manifest_within_limit_persists(self, make_files, tmp_path, index):
        make_files(tmp_path, {"package.json": '{"a": ' * 50 + "1" + "}" * 50})
        index.persist_dir = tmp_path / ".scriptnav"

        ManifestIndexer(tmp_path, index).build_full()

        assert len(index) == 1
        assert index.persist() is True
