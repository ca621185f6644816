"""Workspace indexer for package.json manifests.

Populates the manifest index with a one-time scan and keeps it current from
change notifications. Notifications from the watch thread are only queued;
they are applied on the caller's thread by ``process_pending`` in the order
they were delivered, so the index is never mutated concurrently.
"""

import os
import queue
from pathlib import Path

from scriptnav.cache import ManifestIndex
from scriptnav.exceptions import ManifestParseError
from scriptnav.fs import FileEvent, FileEventKind, FileSystem, LocalFileSystem, WatchHandle
from scriptnav.manifest import parse_manifest
from scriptnav.utils.constants import DEPENDENCY_DIR, MANIFEST_NAME
from scriptnav.utils.helpers import is_in_dependency_dir
from scriptnav.utils.logging import component_logger


class ManifestIndexer:
    """Discovers, parses and refreshes manifests in a ManifestIndex."""

    def __init__(
        self,
        root: str | Path,
        index: ManifestIndex,
        fs: FileSystem | None = None,
        manifest_name: str = MANIFEST_NAME,
        dependency_dir: str = DEPENDENCY_DIR,
        log=None,
    ):
        self.root = os.path.abspath(root)
        self.index = index
        self.fs = fs or LocalFileSystem()
        self.manifest_name = manifest_name
        self.dependency_dir = dependency_dir
        self.log = log or component_logger("indexer")
        self._pending: queue.Queue[FileEvent] = queue.Queue()
        self._watch: WatchHandle | None = None

    def build_full(self) -> int:
        """Index every manifest under the root outside dependency directories."""
        try:
            files = self.fs.find_files(
                self.root, self.manifest_name, exclude_dirs=[self.dependency_dir]
            )
        except OSError as e:
            self.log.warning("Manifest scan of {root} failed: {err}", root=self.root, err=e)
            return len(self.index)

        for path in files:
            self.index_one(path)
        self._drop_missing({os.path.abspath(p) for p in files})
        self.log.info("Indexed {count} {name} files", count=len(self.index), name=self.manifest_name)
        return len(self.index)

    def _drop_missing(self, found: set[str]) -> None:
        """Forget entries under the root that the scan no longer sees (restored from a snapshot)."""
        prefix = os.path.join(self.root, "")
        for key in list(self.index.keys()):
            if key.startswith(prefix) and key not in found:
                self.index.delete(key)
                self.log.debug("Dropped {path}: no longer on disk", path=key)

    def index_one(self, path: str | Path) -> bool:
        """(Re)index one manifest. A failed parse keeps whatever entry was there."""
        location = os.path.abspath(path)
        try:
            text = self.fs.read_text(location)
        except (OSError, UnicodeDecodeError) as e:
            self.log.warning("Failed to read {path}: {err}", path=location, err=e)
            return False

        try:
            entry = parse_manifest(location, text)
        except (ManifestParseError, RecursionError) as e:
            self.log.warning("Failed to parse {path}: {err}", path=location, err=e)
            return False

        self.index.set(location, entry)
        self.log.debug("Indexed {path}", path=location)
        return True

    def on_changed(self, path: str | Path) -> bool:
        return self.index_one(path)

    def on_created(self, path: str | Path) -> bool:
        return self.index_one(path)

    def on_deleted(self, path: str | Path) -> bool:
        removed = self.index.delete(os.path.abspath(path))
        if removed:
            self.log.debug("Removed {path}", path=path)
        return removed

    def accepts(self, path: str | Path) -> bool:
        """Only manifests outside dependency directories are tracked."""
        return os.path.basename(path) == self.manifest_name and not is_in_dependency_dir(
            path, self.dependency_dir
        )

    def dispatch(self, event: FileEvent) -> None:
        """Apply one change notification to the index."""
        if not self.accepts(event.path):
            return
        if event.kind is FileEventKind.DELETED:
            self.on_deleted(event.path)
        else:
            self.index_one(event.path)

    def subscribe(self) -> None:
        """Start watching the root; events queue up until ``process_pending``."""
        if self._watch is not None:
            return
        self._watch = self.fs.watch(self.root, self.manifest_name, self._pending.put)
        self.log.info("Watching {root} for {name} changes", root=self.root, name=self.manifest_name)

    def unsubscribe(self) -> None:
        if self._watch is not None:
            self._watch.stop()
            self._watch = None

    def process_pending(self, timeout: float | None = None) -> int:
        """Apply queued notifications in delivery order.

        Waits up to ``timeout`` seconds for the first event (not at all when
        None), then drains whatever else is queued. Returns the number applied.
        """
        processed = 0
        try:
            if timeout is None:
                event = self._pending.get_nowait()
            else:
                event = self._pending.get(timeout=timeout)
        except queue.Empty:
            return 0

        while True:
            self.dispatch(event)
            processed += 1
            try:
                event = self._pending.get_nowait()
            except queue.Empty:
                return processed
