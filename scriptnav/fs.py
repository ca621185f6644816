"""File-system capability consumed by the indexer and the resolver.

The core never touches the platform directly for reads, globbing or watching:
it receives an object satisfying ``FileSystem``. ``LocalFileSystem`` is the
real implementation (pathlib + os.walk + watchdog); tests may pass anything
with the same methods.
"""

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class FileEventKind(str, Enum):
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass(frozen=True)
class FileEvent:
    """A single change notification for one path."""

    kind: FileEventKind
    path: str


class WatchHandle(Protocol):
    def stop(self) -> None: ...


class FileSystem(Protocol):
    """Read, stat, glob and watch primitives supplied by the host."""

    def read_text(self, path: str | Path) -> str: ...

    def is_file(self, path: str | Path) -> bool: ...

    def exists(self, path: str | Path) -> bool: ...

    def find_files(
        self,
        root: str | Path,
        pattern: str,
        exclude_dirs: Iterable[str] = (),
        limit: int | None = None,
    ) -> list[str]: ...

    def watch(
        self, root: str | Path, filename: str, sink: Callable[[FileEvent], None]
    ) -> WatchHandle: ...


class _NamedFileHandler(FileSystemEventHandler):
    """Forward watchdog events for files called ``filename`` to ``sink``."""

    def __init__(self, filename: str, sink: Callable[[FileEvent], None]):
        super().__init__()
        self.filename = filename
        self.sink = sink

    def _emit(self, kind: FileEventKind, raw_path) -> None:
        path = os.fsdecode(raw_path)
        if os.path.basename(path) == self.filename:
            self.sink(FileEvent(kind, os.path.abspath(path)))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(FileEventKind.CREATED, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(FileEventKind.CHANGED, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(FileEventKind.DELETED, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(FileEventKind.DELETED, event.src_path)
            self._emit(FileEventKind.CREATED, event.dest_path)


class _ObserverHandle:
    def __init__(self, observer):
        self._observer = observer

    def stop(self) -> None:
        self._observer.stop()
        self._observer.join(timeout=5)


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def read_text(self, path: str | Path) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    def is_file(self, path: str | Path) -> bool:
        return os.path.isfile(path)

    def exists(self, path: str | Path) -> bool:
        return os.path.exists(path)

    def find_files(
        self,
        root: str | Path,
        pattern: str,
        exclude_dirs: Iterable[str] = (),
        limit: int | None = None,
    ) -> list[str]:
        """Files under ``root`` whose relative path matches ``pattern`` from the right.

        ``pattern`` is matched the way ``**/<pattern>`` globbing would: ``"package.json"``
        finds every manifest, ``"src/ma*"`` finds ``a/src/main.ts``. Excluded
        directory names are pruned and never descended into. Results are sorted.
        """
        if limit is not None and limit < 1:
            return []
        excluded = set(exclude_dirs)
        root = os.path.abspath(root)
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in excluded)
            rel_dir = os.path.relpath(dirpath, root)
            for filename in sorted(filenames):
                rel = filename if rel_dir == "." else f"{rel_dir}/{filename}"
                if PurePosixPath(rel.replace(os.sep, "/")).match(pattern):
                    found.append(os.path.join(dirpath, filename))
                    if limit is not None and len(found) >= limit:
                        return found
        return found

    def watch(
        self, root: str | Path, filename: str, sink: Callable[[FileEvent], None]
    ) -> WatchHandle:
        """Start a recursive watchdog observer. ``sink`` runs on the observer thread."""
        observer = Observer()
        observer.schedule(_NamedFileHandler(filename, sink), str(root), recursive=True)
        observer.daemon = True
        observer.start()
        return _ObserverHandle(observer)
