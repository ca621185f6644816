"""Workspace session wiring the index, indexer, resolver and definition provider."""

import os
from pathlib import Path
from typing import Any

from scriptnav.cache import create_manifest_index
from scriptnav.config_runtime import load_runtime_config
from scriptnav.definitions import DefinitionProvider
from scriptnav.fs import FileSystem, LocalFileSystem
from scriptnav.indexer import ManifestIndexer
from scriptnav.resolver import ResolutionEngine, ResolvedLocation, ResolveOptions
from scriptnav.utils.logging import component_logger


class Navigator:
    """Everything one workspace needs, built once per process.

    Args:
        root: Workspace root to index and search.
        config: Pre-loaded runtime config; loaded from ``root`` when omitted.
        fs: File-system capability; the local disk when omitted.
        persist: Override ``cache.persist`` from the config.
    """

    def __init__(
        self,
        root: str | Path = ".",
        config: dict[str, Any] | None = None,
        fs: FileSystem | None = None,
        persist: bool | None = None,
    ):
        self.root = os.path.abspath(root)
        self.config = config or load_runtime_config(self.root)
        self.fs = fs or LocalFileSystem()
        self.log = component_logger("navigator")

        cache_cfg = self.config["cache"]
        resolve_cfg = self.config["resolve"]
        paths_cfg = self.config["paths"]

        should_persist = cache_cfg["persist"] if persist is None else persist
        self.index = create_manifest_index(
            capacity=cache_cfg["capacity"],
            persist_dir=cache_cfg["dir"] if should_persist else None,
        )
        self.indexer = ManifestIndexer(
            self.root,
            self.index,
            fs=self.fs,
            manifest_name=paths_cfg["manifest_name"],
            dependency_dir=paths_cfg["dependency_dir"],
        )
        self.options = ResolveOptions(
            extensions=tuple(resolve_cfg["extensions"]),
            prefer_nearest_dependency=resolve_cfg["prefer_nearest_dependency"],
            search_limit=resolve_cfg["search_limit"],
            dependency_dir=paths_cfg["dependency_dir"],
        )
        self.engine = ResolutionEngine(self.index, fs=self.fs, workspace_root=self.root)
        self.definitions = DefinitionProvider(
            self.index, self.engine, fs=self.fs, options=self.options
        )

    def start(self, restore: bool = True) -> int:
        """Load the snapshot (unless ``restore`` is False), then scan the workspace.

        The scan always runs, so edited manifests are re-parsed and deleted ones
        dropped. A manifest that no longer parses keeps its restored entry.
        """
        if restore:
            restored = self.index.restore()
            if restored:
                self.log.info("Restored {count} manifests from snapshot", count=restored)
        return self.indexer.build_full()

    def reindex(self) -> int:
        """Full rescan followed by a snapshot write. Returns the entry count."""
        self.log.info("Reindexing {root}", root=self.root)
        count = self.indexer.build_full()
        self.index.persist()
        return count

    def resolve(self, token: str, origin: str | Path) -> list[ResolvedLocation]:
        return self.engine.resolve(token, origin, self.options)

    def define(self, token: str, origin: str | Path, **context) -> list[ResolvedLocation]:
        return self.definitions.provide(token, origin, **context)

    def watch(self) -> None:
        self.indexer.subscribe()

    def close(self) -> None:
        self.indexer.unsubscribe()
        self.index.persist()
