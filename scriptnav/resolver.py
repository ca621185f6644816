"""Token resolution for the JavaScript package ecosystem.

Given a token found in source text (a relative path, a module specifier, a
script or binary name) and the file it was found in, produce the locations
that define it. Strategies run in a fixed order and the first one that finds
anything wins:

    1. literal path        "./lib/x"        -> probe relative to the origin
    2. dependency subpath  "pkg/sub"        -> <ancestor>/node_modules/pkg/sub
    3. binary name         "eslint"         -> bin fields, module manifests, .bin shims
    4. workspace search    anything else    -> files whose name starts with the token

Nothing in this module raises for a miss: filesystem and parse errors are
logged at debug level and count as a miss for the candidate being checked.
"""

import glob
import os
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass, field
from pathlib import Path

import json5

from scriptnav.cache import ManifestIndex
from scriptnav.fs import FileSystem, LocalFileSystem
from scriptnav.jsonc import offset_to_position
from scriptnav.manifest import (
    ManifestEntry,
    bin_basename,
    bin_entry_for,
    bin_field,
    entry_field,
    name_matches,
)
from scriptnav.probe import probe
from scriptnav.utils.constants import (
    DEFAULT_EXTENSIONS,
    DEFAULT_SEARCH_LIMIT,
    DEPENDENCY_DIR,
    INDEX_BASENAME,
    MANIFEST_NAME,
    SHIM_DIR,
    SHIM_SUFFIXES,
)
from scriptnav.utils.helpers import ancestor_dirs, strip_quotes
from scriptnav.utils.logging import component_logger

# Reason tags. Stable strings: diagnostics and tests key on them.
REASON_RELATIVE_PATH = "relative path"
REASON_MODULE_SUBPATH = "module subpath"
REASON_BIN_NEAREST = "bin field in nearest package"
REASON_BIN_MODULE = "bin field in module package"
REASON_MODULE_MAIN = "module main"
REASON_MODULE_INDEX = "module index fallback"
REASON_SHIM = ".bin shim"
REASON_BIN_CACHED = "bin in cached package"
REASON_MAIN_CACHED = "main in cached package"
REASON_WORKSPACE_SEARCH = "workspace search"
REASON_SCRIPT_ENTRY = "scripts entry"
REASON_BIN_ENTRY = "bin entry"
REASON_BIN_PATH = "bin path"


@dataclass
class ResolvedLocation:
    """A file that defines a token, optionally pinned to a character in it."""

    path: str
    reason: str
    offset: int | None = None
    line: int | None = None
    column: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ResolveOptions:
    """Knobs for a single resolution.

    prefer_nearest_dependency: walk ancestor directories nearest-first (the
        npm convention). False walks from the outermost ancestor inwards.
    """

    extensions: Sequence[str] = field(default_factory=lambda: DEFAULT_EXTENSIONS)
    prefer_nearest_dependency: bool = True
    search_limit: int = DEFAULT_SEARCH_LIMIT
    dependency_dir: str = DEPENDENCY_DIR


def looks_like_path(token: str) -> bool:
    """Relative/absolute path syntax rather than a bare name or module specifier."""
    return (
        token.startswith(("./", "../", "/"))
        or "./" in token
        or "../" in token
    )


Strategy = Callable[[str, str, ResolveOptions], list[ResolvedLocation]]


class ResolutionEngine:
    """Runs the ordered strategy chain against the manifest index and the filesystem."""

    def __init__(
        self,
        index: ManifestIndex,
        fs: FileSystem | None = None,
        workspace_root: str | Path | None = None,
        log=None,
    ):
        self.index = index
        self.fs = fs or LocalFileSystem()
        self.workspace_root = os.path.abspath(workspace_root or os.getcwd())
        self.log = log or component_logger("resolver")

    @property
    def strategies(self) -> list[Strategy]:
        return [
            self.resolve_literal_path,
            self.resolve_module_subpath,
            self.resolve_binary,
            self.search_workspace,
        ]

    def resolve(
        self,
        token: str,
        origin_path: str | Path,
        options: ResolveOptions | None = None,
    ) -> list[ResolvedLocation]:
        """Resolve ``token`` as seen from ``origin_path``. Empty list when nothing matches."""
        options = options or ResolveOptions()
        token = token.strip()
        if not token:
            return []
        origin_dir = os.path.dirname(os.path.abspath(origin_path))

        for strategy in self.strategies:
            try:
                results = strategy(token, origin_dir, options)
            except (OSError, ValueError, RecursionError) as e:
                self.log.debug(
                    "{name} failed for {token}: {err}",
                    name=strategy.__name__,
                    token=token,
                    err=e,
                )
                continue
            if results:
                return results
        return []

    def _ancestors(self, origin_dir: str, options: ResolveOptions) -> list[str]:
        dirs = ancestor_dirs(origin_dir)
        return dirs if options.prefer_nearest_dependency else dirs[::-1]

    def _probe(self, base: str, options: ResolveOptions) -> str | None:
        return probe(os.path.normpath(base), self.fs, options.extensions, log=self.log)

    def resolve_literal_path(
        self, token: str, origin_dir: str, options: ResolveOptions
    ) -> list[ResolvedLocation]:
        if not looks_like_path(token):
            return []
        candidate = strip_quotes(token)
        if not os.path.isabs(candidate):
            candidate = os.path.normpath(os.path.join(origin_dir, candidate))
        resolved = self._probe(candidate, options)
        if resolved:
            return [ResolvedLocation(resolved, REASON_RELATIVE_PATH)]
        return []

    def resolve_module_subpath(
        self, token: str, origin_dir: str, options: ResolveOptions
    ) -> list[ResolvedLocation]:
        if looks_like_path(token) or "/" not in token:
            return []
        for directory in self._ancestors(origin_dir, options):
            resolved = self._probe(os.path.join(directory, options.dependency_dir, token), options)
            if resolved:
                return [ResolvedLocation(resolved, REASON_MODULE_SUBPATH)]
        return []

    def resolve_binary(
        self, token: str, origin_dir: str, options: ResolveOptions
    ) -> list[ResolvedLocation]:
        found = self.resolve_binary_name(token, origin_dir, options)
        return [found] if found else []

    def resolve_binary_name(
        self, cmd: str, origin_dir: str, options: ResolveOptions | None = None
    ) -> ResolvedLocation | None:
        """Find the file behind an executable name.

        At each ancestor level: the indexed manifest's ``bin`` mapping, then
        ``node_modules/<cmd>/package.json`` read straight from disk, then the
        ``node_modules/.bin`` shims. After the walk, any indexed manifest whose
        name is ``cmd`` (scoped or not).
        """
        options = options or ResolveOptions()
        tried: list[str] = []

        for directory in self._ancestors(origin_dir, options):
            for step in (self._bin_in_manifest, self._bin_in_module, self._bin_shim):
                try:
                    found = step(cmd, directory, options, tried)
                except (OSError, ValueError, RecursionError) as e:
                    self.log.debug(
                        "{step} failed in {dir}: {err}", step=step.__name__, dir=directory, err=e
                    )
                    continue
                if found:
                    return found

        found = self._bin_in_cached_packages(cmd, options)
        if found:
            return found

        self.log.debug("No binary for {cmd}; tried {tried}", cmd=cmd, tried=tried[:10])
        return None

    def _bin_in_manifest(
        self, cmd: str, directory: str, options: ResolveOptions, tried: list[str]
    ) -> ResolvedLocation | None:
        entry = self.index.get(os.path.join(directory, MANIFEST_NAME))
        if entry is None:
            return None
        bins = entry.bin
        if not isinstance(bins, dict) or cmd not in bins:
            return None
        resolved = self._probe(os.path.join(directory, bins[cmd]), options)
        if resolved:
            return ResolvedLocation(resolved, REASON_BIN_NEAREST)
        return None

    def _bin_in_module(
        self, cmd: str, directory: str, options: ResolveOptions, tried: list[str]
    ) -> ResolvedLocation | None:
        module_dir = os.path.join(directory, options.dependency_dir, cmd)
        manifest_path = os.path.join(module_dir, MANIFEST_NAME)
        tried.append(manifest_path)
        if not self.fs.is_file(manifest_path):
            return None

        raw = json5.loads(self.fs.read_text(manifest_path))
        if not isinstance(raw, dict):
            raw = {}

        bin_path = bin_entry_for(raw, cmd)
        if bin_path:
            resolved = self._probe(os.path.join(module_dir, bin_path), options)
            if resolved:
                return ResolvedLocation(resolved, REASON_BIN_MODULE)

        main = entry_field(raw)
        if main:
            resolved = self._probe(os.path.join(module_dir, main), options)
            if resolved:
                return ResolvedLocation(resolved, REASON_MODULE_MAIN)

        resolved = self._probe(os.path.join(module_dir, INDEX_BASENAME), options)
        if resolved:
            return ResolvedLocation(resolved, REASON_MODULE_INDEX)
        return None

    def _bin_shim(
        self, cmd: str, directory: str, options: ResolveOptions, tried: list[str]
    ) -> ResolvedLocation | None:
        shim = os.path.join(directory, options.dependency_dir, SHIM_DIR, cmd)
        resolved = self._probe(shim, options)
        if resolved:
            return ResolvedLocation(resolved, REASON_SHIM)
        for suffix in SHIM_SUFFIXES:
            if self.fs.is_file(shim + suffix):
                return ResolvedLocation(shim + suffix, f"{REASON_SHIM} {suffix}")
        return None

    def _bin_in_cached_packages(self, cmd: str, options: ResolveOptions) -> ResolvedLocation | None:
        for entry in self.index.values():
            if not name_matches(entry.name, cmd):
                continue
            package_dir = os.path.dirname(entry.location)
            try:
                bin_path = bin_entry_for(entry.raw, cmd)
                if bin_path:
                    resolved = self._probe(os.path.join(package_dir, bin_path), options)
                    if resolved:
                        return ResolvedLocation(resolved, REASON_BIN_CACHED)
                main = entry.raw.get("main")
                if isinstance(main, str) and main:
                    resolved = self._probe(os.path.join(package_dir, main), options)
                    if resolved:
                        return ResolvedLocation(resolved, REASON_MAIN_CACHED)
            except (OSError, ValueError, RecursionError) as e:
                self.log.debug("Cached package {path} failed: {err}", path=entry.location, err=e)
        return None

    def search_workspace(
        self, token: str, origin_dir: str, options: ResolveOptions
    ) -> list[ResolvedLocation]:
        """Last resort: files in the workspace whose name starts with ``token``."""
        found = self.fs.find_files(
            self.workspace_root,
            glob.escape(token) + "*",
            exclude_dirs=[options.dependency_dir],
            limit=options.search_limit,
        )
        return [ResolvedLocation(path, REASON_WORKSPACE_SEARCH) for path in found]

    def lookup_in_manifest(self, entry: ManifestEntry, key: str) -> list[ResolvedLocation]:
        """Locate ``scripts.<key>`` / ``bin.<key>`` inside one manifest.

        A string-form ``bin`` whose basename equals ``key`` also matches. Each
        result points at the value node's offset, with its line and column.
        """
        matches: list[tuple[int, str]] = []
        for section, reason in (("scripts", REASON_SCRIPT_ENTRY), ("bin", REASON_BIN_ENTRY)):
            node = entry.find(section, key)
            if node is not None:
                matches.append((node.offset, reason))

        if isinstance(bin_field(entry.raw), str) and bin_basename(entry.raw) == key:
            node = entry.find("bin")
            if node is not None:
                matches.append((node.offset, REASON_BIN_PATH))

        if not matches:
            return []

        text = self._read_manifest_text(entry.location)
        results = []
        for offset, reason in matches:
            line, column = offset_to_position(text, offset) if text is not None else (0, 0)
            results.append(ResolvedLocation(entry.location, reason, offset, line, column))
        return results

    def _read_manifest_text(self, location: str) -> str | None:
        try:
            return self.fs.read_text(location)
        except (OSError, UnicodeDecodeError) as e:
            self.log.debug("Cannot read {path} for positions: {err}", path=location, err=e)
            return None


def resolve(
    token: str,
    origin_path: str | Path,
    index: ManifestIndex,
    options: ResolveOptions | None = None,
    fs: FileSystem | None = None,
    workspace_root: str | Path | None = None,
) -> list[ResolvedLocation]:
    """One-shot resolution without keeping an engine around."""
    engine = ResolutionEngine(index, fs=fs, workspace_root=workspace_root)
    return engine.resolve(token, origin_path, options)
