"""Go-to-definition for script names, binaries and package.json values.

This is the layer an editor integration talks to. It answers "where is this
defined?" for a token under the cursor:

- in ordinary files, ``npm run lint`` / ``lint`` jumps to ``scripts.lint`` in
  the nearest manifest that defines it (nearest-wins along the ancestry);
- inside a package.json, a script value such as ``"eslint ."`` or
  ``"node tools/build.js"`` is resolved to the file it runs;
- in Jenkinsfiles and other Groovy pipelines the whole shell line is
  normalized first, so clicking anywhere in ``npx fr-short-uri --hub x``
  finds ``fr-short-uri``.
"""

import os
import re
from pathlib import Path

from scriptnav.cache import ManifestIndex
from scriptnav.exceptions import ManifestParseError
from scriptnav.fs import FileSystem, LocalFileSystem
from scriptnav.jsonc import PropertyNode, StringNode, find_node_path_at_offset, parse_tree
from scriptnav.manifest import ManifestEntry
from scriptnav.normalizer import is_package_manager_invocation, normalize_command
from scriptnav.resolver import ResolutionEngine, ResolvedLocation, ResolveOptions
from scriptnav.utils.constants import MANIFEST_NAME, PIPELINE_FILE_NAMES, PIPELINE_FILE_SUFFIXES
from scriptnav.utils.helpers import ancestor_dirs
from scriptnav.utils.logging import component_logger

REASON_DIRECT_PATH = "direct path"

_PATH_CHARS = re.compile(r"[./\\]")


def is_pipeline_file(path: str | Path) -> bool:
    name = os.path.basename(path)
    return name in PIPELINE_FILE_NAMES or name.endswith(PIPELINE_FILE_SUFFIXES)


class DefinitionProvider:
    """Maps a token and its origin file to definition locations."""

    def __init__(
        self,
        index: ManifestIndex,
        engine: ResolutionEngine,
        fs: FileSystem | None = None,
        options: ResolveOptions | None = None,
        log=None,
    ):
        self.index = index
        self.engine = engine
        self.fs = fs or LocalFileSystem()
        self.options = options or ResolveOptions()
        self.log = log or component_logger("definitions")

    def find_nearest_package(self, path: str | Path) -> ManifestEntry | None:
        """The closest indexed manifest above ``path``."""
        for directory in ancestor_dirs(os.path.dirname(os.path.abspath(path))):
            entry = self.index.get(os.path.join(directory, MANIFEST_NAME))
            if entry is not None:
                return entry
        return None

    def find_script_definition(self, token: str, origin: str | Path) -> list[ResolvedLocation]:
        """Look a script or bin name up, nearest manifest first."""
        key = normalize_command(token)
        if not key:
            return []
        origin_dir = os.path.dirname(os.path.abspath(origin))

        for directory in ancestor_dirs(origin_dir):
            entry = self.index.get(os.path.join(directory, MANIFEST_NAME))
            if entry is None:
                continue
            results = self.engine.lookup_in_manifest(entry, key)
            if results:
                return results

        results: list[ResolvedLocation] = []
        for entry in self.index.values():
            results.extend(self.engine.lookup_in_manifest(entry, key))
        if results:
            return results

        if _PATH_CHARS.search(key):
            candidate = os.path.normpath(os.path.join(origin_dir, key))
            try:
                if self.fs.exists(candidate):
                    return [ResolvedLocation(candidate, REASON_DIRECT_PATH, 0, 0, 0)]
            except OSError as e:
                self.log.debug("Cannot stat {path}: {err}", path=candidate, err=e)
        return []

    def definition_in_manifest(
        self, text: str, offset: int, manifest_path: str | Path
    ) -> list[ResolvedLocation]:
        """Resolve the string value of the property under ``offset`` in a manifest."""
        try:
            tree = parse_tree(text)
        except ManifestParseError as e:
            self.log.debug("Cannot parse {path}: {err}", path=manifest_path, err=e)
            return []

        value = _property_value_at(find_node_path_at_offset(tree, offset))
        if not value:
            return []

        command = normalize_command(value)
        if not command:
            return []
        results = self.engine.resolve(command, manifest_path, self.options)
        if results:
            return results
        return self.find_script_definition(command, manifest_path)

    def definition_for_command_line(
        self, line: str, word: str, origin: str | Path
    ) -> list[ResolvedLocation]:
        """Pipeline files: prefer the command named by the whole shell line."""
        if is_package_manager_invocation(line):
            normalized = normalize_command(line)
            if normalized and word in normalized:
                return self.find_script_definition(normalized, origin)
        return self.find_script_definition(word, origin)

    def provide(
        self,
        token: str,
        origin: str | Path,
        line_text: str | None = None,
        offset: int | None = None,
        text: str | None = None,
    ) -> list[ResolvedLocation]:
        """Entry point for editor integrations. Never raises."""
        try:
            if is_pipeline_file(origin) and line_text is not None:
                return self.definition_for_command_line(line_text, token, origin)

            if os.path.basename(origin) == MANIFEST_NAME and text is not None and offset is not None:
                results = self.definition_in_manifest(text, offset, origin)
                if results:
                    return results

            return self.find_script_definition(token, origin)
        except Exception:
            self.log.opt(exception=True).error("Definition lookup failed for {token}", token=token)
            return []


def _property_value_at(path: list) -> str | None:
    """String value of the property the cursor is on (key, value, or between)."""
    if not path:
        return None
    node = path[-1]
    parent = path[-2] if len(path) > 1 else None

    if isinstance(node, StringNode) and isinstance(parent, PropertyNode):
        if node is parent.value:
            return node.value
        value = parent.value
        return value.value if isinstance(value, StringNode) else None

    if isinstance(node, PropertyNode) and isinstance(node.value, StringNode):
        return node.value.value
    return None
