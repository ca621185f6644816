"""Parsed package.json records and the field accessors the resolver relies on."""

import posixpath
from dataclasses import dataclass
from typing import Any

from scriptnav.exceptions import ManifestParseError
from scriptnav.jsonc import (
    JsonNode,
    ObjectNode,
    find_node_at_location,
    node_value,
    parse_tree,
    tree_from_dict,
    tree_to_dict,
)
from scriptnav.utils.helpers import compute_digest


@dataclass
class ManifestEntry:
    """One indexed package.json.

    ``raw`` is always derived from ``tree``; both come from the same text.
    ``digest`` is recorded at index time and persisted but nothing compares it.
    """

    location: str
    raw: dict[str, Any]
    tree: ObjectNode
    digest: str

    @property
    def name(self) -> str | None:
        name = self.raw.get("name")
        return name if isinstance(name, str) else None

    @property
    def scripts(self) -> dict[str, str]:
        scripts = self.raw.get("scripts")
        if not isinstance(scripts, dict):
            return {}
        return {k: v for k, v in scripts.items() if isinstance(v, str)}

    @property
    def bin(self) -> str | dict[str, str] | None:
        return bin_field(self.raw)

    @property
    def main(self) -> str | None:
        return entry_field(self.raw)

    def find(self, *path: str | int) -> JsonNode | None:
        """Value node at ``path`` inside the manifest, or None."""
        return find_node_at_location(self.tree, list(path))

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "raw": self.raw,
            "tree": tree_to_dict(self.tree),
            "digest": self.digest,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManifestEntry":
        """Rebuild an entry from ``to_dict`` output.

        Raises:
            ValueError, KeyError, TypeError: when ``data`` is malformed.
        """
        tree = tree_from_dict(data["tree"])
        if not isinstance(tree, ObjectNode):
            raise ValueError("manifest tree root must be an object")
        raw = data["raw"]
        if not isinstance(raw, dict):
            raise ValueError("manifest raw content must be an object")
        return cls(
            location=str(data["location"]),
            raw=raw,
            tree=tree,
            digest=str(data.get("digest", "")),
        )


def parse_manifest(location: str, text: str) -> ManifestEntry:
    """Parse manifest text in a single pass into a ManifestEntry.

    Raises:
        ManifestParseError: if the text is not JSON/JSONC or not an object.
    """
    digest = compute_digest(text)
    tree = parse_tree(text)
    if not isinstance(tree, ObjectNode):
        raise ManifestParseError("Manifest root must be an object", tree.offset)
    return ManifestEntry(location=location, raw=node_value(tree), tree=tree, digest=digest)


def bin_field(raw: dict[str, Any]) -> str | dict[str, str] | None:
    """The ``bin`` field as a string or a {command: path} mapping of strings."""
    value = raw.get("bin")
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        mapping = {k: v for k, v in value.items() if isinstance(v, str) and v}
        return mapping or None
    return None


def entry_field(raw: dict[str, Any]) -> str | None:
    """``main``, else ``module``."""
    for key in ("main", "module"):
        value = raw.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def bin_entry_for(raw: dict[str, Any], cmd: str) -> str | None:
    """Pick the bin path for ``cmd``: the string form, the exact key, else the first entry."""
    value = bin_field(raw)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get(cmd) or next(iter(value.values()))
    return None


def name_matches(name: str | None, cmd: str) -> bool:
    """True for ``cmd``, ``@cmd`` and any scoped ``.../cmd`` package name."""
    if not name:
        return False
    return name == cmd or name == f"@{cmd}" or name.endswith(f"/{cmd}")


def bin_basename(raw: dict[str, Any]) -> str | None:
    """Basename of a string-form ``bin`` (``"./bin/cli.js"`` -> ``"cli.js"``)."""
    value = bin_field(raw)
    if isinstance(value, str):
        return posixpath.basename(value.replace("\\", "/"))
    return None
