"""Position-aware JSON / JSONC trees built on tree-sitter.

package.json files are usually strict JSON, but editors happily save comments
and trailing commas into them, so both are accepted. tree-sitter's JSON
grammar treats comments as extras; trailing commas are blanked out before
parsing (same length, so offsets do not move). Unlike ``json`` or ``json5``
the tree keeps the source offset and length of every node, which is what lets
a script name be mapped back to the exact character in the manifest.

The tree is a tagged union of small dataclasses. Offsets are character
offsets into the original text, converted from tree-sitter's byte offsets.
Decoded Python values are always derived from the tree with ``node_value`` so
that offsets and values never come from two different parses.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, ClassVar, Union

from tree_sitter_language_pack import get_parser

from scriptnav.exceptions import ManifestParseError

# Deeper documents are rejected instead of recursing without bound
MAX_DEPTH = 64


@dataclass
class StringNode:
    kind: ClassVar[str] = "string"
    offset: int
    length: int
    value: str


@dataclass
class NumberNode:
    kind: ClassVar[str] = "number"
    offset: int
    length: int
    value: int | float


@dataclass
class BooleanNode:
    kind: ClassVar[str] = "boolean"
    offset: int
    length: int
    value: bool


@dataclass
class NullNode:
    kind: ClassVar[str] = "null"
    offset: int
    length: int


@dataclass
class PropertyNode:
    """A ``"key": value`` pair. Spans from the key's opening quote to the end of the value."""

    kind: ClassVar[str] = "property"
    offset: int
    length: int
    key: StringNode
    value: "JsonNode"


@dataclass
class ObjectNode:
    kind: ClassVar[str] = "object"
    offset: int
    length: int
    properties: list[PropertyNode]


@dataclass
class ArrayNode:
    kind: ClassVar[str] = "array"
    offset: int
    length: int
    items: list["JsonNode"]


JsonNode = Union[ObjectNode, ArrayNode, PropertyNode, StringNode, NumberNode, BooleanNode, NullNode]


@lru_cache(maxsize=1)
def _json_parser():
    return get_parser("json")


def _mask_trailing_commas(text: str) -> str:
    """Replace commas directly followed by ``}`` or ``]`` with spaces.

    Strings and comments are skipped. A comma right after ``{``, ``[`` or
    another comma is left alone so that ``[1,,2]`` still fails to parse.
    """
    chars = list(text)
    if text.startswith("\ufeff"):
        chars[0] = " "
    pending = None
    prev = ""
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            i += 1
            while i < n and text[i] != '"':
                i += 2 if text[i] == "\\" else 1
            i += 1
            pending, prev = None, '"'
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline + 1
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close == -1 else close + 2
        elif ch in " \t\r\n\ufeff":
            i += 1
        else:
            if ch == ",":
                pending = i if prev not in ("{", "[", ",") else None
            elif ch in "}]" and pending is not None:
                chars[pending] = " "
                pending = None
            else:
                pending = None
            prev = ch
            i += 1
    return "".join(chars)


class _TreeBuilder:
    """Converts a tree-sitter JSON syntax tree into JsonNode dataclasses."""

    def __init__(self, text: str):
        self.text = text
        self.data = text.encode("utf-8", "surrogatepass")
        self._chars = None if text.isascii() else self._byte_to_char(text)

    @staticmethod
    def _byte_to_char(text: str) -> list[int]:
        mapping: list[int] = []
        for index, ch in enumerate(text):
            mapping.extend([index] * len(ch.encode("utf-8", "surrogatepass")))
        mapping.append(len(text))
        return mapping

    def char_offset(self, byte_offset: int) -> int:
        return byte_offset if self._chars is None else self._chars[byte_offset]

    def span(self, node) -> tuple[int, int]:
        start = self.char_offset(node.start_byte)
        return start, self.char_offset(node.end_byte) - start

    def error(self, message: str, node) -> ManifestParseError:
        return ManifestParseError(message, self.char_offset(node.start_byte))

    def build(self) -> JsonNode:
        root = _json_parser().parse(self.data).root_node
        if root.has_error:
            bad = _first_error(root)
            if bad is not None:
                if bad.is_missing:
                    raise self.error(f"Missing {bad.type}", bad)
                raise self.error("Unexpected input", bad)
            raise ManifestParseError("Invalid JSON", 0)

        values = _values(root)
        if not values:
            raise ManifestParseError("Unexpected end of input", len(self.text))
        if len(values) > 1:
            raise self.error("Unexpected content after value", values[1])
        return self.convert(values[0], 0)

    def convert(self, node, depth: int) -> JsonNode:
        offset, length = self.span(node)
        kind = node.type
        if kind in ("object", "array"):
            if depth >= MAX_DEPTH:
                raise self.error(f"Nesting deeper than {MAX_DEPTH} levels", node)
            if kind == "array":
                return ArrayNode(
                    offset, length, [self.convert(c, depth + 1) for c in _values(node)]
                )
            return ObjectNode(offset, length, [self.convert_pair(c, depth) for c in _values(node)])
        if kind == "string":
            return StringNode(offset, length, self.decode(node, offset, length))
        if kind == "number":
            value = self.decode(node, offset, length)
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise self.error("Invalid number", node)
            return NumberNode(offset, length, value)
        if kind in ("true", "false"):
            return BooleanNode(offset, length, kind == "true")
        if kind == "null":
            return NullNode(offset, length)
        raise self.error("Value expected", node)

    def convert_pair(self, node, depth: int) -> PropertyNode:
        key_node = node.child_by_field_name("key")
        value_node = node.child_by_field_name("value")
        if key_node is None or key_node.type != "string":
            raise self.error("Property name expected", key_node or node)
        if value_node is None:
            raise self.error("Value expected", node)
        key = self.convert(key_node, depth + 1)
        value = self.convert(value_node, depth + 1)
        return PropertyNode(key.offset, value.offset + value.length - key.offset, key, value)

    def decode(self, node, offset: int, length: int) -> Any:
        """Decode one string or number literal with the json module."""
        literal = self.text[offset : offset + length]
        try:
            return json.loads(literal)
        except ValueError as e:
            raise self.error(f"Invalid {node.type} literal", node) from e


def _values(node) -> list:
    """Named children that are not comments."""
    return [c for c in node.named_children if c.type != "comment"]


def _first_error(root):
    """First ERROR or MISSING node in document order, walked without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parse_tree(text: str) -> JsonNode:
    """Parse JSON/JSONC text into a position-aware tree.

    Raises:
        ManifestParseError: on any syntax error, or nesting deeper than MAX_DEPTH.
    """
    return _TreeBuilder(_mask_trailing_commas(text)).build()


def node_value(node: JsonNode) -> Any:
    """Decode a node into plain Python values. Duplicate keys: last one wins."""
    if isinstance(node, ObjectNode):
        return {prop.key.value: node_value(prop.value) for prop in node.properties}
    if isinstance(node, ArrayNode):
        return [node_value(item) for item in node.items]
    if isinstance(node, PropertyNode):
        return node_value(node.value)
    if isinstance(node, NullNode):
        return None
    return node.value


def find_node_at_location(tree: JsonNode | None, path: list[str | int]) -> JsonNode | None:
    """Follow ``path`` (property names and array indexes) down from ``tree``.

    Returns the value node at the end of the path, or None when any segment is
    missing. For duplicate keys the last property wins, matching ``node_value``.
    """
    node = tree
    for segment in path:
        if node is None:
            return None
        if isinstance(segment, str):
            if not isinstance(node, ObjectNode):
                return None
            found = None
            for prop in node.properties:
                if prop.key.value == segment:
                    found = prop.value
            node = found
        else:
            if not isinstance(node, ArrayNode) or not 0 <= segment < len(node.items):
                return None
            node = node.items[segment]
    return node


def _children(node: JsonNode) -> list[JsonNode]:
    if isinstance(node, ObjectNode):
        return list(node.properties)
    if isinstance(node, ArrayNode):
        return list(node.items)
    if isinstance(node, PropertyNode):
        return [node.key, node.value]
    return []


def find_node_path_at_offset(tree: JsonNode | None, offset: int) -> list[JsonNode]:
    """Return the chain of nodes (root first) whose span contains ``offset``.

    The last element is the innermost node, the one before it its parent.
    """
    path: list[JsonNode] = []
    node = tree
    while node is not None and node.offset <= offset < node.offset + node.length:
        path.append(node)
        node = next(
            (c for c in _children(node) if c.offset <= offset < c.offset + c.length),
            None,
        )
    return path


def offset_to_position(text: str, offset: int) -> tuple[int, int]:
    """Translate a character offset into a 0-based ``(line, column)`` pair."""
    before = text[: max(0, offset)]
    line = before.count("\n")
    column = len(before) - (before.rfind("\n") + 1)
    return line, column


def tree_to_dict(node: JsonNode) -> dict[str, Any]:
    """Serialize a tree to plain JSON-compatible dicts."""
    data: dict[str, Any] = {"type": node.kind, "offset": node.offset, "length": node.length}
    if isinstance(node, ObjectNode):
        data["children"] = [tree_to_dict(p) for p in node.properties]
    elif isinstance(node, ArrayNode):
        data["children"] = [tree_to_dict(i) for i in node.items]
    elif isinstance(node, PropertyNode):
        data["key"] = tree_to_dict(node.key)
        data["value"] = tree_to_dict(node.value)
    elif not isinstance(node, NullNode):
        data["value"] = node.value
    return data


def tree_from_dict(data: dict[str, Any]) -> JsonNode:
    """Rebuild a tree serialized by ``tree_to_dict``.

    Raises:
        ValueError, KeyError, TypeError: when ``data`` is not a serialized tree.
    """
    kind = data["type"]
    offset = int(data["offset"])
    length = int(data["length"])
    if kind == "object":
        properties = [tree_from_dict(c) for c in data["children"]]
        if not all(isinstance(p, PropertyNode) for p in properties):
            raise ValueError("object children must be properties")
        return ObjectNode(offset, length, properties)
    if kind == "array":
        return ArrayNode(offset, length, [tree_from_dict(c) for c in data["children"]])
    if kind == "property":
        key = tree_from_dict(data["key"])
        if not isinstance(key, StringNode):
            raise ValueError("property key must be a string")
        return PropertyNode(offset, length, key, tree_from_dict(data["value"]))
    if kind == "string":
        return StringNode(offset, length, str(data["value"]))
    if kind == "number":
        return NumberNode(offset, length, data["value"])
    if kind == "boolean":
        return BooleanNode(offset, length, bool(data["value"]))
    if kind == "null":
        return NullNode(offset, length)
    raise ValueError(f"unknown node type: {kind!r}")
