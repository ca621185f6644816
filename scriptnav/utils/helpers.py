"""Helper utility functions for scriptnav.

IMPORTANT UTILITIES:
- ancestor_dirs(): the directory walk every resolution strategy shares. It
  starts at the given directory and stops BEFORE the filesystem root, the same
  way npm's own lookup treats the root as out of bounds.
"""

import hashlib
import os
from pathlib import Path

from .constants import DEPENDENCY_DIR


def compute_digest(content: str | bytes) -> str:
    """Compute the SHA-1 hex digest of text or raw bytes."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    return hashlib.sha1(data).hexdigest()


def ancestor_dirs(start: str | Path) -> list[str]:
    """List ``start`` and its parents, nearest first, excluding the filesystem root.

    Examples:
        >>> ancestor_dirs("/proj/src/lib")
        ['/proj/src/lib', '/proj/src', '/proj']
    """
    current = os.path.abspath(str(start))
    root = Path(current).anchor
    dirs = []
    while current and current != root:
        dirs.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return dirs


def is_in_dependency_dir(path: str | Path, dependency_dir: str = DEPENDENCY_DIR) -> bool:
    """True if any segment of ``path`` is a dependency directory."""
    return dependency_dir in Path(path).parts


def strip_quotes(token: str) -> str:
    """Remove one leading and one trailing quote character (", ' or `)."""
    quotes = "\"'`"
    if token[:1] in quotes:
        token = token[1:]
    if token[-1:] in quotes:
        token = token[:-1]
    return token
