"""scriptnav utilities package."""

from .constants import (
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_EXTENSIONS,
    DEFAULT_SEARCH_LIMIT,
    DEPENDENCY_DIR,
    ERROR_LOG_FILE,
    MANIFEST_NAME,
    SNAPSHOT_FILE_NAME,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .helpers import ancestor_dirs, compute_digest, is_in_dependency_dir, strip_quotes

__all__ = [
    "DEFAULT_CACHE_CAPACITY",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_SEARCH_LIMIT",
    "DEPENDENCY_DIR",
    "ERROR_LOG_FILE",
    "MANIFEST_NAME",
    "SNAPSHOT_FILE_NAME",
    "STATE_DIR",
    "handle_exceptions",
    "ancestor_dirs",
    "compute_digest",
    "is_in_dependency_dir",
    "strip_quotes",
]
