"""Centralized constants for scriptnav.

Single source of truth for file names, directories, and defaults shared by the
indexer, the resolver and the CLI.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Per-workspace state directory (snapshot, config, error log)
STATE_DIR = Path("./.scriptnav")

ERROR_LOG_FILE = STATE_DIR / "error.log"
CONFIG_FILE_NAME = "config.json"
SNAPSHOT_FILE_NAME = "cache.json"

# ============================================================================
# PACKAGE ECOSYSTEM CONVENTIONS
# ============================================================================

MANIFEST_NAME = "package.json"
DEPENDENCY_DIR = "node_modules"
SHIM_DIR = ".bin"
INDEX_BASENAME = "index"

# Probing order matters: earlier extensions win
DEFAULT_EXTENSIONS = (".js", ".cjs", ".mjs", ".ts", ".tsx", ".jsx", ".json")

# Windows shim variants, checked after the extensionless shim
SHIM_SUFFIXES = (".cmd", ".ps1")

# Files whose lines are shell commands rather than JS source
PIPELINE_FILE_NAMES = ("Jenkinsfile", "jenkinsfile")
PIPELINE_FILE_SUFFIXES = (".groovy",)

# ============================================================================
# LIMITS
# ============================================================================

DEFAULT_CACHE_CAPACITY = 500
DEFAULT_SEARCH_LIMIT = 10


# Environment overrides are SCRIPTNAV_<SECTION>_<KEY>
ENV_PREFIX = "SCRIPTNAV"
