"""scriptnav cache package.

Bounded, optionally persistent index of parsed manifests:
- BoundedIndex: capacity-limited mapping with snapshot persistence
- EvictionPolicy / LRUPolicy: pluggable eviction order
- create_manifest_index: BoundedIndex wired for ManifestEntry values
"""

from pathlib import Path

from scriptnav.cache.lru_cache import BoundedIndex, EvictionPolicy, LRUPolicy
from scriptnav.manifest import ManifestEntry
from scriptnav.utils.constants import DEFAULT_CACHE_CAPACITY

ManifestIndex = BoundedIndex[str, ManifestEntry]


def create_manifest_index(
    capacity: int = DEFAULT_CACHE_CAPACITY,
    persist_dir: str | Path | None = None,
    log=None,
) -> ManifestIndex:
    """Build the index used for package.json entries."""
    return BoundedIndex(
        capacity=capacity,
        persist_dir=persist_dir,
        serialize=ManifestEntry.to_dict,
        deserialize=ManifestEntry.from_dict,
        log=log,
    )


__all__ = [
    "BoundedIndex",
    "EvictionPolicy",
    "LRUPolicy",
    "ManifestIndex",
    "create_manifest_index",
]
