"""Capacity-bounded manifest index with least-recently-used eviction.

Storage and eviction are separate: ``BoundedIndex`` keeps the entries in a
plain dict and asks an ``EvictionPolicy`` which key to drop. The default
``LRUPolicy`` tracks recency with an OrderedDict (move-to-end on touch), so
its order is always oldest-first.
"""

import json
import os
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Callable, Hashable, Iterator
from pathlib import Path
from typing import Any, Generic, TypeVar

from scriptnav.utils.constants import DEFAULT_CACHE_CAPACITY, SNAPSHOT_FILE_NAME
from scriptnav.utils.logging import component_logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class EvictionPolicy(ABC, Generic[K]):
    """Decides which key leaves a full index."""

    @abstractmethod
    def touch(self, key: K) -> None:
        """Record an insertion or a successful read of ``key``."""
        ...

    @abstractmethod
    def forget(self, key: K) -> None:
        """Drop ``key`` from the policy's bookkeeping (no-op if unknown)."""
        ...

    @abstractmethod
    def victim(self) -> K | None:
        """The key to evict next, or None when nothing is tracked."""
        ...

    @abstractmethod
    def order(self) -> list[K]:
        """Tracked keys, next victim first."""
        ...

    def clear(self) -> None:
        for key in self.order():
            self.forget(key)


class LRUPolicy(EvictionPolicy[K]):
    """Least-recently-used: every touch moves the key to the end."""

    def __init__(self):
        self._order: OrderedDict[K, None] = OrderedDict()

    def touch(self, key: K) -> None:
        self._order[key] = None
        self._order.move_to_end(key)

    def forget(self, key: K) -> None:
        self._order.pop(key, None)

    def victim(self) -> K | None:
        return next(iter(self._order), None)

    def order(self) -> list[K]:
        return list(self._order)

    def clear(self) -> None:
        self._order.clear()


class BoundedIndex(Generic[K, V]):
    """In-memory mapping with a fixed capacity and optional on-disk snapshot.

    Args:
        capacity: Maximum number of entries (default 500).
        persist_dir: Directory holding ``cache.json``. None disables persistence.
        serialize: Converts a value to JSON-compatible data for the snapshot.
        deserialize: Inverse of ``serialize``; may raise ValueError/KeyError/TypeError.
        policy: Eviction policy, LRU when omitted.
        log: Bound logger; defaults to the ``cache`` component logger.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        persist_dir: str | Path | None = None,
        serialize: Callable[[V], Any] | None = None,
        deserialize: Callable[[Any], V] | None = None,
        policy: EvictionPolicy[K] | None = None,
        log=None,
    ):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.persist_dir = Path(persist_dir) if persist_dir is not None else None
        self._serialize = serialize or (lambda value: value)
        self._deserialize = deserialize or (lambda data: data)
        self._policy: EvictionPolicy[K] = policy or LRUPolicy()
        self._entries: dict[K, V] = {}
        self.log = log or component_logger("cache")

    @property
    def snapshot_path(self) -> Path | None:
        if self.persist_dir is None:
            return None
        return self.persist_dir / SNAPSHOT_FILE_NAME

    def get(self, key: K) -> V | None:
        if key not in self._entries:
            return None
        self._policy.touch(key)
        return self._entries[key]

    def set(self, key: K, value: V) -> None:
        if key not in self._entries and len(self._entries) >= self.capacity:
            victim = self._policy.victim()
            if victim is not None:
                self._entries.pop(victim, None)
                self._policy.forget(victim)
                self.log.debug("Evicted {key}", key=victim)
        self._entries[key] = value
        self._policy.touch(key)

    def delete(self, key: K) -> bool:
        if key not in self._entries:
            return False
        del self._entries[key]
        self._policy.forget(key)
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._policy.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> Iterator[K]:
        return iter(self._policy.order())

    def entries(self) -> Iterator[tuple[K, V]]:
        """Snapshot of (key, value) pairs taken now, oldest first. Does not touch."""
        return iter([(key, self._entries[key]) for key in self._policy.order()])

    def values(self) -> Iterator[V]:
        return iter([self._entries[key] for key in self._policy.order()])

    def persist(self) -> bool:
        """Write every string-keyed entry to the snapshot file. Never raises."""
        path = self.snapshot_path
        if path is None:
            return False
        try:
            payload = {
                key: self._serialize(value)
                for key, value in self.entries()
                if isinstance(key, str)
            }
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(path.name + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError, RecursionError) as e:
            self.log.warning("Failed to save cache to {path}: {err}", path=path, err=e)
            return False
        self.log.debug("Saved {count} entries to {path}", count=len(payload), path=path)
        return True

    def restore(self) -> int:
        """Replace the in-memory content with the snapshot. Never raises.

        Returns the number of entries loaded. On any failure the index is left
        exactly as it was before the call.
        """
        path = self.snapshot_path
        if path is None or not path.exists():
            return 0
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("snapshot root must be an object")
            loaded = [(key, self._deserialize(value)) for key, value in data.items()]
        except (OSError, ValueError, KeyError, TypeError, RecursionError) as e:
            self.log.warning("Failed to load cache from {path}: {err}", path=path, err=e)
            return 0

        self.clear()
        # Snapshot order is oldest-first, so the tail is the most recent
        for key, value in loaded[-self.capacity :]:
            self.set(key, value)
        self.log.debug("Loaded {count} entries from {path}", count=len(self), path=path)
        return len(self)
