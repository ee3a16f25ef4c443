#!/usr/bin/env python3
"""
cache.py
--------------------
Client-side query cache.

Query results are cached under tuple keys such as ``("people",)`` or
``("memory", 42)``. The server stays the source of truth: entries are
marked stale by ``invalidate`` and reloaded on the next ``fetch``.

Snapshots let a caller apply a guess to the cache and put the previous
values back if the server rejects the change.

Usage:
    cache = QueryCache()
    people = cache.fetch(("people",), lambda: api.list("people"))

    snap = cache.snapshot([("people",)])
    cache.update(("people",), lambda rows: rows + [guess])
    cache.rollback(snap)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import copy
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Set, Tuple

QueryKey = Tuple[Hashable, ...]

_MISSING = object()


class QueryCache:
    """In-memory cache of query results keyed by tuples."""

    def __init__(self) -> None:
        self._entries: Dict[QueryKey, Any] = {}
        self._stale: Set[QueryKey] = set()

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def keys(self) -> Set[QueryKey]:
        return set(self._entries)

    def get(self, key: QueryKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = value
        self._stale.discard(key)

    def update(self, key: QueryKey, updater: Callable[[Any], Any]) -> None:
        """Replace an entry with ``updater(old)``; absent entries are left alone."""
        if key in self._entries:
            self._entries[key] = updater(self._entries[key])

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(key, None)
        self._stale.discard(key)

    def is_stale(self, key: QueryKey) -> bool:
        return key not in self._entries or key in self._stale

    def invalidate(self, prefix: QueryKey) -> int:
        """
        Mark every entry whose key starts with ``prefix`` as stale.

        Returns:
            Number of entries marked
        """
        matched = [key for key in self._entries if key[: len(prefix)] == prefix]
        self._stale.update(matched)
        return len(matched)

    def fetch(self, key: QueryKey, loader: Callable[[], Any]) -> Any:
        """Return the cached value, loading it first if absent or stale."""
        if self.is_stale(key):
            self.set(key, loader())
        return self._entries[key]

    def snapshot(self, keys: Iterable[QueryKey]) -> Dict[QueryKey, Any]:
        """Deep copies of the given entries (absent ones remembered as absent)."""
        return {
            key: copy.deepcopy(self._entries[key]) if key in self._entries else _MISSING
            for key in keys
        }

    def rollback(self, snapshot: Dict[QueryKey, Any]) -> None:
        """Restore the entries captured by ``snapshot``."""
        for key, value in snapshot.items():
            if value is _MISSING:
                self.remove(key)
            else:
                self._entries[key] = value

    def clear(self, key: Optional[QueryKey] = None) -> None:
        if key is None:
            self._entries.clear()
            self._stale.clear()
        else:
            self.remove(key)
