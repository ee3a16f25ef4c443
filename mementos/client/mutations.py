#!/usr/bin/env python3
"""
mutations.py
--------------------
Optimistic mutations against the query cache.

A mutation runs in four steps:
    1. snapshot the cache entries it may touch
    2. apply an optimistic guess to the cache
    3. call the server; on success write the server's answer back,
       on failure restore the snapshot and re-raise
    4. invalidate the affected query prefixes either way

Usage:
    runner = MutationRunner(cache)
    runner.execute(Mutation(
        run=lambda: api.update("people", 7, {"role": "Chef"}),
        affected=[("people",), ("person", 7)],
        optimistic=lambda c: c.update(("person", 7), lambda p: {**p, "role": "Chef"}),
        reconcile=lambda c, person: c.set(("person", 7), person),
        invalidate=[("people",)],
    ))
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, TypeVar

# --- Local imports ---
from mementos.core.logging_manager import MementosLogger, safe_logger
from .cache import QueryCache, QueryKey

T = TypeVar("T")


@dataclass
class Mutation(Generic[T]):
    """One server call with its cache effects."""

    run: Callable[[], T]
    affected: List[QueryKey] = field(default_factory=list)
    optimistic: Optional[Callable[[QueryCache], None]] = None
    reconcile: Optional[Callable[[QueryCache, T], None]] = None
    invalidate: List[QueryKey] = field(default_factory=list)
    name: str = "mutation"


class MutationRunner:
    """Executes mutations with snapshot, guess, reconcile and rollback."""

    def __init__(self, cache: QueryCache, logger: Optional[MementosLogger] = None) -> None:
        self.cache = cache
        self.logger = logger

    def execute(self, mutation: Mutation[T]) -> T:
        """
        Run a mutation.

        Returns:
            Whatever the server call returned

        Raises:
            Whatever the server call raised, after the cache is restored
        """
        log = safe_logger(self.logger)
        snapshot = self.cache.snapshot(mutation.affected)

        try:
            if mutation.optimistic is not None:
                mutation.optimistic(self.cache)
            result = mutation.run()
        except Exception as e:
            self.cache.rollback(snapshot)
            log.log_warning(
                "Mutation failed; cache rolled back",
                {"mutation": mutation.name, "error": str(e)},
            )
            raise
        else:
            if mutation.reconcile is not None:
                mutation.reconcile(self.cache, result)
            log.log_debug("mutation_applied", {"mutation": mutation.name})
            return result
        finally:
            for prefix in mutation.invalidate:
                self.cache.invalidate(prefix)


def replace_in_list(rows: Any, item: dict) -> Any:
    """Swap the row with ``item['id']`` for ``item`` in a cached list."""
    if not isinstance(rows, list):
        return rows
    return [item if row.get("id") == item.get("id") else row for row in rows]


def merge_in_list(rows: Any, item_id: Any, changes: dict) -> Any:
    """Apply ``changes`` to the row with ``item_id`` in a cached list."""
    if not isinstance(rows, list):
        return rows
    return [{**row, **changes} if row.get("id") == item_id else row for row in rows]
