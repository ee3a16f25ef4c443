#!/usr/bin/env python3
"""
store.py
--------------------
Cached, optimistic access to the Mementos API.

List queries are cached under ``(resource,)`` and single records under
``(singular, id)``. Writes go through the MutationRunner: the cache is
updated with a guess, replaced with the server's answer when the call
succeeds and rolled back when it fails.

Usage:
    store = MementosStore(ApiClient(base_url, headers=auth_headers))
    memory = store.memory(12)
    store.set_memory_event(12, lunch_id)   # memory shows the event's place at once
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import itertools
from typing import Any, Dict, List, Mapping, Optional

# --- Local imports ---
from mementos.core.logging_manager import MementosLogger
from .api_client import ApiClient
from .cache import QueryCache, QueryKey
from .mutations import Mutation, MutationRunner, merge_in_list, replace_in_list

SINGULAR = {
    "people": "person",
    "places": "place",
    "events": "event",
    "memories": "memory",
    "attributes": "attribute",
    "collections": "collection",
}

_temp_ids = itertools.count(1)


def list_key(resource: str) -> QueryKey:
    return (resource,)


def detail_key(resource: str, item_id: Any) -> QueryKey:
    return (SINGULAR[resource], item_id)


class MementosStore:
    """Query cache plus optimistic mutations over an ApiClient."""

    def __init__(
        self,
        api: ApiClient,
        cache: Optional[QueryCache] = None,
        logger: Optional[MementosLogger] = None,
    ) -> None:
        self.api = api
        self.cache = cache or QueryCache()
        self.runner = MutationRunner(self.cache, logger)

    # ---- Queries ----
    def list(self, resource: str, q: Optional[str] = None) -> List[Dict[str, Any]]:
        """List a resource; searches are not cached."""
        if q:
            return self.api.list(resource, q)
        return self.cache.fetch(list_key(resource), lambda: self.api.list(resource))

    def get(self, resource: str, item_id: int) -> Dict[str, Any]:
        return self.cache.fetch(
            detail_key(resource, item_id), lambda: self.api.get(resource, item_id)
        )

    def memory(self, memory_id: int) -> Dict[str, Any]:
        return self.get("memories", memory_id)

    # ---- Generic writes ----
    def create(self, resource: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        key = list_key(resource)
        guess = {**data, "id": f"temp-{next(_temp_ids)}"}

        def optimistic(cache: QueryCache) -> None:
            cache.update(key, lambda rows: [guess] + list(rows or []))

        def reconcile(cache: QueryCache, created: Dict[str, Any]) -> None:
            cache.update(
                key,
                lambda rows: [created if row.get("id") == guess["id"] else row for row in rows],
            )
            cache.set(detail_key(resource, created["id"]), created)

        return self.runner.execute(
            Mutation(
                run=lambda: self.api.create(resource, data),
                affected=[key],
                optimistic=optimistic,
                reconcile=reconcile,
                invalidate=[key],
                name=f"create_{SINGULAR[resource]}",
            )
        )

    def update(self, resource: str, item_id: int, changes: Mapping[str, Any]) -> Dict[str, Any]:
        lkey, dkey = list_key(resource), detail_key(resource, item_id)

        def optimistic(cache: QueryCache) -> None:
            cache.update(lkey, lambda rows: merge_in_list(rows, item_id, dict(changes)))
            cache.update(dkey, lambda row: {**row, **changes})

        return self.runner.execute(
            Mutation(
                run=lambda: self.api.update(resource, item_id, changes),
                affected=[lkey, dkey],
                optimistic=optimistic,
                reconcile=self._reconcile_record(resource),
                invalidate=[lkey],
                name=f"update_{SINGULAR[resource]}",
            )
        )

    def delete(self, resource: str, item_id: int) -> None:
        lkey, dkey = list_key(resource), detail_key(resource, item_id)

        def optimistic(cache: QueryCache) -> None:
            cache.update(lkey, lambda rows: [r for r in rows if r.get("id") != item_id])
            cache.remove(dkey)

        self.runner.execute(
            Mutation(
                run=lambda: self.api.delete(resource, item_id),
                affected=[lkey, dkey],
                optimistic=optimistic,
                invalidate=[lkey],
                name=f"delete_{SINGULAR[resource]}",
            )
        )

    # ---- Memory associations ----
    def set_memory_people(self, memory_id: int, person_ids: List[int]) -> Dict[str, Any]:
        unique_ids = list(dict.fromkeys(person_ids))
        return self._memory_mutation(
            memory_id,
            {"people_ids": sorted(unique_ids)},
            lambda: self.api.set_memory_people(memory_id, unique_ids),
            "set_memory_people",
        )

    def set_memory_event(self, memory_id: int, event_id: Optional[int]) -> Dict[str, Any]:
        guess: Dict[str, Any] = {"event_id": event_id}
        if event_id is None:
            current = self.cache.get(detail_key("memories", memory_id)) or {}
            if current.get("place_is_derived"):
                guess["place_id"] = None
            guess["place_is_derived"] = False
        else:
            event = self.cache.get(detail_key("events", event_id))
            if event is not None:
                guess["place_id"] = event.get("place_id")
                guess["place_is_derived"] = event.get("place_id") is not None
        return self._memory_mutation(
            memory_id,
            guess,
            lambda: self.api.set_memory_event(memory_id, event_id),
            "set_memory_event",
        )

    def set_memory_place(self, memory_id: int, place_id: Optional[int]) -> Dict[str, Any]:
        return self._memory_mutation(
            memory_id,
            {"place_id": place_id},
            lambda: self.api.set_memory_place(memory_id, place_id),
            "set_memory_place",
        )

    def add_reflection(self, memory_id: int, title: str, content: str) -> Dict[str, Any]:
        dkey = detail_key("memories", memory_id)
        guess = {"id": f"temp-{next(_temp_ids)}", "memory_id": memory_id,
                 "title": title, "content": content}

        def optimistic(cache: QueryCache) -> None:
            cache.update(
                dkey, lambda m: {**m, "reflections": list(m.get("reflections", [])) + [guess]}
            )

        return self.runner.execute(
            Mutation(
                run=lambda: self.api.add_reflection(memory_id, title, content),
                affected=[dkey],
                optimistic=optimistic,
                invalidate=[dkey, list_key("memories")],
                name="add_reflection",
            )
        )

    # ---- Helpers ----
    def _reconcile_record(self, resource: str):
        def reconcile(cache: QueryCache, record: Dict[str, Any]) -> None:
            cache.set(detail_key(resource, record["id"]), record)
            cache.update(list_key(resource), lambda rows: replace_in_list(rows, record))

        return reconcile

    def _memory_mutation(self, memory_id: int, guess: Dict[str, Any], run, name: str):
        lkey, dkey = list_key("memories"), detail_key("memories", memory_id)

        def optimistic(cache: QueryCache) -> None:
            cache.update(dkey, lambda m: {**m, **guess})
            cache.update(lkey, lambda rows: merge_in_list(rows, memory_id, guess))

        return self.runner.execute(
            Mutation(
                run=run,
                affected=[lkey, dkey],
                optimistic=optimistic,
                reconcile=self._reconcile_record("memories"),
                invalidate=[lkey],
                name=name,
            )
        )
