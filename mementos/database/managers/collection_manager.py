#!/usr/bin/env python3
"""
collection_manager.py
--------------------
Manages Collection entities: named groupings of a user's records.

Collections are inert. Adding an item to a collection never changes the
item; deleting a collection never deletes its items.

Usage:
    collection_mgr = CollectionManager(session, owner_id, logger)

    trip = collection_mgr.create({"name": "Lisbon 2024", "details": "Spring trip"})
    collection_mgr.set_items(trip.id, "memories", [m1.id, m2.id])
"""
from typing import Any, Dict, List, Optional

from mementos.core.exceptions import ValidationError
from mementos.core.validators import DataValidator
from mementos.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from mementos.database.models import Collection, Event, Memory, Person, Place
from .base_manager import OwnedManager

SEARCH_FIELDS = ("name", "details")

COLLECTION_FIELDS = [
    ("name", DataValidator.normalize_string, False),
    ("details", DataValidator.normalize_string, True),
]

ITEM_KINDS = {
    "memories": Memory,
    "events": Event,
    "places": Place,
    "people": Person,
}

_ITEM_KEYS = {
    "memories": "memory_ids",
    "events": "event_ids",
    "places": "place_ids",
    "people": "person_ids",
}


class CollectionManager(OwnedManager):
    """Manages Collection table operations for one owner."""

    @handle_db_errors
    @log_database_operation("get_collection")
    def get(self, collection_id: int) -> Collection:
        """Retrieve a collection by id (NotFoundError when missing)."""
        return self._require_owned(Collection, collection_id)

    @handle_db_errors
    @log_database_operation("get_all_collections")
    def get_all(self) -> List[Collection]:
        """Retrieve all collections, newest first."""
        return self._list(Collection, "created_at")

    @handle_db_errors
    @log_database_operation("search_collections")
    def search(self, query: Optional[str]) -> List[Collection]:
        """Case-insensitive search over name and details."""
        return self._search(Collection, query, SEARCH_FIELDS, "created_at")

    @handle_db_errors
    @log_database_operation("create_collection")
    @validate_metadata(["name"])
    def create(self, metadata: Dict[str, Any]) -> Collection:
        """
        Create a new collection.

        Args:
            metadata: Dictionary with required key ``name`` and optional
                ``details`` plus item id lists (``memory_ids``,
                ``event_ids``, ``place_ids``, ``person_ids``)

        Returns:
            Created Collection
        """
        values = self._initial_values(metadata, COLLECTION_FIELDS)
        collection = Collection(owner_id=self.owner_id, **values)
        self.session.add(collection)

        for kind, key in _ITEM_KEYS.items():
            if metadata.get(key):
                self._replace_collection(collection, kind, metadata[key], ITEM_KINDS[kind])

        self._flush()
        return collection

    @handle_db_errors
    @log_database_operation("update_collection")
    def update(self, collection_id: int, changes: Dict[str, Any]) -> Collection:
        """Apply tagged updates to a collection's name and details."""
        collection = self._require_owned(Collection, collection_id)
        self._apply_updates(collection, changes, COLLECTION_FIELDS)
        self._flush()
        return collection

    @handle_db_errors
    @log_database_operation("set_collection_items")
    def set_items(self, collection_id: int, kind: str, ids: List[Any]) -> Collection:
        """
        Replace the items of one kind in a collection.

        Args:
            collection_id: Collection to update
            kind: memories, events, places or people
            ids: Ids of the owner's records of that kind

        Raises:
            ValidationError: If the kind is unknown
            NotFoundError: If the collection or an item does not resolve
        """
        if kind not in ITEM_KINDS:
            raise ValidationError(
                f"Invalid collection item kind: {kind!r}. "
                f"Expected one of: {', '.join(ITEM_KINDS)}"
            )
        collection = self._require_owned(Collection, collection_id)
        self._replace_collection(collection, kind, ids, ITEM_KINDS[kind])
        collection.touch()
        self._flush()
        return collection

    @handle_db_errors
    @log_database_operation("delete_collection")
    def delete(self, collection_id: int) -> None:
        """Delete a collection (its items are kept)."""
        collection = self._require_owned(Collection, collection_id)
        self.session.delete(collection)
        self._flush()

