#!/usr/bin/env python3
"""
memory_manager.py
--------------------
Manages Memory entities: uploaded photos and documents.

Association changes (people, event, place) are delegated to the
association manager so the place-follows-event rule holds on every path,
including creation.

Key Features:
    - CRUD operations, all scoped to the owning user
    - Media metadata (type, url, name, size)
    - Date precision handling
    - People, place and event links on create and update
    - Search over title, description and media name

Usage:
    memory_mgr = MemoryManager(session, owner_id, logger, associations=engine)

    memory = memory_mgr.create({
        "title": "Lunch photo",
        "media_type": "photo",
        "media_url": "https://cdn.example.com/abc_lunch.jpg",
        "event_id": lunch.id,        # place follows the event
        "people_ids": [alice.id],
    })
    memory_mgr.update(memory.id, {"description": SetTo("Sunny day")})
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from mementos.core.logging_manager import MementosLogger
from mementos.core.validators import DataValidator
from mementos.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from mementos.database.models import MediaType, Memory, Person
from mementos.database.updates import get_update, is_set, resolve
from .association_manager import AssociationManager
from .base_manager import OwnedManager

SEARCH_FIELDS = ("title", "description", "media_name")
DETAIL_FIELDS = ("title", "description", "date", "date_type")


def _normalize_media_type(value: Any) -> Optional[MediaType]:
    return DataValidator.normalize_enum(value, MediaType, "media_type")


def _normalize_media_size(value: Any) -> Optional[int]:
    size = DataValidator.normalize_int(value, "media_size")
    return DataValidator.validate_range(size, "media_size", minimum=0)


MEMORY_FIELDS = [
    ("title", DataValidator.normalize_string, False),
    ("description", DataValidator.normalize_string, True),
    ("media_url", DataValidator.normalize_string, True),
    ("media_name", DataValidator.normalize_string, True),
    ("media_size", _normalize_media_size, True),
]

MEDIA_FIELDS = [
    ("media_type", _normalize_media_type, False),
    ("media_url", DataValidator.normalize_string, True),
    ("media_name", DataValidator.normalize_string, True),
    ("media_size", _normalize_media_size, True),
]


class MemoryManager(OwnedManager):
    """Manages Memory table operations for one owner."""

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
        associations: Optional[AssociationManager] = None,
    ):
        super().__init__(session, owner_id, logger)
        self.associations = associations or AssociationManager(session, owner_id, logger)

    @handle_db_errors
    @log_database_operation("get_memory")
    def get(self, memory_id: int) -> Memory:
        """
        Retrieve a memory by id.

        Raises:
            NotFoundError: If the memory does not exist or is not owned
        """
        return self._require_owned(Memory, memory_id)

    @handle_db_errors
    @log_database_operation("get_all_memories")
    def get_all(self) -> List[Memory]:
        """Retrieve all memories, most recent date first."""
        return self._list(Memory, "date")

    @handle_db_errors
    @log_database_operation("search_memories")
    def search(self, query: Optional[str]) -> List[Memory]:
        """Case-insensitive search over title, description and media name."""
        return self._search(Memory, query, SEARCH_FIELDS, "date")

    @handle_db_errors
    @log_database_operation("count_memories")
    def count(self) -> int:
        """Number of memories the owner has."""
        stmt = select(func.count(Memory.id)).where(Memory.owner_id == self.owner_id)
        return self.session.scalar(stmt) or 0

    @handle_db_errors
    @log_database_operation("create_memory")
    @validate_metadata(["title"])
    def create(self, metadata: Dict[str, Any]) -> Memory:
        """
        Create a new memory.

        Args:
            metadata: Dictionary with required key:
                - title: Memory title
                Optional keys:
                - description: Free-form text
                - media_type: photo (default) or document
                - media_url, media_name: strings
                - media_size: Size in bytes
                - date: datetime or ISO string
                - date_type: DateType or its value (default exact)
                - people_ids: List of Person ids
                - place_id: Place id (must match the event's place when both are given)
                - event_id: Event id

        Returns:
            Created Memory

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If a referenced person, place or event is missing
            ConflictError: If place_id contradicts the event's place
        """
        values = self._initial_values(metadata, MEMORY_FIELDS)
        values.update(self._initial_date(metadata))
        values["media_type"] = _normalize_media_type(metadata.get("media_type")) or MediaType.PHOTO

        memory = Memory(owner_id=self.owner_id, **values)
        memory.people = self._require_all_owned(Person, metadata.get("people_ids") or [])
        self.associations.apply_on_create(
            memory,
            place_id=metadata.get("place_id"),
            event_id=metadata.get("event_id"),
        )

        self.session.add(memory)
        self._flush()
        return memory

    @handle_db_errors
    @log_database_operation("update_memory")
    def update(self, memory_id: int, changes: Dict[str, Any]) -> Memory:
        """
        Apply a partial update to a memory.

        Details (title, description, date, date_type) and media fields are
        updated directly; ``people_ids``, ``event_id`` and ``place_id`` go
        through the association manager, event before place.

        Args:
            memory_id: Memory to update
            changes: Tagged updates keyed by field name

        Returns:
            Updated Memory
        """
        memory = self._require_owned(Memory, memory_id)

        with self.session.begin_nested():
            if any(field in changes for field in DETAIL_FIELDS):
                self.associations.update_memory_details(memory.id, changes)

            if self._apply_updates(memory, changes, MEDIA_FIELDS):
                memory.touch()

            people_update = get_update(changes, "people_ids")
            if is_set(people_update):
                self.associations.set_memory_people(memory.id, resolve(people_update) or [])

            event_update = get_update(changes, "event_id")
            if is_set(event_update):
                self.associations.set_memory_event(memory.id, resolve(event_update))

            place_update = get_update(changes, "place_id")
            if is_set(place_update):
                self.associations.set_memory_place(memory.id, resolve(place_update))

        return memory

    @handle_db_errors
    @log_database_operation("delete_memory")
    def delete(self, memory_id: int) -> None:
        """Delete a memory together with its reflections."""
        memory = self._require_owned(Memory, memory_id)
        self.session.delete(memory)
        self._flush()
