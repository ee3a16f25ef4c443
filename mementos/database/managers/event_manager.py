#!/usr/bin/env python3
"""
event_manager.py
--------------------
Manages Event entities.

An event is a dated happening, optionally held at a place. Memories
linked to an event share its place, so every change to an event's place
(and the deletion of an event) is reconciled through the association
manager.

Key Features:
    - CRUD operations, all scoped to the owning user
    - Date precision handling (exact, day, month, year)
    - Place changes propagated to linked memories
    - Replace-style attribute values
    - Search over title and description

Usage:
    event_mgr = EventManager(session, owner_id, logger, associations=engine)

    lunch = event_mgr.create({
        "title": "Team Lunch",
        "date": "2024-05-10T12:30:00Z",
        "type": "social",
        "place_id": cafe.id,
    })
    event_mgr.update(lunch.id, {"place_id": SetTo(other.id)})  # memories follow
    event_mgr.delete(lunch.id)  # memories detached, derived place cleared
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.core.validators import DataValidator
from mementos.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from mementos.database.models import AttributeScope, Event, EventType, Place
from mementos.database.updates import get_update, is_set, resolve
from .association_manager import AssociationManager
from .attribute_manager import AttributeManager
from .base_manager import OwnedManager

SEARCH_FIELDS = ("title", "description")


def _normalize_event_type(value: Any) -> Optional[EventType]:
    return DataValidator.normalize_enum(value, EventType, "type")


def _normalize_capacity(value: Any) -> Optional[int]:
    capacity = DataValidator.normalize_int(value, "capacity")
    return DataValidator.validate_range(capacity, "capacity", minimum=0)


EVENT_FIELDS = [
    ("title", DataValidator.normalize_string, False),
    ("description", DataValidator.normalize_string, True),
    ("type", _normalize_event_type, True),
    ("capacity", _normalize_capacity, True),
]


class EventManager(OwnedManager):
    """Manages Event table operations for one owner."""

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
        associations: Optional[AssociationManager] = None,
        attributes: Optional[AttributeManager] = None,
    ):
        super().__init__(session, owner_id, logger)
        self.associations = associations or AssociationManager(session, owner_id, logger)
        self.attributes = attributes or AttributeManager(session, owner_id, logger)

    @handle_db_errors
    @log_database_operation("get_event")
    def get(self, event_id: int) -> Event:
        """
        Retrieve an event by id.

        Raises:
            NotFoundError: If the event does not exist or is not owned
        """
        return self._require_owned(Event, event_id)

    @handle_db_errors
    @log_database_operation("get_all_events")
    def get_all(self) -> List[Event]:
        """Retrieve all events, most recent date first."""
        return self._list(Event, "date")

    @handle_db_errors
    @log_database_operation("search_events")
    def search(self, query: Optional[str]) -> List[Event]:
        """Case-insensitive search over title and description."""
        return self._search(Event, query, SEARCH_FIELDS, "date")

    @handle_db_errors
    @log_database_operation("create_event")
    @validate_metadata(["title"])
    def create(self, metadata: Dict[str, Any]) -> Event:
        """
        Create a new event.

        Args:
            metadata: Dictionary with required key:
                - title: Event title
                Optional keys:
                - description: Free-form text
                - date: datetime or ISO string
                - date_type: DateType or its value (default exact)
                - type: EventType or its value
                - capacity: Integer >= 0
                - place_id: Place id
                - attributes: List of {"attribute"|"attribute_id", "value"}

        Returns:
            Created Event

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If the place does not resolve
        """
        values = self._initial_values(metadata, EVENT_FIELDS)
        values.update(self._initial_date(metadata))

        event = Event(owner_id=self.owner_id, **values)
        if metadata.get("place_id") is not None:
            event.place = self._require_owned(Place, metadata["place_id"])

        self.session.add(event)
        self._flush()

        if metadata.get("attributes"):
            self.attributes.set_values(event, AttributeScope.EVENT, metadata["attributes"])

        return event

    @handle_db_errors
    @log_database_operation("update_event")
    def update(self, event_id: int, changes: Dict[str, Any]) -> Event:
        """
        Apply a partial update to an event.

        A new place is propagated to every memory linked to the event.

        Args:
            event_id: Event to update
            changes: Tagged updates keyed by field name; also accepts
                ``place_id`` and ``attributes`` (replace)

        Returns:
            Updated Event
        """
        event = self._require_owned(Event, event_id)

        with self.session.begin_nested():
            self._apply_updates(event, changes, EVENT_FIELDS)
            self._apply_date_updates(event, changes)

            place_update = get_update(changes, "place_id")
            if is_set(place_update):
                place_id = resolve(place_update)
                new_place = self._require_owned(Place, place_id) if place_id is not None else None
                if event.place is not new_place:
                    event.place = new_place
                    self.associations.on_event_place_changed(event)

            attributes_update = get_update(changes, "attributes")
            if is_set(attributes_update):
                self.attributes.set_values(
                    event, AttributeScope.EVENT, resolve(attributes_update) or []
                )
                event.touch()

        return event

    @handle_db_errors
    @log_database_operation("delete_event")
    def delete(self, event_id: int) -> None:
        """
        Delete an event.

        Linked memories are detached first and lose the place they got
        from the event.
        """
        event = self._require_owned(Event, event_id)

        with self.session.begin_nested():
            detached = self.associations.on_event_deleted(event)
            self.session.flush()
            self.session.delete(event)

        self.session.flush()
        if detached:
            safe_logger(self.logger).log_info(
                "Event deleted with linked memories",
                {"event_id": event_id, "memories": detached},
            )
