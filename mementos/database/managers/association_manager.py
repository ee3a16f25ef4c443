#!/usr/bin/env python3
"""
association_manager.py
--------------------
Keeps Memory, Event and Place consistent.

A memory's place is derived from its event: when a memory is linked to
an event, the memory's place is the event's place (or null when the event
has none). Each of the three associations of a memory (people, event,
place) is saved by its own operation, and every operation runs inside a
SAVEPOINT so a failure part-way leaves nothing behind.

Memory states, as (has event, has place):
    (no, no)    - unlinked
    (no, yes)   - place chosen directly
    (yes, no)   - event without a place
    (yes, yes)  - place derived from the event

With ``strict_place_lock`` enabled, a memory can never hold a place that
differs from its event's place. With it disabled, such a change is
logged as a warning and allowed.

Usage:
    engine = AssociationManager(session, owner_id, logger)

    engine.set_memory_people(memory_id, [alice.id, bob.id])
    engine.set_memory_event(memory_id, event.id)   # place follows the event
    engine.set_memory_event(memory_id, None)       # derived place is cleared
    engine.set_memory_place(memory_id, place.id)   # ConflictError if locked
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Any, Dict, Iterable, Optional

# --- Third party imports ---
from sqlalchemy.orm import Session

# --- Local imports ---
from mementos.core.exceptions import ConflictError
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.core.validators import DataValidator
from mementos.database.decorators import handle_db_errors, log_database_operation
from mementos.database.models import Event, Memory, Person, Place
from .base_manager import OwnedManager

PLACE_LOCKED_MESSAGE = (
    "Place is locked by an associated event; change or remove the event first"
)


class AssociationManager(OwnedManager):
    """
    Transactional updates of a memory's people, event and place.

    Attributes:
        strict_place_lock: Reject place changes that contradict the event
    """

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
        strict_place_lock: bool = True,
    ):
        super().__init__(session, owner_id, logger)
        self.strict_place_lock = strict_place_lock

    # -------------------------------------------------------------------------
    # Memory association operations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("set_memory_people")
    def set_memory_people(self, memory_id: int, person_ids: Iterable[Any]) -> Memory:
        """
        Replace the full set of people linked to a memory.

        The set is cleared and refilled in one step, so calling this twice
        with the same ids leaves exactly those people.

        Args:
            memory_id: Memory to update
            person_ids: Ids of the people to link (duplicates ignored)

        Returns:
            The updated Memory

        Raises:
            NotFoundError: If the memory or any person does not resolve
        """
        memory = self._require_owned(Memory, memory_id)
        people = self._require_all_owned(Person, person_ids)

        with self.session.begin_nested():
            memory.people.clear()
            self.session.flush()
            memory.people.extend(people)
            memory.touch()

        return memory

    @handle_db_errors
    @log_database_operation("set_memory_event")
    def set_memory_event(self, memory_id: int, event_id: Optional[Any]) -> Memory:
        """
        Link a memory to an event, or unlink it.

        The previous event's place is cleared from the memory when the
        memory still holds it; a place that did not come from the event is
        left alone. When attaching, the memory takes the new event's place
        (null when the event has none). This also replaces a place set
        directly on the memory when the place lock is off, so attaching an
        event without a place leaves the memory without one.

        Args:
            memory_id: Memory to update
            event_id: Event to attach, or None to detach

        Returns:
            The updated Memory

        Raises:
            NotFoundError: If the memory or the event does not resolve
        """
        memory = self._require_owned(Memory, memory_id)
        event = self._require_owned(Event, event_id) if event_id is not None else None

        with self.session.begin_nested():
            old_event = memory.event
            old_derived_place = old_event.place if old_event is not None else None

            memory.event = None
            if old_derived_place is not None and memory.place is old_derived_place:
                memory.place = None

            if event is not None:
                memory.event = event
                memory.place = event.place

            memory.touch()

        safe_logger(self.logger).log_debug(
            "Memory event changed",
            {
                "memory_id": memory.id,
                "old_event_id": old_event.id if old_event is not None else None,
                "event_id": event.id if event is not None else None,
                "place_id": memory.place.id if memory.place is not None else None,
            },
        )
        return memory

    @handle_db_errors
    @log_database_operation("set_memory_place")
    def set_memory_place(self, memory_id: int, place_id: Optional[Any]) -> Memory:
        """
        Set or clear a memory's place.

        Args:
            memory_id: Memory to update
            place_id: Place to set, or None to clear

        Returns:
            The updated Memory

        Raises:
            NotFoundError: If the memory or the place does not resolve
            ConflictError: If the memory's event dictates a different place
                and the place lock is strict
        """
        memory = self._require_owned(Memory, memory_id)
        place = self._require_owned(Place, place_id) if place_id is not None else None
        self._check_place_lock(memory.event, place)

        with self.session.begin_nested():
            memory.place = place
            memory.touch()

        return memory

    @handle_db_errors
    @log_database_operation("update_memory_details")
    def update_memory_details(self, memory_id: int, changes: Dict[str, Any]) -> Memory:
        """
        Update title, description, date and date type of a memory.

        No association is touched.

        Args:
            memory_id: Memory to update
            changes: Tagged updates keyed by field name

        Returns:
            The updated Memory

        Raises:
            ValidationError: If the title is supplied empty or cleared
        """
        memory = self._require_owned(Memory, memory_id)

        with self.session.begin_nested():
            self._apply_updates(
                memory,
                changes,
                [
                    ("title", DataValidator.normalize_string, False),
                    ("description", DataValidator.normalize_string, True),
                ],
            )
            self._apply_date_updates(memory, changes)
            memory.touch()

        return memory

    # -------------------------------------------------------------------------
    # Reconciliation hooks (used by the entity managers)
    # -------------------------------------------------------------------------

    def apply_on_create(
        self,
        memory: Memory,
        place_id: Optional[Any] = None,
        event_id: Optional[Any] = None,
    ) -> None:
        """
        Apply the association rule to a memory being created.

        The event wins: its place becomes the memory's place. An explicit
        place that contradicts the event is a conflict under the strict
        lock.

        Raises:
            NotFoundError: If the place or the event does not resolve
            ConflictError: If the explicit place contradicts the event
        """
        place = self._require_owned(Place, place_id) if place_id is not None else None
        event = self._require_owned(Event, event_id) if event_id is not None else None

        if event is not None:
            if place is not None:
                self._check_place_lock(event, place)
            memory.event = event
            memory.place = event.place if (self.strict_place_lock or place is None) else place
        else:
            memory.place = place

    def on_event_place_changed(self, event: Event) -> int:
        """
        Propagate an event's place to every memory linked to it.

        Returns:
            Number of memories updated
        """
        updated = 0
        for memory in event.memories:
            if memory.place is not event.place:
                memory.place = event.place
                memory.touch()
                updated += 1

        safe_logger(self.logger).log_debug(
            "Event place propagated",
            {"event_id": event.id, "memories": updated},
        )
        return updated

    def on_event_deleted(self, event: Event) -> int:
        """
        Detach an event from its memories before it is removed.

        Memories whose place came from the event lose that place.

        Returns:
            Number of memories detached
        """
        memories = list(event.memories)
        for memory in memories:
            if event.place is not None and memory.place is event.place:
                memory.place = None
            memory.event = None
            memory.touch()
        return len(memories)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_place_lock(self, event: Optional[Event], place: Optional[Place]) -> None:
        """Raise or warn when ``place`` contradicts ``event``'s place."""
        if event is None:
            return

        if event.place is place:
            return
        requested = place.id if place is not None else None

        if self.strict_place_lock:
            raise ConflictError(PLACE_LOCKED_MESSAGE)

        safe_logger(self.logger).log_warning(
            "Memory place differs from its event's place",
            {"event_id": event.id, "event_place_id": event.place_id, "place_id": requested},
        )
