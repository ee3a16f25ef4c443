#!/usr/bin/env python3
"""
place_manager.py
--------------------
Manages Place entities.

A place is a physical location with a name, a city and a country. Events
are held at places and memories are taken at them; deleting a place
clears it from both so the memory/event place rule still holds.

Key Features:
    - CRUD operations, all scoped to the owning user
    - Capacity (>= 0) and rating (1.0 - 5.0) validation
    - Replace-style attribute values
    - Search over name, city and address

Usage:
    place_mgr = PlaceManager(session, owner_id, logger)

    cafe = place_mgr.create({
        "name": "Blue Bottle Cafe",
        "city": "San Francisco",
        "country": "USA",
        "type": "restaurant",
        "rating": 4.5,
    })
    place_mgr.update(cafe.id, {"rating": SetTo(5.0), "address": CLEARED})
    place_mgr.delete(cafe.id)
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from mementos.core.logging_manager import MementosLogger
from mementos.core.validators import DataValidator
from mementos.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from mementos.database.models import AttributeScope, Place, PlaceType
from mementos.database.updates import get_update, is_set, resolve
from .attribute_manager import AttributeManager
from .base_manager import OwnedManager

SEARCH_FIELDS = ("name", "city", "address")


def _normalize_place_type(value: Any) -> Optional[PlaceType]:
    return DataValidator.normalize_enum(value, PlaceType, "type")


def _normalize_capacity(value: Any) -> Optional[int]:
    capacity = DataValidator.normalize_int(value, "capacity")
    return DataValidator.validate_range(capacity, "capacity", minimum=0)


def _normalize_rating(value: Any) -> Optional[float]:
    rating = DataValidator.normalize_float(value, "rating")
    return DataValidator.validate_range(rating, "rating", minimum=1.0, maximum=5.0)


PLACE_FIELDS = [
    ("name", DataValidator.normalize_string, False),
    ("address", DataValidator.normalize_string, True),
    ("city", DataValidator.normalize_string, False),
    ("country", DataValidator.normalize_string, False),
    ("type", _normalize_place_type, True),
    ("capacity", _normalize_capacity, True),
    ("rating", _normalize_rating, True),
]


class PlaceManager(OwnedManager):
    """Manages Place table operations for one owner."""

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
        attributes: Optional[AttributeManager] = None,
    ):
        super().__init__(session, owner_id, logger)
        self.attributes = attributes or AttributeManager(session, owner_id, logger)

    @handle_db_errors
    @log_database_operation("get_place")
    def get(self, place_id: int) -> Place:
        """
        Retrieve a place by id.

        Raises:
            NotFoundError: If the place does not exist or is not owned
        """
        return self._require_owned(Place, place_id)

    @handle_db_errors
    @log_database_operation("get_all_places")
    def get_all(self) -> List[Place]:
        """Retrieve all places, newest first."""
        return self._list(Place, "created_at")

    @handle_db_errors
    @log_database_operation("search_places")
    def search(self, query: Optional[str]) -> List[Place]:
        """Case-insensitive search over name, city and address."""
        return self._search(Place, query, SEARCH_FIELDS, "created_at")

    @handle_db_errors
    @log_database_operation("create_place")
    @validate_metadata(["name", "city", "country"])
    def create(self, metadata: Dict[str, Any]) -> Place:
        """
        Create a new place.

        Args:
            metadata: Dictionary with required keys:
                - name, city, country
                Optional keys:
                - address: Street address
                - type: PlaceType or its value
                - capacity: Integer >= 0
                - rating: Number between 1.0 and 5.0
                - attributes: List of {"attribute"|"attribute_id", "value"}

        Returns:
            Created Place

        Raises:
            ValidationError: If a field is missing or out of range
        """
        values = self._initial_values(metadata, PLACE_FIELDS)
        place = Place(owner_id=self.owner_id, **values)
        self.session.add(place)
        self._flush()

        if metadata.get("attributes"):
            self.attributes.set_values(place, AttributeScope.PLACE, metadata["attributes"])

        return place

    @handle_db_errors
    @log_database_operation("update_place")
    def update(self, place_id: int, changes: Dict[str, Any]) -> Place:
        """
        Apply a partial update to a place.

        Args:
            place_id: Place to update
            changes: Tagged updates keyed by field name; ``attributes``
                replaces all attribute values

        Returns:
            Updated Place
        """
        place = self._require_owned(Place, place_id)
        self._apply_updates(place, changes, PLACE_FIELDS)

        attributes_update = get_update(changes, "attributes")
        if is_set(attributes_update):
            self.attributes.set_values(
                place, AttributeScope.PLACE, resolve(attributes_update) or []
            )
            place.touch()

        self._flush()
        return place

    @handle_db_errors
    @log_database_operation("delete_place")
    def delete(self, place_id: int) -> None:
        """
        Delete a place.

        Events held there and memories taken there lose their place.
        """
        place = self._require_owned(Place, place_id)

        for event in list(place.events):
            event.place = None
            event.touch()
        for memory in list(place.memories):
            memory.place = None
            memory.touch()
        self._flush()

        self.session.delete(place)
        self._flush()
