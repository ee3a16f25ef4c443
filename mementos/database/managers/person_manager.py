#!/usr/bin/env python3
"""
person_manager.py
--------------------
Manages Person entities with a small family graph and attribute values.

Person represents someone appearing in a user's memories. Besides the
scalar profile fields, a person may have a spouse (kept symmetric),
children (self-referential many-to-many) and free-form attribute values.

Key Features:
    - CRUD operations, all scoped to the owning user
    - Symmetric spouse links (setting A -> B also sets B -> A and
      detaches the previous spouses of both)
    - Replace-style children and attribute updates
    - Self-reference checks (no one is their own spouse or child)
    - Search over name, email and role

Usage:
    person_mgr = PersonManager(session, owner_id, logger)

    alice = person_mgr.create({"name": "Alice", "role": "Designer"})
    bob = person_mgr.create({"name": "Bob", "spouse_id": alice.id})
    # alice.spouse is bob

    person_mgr.update(alice.id, {"spouse_id": CLEARED})
    # bob.spouse is None

    person_mgr.search("design")
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from mementos.core.exceptions import ValidationError
from mementos.core.logging_manager import MementosLogger
from mementos.core.validators import DataValidator
from mementos.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from mementos.database.models import AttributeScope, MaritalStatus, Person
from mementos.database.updates import get_update, is_set, resolve
from .attribute_manager import AttributeManager
from .base_manager import OwnedManager

SEARCH_FIELDS = ("name", "email", "role")


def _normalize_marital_status(value: Any) -> Optional[MaritalStatus]:
    return DataValidator.normalize_enum(value, MaritalStatus, "marital_status")


PERSON_FIELDS = [
    ("name", DataValidator.normalize_string, False),
    ("email", DataValidator.normalize_string, True),
    ("role", DataValidator.normalize_string, True),
    ("photo_url", DataValidator.normalize_string, True),
    ("date_of_birth", DataValidator.normalize_date, True),
    ("place_of_birth", DataValidator.normalize_string, True),
    ("marital_status", _normalize_marital_status, True),
]


class PersonManager(OwnedManager):
    """
    Manages Person table operations for one owner.

    Spouse links are symmetric: the manager always updates both sides.
    """

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
        attributes: Optional[AttributeManager] = None,
    ):
        super().__init__(session, owner_id, logger)
        self.attributes = attributes or AttributeManager(session, owner_id, logger)

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    @handle_db_errors
    @log_database_operation("get_person")
    def get(self, person_id: int) -> Person:
        """
        Retrieve a person by id.

        Raises:
            NotFoundError: If the person does not exist or is not owned
        """
        return self._require_owned(Person, person_id)

    @handle_db_errors
    @log_database_operation("get_all_people")
    def get_all(self) -> List[Person]:
        """Retrieve all people, newest first."""
        return self._list(Person, "created_at")

    @handle_db_errors
    @log_database_operation("search_people")
    def search(self, query: Optional[str]) -> List[Person]:
        """Case-insensitive search over name, email and role."""
        return self._search(Person, query, SEARCH_FIELDS, "created_at")

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    @handle_db_errors
    @log_database_operation("create_person")
    @validate_metadata(["name"])
    def create(self, metadata: Dict[str, Any]) -> Person:
        """
        Create a new person.

        Args:
            metadata: Dictionary with required key:
                - name: Display name
                Optional keys:
                - email, role, photo_url, place_of_birth: strings
                - date_of_birth: date or ISO string
                - marital_status: MaritalStatus or its value
                - spouse_id: Person id (linked symmetrically)
                - children_ids: List of Person ids
                - attributes: List of {"attribute"|"attribute_id", "value"}

        Returns:
            Created Person

        Raises:
            ValidationError: If a field is invalid
            NotFoundError: If a referenced person or attribute is missing
        """
        values = self._initial_values(metadata, PERSON_FIELDS)
        person = Person(owner_id=self.owner_id, **values)
        self.session.add(person)
        self._flush()

        if metadata.get("spouse_id") is not None:
            self._set_spouse(person, metadata["spouse_id"])
        if metadata.get("children_ids"):
            self._set_children(person, metadata["children_ids"])
        if metadata.get("attributes"):
            self.attributes.set_values(person, AttributeScope.PERSON, metadata["attributes"])

        self._flush()
        return person

    @handle_db_errors
    @log_database_operation("update_person")
    def update(self, person_id: int, changes: Dict[str, Any]) -> Person:
        """
        Apply a partial update to a person.

        Args:
            person_id: Person to update
            changes: Tagged updates keyed by field name. Besides the scalar
                fields, accepts ``spouse_id``, ``children_ids`` (replace)
                and ``attributes`` (replace).

        Returns:
            Updated Person

        Raises:
            ValidationError: If a field is invalid or self-referencing
            NotFoundError: If the person or a referenced record is missing
        """
        person = self._require_owned(Person, person_id)

        self._apply_updates(person, changes, PERSON_FIELDS)

        spouse_update = get_update(changes, "spouse_id")
        if is_set(spouse_update):
            self._set_spouse(person, resolve(spouse_update))

        children_update = get_update(changes, "children_ids")
        if is_set(children_update):
            self._set_children(person, resolve(children_update) or [])

        attributes_update = get_update(changes, "attributes")
        if is_set(attributes_update):
            self.attributes.set_values(
                person, AttributeScope.PERSON, resolve(attributes_update) or []
            )

        if is_set(children_update) or is_set(attributes_update):
            person.touch()

        self._flush()
        return person

    @handle_db_errors
    @log_database_operation("delete_person")
    def delete(self, person_id: int) -> None:
        """
        Delete a person.

        The spouse's back-reference is cleared; memory, family and
        collection links are removed with the person.
        """
        person = self._require_owned(Person, person_id)

        for other in self.session.scalars(
            self._owned(Person).where(Person.spouse_id == person.id)
        ).all():
            other.spouse = None
        person.spouse = None
        self._flush()

        self.session.delete(person)
        self._flush()

    # =========================================================================
    # FAMILY HELPERS
    # =========================================================================

    def _set_spouse(self, person: Person, spouse_id: Optional[Any]) -> None:
        """Link two people as spouses (or unlink), keeping both sides in step."""
        spouse = self._require_owned(Person, spouse_id) if spouse_id is not None else None
        if spouse is not None and spouse.id == person.id:
            raise ValidationError("A person cannot be their own spouse")

        old = person.spouse
        if old is spouse:
            if spouse is not None and spouse.spouse is not person:
                spouse.spouse = person
            return

        if old is not None and old.spouse is person:
            old.spouse = None

        if spouse is not None:
            previous = spouse.spouse
            if previous is not None and previous is not person and previous.spouse is spouse:
                previous.spouse = None
            spouse.spouse = person

        person.spouse = spouse

    def _set_children(self, person: Person, child_ids: Any) -> None:
        """Replace the children of a person."""
        ids = DataValidator.normalize_id_list(child_ids, "children_ids")
        if person.id in ids:
            raise ValidationError("A person cannot be their own child")
        self._replace_collection(person, "children", ids, Person)

