#!/usr/bin/env python3
"""
attribute_manager.py
--------------------
Manages the per-user attribute vocabulary and the attribute values stored
on people, places and events.

An attribute is a named key ("Favourite food", "Wi-Fi password") scoped to
one entity type or to all of them. Names are unique per owner and scope,
compared case-insensitively, so creating an attribute is idempotent.

Key Features:
    - Scope-aware listing (requested type plus "all")
    - Case-insensitive substring search
    - Idempotent, race-safe creation backed by a unique constraint
    - Replace-style attribute values for people, places and events

Usage:
    attr_mgr = AttributeManager(session, owner_id, logger)

    attr_mgr.create("Nickname", entity_type="person")
    attr_mgr.list_by_entity_type("person")   # person + all
    attr_mgr.search("nick", entity_type="person")

    attr_mgr.set_values(person, AttributeScope.PERSON, [
        {"attribute": "Nickname", "value": "Al"},
    ])

Notes:
    There is no update or delete operation for attributes.
"""
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy import or_

from mementos.core.exceptions import ValidationError
from mementos.core.validators import DataValidator
from mementos.database.decorators import handle_db_errors, log_database_operation
from mementos.database.models import (
    DEFAULT_CATEGORY,
    Attribute,
    AttributeScope,
    Event,
    EventAttribute,
    Person,
    PersonAttribute,
    Place,
    PlaceAttribute,
)
from .base_manager import OwnedManager

_VALUE_MODELS = {
    AttributeScope.PERSON: PersonAttribute,
    AttributeScope.PLACE: PlaceAttribute,
    AttributeScope.EVENT: EventAttribute,
}


class AttributeManager(OwnedManager):
    """Manages Attribute rows and the per-entity attribute values."""

    # =========================================================================
    # VOCABULARY
    # =========================================================================

    def _scoped(self, entity_type: Optional[Any]):
        stmt = self._owned(Attribute)
        if entity_type is not None:
            scope = DataValidator.normalize_enum(entity_type, AttributeScope, "entity_type")
            if scope is not AttributeScope.ALL:
                stmt = stmt.where(
                    or_(
                        Attribute.entity_type == scope,
                        Attribute.entity_type == AttributeScope.ALL,
                    )
                )
        return stmt

    @handle_db_errors
    @log_database_operation("list_attributes_by_entity_type")
    def list_by_entity_type(self, entity_type: Union[str, AttributeScope]) -> List[Attribute]:
        """
        List attributes usable on an entity type.

        Args:
            entity_type: person, event or place

        Returns:
            Attributes scoped to that type or to all, ordered by
            category then name
        """
        stmt = self._scoped(entity_type).order_by(
            Attribute.category, Attribute.name, Attribute.id
        )
        return list(self.session.scalars(stmt).all())

    @handle_db_errors
    @log_database_operation("search_attributes")
    def search(
        self, query: Optional[str], entity_type: Optional[Union[str, AttributeScope]] = None
    ) -> List[Attribute]:
        """
        Case-insensitive substring search on attribute names.

        Args:
            query: Text to look for (empty lists everything in scope)
            entity_type: Optional scope filter (type plus all)
        """
        stmt = self._scoped(entity_type)
        term = DataValidator.normalize_string(query)
        if term:
            stmt = stmt.where(Attribute.name_key.contains(term.lower(), autoescape=True))
        stmt = stmt.order_by(Attribute.category, Attribute.name, Attribute.id)
        return list(self.session.scalars(stmt).all())

    @handle_db_errors
    @log_database_operation("list_all_attributes")
    def list_all(self) -> List[Attribute]:
        """List every attribute ordered by entity type, category and name."""
        stmt = self._owned(Attribute).order_by(
            Attribute.entity_type, Attribute.category, Attribute.name, Attribute.id
        )
        return list(self.session.scalars(stmt).all())

    @handle_db_errors
    @log_database_operation("get_attribute")
    def get(self, attribute_id: int) -> Attribute:
        """Retrieve an attribute by id (NotFoundError when missing)."""
        return self._require_owned(Attribute, attribute_id)

    @handle_db_errors
    @log_database_operation("create_attribute")
    def create(
        self,
        name: str,
        category: Optional[str] = None,
        entity_type: Union[str, AttributeScope] = AttributeScope.ALL,
    ) -> Attribute:
        """
        Create an attribute, or return the existing one with the same name.

        Args:
            name: Attribute name (trimmed; compared case-insensitively)
            category: Grouping (default "Custom")
            entity_type: person, event, place or all (default all)

        Returns:
            The new or existing Attribute

        Raises:
            ValidationError: If the name is empty or the scope is unknown
        """
        clean_name = DataValidator.require_string(name, "name")
        scope = DataValidator.normalize_enum(entity_type, AttributeScope, "entity_type")
        scope = scope or AttributeScope.ALL

        return self._get_or_create(
            Attribute,
            {
                "owner_id": self.owner_id,
                "entity_type": scope,
                "name_key": clean_name.lower(),
            },
            {
                "name": clean_name,
                "category": DataValidator.normalize_string(category) or DEFAULT_CATEGORY,
                "description": f"Custom attribute: {clean_name}",
            },
        )

    def _resolve_by_name(self, name: str, scope: AttributeScope) -> Attribute:
        """Find an attribute usable in ``scope`` by name, creating it if absent."""
        clean_name = DataValidator.require_string(name, "attribute")
        stmt = (
            self._scoped(scope)
            .where(Attribute.name_key == clean_name.lower())
            .order_by(Attribute.entity_type != scope, Attribute.id)
        )
        existing = self.session.scalars(stmt).first()
        if existing is not None:
            return existing
        return self.create(clean_name, entity_type=scope)

    # =========================================================================
    # VALUES
    # =========================================================================

    @handle_db_errors
    @log_database_operation("set_attribute_values")
    def set_values(
        self,
        entity: Union[Person, Place, Event],
        scope: AttributeScope,
        pairs: Sequence[Dict[str, Any]],
    ) -> None:
        """
        Replace all attribute values of an entity.

        Args:
            entity: Person, Place or Event owned by this user
            scope: Entity type the values belong to
            pairs: Dicts with ``value`` and either ``attribute_id`` or
                ``attribute`` (an attribute name, created on demand)

        Raises:
            ValidationError: If a pair is malformed or its attribute does
                not apply to ``scope``
            NotFoundError: If an attribute id does not resolve
        """
        if scope not in _VALUE_MODELS:
            raise ValidationError(f"Attribute values cannot be stored for scope '{scope}'")
        if pairs is None:
            pairs = []
        if not isinstance(pairs, (list, tuple)):
            raise ValidationError("'attributes' must be a list")

        value_model = _VALUE_MODELS[scope]
        rows = []
        for pair in pairs:
            if not isinstance(pair, dict):
                raise ValidationError("Each attribute must be an object")

            if pair.get("attribute_id") is not None:
                attribute = self._require_owned(Attribute, pair["attribute_id"])
                if not attribute.applies_to(scope):
                    raise ValidationError(
                        f"Attribute '{attribute.name}' does not apply to {scope.value}"
                    )
            elif pair.get("attribute"):
                attribute = self._resolve_by_name(pair["attribute"], scope)
            else:
                raise ValidationError("Each attribute needs 'attribute' or 'attribute_id'")

            value = pair.get("value")
            rows.append(
                value_model(attribute=attribute, value="" if value is None else str(value))
            )

        entity.attributes.clear()
        self._flush()
        entity.attributes.extend(rows)
        self._flush()
