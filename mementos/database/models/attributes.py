"""
Attribute Models
-----------------

Free-form (attribute, value) annotations for people, places and events.

Models:
    - Attribute: Per-user vocabulary of attribute names
    - PersonAttribute: Value of an attribute for a person
    - PlaceAttribute: Value of an attribute for a place
    - EventAttribute: Value of an attribute for an event

An attribute name is unique per owner and scope, compared case-insensitively
through the stored ``name_key``.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING, Optional

# --- Third party imports ---
from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

# --- Local imports ---
from .base import Base, OwnedMixin, TimestampMixin
from .enums import AttributeScope

if TYPE_CHECKING:
    from .entities import Event, Person, Place

DEFAULT_CATEGORY = "Custom"


class Attribute(Base, TimestampMixin, OwnedMixin):
    """
    Represents an attribute name available to a user's entities.

    Attributes:
        id: Primary key
        owner_id: Owning user
        name: Display name (trimmed)
        name_key: Lowercased name used for uniqueness
        category: Grouping shown in pickers (default "Custom")
        description: Help text (default "Custom attribute: <name>")
        entity_type: Scope of the attribute (person, event, place or all)
    """

    __tablename__ = "attributes"
    __table_args__ = (
        UniqueConstraint(
            "owner_id", "entity_type", "name_key", name="uq_attribute_owner_scope_name"
        ),
        CheckConstraint("name != ''", name="ck_attribute_non_empty_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_CATEGORY
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    entity_type: Mapped[AttributeScope] = mapped_column(
        SQLEnum(AttributeScope, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=AttributeScope.ALL,
        index=True,
    )

    def applies_to(self, scope: AttributeScope) -> bool:
        """Whether this attribute may be used on an entity of ``scope``."""
        return self.entity_type in (scope, AttributeScope.ALL)

    def __repr__(self) -> str:
        return f"<Attribute(id={self.id}, name={self.name!r}, entity_type={self.entity_type})>"


class AttributeValueMixin:
    """Columns shared by the per-entity attribute value tables."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    attribute_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("attributes.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    @declared_attr
    def attribute(cls) -> Mapped["Attribute"]:
        return relationship("Attribute", lazy="joined")

    @property
    def name(self) -> str:
        return self.attribute.name

    def to_dict(self) -> dict:
        return {
            "attribute_id": self.attribute_id,
            "name": self.attribute.name,
            "value": self.value,
        }


class PersonAttribute(Base, AttributeValueMixin):
    """Value of an attribute for a person."""

    __tablename__ = "person_attributes"

    person_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person: Mapped["Person"] = relationship("Person", back_populates="attributes")


class PlaceAttribute(Base, AttributeValueMixin):
    """Value of an attribute for a place."""

    __tablename__ = "place_attributes"

    place_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("places.id", ondelete="CASCADE"), nullable=False, index=True
    )
    place: Mapped["Place"] = relationship("Place", back_populates="attributes")


class EventAttribute(Base, AttributeValueMixin):
    """Value of an attribute for an event."""

    __tablename__ = "event_attributes"

    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event: Mapped["Event"] = relationship("Event", back_populates="attributes")
