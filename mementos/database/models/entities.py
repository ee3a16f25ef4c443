"""
Entity Models
--------------

Models for the people, places and events that memories are linked to.

Models:
    - Person: People appearing in memories, with a small family graph
    - Place: Physical locations
    - Event: Dated happenings, optionally held at a place

An event's place is authoritative for every memory linked to the event;
the managers keep the two in step.
"""

# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import CheckConstraint, Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .associations import memory_people, person_children
from .base import Base, OwnedMixin, TimestampMixin, UTCDateTime
from .enums import DateType, EventType, MaritalStatus, PlaceType

if TYPE_CHECKING:
    from .attributes import EventAttribute, PersonAttribute, PlaceAttribute
    from .memories import Memory


class Person(Base, TimestampMixin, OwnedMixin):
    """
    Represents a person appearing in a user's memories.

    Attributes:
        id: Primary key
        owner_id: Owning user
        name: Display name
        email: Contact email
        role: Free-form role (e.g. "Designer", "Grandmother")
        photo_url: Portrait image
        date_of_birth: Birth date
        place_of_birth: Birth place (free text)
        marital_status: Marital status (enum)
        spouse_id: Spouse, kept symmetric by the manager

    Relationships:
        spouse: Many-to-one with Person
        children: Many-to-many with Person (parent -> child)
        parents: Inverse of children
        attributes: One-to-many with PersonAttribute
        memories: Many-to-many with Memory
    """

    __tablename__ = "people"
    __table_args__ = (
        CheckConstraint("name != ''", name="ck_person_non_empty_name"),
        CheckConstraint(
            "spouse_id IS NULL OR spouse_id != id", name="ck_person_not_own_spouse"
        ),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    place_of_birth: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    marital_status: Mapped[Optional[MaritalStatus]] = mapped_column(
        SQLEnum(MaritalStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    spouse_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("people.id", ondelete="SET NULL"), nullable=True
    )

    # ---- Relationships ----
    spouse: Mapped[Optional["Person"]] = relationship(
        "Person", remote_side=[id], foreign_keys=[spouse_id], post_update=True
    )
    children: Mapped[List["Person"]] = relationship(
        "Person",
        secondary=person_children,
        primaryjoin=lambda: Person.id == person_children.c.parent_id,
        secondaryjoin=lambda: Person.id == person_children.c.child_id,
        back_populates="parents",
    )
    parents: Mapped[List["Person"]] = relationship(
        "Person",
        secondary=person_children,
        primaryjoin=lambda: Person.id == person_children.c.child_id,
        secondaryjoin=lambda: Person.id == person_children.c.parent_id,
        back_populates="children",
    )
    attributes: Mapped[List["PersonAttribute"]] = relationship(
        "PersonAttribute", back_populates="person", cascade="all, delete-orphan"
    )
    memories: Mapped[List["Memory"]] = relationship(
        "Memory", secondary=memory_people, back_populates="people"
    )

    def __repr__(self) -> str:
        return f"<Person(id={self.id}, name={self.name!r})>"


class Place(Base, TimestampMixin, OwnedMixin):
    """
    Represents a physical location.

    Attributes:
        id: Primary key
        owner_id: Owning user
        name: Place name
        address: Street address
        city: City (required)
        country: Country (required)
        type: Kind of place (enum)
        capacity: Number of people it holds (>= 0)
        rating: Personal rating between 1.0 and 5.0

    Relationships:
        events: One-to-many with Event
        memories: One-to-many with Memory
        attributes: One-to-many with PlaceAttribute
    """

    __tablename__ = "places"
    __table_args__ = (
        CheckConstraint("name != ''", name="ck_place_non_empty_name"),
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="ck_place_capacity"),
        CheckConstraint(
            "rating IS NULL OR (rating >= 1.0 AND rating <= 5.0)",
            name="ck_place_rating_range",
        ),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[Optional[PlaceType]] = mapped_column(
        SQLEnum(PlaceType, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # ---- Relationships ----
    events: Mapped[List["Event"]] = relationship("Event", back_populates="place")
    memories: Mapped[List["Memory"]] = relationship("Memory", back_populates="place")
    attributes: Mapped[List["PlaceAttribute"]] = relationship(
        "PlaceAttribute", back_populates="place", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        """Name with its city, e.g. 'Blue Bottle Cafe, San Francisco'."""
        return f"{self.name}, {self.city}"

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, name={self.name!r}, city={self.city!r})>"


class Event(Base, TimestampMixin, OwnedMixin):
    """
    Represents a dated happening.

    Attributes:
        id: Primary key
        owner_id: Owning user
        title: Event title
        description: Free-form description
        date: When it happened, truncated to ``date_type``
        date_type: Precision of ``date``
        type: Kind of event (enum)
        capacity: Expected attendance
        place_id: Where it was held

    Relationships:
        place: Many-to-one with Place
        memories: One-to-many with Memory (their place follows this event's)
        attributes: One-to-many with EventAttribute
    """

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("title != ''", name="ck_event_non_empty_title"),
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="ck_event_capacity"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True, index=True)
    date_type: Mapped[DateType] = mapped_column(
        SQLEnum(DateType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=DateType.EXACT,
    )
    type: Mapped[Optional[EventType]] = mapped_column(
        SQLEnum(EventType, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    place_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("places.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # ---- Relationships ----
    place: Mapped[Optional["Place"]] = relationship("Place", back_populates="events")
    memories: Mapped[List["Memory"]] = relationship("Memory", back_populates="event")
    attributes: Mapped[List["EventAttribute"]] = relationship(
        "EventAttribute", back_populates="event", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title!r})>"
