"""
Memory Models
--------------

Models for uploaded media and the reflections written about them.

Models:
    - Memory: An uploaded photo or document with its associations
    - Reflection: A titled note attached to a memory

Association rule: when ``event_id`` is set, ``place_id`` mirrors the
event's place (null when the event has none).
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .associations import memory_people
from .base import Base, OwnedMixin, TimestampMixin, UTCDateTime
from .enums import DateType, MediaType

if TYPE_CHECKING:
    from .entities import Event, Person, Place


class Memory(Base, TimestampMixin, OwnedMixin):
    """
    Represents an uploaded photo or document.

    Attributes:
        id: Primary key
        owner_id: Owning user
        title: Memory title
        description: Free-form description
        media_type: Photo or document
        media_url: Where the stored object is served from
        media_name: Original file name
        media_size: Size in bytes
        date: When it was taken, truncated to ``date_type``
        date_type: Precision of ``date``
        place_id: Where it was taken (derived from the event when linked)
        event_id: Event it belongs to

    Relationships:
        people: Many-to-many with Person
        place: Many-to-one with Place
        event: Many-to-one with Event
        reflections: One-to-many with Reflection (deleted with the memory)
    """

    __tablename__ = "memories"
    __table_args__ = (
        CheckConstraint("title != ''", name="ck_memory_non_empty_title"),
        CheckConstraint(
            "media_size IS NULL OR media_size >= 0", name="ck_memory_media_size"
        ),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    media_type: Mapped[MediaType] = mapped_column(
        SQLEnum(MediaType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=MediaType.PHOTO,
    )
    media_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    media_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    media_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True, index=True)
    date_type: Mapped[DateType] = mapped_column(
        SQLEnum(DateType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=DateType.EXACT,
    )
    place_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("places.id", ondelete="SET NULL"), nullable=True, index=True
    )
    event_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # ---- Relationships ----
    people: Mapped[List["Person"]] = relationship(
        "Person", secondary=memory_people, back_populates="memories"
    )
    place: Mapped[Optional["Place"]] = relationship("Place", back_populates="memories")
    event: Mapped[Optional["Event"]] = relationship("Event", back_populates="memories")
    reflections: Mapped[List["Reflection"]] = relationship(
        "Reflection",
        back_populates="memory",
        cascade="all, delete-orphan",
        order_by="Reflection.created_at",
    )

    @property
    def place_is_derived(self) -> bool:
        """Whether the current place comes from the linked event."""
        return self.event is not None and self.place is self.event.place

    def __repr__(self) -> str:
        return f"<Memory(id={self.id}, title={self.title!r})>"


class Reflection(Base, TimestampMixin):
    """
    A titled note written about a memory.

    Reflections are owned through their memory; every write touches the
    parent's ``updated_at``.
    """

    __tablename__ = "reflections"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    memory_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("memories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    memory: Mapped["Memory"] = relationship("Memory", back_populates="reflections")

    def __repr__(self) -> str:
        return f"<Reflection(id={self.id}, memory_id={self.memory_id})>"
