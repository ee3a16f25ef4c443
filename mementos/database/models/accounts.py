"""
Account Models
---------------

Models for users, their collections, and billing bookkeeping.

Models:
    - User: Internal mirror of an identity from the auth provider
    - Collection: Named grouping of memories, events, places and people
    - WebhookEvent: Payment provider events already processed

A user is created lazily on first authenticated visit, together with a
default collection.
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
from .associations import (
    collection_events,
    collection_members,
    collection_memories,
    collection_people,
    collection_places,
)
from .base import Base, OwnedMixin, TimestampMixin, UTCDateTime, utcnow
from .enums import Plan

if TYPE_CHECKING:
    from .entities import Event, Person, Place
    from .memories import Memory


class User(Base, TimestampMixin):
    """
    Represents an authenticated user.

    Attributes:
        id: Primary key
        external_id: Identity issued by the auth provider (unique)
        email: Primary email address
        plan: Subscription plan
        quota_limit: Maximum number of memories on the free plan
        default_collection_id: Collection new uploads are filed under

    Relationships:
        default_collection: Many-to-one with Collection
        collections: One-to-many with Collection (owned collections)
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("quota_limit >= 0", name="positive_quota_limit"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="")
    plan: Mapped[Plan] = mapped_column(
        SQLEnum(Plan, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=Plan.FREE,
    )
    quota_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    default_collection_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey(
            "collections.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_users_default_collection",
        ),
        nullable=True,
    )

    # ---- Relationships ----
    default_collection: Mapped[Optional["Collection"]] = relationship(
        "Collection",
        foreign_keys=[default_collection_id],
        post_update=True,
    )
    collections: Mapped[List["Collection"]] = relationship(
        "Collection",
        foreign_keys="Collection.owner_id",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_pro(self) -> bool:
        """Whether the user is on the paid plan."""
        return self.plan == Plan.PRO

    def __repr__(self) -> str:
        return f"<User(id={self.id}, external_id={self.external_id!r}, plan={self.plan})>"


class Collection(Base, TimestampMixin, OwnedMixin):
    """
    Named grouping of a user's records.

    Collections are inert containers: adding an item to a collection has
    no effect on the item itself.

    Attributes:
        id: Primary key
        owner_id: Owning user
        name: Display name
        details: Free-form description

    Relationships:
        owner: Many-to-one with User
        members: Many-to-many with User (users the collection is shared with)
        memories / events / places / people: Many-to-many with each entity
    """

    __tablename__ = "collections"
    __table_args__ = (CheckConstraint("name != ''", name="ck_collection_non_empty_name"),)

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ---- Relationships ----
    owner: Mapped["User"] = relationship(
        "User", foreign_keys="Collection.owner_id", back_populates="collections"
    )
    members: Mapped[List["User"]] = relationship("User", secondary=collection_members)
    memories: Mapped[List["Memory"]] = relationship(
        "Memory", secondary=collection_memories
    )
    events: Mapped[List["Event"]] = relationship("Event", secondary=collection_events)
    places: Mapped[List["Place"]] = relationship("Place", secondary=collection_places)
    people: Mapped[List["Person"]] = relationship("Person", secondary=collection_people)

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, name={self.name!r})>"


class WebhookEvent(Base):
    """
    Payment provider event that has already been handled.

    Redelivered events are recognized by ``provider_event_id`` and skipped.

    Attributes:
        id: Primary key
        provider_event_id: Event id assigned by the provider (unique)
        event_type: Provider event type (e.g. checkout.session.completed)
        processed_at: When the event was handled
    """

    __tablename__ = "webhook_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider_event_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(255), nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
