"""
Association Tables
-------------------

Many-to-many relationship tables for the Mementos database.

This module contains all association tables that connect:
- Memories with the people they depict
- People with their children (self-referential)
- Collections with member users, memories, events, places and people

These are pure association tables with no additional metadata.
"""
# --- Third party imports ---
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Table

# --- Local imports ---
from .base import Base

# Memory associations
memory_people = Table(
    "memory_people",
    Base.metadata,
    Column(
        "memory_id",
        Integer,
        ForeignKey("memories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("person_id", Integer, ForeignKey("people.id", ondelete="CASCADE"), primary_key=True),
)

# Family tree (self-referential)
person_children = Table(
    "person_children",
    Base.metadata,
    Column(
        "parent_id",
        Integer,
        ForeignKey("people.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "child_id",
        Integer,
        ForeignKey("people.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    CheckConstraint("parent_id != child_id", name="no_self_parenting"),
)

# Collection associations
collection_members = Table(
    "collection_members",
    Base.metadata,
    Column(
        "collection_id",
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

collection_memories = Table(
    "collection_memories",
    Base.metadata,
    Column(
        "collection_id",
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("memory_id", Integer, ForeignKey("memories.id", ondelete="CASCADE"), primary_key=True),
)

collection_events = Table(
    "collection_events",
    Base.metadata,
    Column(
        "collection_id",
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
)

collection_places = Table(
    "collection_places",
    Base.metadata,
    Column(
        "collection_id",
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("place_id", Integer, ForeignKey("places.id", ondelete="CASCADE"), primary_key=True),
)

collection_people = Table(
    "collection_people",
    Base.metadata,
    Column(
        "collection_id",
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("person_id", Integer, ForeignKey("people.id", ondelete="CASCADE"), primary_key=True),
)
