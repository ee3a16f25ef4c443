"""
Database Models Package
------------------------

SQLAlchemy ORM models for the Mementos database.

This package provides a modular organization of database models:
- base: Base class, UTC datetime type and mixins
- associations: Many-to-many relationship tables
- enums: Enumeration types
- accounts: User, Collection, WebhookEvent
- entities: Person, Place, Event
- memories: Memory, Reflection
- attributes: Attribute and its per-entity value tables

Usage:
    from mementos.database.models import Memory, Person, Place, Event
"""
# Base classes
from .base import Base, OwnedMixin, TimestampMixin, UTCDateTime, utcnow

# Enumerations
from .enums import (
    AttributeScope,
    DateType,
    EventType,
    MaritalStatus,
    MediaType,
    PlaceType,
    Plan,
)

# Association tables (for direct usage if needed)
from .associations import (
    collection_events,
    collection_members,
    collection_memories,
    collection_people,
    collection_places,
    memory_people,
    person_children,
)

# Account models
from .accounts import Collection, User, WebhookEvent

# Entity models
from .entities import Event, Person, Place

# Memory models
from .memories import Memory, Reflection

# Attribute models
from .attributes import (
    DEFAULT_CATEGORY,
    Attribute,
    EventAttribute,
    PersonAttribute,
    PlaceAttribute,
)

__all__ = [
    # Base
    "Base",
    "OwnedMixin",
    "TimestampMixin",
    "UTCDateTime",
    "utcnow",
    # Enums
    "AttributeScope",
    "DateType",
    "EventType",
    "MaritalStatus",
    "MediaType",
    "PlaceType",
    "Plan",
    # Association tables
    "collection_events",
    "collection_members",
    "collection_memories",
    "collection_people",
    "collection_places",
    "memory_people",
    "person_children",
    # Accounts
    "Collection",
    "User",
    "WebhookEvent",
    # Entities
    "Event",
    "Person",
    "Place",
    # Memories
    "Memory",
    "Reflection",
    # Attributes
    "DEFAULT_CATEGORY",
    "Attribute",
    "EventAttribute",
    "PersonAttribute",
    "PlaceAttribute",
]
