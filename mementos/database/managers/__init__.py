"""
Entity managers for the Mementos database.

Each manager wraps one entity type; all but UserManager are scoped to a
single owner.
"""
from .base_manager import BaseManager, OwnedManager
from .attribute_manager import AttributeManager
from .association_manager import AssociationManager, PLACE_LOCKED_MESSAGE
from .person_manager import PersonManager
from .place_manager import PlaceManager
from .event_manager import EventManager
from .memory_manager import MemoryManager
from .reflection_manager import ReflectionManager
from .collection_manager import CollectionManager
from .user_manager import (
    DEFAULT_COLLECTION_DETAILS,
    DEFAULT_COLLECTION_NAME,
    UserManager,
)

__all__ = [
    "BaseManager",
    "OwnedManager",
    "AttributeManager",
    "AssociationManager",
    "PLACE_LOCKED_MESSAGE",
    "PersonManager",
    "PlaceManager",
    "EventManager",
    "MemoryManager",
    "ReflectionManager",
    "CollectionManager",
    "UserManager",
    "DEFAULT_COLLECTION_NAME",
    "DEFAULT_COLLECTION_DETAILS",
]
