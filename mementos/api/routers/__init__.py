"""
API routers, one module per resource.
"""
from . import (
    attributes,
    collections,
    events,
    memories,
    people,
    places,
    reflections,
    system,
    uploads,
)

__all__ = [
    "attributes",
    "collections",
    "events",
    "memories",
    "people",
    "places",
    "reflections",
    "system",
    "uploads",
]
