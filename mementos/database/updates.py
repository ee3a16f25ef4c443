#!/usr/bin/env python3
"""
updates.py
--------------------
Tagged field updates for partial edits.

A partial update has to tell apart three intents for every field:
leave it alone, set it to a value, or clear it. Plain ``None`` cannot
carry all three, so each field change is one of:

    UNCHANGED   - field not part of the update
    SetTo(v)    - field takes value v
    CLEARED     - field becomes null

Usage:
    changes = {"title": SetTo("Lunch"), "description": CLEARED}
    memory_mgr.update(memory_id, changes)

    # From an HTTP payload, only the fields actually sent:
    changes = updates_from_fields(payload.model_dump(), payload.model_fields_set)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, Mapping, TypeVar, Union

T = TypeVar("T")


class _Unchanged:
    """Marker for a field that is not part of the update."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNCHANGED"

    def __bool__(self) -> bool:
        return False


class _Cleared:
    """Marker for a field that should become null."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CLEARED"


@dataclass(frozen=True)
class SetTo(Generic[T]):
    """A field that takes ``value``."""

    value: T


UNCHANGED = _Unchanged()
CLEARED = _Cleared()

Update = Union[_Unchanged, SetTo, _Cleared]


def as_update(value: Any) -> Update:
    """
    Coerce a raw value to a tagged update.

    Tagged values pass through; ``None`` means CLEARED; anything else
    means SetTo(value).
    """
    if isinstance(value, (_Unchanged, _Cleared, SetTo)):
        return value
    if value is None:
        return CLEARED
    return SetTo(value)


def updates_from_fields(
    data: Mapping[str, Any], fields_set: Iterable[str]
) -> Dict[str, Update]:
    """
    Build tagged updates from the fields a caller explicitly sent.

    Args:
        data: Field values (absent fields may hold defaults)
        fields_set: Names of the fields that were actually provided

    Returns:
        Mapping of field name to SetTo/CLEARED; omitted fields are absent
    """
    return {name: as_update(data.get(name)) for name in fields_set}


def get_update(changes: Mapping[str, Any], field: str) -> Update:
    """Look up the tagged update for ``field`` (UNCHANGED when absent)."""
    if field not in changes:
        return UNCHANGED
    return as_update(changes[field])


def resolve(update: Update, current: Any = None) -> Any:
    """Value a field holds after applying ``update`` to ``current``."""
    if isinstance(update, SetTo):
        return update.value
    if update is CLEARED:
        return None
    return current


def is_set(update: Update) -> bool:
    """Whether the update changes the field (SetTo or CLEARED)."""
    return update is not UNCHANGED
