#!/usr/bin/env python3
"""
schemas.py
--------------------
Request and response models for the HTTP layer.

Request models keep enum and date fields as strings: the managers do the
normalization (case-insensitive enums, ISO dates with precision), so
validation rules live in one place.

Partial updates are mapped with ``to_changes``, which turns the fields a
client actually sent into tagged updates. A field sent as ``null`` is
cleared; a field left out is unchanged.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

# --- Third party imports ---
from pydantic import BaseModel, ConfigDict, Field

# --- Local imports ---
from mementos.database.models import (
    Attribute,
    Collection,
    Event,
    Memory,
    Person,
    Place,
    Reflection,
    User,
)
from mementos.database.updates import updates_from_fields


def _ids(items: Iterable[Any]) -> List[int]:
    return sorted(item.id for item in items)


def to_metadata(payload: BaseModel) -> Dict[str, Any]:
    """Create payload as a metadata dict, without fields the client omitted."""
    return payload.model_dump(exclude_unset=True)


def to_changes(payload: BaseModel) -> Dict[str, Any]:
    """Tagged updates for the fields the client sent."""
    return updates_from_fields(
        payload.model_dump(exclude_unset=True), payload.model_fields_set
    )


# ----- Shared -----
class AttributePair(BaseModel):
    """One attribute value; the attribute is given by id or by name."""

    attribute_id: Optional[int] = None
    attribute: Optional[str] = None
    value: str = ""


class AttributeValueOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    attribute_id: int
    name: str
    value: str


class ErrorOut(BaseModel):
    error: str


# ----- People -----
class PersonCreate(BaseModel):
    name: str
    email: Optional[str] = None
    role: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[str] = None
    place_of_birth: Optional[str] = None
    marital_status: Optional[str] = None
    spouse_id: Optional[int] = None
    children_ids: List[int] = Field(default_factory=list)
    attributes: List[AttributePair] = Field(default_factory=list)


class PersonUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[str] = None
    place_of_birth: Optional[str] = None
    marital_status: Optional[str] = None
    spouse_id: Optional[int] = None
    children_ids: Optional[List[int]] = None
    attributes: Optional[List[AttributePair]] = None


class PersonOut(BaseModel):
    id: int
    name: str
    email: Optional[str]
    role: Optional[str]
    photo_url: Optional[str]
    date_of_birth: Optional[date]
    place_of_birth: Optional[str]
    marital_status: Optional[str]
    spouse_id: Optional[int]
    children_ids: List[int]
    parent_ids: List[int]
    attributes: List[AttributeValueOut]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, person: Person) -> "PersonOut":
        return cls(
            id=person.id,
            name=person.name,
            email=person.email,
            role=person.role,
            photo_url=person.photo_url,
            date_of_birth=person.date_of_birth,
            place_of_birth=person.place_of_birth,
            marital_status=person.marital_status.value if person.marital_status else None,
            spouse_id=person.spouse.id if person.spouse is not None else None,
            children_ids=_ids(person.children),
            parent_ids=_ids(person.parents),
            attributes=[AttributeValueOut.model_validate(a) for a in person.attributes],
            created_at=person.created_at,
            updated_at=person.updated_at,
        )


# ----- Places -----
class PlaceCreate(BaseModel):
    name: str
    city: str
    country: str
    address: Optional[str] = None
    type: Optional[str] = None
    capacity: Optional[int] = None
    rating: Optional[float] = None
    attributes: List[AttributePair] = Field(default_factory=list)


class PlaceUpdate(BaseModel):
    name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    type: Optional[str] = None
    capacity: Optional[int] = None
    rating: Optional[float] = None
    attributes: Optional[List[AttributePair]] = None


class PlaceOut(BaseModel):
    id: int
    name: str
    address: Optional[str]
    city: str
    country: str
    type: Optional[str]
    capacity: Optional[int]
    rating: Optional[float]
    display_name: str
    attributes: List[AttributeValueOut]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, place: Place) -> "PlaceOut":
        return cls(
            id=place.id,
            name=place.name,
            address=place.address,
            city=place.city,
            country=place.country,
            type=place.type.value if place.type else None,
            capacity=place.capacity,
            rating=place.rating,
            display_name=place.display_name,
            attributes=[AttributeValueOut.model_validate(a) for a in place.attributes],
            created_at=place.created_at,
            updated_at=place.updated_at,
        )


# ----- Events -----
class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    date: Optional[str] = None
    date_type: Optional[str] = None
    type: Optional[str] = None
    capacity: Optional[int] = None
    place_id: Optional[int] = None
    attributes: List[AttributePair] = Field(default_factory=list)


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    date_type: Optional[str] = None
    type: Optional[str] = None
    capacity: Optional[int] = None
    place_id: Optional[int] = None
    attributes: Optional[List[AttributePair]] = None


class EventOut(BaseModel):
    id: int
    title: str
    description: Optional[str]
    date: Optional[datetime]
    date_type: str
    type: Optional[str]
    capacity: Optional[int]
    place_id: Optional[int]
    memory_ids: List[int]
    attributes: List[AttributeValueOut]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, event: Event) -> "EventOut":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            date=event.date,
            date_type=event.date_type.value,
            type=event.type.value if event.type else None,
            capacity=event.capacity,
            place_id=event.place.id if event.place is not None else None,
            memory_ids=_ids(event.memories),
            attributes=[AttributeValueOut.model_validate(a) for a in event.attributes],
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


# ----- Memories & reflections -----
class ReflectionIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class ReflectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    memory_id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, reflection: Reflection) -> "ReflectionOut":
        return cls.model_validate(reflection)


class MemoryCreate(BaseModel):
    title: str
    description: Optional[str] = None
    media_type: Optional[str] = None
    media_url: Optional[str] = None
    media_name: Optional[str] = None
    media_size: Optional[int] = None
    date: Optional[str] = None
    date_type: Optional[str] = None
    people_ids: List[int] = Field(default_factory=list)
    place_id: Optional[int] = None
    event_id: Optional[int] = None


class MemoryUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    media_type: Optional[str] = None
    media_url: Optional[str] = None
    media_name: Optional[str] = None
    media_size: Optional[int] = None
    date: Optional[str] = None
    date_type: Optional[str] = None
    people_ids: Optional[List[int]] = None
    place_id: Optional[int] = None
    event_id: Optional[int] = None


class MemoryPeopleIn(BaseModel):
    person_ids: List[int] = Field(default_factory=list)


class MemoryEventIn(BaseModel):
    event_id: Optional[int] = None


class MemoryPlaceIn(BaseModel):
    place_id: Optional[int] = None


class MemoryOut(BaseModel):
    id: int
    title: str
    description: Optional[str]
    media_type: str
    media_url: Optional[str]
    media_name: Optional[str]
    media_size: Optional[int]
    date: Optional[datetime]
    date_type: str
    place_id: Optional[int]
    event_id: Optional[int]
    place_is_derived: bool
    people_ids: List[int]
    reflections: List[ReflectionOut]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, memory: Memory) -> "MemoryOut":
        return cls(
            id=memory.id,
            title=memory.title,
            description=memory.description,
            media_type=memory.media_type.value,
            media_url=memory.media_url,
            media_name=memory.media_name,
            media_size=memory.media_size,
            date=memory.date,
            date_type=memory.date_type.value,
            place_id=memory.place.id if memory.place is not None else None,
            event_id=memory.event.id if memory.event is not None else None,
            place_is_derived=memory.place_is_derived,
            people_ids=_ids(memory.people),
            reflections=[ReflectionOut.from_entity(r) for r in memory.reflections],
            created_at=memory.created_at,
            updated_at=memory.updated_at,
        )


# ----- Attributes -----
class AttributeCreate(BaseModel):
    name: str
    category: Optional[str] = None
    entity_type: str = "all"


class AttributeOut(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str]
    entity_type: str

    @classmethod
    def from_entity(cls, attribute: Attribute) -> "AttributeOut":
        return cls(
            id=attribute.id,
            name=attribute.name,
            category=attribute.category,
            description=attribute.description,
            entity_type=attribute.entity_type.value,
        )


# ----- Collections -----
class CollectionCreate(BaseModel):
    name: str
    details: Optional[str] = None
    memory_ids: List[int] = Field(default_factory=list)
    event_ids: List[int] = Field(default_factory=list)
    place_ids: List[int] = Field(default_factory=list)
    person_ids: List[int] = Field(default_factory=list)


class CollectionUpdate(BaseModel):
    name: Optional[str] = None
    details: Optional[str] = None


class CollectionItemsIn(BaseModel):
    ids: List[int] = Field(default_factory=list)


class CollectionOut(BaseModel):
    id: int
    name: str
    details: Optional[str]
    is_default: bool
    memory_ids: List[int]
    event_ids: List[int]
    place_ids: List[int]
    person_ids: List[int]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, collection: Collection) -> "CollectionOut":
        return cls(
            id=collection.id,
            name=collection.name,
            details=collection.details,
            is_default=collection.owner.default_collection_id == collection.id,
            memory_ids=_ids(collection.memories),
            event_ids=_ids(collection.events),
            place_ids=_ids(collection.places),
            person_ids=_ids(collection.people),
            created_at=collection.created_at,
            updated_at=collection.updated_at,
        )


# ----- Account -----
class SyncOut(BaseModel):
    isSynced: bool


class PlanOut(BaseModel):
    plan: str
    quota_limit: int
    memory_count: int

    @classmethod
    def from_user(cls, user: User, memory_count: int) -> "PlanOut":
        return cls(plan=user.plan.value, quota_limit=user.quota_limit, memory_count=memory_count)


class CheckoutOut(BaseModel):
    url: str


# ----- Uploads -----
class PresignIn(BaseModel):
    file_name: str
    content_type: str
    content_length: int


class PresignOut(BaseModel):
    key: str
    upload_url: str
    url: str


class UploadOut(BaseModel):
    key: str
    url: str
    media_name: str
    media_size: int
    media_type: str
