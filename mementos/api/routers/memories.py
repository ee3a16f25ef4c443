"""
Memory endpoints.

Besides plain CRUD, a memory's people, event and place each have their
own PUT endpoint so the three can be saved independently. The event
endpoint also moves the memory's place; the place endpoint is refused
while an event dictates the place.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import (
    MemoryCreate,
    MemoryEventIn,
    MemoryOut,
    MemoryPeopleIn,
    MemoryPlaceIn,
    MemoryUpdate,
    ReflectionIn,
    ReflectionOut,
    to_changes,
    to_metadata,
)

router = APIRouter(prefix="/api/memories", tags=["memories"])


@router.get("", response_model=List[MemoryOut])
def list_memories(q: Optional[str] = None, scope: OwnerScope = Depends(get_scope)):
    memories = scope.memories.search(q) if q else scope.memories.get_all()
    return [MemoryOut.from_entity(m) for m in memories]


@router.get("/{memory_id}", response_model=MemoryOut)
def get_memory(memory_id: int, scope: OwnerScope = Depends(get_scope)):
    return MemoryOut.from_entity(scope.memories.get(memory_id))


@router.post("", response_model=MemoryOut, status_code=201)
def create_memory(payload: MemoryCreate, scope: OwnerScope = Depends(get_scope)):
    return MemoryOut.from_entity(scope.memories.create(to_metadata(payload)))


@router.patch("/{memory_id}", response_model=MemoryOut)
def update_memory(
    memory_id: int, payload: MemoryUpdate, scope: OwnerScope = Depends(get_scope)
):
    return MemoryOut.from_entity(scope.memories.update(memory_id, to_changes(payload)))


@router.delete("/{memory_id}", status_code=204)
def delete_memory(memory_id: int, scope: OwnerScope = Depends(get_scope)):
    scope.memories.delete(memory_id)
    return Response(status_code=204)


# ----- Associations -----
@router.put("/{memory_id}/people", response_model=MemoryOut)
def set_memory_people(
    memory_id: int, payload: MemoryPeopleIn, scope: OwnerScope = Depends(get_scope)
):
    memory = scope.associations.set_memory_people(memory_id, payload.person_ids)
    return MemoryOut.from_entity(memory)


@router.put("/{memory_id}/event", response_model=MemoryOut)
def set_memory_event(
    memory_id: int, payload: MemoryEventIn, scope: OwnerScope = Depends(get_scope)
):
    memory = scope.associations.set_memory_event(memory_id, payload.event_id)
    return MemoryOut.from_entity(memory)


@router.put("/{memory_id}/place", response_model=MemoryOut)
def set_memory_place(
    memory_id: int, payload: MemoryPlaceIn, scope: OwnerScope = Depends(get_scope)
):
    memory = scope.associations.set_memory_place(memory_id, payload.place_id)
    return MemoryOut.from_entity(memory)


# ----- Reflections -----
@router.get("/{memory_id}/reflections", response_model=List[ReflectionOut])
def list_reflections(memory_id: int, scope: OwnerScope = Depends(get_scope)):
    return [ReflectionOut.from_entity(r) for r in scope.reflections.list_for_memory(memory_id)]


@router.post("/{memory_id}/reflections", response_model=ReflectionOut, status_code=201)
def add_reflection(
    memory_id: int, payload: ReflectionIn, scope: OwnerScope = Depends(get_scope)
):
    reflection = scope.reflections.add(memory_id, payload.title, payload.content)
    return ReflectionOut.from_entity(reflection)
