"""
Event endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import EventCreate, EventOut, EventUpdate, to_changes, to_metadata

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=List[EventOut])
def list_events(q: Optional[str] = None, scope: OwnerScope = Depends(get_scope)):
    events = scope.events.search(q) if q else scope.events.get_all()
    return [EventOut.from_entity(e) for e in events]


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, scope: OwnerScope = Depends(get_scope)):
    return EventOut.from_entity(scope.events.get(event_id))


@router.post("", response_model=EventOut, status_code=201)
def create_event(payload: EventCreate, scope: OwnerScope = Depends(get_scope)):
    return EventOut.from_entity(scope.events.create(to_metadata(payload)))


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int, payload: EventUpdate, scope: OwnerScope = Depends(get_scope)
):
    return EventOut.from_entity(scope.events.update(event_id, to_changes(payload)))


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: int, scope: OwnerScope = Depends(get_scope)):
    scope.events.delete(event_id)
    return Response(status_code=204)
