"""
People endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import PersonCreate, PersonOut, PersonUpdate, to_changes, to_metadata

router = APIRouter(prefix="/api/people", tags=["people"])


@router.get("", response_model=List[PersonOut])
def list_people(q: Optional[str] = None, scope: OwnerScope = Depends(get_scope)):
    people = scope.people.search(q) if q else scope.people.get_all()
    return [PersonOut.from_entity(p) for p in people]


@router.get("/{person_id}", response_model=PersonOut)
def get_person(person_id: int, scope: OwnerScope = Depends(get_scope)):
    return PersonOut.from_entity(scope.people.get(person_id))


@router.post("", response_model=PersonOut, status_code=201)
def create_person(payload: PersonCreate, scope: OwnerScope = Depends(get_scope)):
    return PersonOut.from_entity(scope.people.create(to_metadata(payload)))


@router.patch("/{person_id}", response_model=PersonOut)
def update_person(
    person_id: int, payload: PersonUpdate, scope: OwnerScope = Depends(get_scope)
):
    return PersonOut.from_entity(scope.people.update(person_id, to_changes(payload)))


@router.delete("/{person_id}", status_code=204)
def delete_person(person_id: int, scope: OwnerScope = Depends(get_scope)):
    scope.people.delete(person_id)
    return Response(status_code=204)
