"""
Place endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import PlaceCreate, PlaceOut, PlaceUpdate, to_changes, to_metadata

router = APIRouter(prefix="/api/places", tags=["places"])


@router.get("", response_model=List[PlaceOut])
def list_places(q: Optional[str] = None, scope: OwnerScope = Depends(get_scope)):
    places = scope.places.search(q) if q else scope.places.get_all()
    return [PlaceOut.from_entity(p) for p in places]


@router.get("/{place_id}", response_model=PlaceOut)
def get_place(place_id: int, scope: OwnerScope = Depends(get_scope)):
    return PlaceOut.from_entity(scope.places.get(place_id))


@router.post("", response_model=PlaceOut, status_code=201)
def create_place(payload: PlaceCreate, scope: OwnerScope = Depends(get_scope)):
    return PlaceOut.from_entity(scope.places.create(to_metadata(payload)))


@router.patch("/{place_id}", response_model=PlaceOut)
def update_place(
    place_id: int, payload: PlaceUpdate, scope: OwnerScope = Depends(get_scope)
):
    return PlaceOut.from_entity(scope.places.update(place_id, to_changes(payload)))


@router.delete("/{place_id}", status_code=204)
def delete_place(place_id: int, scope: OwnerScope = Depends(get_scope)):
    scope.places.delete(place_id)
    return Response(status_code=204)
