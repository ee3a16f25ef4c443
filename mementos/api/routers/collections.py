"""
Collection endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import (
    CollectionCreate,
    CollectionItemsIn,
    CollectionOut,
    CollectionUpdate,
    to_changes,
    to_metadata,
)

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.get("", response_model=List[CollectionOut])
def list_collections(q: Optional[str] = None, scope: OwnerScope = Depends(get_scope)):
    collections = scope.collections.search(q) if q else scope.collections.get_all()
    return [CollectionOut.from_entity(c) for c in collections]


@router.get("/{collection_id}", response_model=CollectionOut)
def get_collection(collection_id: int, scope: OwnerScope = Depends(get_scope)):
    return CollectionOut.from_entity(scope.collections.get(collection_id))


@router.post("", response_model=CollectionOut, status_code=201)
def create_collection(payload: CollectionCreate, scope: OwnerScope = Depends(get_scope)):
    return CollectionOut.from_entity(scope.collections.create(to_metadata(payload)))


@router.patch("/{collection_id}", response_model=CollectionOut)
def update_collection(
    collection_id: int, payload: CollectionUpdate, scope: OwnerScope = Depends(get_scope)
):
    collection = scope.collections.update(collection_id, to_changes(payload))
    return CollectionOut.from_entity(collection)


@router.put("/{collection_id}/{kind}", response_model=CollectionOut)
def set_collection_items(
    collection_id: int,
    kind: str,
    payload: CollectionItemsIn,
    scope: OwnerScope = Depends(get_scope),
):
    collection = scope.collections.set_items(collection_id, kind, payload.ids)
    return CollectionOut.from_entity(collection)


@router.delete("/{collection_id}", status_code=204)
def delete_collection(collection_id: int, scope: OwnerScope = Depends(get_scope)):
    scope.collections.delete(collection_id)
    return Response(status_code=204)
