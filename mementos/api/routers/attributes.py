"""
Attribute endpoints. Attributes are create-only: there is no update or
delete.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import AttributeCreate, AttributeOut

router = APIRouter(prefix="/api/attributes", tags=["attributes"])


@router.get("", response_model=List[AttributeOut])
def list_attributes(
    q: Optional[str] = None,
    entity_type: Optional[str] = None,
    scope: OwnerScope = Depends(get_scope),
):
    if q:
        attributes = scope.attributes.search(q, entity_type)
    elif entity_type:
        attributes = scope.attributes.list_by_entity_type(entity_type)
    else:
        attributes = scope.attributes.list_all()
    return [AttributeOut.from_entity(a) for a in attributes]


@router.get("/{attribute_id}", response_model=AttributeOut)
def get_attribute(attribute_id: int, scope: OwnerScope = Depends(get_scope)):
    return AttributeOut.from_entity(scope.attributes.get(attribute_id))


@router.post("", response_model=AttributeOut, status_code=201)
def create_attribute(payload: AttributeCreate, scope: OwnerScope = Depends(get_scope)):
    attribute = scope.attributes.create(
        payload.name, category=payload.category, entity_type=payload.entity_type
    )
    return AttributeOut.from_entity(attribute)
