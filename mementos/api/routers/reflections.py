"""
Reflection endpoints (creation lives under /api/memories/{id}/reflections).
"""
from fastapi import APIRouter, Depends, Response

from mementos.database import OwnerScope
from ..dependencies import get_scope
from ..schemas import ReflectionIn, ReflectionOut, to_changes

router = APIRouter(prefix="/api/reflections", tags=["reflections"])


@router.get("/{reflection_id}", response_model=ReflectionOut)
def get_reflection(reflection_id: int, scope: OwnerScope = Depends(get_scope)):
    return ReflectionOut.from_entity(scope.reflections.get(reflection_id))


@router.put("/{reflection_id}", response_model=ReflectionOut)
def update_reflection(
    reflection_id: int, payload: ReflectionIn, scope: OwnerScope = Depends(get_scope)
):
    reflection = scope.reflections.update(reflection_id, to_changes(payload))
    return ReflectionOut.from_entity(reflection)


@router.delete("/{reflection_id}", status_code=204)
def delete_reflection(reflection_id: int, scope: OwnerScope = Depends(get_scope)):
    scope.reflections.delete(reflection_id)
    return Response(status_code=204)
