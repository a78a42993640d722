# celine/projection/api/discovery.py
"""
Health and view discovery endpoints.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from celine.projection.api.deps import get_registry
from celine.projection.core.declarations.registry import DeclarationRegistry

router = APIRouter()


@router.get("/health")
async def health(registry: DeclarationRegistry = Depends(get_registry)) -> dict:
    return {"status": "healthy", "views": len(registry)}


@router.get("/views")
async def list_views(
    registry: DeclarationRegistry = Depends(get_registry),
) -> list[dict]:
    """List registered view declarations and the entity types bound to them."""
    return registry.list()


@router.get("/views/{name}")
async def describe_view(
    name: str,
    registry: DeclarationRegistry = Depends(get_registry),
) -> dict:
    try:
        return registry.describe(name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"View '{name}' not found") from exc
