# celine/projection/api/rendering.py
"""
Rendering resolved projections as JSON responses.

    @router.get("/items")
    async def list_items(
        resolver: ViewResolver = Depends(get_resolver),
        ctx: RequestContext = Depends(get_request_context),
    ):
        return render(repo.all_items(), resolver=resolver, context=ctx)
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from celine.projection.contracts.context import RequestContext
from celine.projection.core.entity import is_many
from celine.projection.core.errors import DeclarationNotFound
from celine.projection.core.resolver import RootOption, View, ViewResolver

logger = logging.getLogger(__name__)


def project(
    data: Any,
    *,
    resolver: ViewResolver,
    context: RequestContext | None = None,
    view: View = None,
    root: RootOption = None,
) -> Any:
    """Resolve a single entity or, for non-mapping iterables, a collection."""
    if is_many(data):
        return resolver.resolve_collection(data, view, context=context, root=root)
    return resolver.resolve(data, view, context=context, root=root)


def render(
    data: Any,
    *,
    resolver: ViewResolver,
    context: RequestContext | None = None,
    view: View = None,
    root: RootOption = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Resolve ``data`` and wrap it in a JSONResponse.

    Raises:
        HTTPException: 500 when no declaration resolves (a server-side
            misconfiguration)
        ComputedFieldError: Propagated unchanged
    """
    try:
        payload = project(data, resolver=resolver, context=context, view=view, root=root)
    except DeclarationNotFound as exc:
        logger.error("Cannot render '%s': %s", exc.entity_type, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return JSONResponse(content=jsonable_encoder(payload), status_code=status_code)
