# celine/projection/api/deps.py
"""
FastAPI dependencies for the projection runtime.

Use as ``Depends(get_resolver)`` / ``Depends(get_request_context)``.
"""
from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from celine.projection.contracts.context import RequestContext
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.resolver import ViewResolver

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"


def get_registry(request: Request) -> DeclarationRegistry:
    registry: DeclarationRegistry | None = getattr(request.app.state, "registry", None)
    if registry is None:
        logger.error("Projection runtime not initialized correctly")
        raise HTTPException(status_code=500, detail="Projection runtime not initialized")
    return registry


def get_resolver(request: Request) -> ViewResolver:
    resolver: ViewResolver | None = getattr(request.app.state, "resolver", None)
    if resolver is None:
        logger.error("Projection runtime not initialized correctly")
        raise HTTPException(status_code=500, detail="Projection runtime not initialized")
    return resolver


def get_request_context(request: Request) -> RequestContext:
    """
    Build the request context from what the request layer has attached.

    The viewer is whatever authentication middleware stored on
    ``request.state.viewer``; nothing is parsed here.
    """
    return RequestContext.create(
        viewer=getattr(request.state, "viewer", None),
        request_id=request.headers.get(REQUEST_ID_HEADER),
        extras={"path": request.url.path},
    )
