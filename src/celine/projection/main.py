# celine/projection/main.py
"""
Projection runtime application factory.

Loads view declarations once at startup into an explicit registry and
exposes the resolver on ``app.state`` for the routes that render
entities.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from celine.projection.api.discovery import router as discovery_router
from celine.projection.core.config import Settings, settings as default_settings
from celine.projection.core.declarations.config import load_declarations_config
from celine.projection.core.declarations.loader import load_and_register_declarations
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.defaults import build_default_policy
from celine.projection.core.logging import configure_logging
from celine.projection.core.resolver import ViewResolver

logger = logging.getLogger(__name__)


def build_resolver(registry: DeclarationRegistry, cfg: Settings) -> ViewResolver:
    return ViewResolver(
        registry,
        default_policy=build_default_policy(
            cfg.default_projection, exclude=cfg.filtered_fields
        ),
        default_root=cfg.default_root,
        max_depth=cfg.max_depth,
    )


def create_app(
    registry: DeclarationRegistry | None = None,
    *,
    cfg: Settings | None = None,
) -> FastAPI:
    """
    Build and wire the projection FastAPI application.

    Args:
        registry: Pre-populated registry; declarations are loaded from
            ``cfg.declarations_config_paths`` when omitted
        cfg: Settings; the module-level settings when omitted
    """
    cfg = cfg if cfg is not None else default_settings
    configure_logging(cfg.log_level, json_output=cfg.log_json)
    logger.info("Creating projection application (env=%s)", cfg.app_env)

    if registry is None:
        try:
            declarations_cfg = load_declarations_config(cfg.declarations_config_paths)
            registry = load_and_register_declarations(cfg=declarations_cfg)
        except Exception:
            logger.exception("Failed to load view declarations")
            raise

    resolver = build_resolver(registry, cfg)

    app = FastAPI(
        title="CELINE Projection",
        version="1.0.0",
        description="Declarative serialization views",
    )

    # Explicit wiring
    app.state.registry = registry
    app.state.resolver = resolver

    app.include_router(discovery_router)

    logger.info("Projection application ready: %d view(s)", len(registry))
    return app
