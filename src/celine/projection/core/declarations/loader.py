# celine/projection/core/declarations/loader.py
"""
Dynamic loading and registration of view declarations.
"""
from __future__ import annotations

import logging

from celine.projection.contracts.declaration import (
    ComputedField,
    RelationshipSpec,
    ViewDeclaration,
)
from celine.projection.core.declarations.config import (
    ComputedEntry,
    DeclarationsConfig,
    RelationshipEntry,
    ViewSpec,
)
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.errors import DeclarationConfigError
from celine.projection.core.loader import import_attr

logger = logging.getLogger(__name__)


def _build_relationship(view: str, entry: RelationshipEntry) -> RelationshipSpec:
    source = None
    if entry.source:
        source = import_attr(entry.source)
        logger.debug(
            "Loaded source '%s' for relationship '%s.%s'", entry.source, view, entry.name
        )

    return RelationshipSpec(
        name=entry.name,
        policy=entry.embed,
        view=entry.view,
        key=entry.key,
        source=source,
        id_field=entry.id_field,
        sideload=entry.sideload,
        many=entry.many,
    )


def _build_computed(entry: ComputedEntry) -> ComputedField:
    return ComputedField(
        name=entry.name,
        func=import_attr(entry.function),
        condition=import_attr(entry.condition) if entry.condition else None,
    )


class _DeclarationBuilder:
    """Builds declarations from specs, following include chains."""

    def __init__(self, cfg: DeclarationsConfig, registry: DeclarationRegistry) -> None:
        self.cfg = cfg
        self.registry = registry
        self._built: dict[str, ViewDeclaration] = {}
        self._resolving: list[str] = []

    def build(self, name: str) -> ViewDeclaration:
        if name in self._built:
            return self._built[name]

        spec = self.cfg.get(name)
        if spec is None:
            # fragments declared in code and registered beforehand
            if self.registry.has(name):
                return self.registry.get(name)
            raise DeclarationConfigError(f"View '{name}' is not declared")

        if name in self._resolving:
            chain = " -> ".join(self._resolving + [name])
            raise DeclarationConfigError(f"Include cycle detected: {chain}")

        self._resolving.append(name)
        try:
            declaration = self._build_spec(spec)
        finally:
            self._resolving.pop()

        self._built[name] = declaration
        return declaration

    def _build_spec(self, spec: ViewSpec) -> ViewDeclaration:
        try:
            declaration = ViewDeclaration(
                name=spec.name,
                fields=spec.fields,
                relationships=tuple(
                    _build_relationship(spec.name, r) for r in spec.relationships
                ),
                computed=tuple(_build_computed(c) for c in spec.computed),
                root=spec.root,
                collection_root=spec.collection_root,
                embed=spec.embed,
                presenter=import_attr(spec.presenter) if spec.presenter else None,
            )
        except ValueError as exc:
            raise DeclarationConfigError(f"Invalid view '{spec.name}': {exc}") from exc

        if spec.include:
            fragments = [self.build(name) for name in spec.include]
            declaration = declaration.include(*fragments)
            logger.debug("View '%s' includes %s", spec.name, list(spec.include))

        return declaration


def load_and_register_declarations(
    *,
    cfg: DeclarationsConfig,
    registry: DeclarationRegistry | None = None,
) -> DeclarationRegistry:
    """
    Build, register and bind all configured view declarations.

    Imports entity classes, computed functions, sources and presenters;
    abstract views are only used as include fragments.

    Args:
        cfg: Declarations configuration
        registry: Registry to populate; a new one if omitted

    Returns:
        The populated registry

    Raises:
        DeclarationConfigError: On unknown includes, include cycles or
            references to unregistered views
        ImportError: If an import path can't be imported
        AttributeError: If an import path names a missing attribute
    """
    registry = registry if registry is not None else DeclarationRegistry()
    builder = _DeclarationBuilder(cfg, registry)

    for spec in cfg.views:
        if spec.abstract:
            continue

        declaration = builder.build(spec.name)
        entity_type = import_attr(spec.entity) if spec.entity else None
        registry.register(declaration, entity_type=entity_type)

    for declaration in registry:
        for rel in declaration.relationships:
            if isinstance(rel.view, str) and not registry.has(rel.view):
                raise DeclarationConfigError(
                    f"Relationship '{rel.name}' of view '{declaration.name}' "
                    f"references unknown view '{rel.view}'"
                )

    logger.info("Successfully registered %d view(s)", len(registry))
    return registry
