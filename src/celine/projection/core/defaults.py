# celine/projection/core/defaults.py
"""
Default projection policies.

A policy is consulted when neither an explicit view nor a type binding
resolves a declaration for an entity.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, runtime_checkable

from celine.projection.contracts.declaration import (
    EmbedPolicy,
    RelationshipSpec,
    ViewDeclaration,
)
from celine.projection.core.entity import (
    is_entity,
    is_entity_collection,
    public_fields,
    read_field,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class DefaultProjectionPolicy(Protocol):
    def declaration_for(self, entity: Any) -> ViewDeclaration | None: ...


class PublicFieldsPolicy:
    """
    Emit every public field of the entity.

    Attributes holding other entities (or collections of them) become
    inline relationships, so nested objects go through the same lookup
    and the same exclusions instead of being emitted raw. Names in
    ``exclude`` are skipped at every level this policy projects.
    """

    def __init__(self, exclude: Iterable[str] = ()) -> None:
        self.exclude = frozenset(exclude)

    def declaration_for(self, entity: Any) -> ViewDeclaration:
        fields: list[str] = []
        relationships: list[RelationshipSpec] = []

        for name in public_fields(entity):
            if name in self.exclude:
                continue
            value = read_field(entity, name)
            if is_entity(value):
                relationships.append(RelationshipSpec(name, EmbedPolicy.INLINE_FULL, many=False))
            elif is_entity_collection(value):
                relationships.append(RelationshipSpec(name, EmbedPolicy.INLINE_FULL, many=True))
            else:
                fields.append(name)

        logger.debug(
            "Falling back to public fields for %s: fields=%s relationships=%s",
            type(entity).__qualname__,
            fields,
            [r.name for r in relationships],
        )
        return ViewDeclaration(
            name=f"default:{type(entity).__qualname__}",
            fields=tuple(fields),
            relationships=tuple(relationships),
        )


class NoDefaultPolicy:
    """Resolve nothing; unresolved entities raise DeclarationNotFound."""

    def declaration_for(self, entity: Any) -> None:
        return None


def build_default_policy(
    name: str,
    *,
    exclude: Iterable[str] = (),
) -> DefaultProjectionPolicy:
    """
    Build a policy from its configuration name.

    Raises:
        ValueError: If the name is unknown
    """
    if name == "public_fields":
        return PublicFieldsPolicy(exclude=exclude)
    if name == "none":
        return NoDefaultPolicy()
    raise ValueError(
        f"Unknown default projection '{name}'. Expected 'public_fields' or 'none'"
    )
