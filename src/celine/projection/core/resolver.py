# celine/projection/core/resolver.py
"""
Resolution of entities into plain, ordered projections.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable

from celine.projection.contracts.context import RequestContext
from celine.projection.contracts.declaration import (
    ComputedField,
    EmbedPolicy,
    RelationshipSpec,
    ViewDeclaration,
)
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.defaults import DefaultProjectionPolicy, PublicFieldsPolicy
from celine.projection.core.entity import is_many, read_field, type_identifier
from celine.projection.core.errors import (
    ComputedFieldError,
    DeclarationNotFound,
    ProjectionDepthError,
    ProjectionError,
)
from celine.projection.core.naming import conventional_name, pluralize

logger = logging.getLogger(__name__)

View = ViewDeclaration | str | None
RootOption = str | bool | None

_SKIP = object()


class _Sideloads:
    """Related projections collected for the root level, unique per key and id."""

    def __init__(self) -> None:
        self._by_key: dict[str, dict[Any, Any]] = {}

    def reserve(self, key: str, ident: Any) -> bool:
        bucket = self._by_key.setdefault(key, {})
        if ident in bucket:
            return False
        bucket[ident] = None
        return True

    def fill(self, key: str, ident: Any, projection: Any) -> None:
        self._by_key[key][ident] = projection

    def merge_into(self, out: dict[str, Any]) -> None:
        for key, bucket in self._by_key.items():
            if key in out:
                raise ProjectionError(
                    f"Sideloaded key '{key}' collides with the root key"
                )
            out[key] = list(bucket.values())


class ViewResolver:
    """
    Turns entities into plain dict/list structures ready for encoding.

    Resolution is a pure function of the entity graph, the declaration and
    the request context. Nothing is cached between calls.

    Handles:
        - Declaration lookup (explicit view, type binding, default policy)
        - Declared fields, computed fields and relationship embedding
        - Root key wrapping and root-level sideloading
    """

    def __init__(
        self,
        registry: DeclarationRegistry,
        *,
        default_policy: DefaultProjectionPolicy | None = None,
        default_root: bool = True,
        max_depth: int = 8,
    ) -> None:
        self.registry = registry
        self.default_policy = (
            default_policy if default_policy is not None else PublicFieldsPolicy()
        )
        self.default_root = default_root
        self.max_depth = max_depth

    # ---- lookup --------------------------------------------------

    def declaration_for(self, entity: Any, view: View = None) -> ViewDeclaration:
        """
        Find the declaration that applies to an entity.

        Args:
            entity: Entity to project
            view: Explicit declaration, or the registered name of one

        Returns:
            The applicable declaration

        Raises:
            DeclarationNotFound: If nothing resolves and the default policy
                declines
        """
        if isinstance(view, ViewDeclaration):
            return view

        if view is not None:
            if not self.registry.has(view):
                logger.warning(
                    "Explicit view '%s' requested for '%s' is not registered",
                    view,
                    type_identifier(entity),
                )
                raise DeclarationNotFound(type_identifier(entity), view=view)
            return self.registry.get(view)

        declaration = self.registry.for_type(entity)
        if declaration is not None:
            return declaration

        declaration = self.default_policy.declaration_for(entity)
        if declaration is not None:
            return declaration

        logger.warning("No view declaration resolves for '%s'", type_identifier(entity))
        raise DeclarationNotFound(type_identifier(entity))

    # ---- public API ----------------------------------------------

    def resolve(
        self,
        entity: Any,
        view: View = None,
        *,
        context: RequestContext | None = None,
        root: RootOption = None,
    ) -> Any:
        """
        Resolve a single entity.

        Args:
            entity: Entity to project
            view: Explicit declaration (or registered name) to use
            context: Request context for computed fields and sources
            root: False disables wrapping, a string overrides the root key,
                True forces the conventional key

        Returns:
            ``{root_key: projection, **sideloads}``, or the bare projection

        Raises:
            DeclarationNotFound: If no declaration resolves
            ComputedFieldError: If a computed field fails
            ProjectionDepthError: If relationship nesting is too deep
        """
        ctx = context if context is not None else RequestContext.create()
        declaration = self.declaration_for(entity, view)
        key = self._root_key(declaration, root, entity)

        sideloads = _Sideloads() if key is not None else None
        body = self._project(entity, declaration, ctx, 0, sideloads)

        if key is None:
            return body

        out: dict[str, Any] = {key: body}
        sideloads.merge_into(out)
        return out

    def resolve_collection(
        self,
        entities: Iterable[Any],
        view: View = None,
        *,
        context: RequestContext | None = None,
        root: RootOption = None,
    ) -> Any:
        """
        Resolve a sequence of entities.

        Each entity gets its own declaration unless ``view`` is given. The
        plural root key comes from ``root``, the view's collection root, its
        pluralized root, or the first entity's type, in that order.

        Returns:
            ``{plural_root_key: [projections], **sideloads}``, or the bare list
        """
        ctx = context if context is not None else RequestContext.create()
        items = list(entities)
        first = items[0] if items else None

        if view is not None:
            key_declaration: ViewDeclaration | None = self.declaration_for(first, view)
        elif items:
            key_declaration = self.declaration_for(first)
        else:
            key_declaration = None

        key = self._root_key(key_declaration, root, first, plural=True)
        sideloads = _Sideloads() if key is not None else None

        body = [
            self._project(item, self.declaration_for(item, view), ctx, 0, sideloads)
            for item in items
        ]

        if key is None:
            return body

        out: dict[str, Any] = {key: body}
        sideloads.merge_into(out)
        return out

    # ---- projection ----------------------------------------------

    def _project(
        self,
        entity: Any,
        declaration: ViewDeclaration,
        ctx: RequestContext,
        depth: int,
        sideloads: _Sideloads | None,
    ) -> dict[str, Any]:
        if depth > self.max_depth:
            logger.error(
                "View '%s' nested deeper than %d levels", declaration.name, self.max_depth
            )
            raise ProjectionDepthError(declaration.name, self.max_depth)

        subject = (
            declaration.presenter(entity, ctx)
            if declaration.presenter is not None
            else entity
        )

        out: dict[str, Any] = {}

        for name in declaration.fields:
            out[name] = read_field(subject, name)

        for comp in declaration.computed:
            value = self._compute(declaration, comp, subject, ctx)
            if value is not _SKIP:
                out[comp.name] = value

        for rel in declaration.relationships:
            policy = declaration.policy_for(rel)
            if policy is EmbedPolicy.OMIT:
                continue

            related = (
                rel.source(subject, ctx)
                if rel.source is not None
                else read_field(subject, rel.name)
            )
            many = rel.many if rel.many is not None else is_many(related)

            if policy is EmbedPolicy.INLINE_IDS:
                out[rel.output_key] = self._embed_ids(
                    rel, related, many, ctx, depth, sideloads
                )
            else:
                out[rel.output_key] = self._embed_full(
                    rel, related, many, ctx, depth, sideloads
                )

        return out

    def _compute(
        self,
        declaration: ViewDeclaration,
        comp: ComputedField,
        subject: Any,
        ctx: RequestContext,
    ) -> Any:
        try:
            if comp.condition is not None and not comp.condition(subject, ctx):
                return _SKIP
            return comp.func(subject, ctx)
        except Exception as exc:
            logger.error(
                "Computed field '%s' of view '%s' failed: %s",
                comp.name,
                declaration.name,
                exc,
            )
            raise ComputedFieldError(declaration.name, comp.name, str(exc)) from exc

    def _embed_full(
        self,
        rel: RelationshipSpec,
        related: Any,
        many: bool,
        ctx: RequestContext,
        depth: int,
        sideloads: _Sideloads | None,
    ) -> Any:
        if related is None:
            return [] if many else None

        if many:
            return [
                self._project(r, self.declaration_for(r, rel.view), ctx, depth + 1, sideloads)
                for r in related
            ]

        return self._project(
            related, self.declaration_for(related, rel.view), ctx, depth + 1, sideloads
        )

    def _embed_ids(
        self,
        rel: RelationshipSpec,
        related: Any,
        many: bool,
        ctx: RequestContext,
        depth: int,
        sideloads: _Sideloads | None,
    ) -> Any:
        if related is None:
            return [] if many else None

        items = list(related) if many else [related]
        ids = [read_field(r, rel.id_field) for r in items]

        if rel.sideload and sideloads is not None:
            key = rel.name if many else pluralize(rel.name)
            for r, ident in zip(items, ids):
                if sideloads.reserve(key, ident):
                    projection = self._project(
                        r, self.declaration_for(r, rel.view), ctx, depth + 1, sideloads
                    )
                    sideloads.fill(key, ident, projection)

        return ids if many else ids[0]

    # ---- root keys -----------------------------------------------

    def _root_key(
        self,
        declaration: ViewDeclaration | None,
        override: RootOption,
        entity: Any,
        *,
        plural: bool = False,
    ) -> str | None:
        if override is False:
            return None
        if isinstance(override, str) and override:
            return override

        # collection_root applies to collections even when root is False
        if plural and declaration is not None and declaration.collection_root:
            return declaration.collection_root
        declared = declaration.root if declaration is not None else None
        if declared is False:
            return None
        if declared is None and override is not True and not self.default_root:
            return None

        if isinstance(declared, str) and declared:
            base: str | None = declared
        elif entity is None or isinstance(entity, Mapping):
            # mappings carry no type name worth rooting under
            base = None
        else:
            base = conventional_name(type(entity))

        if base is None:
            return None
        return pluralize(base) if plural else base
