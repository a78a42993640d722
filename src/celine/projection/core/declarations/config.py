# celine/projection/core/declarations/config.py
"""
Configuration models and loading for view declarations.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

import jsonschema

from celine.projection.core.errors import DeclarationConfigError
from celine.projection.core.loader import load_yaml_files, substitute_env_vars

logger = logging.getLogger(__name__)

_IMPORT_PATH = {"type": "string", "pattern": r"^[\w.]+:[\w.]+$"}
_EMBED = {
    "oneOf": [
        {
            "type": "string",
            "enum": ["inline-full", "objects", "full", "inline-ids-only", "ids", "omit", "none"],
        },
        {"const": False},
    ]
}

VIEW_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "abstract": {"type": "boolean"},
        "entity": _IMPORT_PATH,
        "fields": {"type": "array", "items": {"type": "string"}},
        "root": {"type": ["string", "boolean", "null"]},
        "collection_root": {"type": "string"},
        "embed": _EMBED,
        "presenter": _IMPORT_PATH,
        "include": {"type": "array", "items": {"type": "string"}},
        "computed": {
            "type": "object",
            "additionalProperties": {
                "oneOf": [
                    _IMPORT_PATH,
                    {
                        "type": "object",
                        "required": ["function"],
                        "additionalProperties": False,
                        "properties": {"function": _IMPORT_PATH, "if": _IMPORT_PATH},
                    },
                ]
            },
        },
        "relationships": {
            "type": "object",
            "additionalProperties": {
                "oneOf": [
                    {"type": "null"},
                    _EMBED,
                    {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {
                            "embed": _EMBED,
                            "view": {"type": "string"},
                            "key": {"type": "string"},
                            "source": _IMPORT_PATH,
                            "id_field": {"type": "string"},
                            "sideload": {"type": "boolean"},
                            "many": {"type": "boolean"},
                        },
                    },
                ]
            },
        },
    },
}


@dataclass(frozen=True)
class RelationshipEntry:
    """
    YAML-declared relationship.

    Attributes:
        name: Relationship name on the entity
        embed: Embed policy (or alias); None inherits the view default
        view: Name of the declaration used for related entities
        key: Output key override
        source: Import path of an ``(entity, context)`` source function
        id_field: Primary identifier field of related entities
        sideload: Emit full related projections at the root level
        many: Explicit cardinality
    """

    name: str
    embed: str | bool | None = None
    view: str | None = None
    key: str | None = None
    source: str | None = None
    id_field: str = "id"
    sideload: bool = False
    many: bool | None = None


@dataclass(frozen=True)
class ComputedEntry:
    name: str
    function: str
    condition: str | None = None


@dataclass(frozen=True)
class ViewSpec:
    """
    YAML-declared view.

    Attributes:
        name: View name (registry key)
        entity: Import path of the entity class bound to this view
        abstract: Fragment only, included by other views, never registered
        fields: Field names in output order
        root: Root key, False to disable, None for the convention
        collection_root: Root key for collections
        embed: Default relationship policy
        presenter: Import path of a presenter class
        include: Names of fragments whose entries are merged in
        computed: Computed field entries
        relationships: Relationship entries
    """

    name: str
    entity: str | None = None
    abstract: bool = False
    fields: tuple[str, ...] = ()
    root: str | bool | None = None
    collection_root: str | None = None
    embed: str | bool = "inline-full"
    presenter: str | None = None
    include: tuple[str, ...] = ()
    computed: tuple[ComputedEntry, ...] = ()
    relationships: tuple[RelationshipEntry, ...] = ()


@dataclass(frozen=True)
class DeclarationsConfig:
    views: list[ViewSpec] = field(default_factory=list)

    def get(self, name: str) -> ViewSpec | None:
        for view in self.views:
            if view.name == name:
                return view
        return None


def validate_view(name: str, raw: Any) -> None:
    """
    Validate a raw view entry against VIEW_SCHEMA.

    Raises:
        DeclarationConfigError: Listing every schema violation
    """
    validator = jsonschema.Draft7Validator(VIEW_SCHEMA)
    errors = sorted(validator.iter_errors(raw), key=lambda e: list(e.path))
    if not errors:
        return

    messages = [
        f"{'/'.join(str(p) for p in err.path) or '<root>'}: {err.message}"
        for err in errors
    ]
    logger.warning("View '%s' failed validation: %s", name, messages)
    raise DeclarationConfigError(
        f"Invalid view '{name}': {messages[0]}",
        errors=messages,
    )


def _parse_relationship(name: str, raw: Any) -> RelationshipEntry:
    if raw is None or not isinstance(raw, dict):
        # shorthand: `comments: ids` or bare `comments:`
        return RelationshipEntry(name=name, embed=raw)

    return RelationshipEntry(
        name=name,
        embed=raw.get("embed"),
        view=raw.get("view"),
        key=raw.get("key"),
        source=raw.get("source"),
        id_field=raw.get("id_field", "id"),
        sideload=raw.get("sideload", False),
        many=raw.get("many"),
    )


def _parse_computed(name: str, raw: str | dict[str, Any]) -> ComputedEntry:
    if isinstance(raw, str):
        return ComputedEntry(name=name, function=raw)
    return ComputedEntry(name=name, function=raw["function"], condition=raw.get("if"))


def _parse_view_spec(name: str, raw: dict[str, Any]) -> ViewSpec:
    """
    Parse a single view from its raw YAML mapping.

    Raises:
        DeclarationConfigError: If the entry is invalid
    """
    validate_view(name, raw)

    abstract = raw.get("abstract", False)
    if abstract and raw.get("entity"):
        raise DeclarationConfigError(
            f"Abstract view '{name}' cannot be bound to an entity"
        )

    return ViewSpec(
        name=name,
        entity=raw.get("entity"),
        abstract=abstract,
        fields=tuple(raw.get("fields", ())),
        root=raw.get("root"),
        collection_root=raw.get("collection_root"),
        embed=raw.get("embed", "inline-full"),
        presenter=raw.get("presenter"),
        include=tuple(raw.get("include", ())),
        computed=tuple(
            _parse_computed(n, c) for n, c in (raw.get("computed") or {}).items()
        ),
        relationships=tuple(
            _parse_relationship(n, r)
            for n, r in (raw.get("relationships") or {}).items()
        ),
    )


def load_declarations_config(patterns: Iterable[str]) -> DeclarationsConfig:
    """
    Load view declarations from YAML files.

    Expected structure::

        views:
          commentable:
            abstract: true
            relationships:
              comments: ids
          item:
            entity: shop.models:Item
            fields: [id, name]
            root: item
            include: [commentable]
            computed:
              url: shop.helpers:item_url
            relationships:
              pictures:
                embed: ids
                sideload: true

    Later files override earlier ones view by view.

    Raises:
        DeclarationConfigError: If a view is invalid
    """
    views_map: dict[str, Any] = {}

    for data in load_yaml_files(patterns):
        views = data.get("views") or {}
        if not isinstance(views, dict):
            raise DeclarationConfigError("'views' must be a mapping of view name to view")
        for name, raw in views.items():
            try:
                views_map[name] = substitute_env_vars(
                    raw if raw is not None else {}, where=f"views.{name}"
                )
            except ValueError as exc:
                logger.error("Failed to substitute environment in view '%s': %s", name, exc)
                raise DeclarationConfigError(f"Invalid view '{name}': {exc}") from exc

    specs: list[ViewSpec] = []
    for name, raw in views_map.items():
        try:
            specs.append(_parse_view_spec(name, raw))
        except DeclarationConfigError as exc:
            logger.error("Failed to parse view '%s': %s", name, exc)
            raise

    logger.info("Loaded %d view spec(s): %s", len(specs), [s.name for s in specs])
    return DeclarationsConfig(views=specs)
