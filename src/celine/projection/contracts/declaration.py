# celine/projection/contracts/declaration.py
"""
View declaration contracts.

A view declaration describes, separately from the entity class, which
fields and relationships of an entity appear in its serialized form and
under which key names. Declarations are immutable values; resolving one
never touches the entity beyond reading it.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Union

EntityFn = Callable[[Any, Any], Any]


class EmbedPolicy(str, Enum):
    """How a relationship is represented in the projection."""

    INLINE_FULL = "inline-full"
    INLINE_IDS = "inline-ids-only"
    OMIT = "omit"

    @classmethod
    def parse(cls, value: "EmbedPolicy | str | bool") -> "EmbedPolicy":
        """
        Parse a policy from its value or one of the short aliases.

        Accepts 'objects'/'full' for inline-full, 'ids' for inline-ids-only
        and 'none'/False for omit.

        Raises:
            ValueError: If the value names no policy
        """
        if isinstance(value, cls):
            return value
        if value is False:
            return cls.OMIT

        key = str(value).strip().lower()
        try:
            return _POLICY_ALIASES[key]
        except KeyError:
            raise ValueError(
                f"Unknown embed policy '{value}'. "
                f"Expected one of: {sorted(_POLICY_ALIASES)}"
            ) from None


_POLICY_ALIASES: dict[str, EmbedPolicy] = {
    "inline-full": EmbedPolicy.INLINE_FULL,
    "objects": EmbedPolicy.INLINE_FULL,
    "full": EmbedPolicy.INLINE_FULL,
    "inline-ids-only": EmbedPolicy.INLINE_IDS,
    "ids": EmbedPolicy.INLINE_IDS,
    "omit": EmbedPolicy.OMIT,
    "none": EmbedPolicy.OMIT,
    "false": EmbedPolicy.OMIT,
}


@dataclass(frozen=True)
class RelationshipSpec:
    """
    A named relationship of an entity and how to embed it.

    Attributes:
        name: Attribute (or mapping key) holding the related entities
        policy: Embedding policy; None inherits the declaration default
        view: Declaration (or its registered name) for related entities
        key: Output key; defaults to ``name``
        source: Optional ``(entity, context)`` function returning the
            related entities instead of reading ``name``
        id_field: Primary identifier field of the related entities
        sideload: With ids-only embedding, also emit the full related
            projections once at the root level
        many: Cardinality; None detects it from the loaded value
    """

    name: str
    policy: EmbedPolicy | None = None
    view: Union[str, "ViewDeclaration", None] = None
    key: str | None = None
    source: EntityFn | None = None
    id_field: str = "id"
    sideload: bool = False
    many: bool | None = None

    def __post_init__(self) -> None:
        if self.policy is not None:
            object.__setattr__(self, "policy", EmbedPolicy.parse(self.policy))

    @property
    def output_key(self) -> str:
        return self.key or self.name


@dataclass(frozen=True)
class ComputedField:
    """
    A field whose value is computed from the entity and request context.

    ``func`` and ``condition`` are called as ``fn(entity, context)`` on
    every resolution; a falsy condition leaves the key out entirely.
    """

    name: str
    func: EntityFn
    condition: EntityFn | None = None


@dataclass(frozen=True)
class ViewDeclaration:
    """
    Named, immutable projection of an entity type.

    Attributes:
        name: Declaration name (registry key)
        fields: Field names to expose, in output order
        relationships: Relationship specs, in output order
        computed: Computed fields, appended after ``fields``
        root: Root key; a string overrides, False disables wrapping,
            True/None use the entity type's conventional name (None also
            defers to the resolver's default)
        collection_root: Root key for collections of this view, used even
            when ``root`` is False
        embed: Default policy for relationships without their own
        presenter: Optional wrapper class, called as
            ``presenter(entity, context)`` before any field is read
    """

    name: str
    fields: tuple[str, ...] = ()
    relationships: tuple[RelationshipSpec, ...] = ()
    computed: tuple[ComputedField, ...] = ()
    root: str | bool | None = None
    collection_root: str | None = None
    embed: EmbedPolicy = EmbedPolicy.INLINE_FULL
    presenter: Callable[[Any, Any], Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "relationships", _as_relationships(self.relationships))
        object.__setattr__(self, "computed", _as_computed(self.computed))
        object.__setattr__(self, "embed", EmbedPolicy.parse(self.embed))

        seen: set[str] = set()
        for key in self.output_keys:
            if key in seen:
                raise ValueError(f"View '{self.name}' declares key '{key}' twice")
            seen.add(key)

    @property
    def output_keys(self) -> list[str]:
        """Every key this declaration may emit, omitted relationships included."""
        return (
            list(self.fields)
            + [c.name for c in self.computed]
            + [r.output_key for r in self.relationships]
        )

    def policy_for(self, rel: RelationshipSpec) -> EmbedPolicy:
        return rel.policy if rel.policy is not None else self.embed

    def include(self, *fragments: "ViewDeclaration") -> "ViewDeclaration":
        """
        Return a copy extended with the entries of shared fragments.

        Entries whose output key is already present are kept as they are,
        so a view can override what a fragment contributes. Fragment
        relationships without their own policy keep the fragment's
        default embed policy.
        """
        fields = list(self.fields)
        computed = list(self.computed)
        relationships = list(self.relationships)
        taken = set(self.output_keys)

        for fragment in fragments:
            for name in fragment.fields:
                if name not in taken:
                    fields.append(name)
                    taken.add(name)
            for comp in fragment.computed:
                if comp.name not in taken:
                    computed.append(comp)
                    taken.add(comp.name)
            for rel in fragment.relationships:
                if rel.output_key not in taken:
                    if rel.policy is None:
                        rel = replace(rel, policy=fragment.embed)
                    relationships.append(rel)
                    taken.add(rel.output_key)

        return replace(
            self,
            fields=tuple(fields),
            computed=tuple(computed),
            relationships=tuple(relationships),
        )

    def describe(self) -> dict[str, Any]:
        """Plain metadata for discovery endpoints."""
        return {
            "name": self.name,
            "fields": list(self.fields),
            "computed": [c.name for c in self.computed],
            "relationships": {
                r.output_key: self.policy_for(r).value for r in self.relationships
            },
            "root": self.root,
            "collection_root": self.collection_root,
            "embed": self.embed.value,
            "presenter": (
                getattr(self.presenter, "__qualname__", repr(self.presenter))
                if self.presenter is not None
                else None
            ),
        }


def _as_relationships(
    value: Iterable[RelationshipSpec] | Mapping[str, Any],
) -> tuple[RelationshipSpec, ...]:
    """Accept specs, or a ``{name: policy | spec}`` mapping."""
    if isinstance(value, Mapping):
        out = []
        for name, spec in value.items():
            if isinstance(spec, RelationshipSpec):
                out.append(spec if spec.name == name else replace(spec, name=name))
            else:
                out.append(RelationshipSpec(name=name, policy=spec))
        return tuple(out)
    return tuple(value)


def _as_computed(
    value: Iterable[ComputedField] | Mapping[str, EntityFn],
) -> tuple[ComputedField, ...]:
    """Accept computed fields, or a ``{name: func}`` mapping."""
    if isinstance(value, Mapping):
        return tuple(ComputedField(name=name, func=fn) for name, fn in value.items())
    return tuple(value)
