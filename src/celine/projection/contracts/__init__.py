"""Public contracts for view declarations."""
from celine.projection.contracts.context import RequestContext
from celine.projection.contracts.declaration import (
    ComputedField,
    EmbedPolicy,
    RelationshipSpec,
    ViewDeclaration,
)

__all__ = [
    "RequestContext",
    "ComputedField",
    "EmbedPolicy",
    "RelationshipSpec",
    "ViewDeclaration",
]
