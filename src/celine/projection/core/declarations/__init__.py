"""View declaration infrastructure: registry, YAML config and loading."""
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.declarations.loader import load_and_register_declarations
from celine.projection.core.declarations.config import (
    DeclarationsConfig,
    ViewSpec,
    load_declarations_config,
)

__all__ = [
    "DeclarationRegistry",
    "load_and_register_declarations",
    "load_declarations_config",
    "DeclarationsConfig",
    "ViewSpec",
]
