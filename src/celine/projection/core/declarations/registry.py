# celine/projection/core/declarations/registry.py
"""
Registry for view declarations.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator

from celine.projection.contracts.declaration import ViewDeclaration
from celine.projection.core.entity import type_identifier

logger = logging.getLogger(__name__)


class DeclarationRegistry:
    """
    Registry of view declarations, populated once at process start.

    Declarations are stored by name. Entity types are bound to a
    declaration by exact type identifier; there is no subclass walk and
    no guessing from class names.
    """

    def __init__(self) -> None:
        self._declarations: dict[str, ViewDeclaration] = {}
        self._bindings: dict[str, str] = {}

    def register(
        self,
        declaration: ViewDeclaration,
        *,
        entity_type: type | str | None = None,
    ) -> None:
        """
        Register a declaration, optionally binding an entity type to it.

        Args:
            declaration: The view declaration
            entity_type: Entity class (or its type identifier) whose
                instances resolve to this declaration by default

        Raises:
            ValueError: If a declaration with this name is already registered
        """
        if declaration.name in self._declarations:
            raise ValueError(f"View '{declaration.name}' is already registered")

        self._declarations[declaration.name] = declaration
        logger.info("Registered view: %s", declaration.name)

        if entity_type is not None:
            self.bind(entity_type, declaration.name)

    def bind(self, entity_type: type | str, name: str) -> None:
        """
        Bind an entity type to a registered declaration.

        Raises:
            KeyError: If no declaration with this name exists
            ValueError: If the entity type is already bound
        """
        if name not in self._declarations:
            raise KeyError(
                f"View '{name}' not found. Available: {list(self._declarations)}"
            )

        type_id = entity_type if isinstance(entity_type, str) else type_identifier(entity_type)
        if type_id in self._bindings:
            raise ValueError(
                f"Entity type '{type_id}' is already bound to view "
                f"'{self._bindings[type_id]}'"
            )

        self._bindings[type_id] = name
        logger.debug("Bound entity type '%s' to view '%s'", type_id, name)

    def get(self, name: str) -> ViewDeclaration:
        try:
            return self._declarations[name]
        except KeyError:
            raise KeyError(
                f"View '{name}' not found. Available: {list(self._declarations)}"
            ) from None

    def has(self, name: str) -> bool:
        return name in self._declarations

    def for_type(self, entity_or_type: Any) -> ViewDeclaration | None:
        """
        Declaration bound to the exact type of an entity.

        Args:
            entity_or_type: An entity instance or an entity class

        Returns:
            The bound declaration, or None if the type is unbound
        """
        name = self._bindings.get(type_identifier(entity_or_type))
        if name is None:
            return None
        return self._declarations[name]

    def list(self) -> list[dict[str, Any]]:
        """
        List registered declarations with their bound entity types.
        """
        bound: dict[str, list[str]] = {}
        for type_id, name in self._bindings.items():
            bound.setdefault(name, []).append(type_id)

        return [
            {
                "name": decl.name,
                "entity_types": bound.get(decl.name, []),
                "fields": len(decl.fields) + len(decl.computed),
                "relationships": len(decl.relationships),
            }
            for decl in self._declarations.values()
        ]

    def describe(self, name: str) -> dict[str, Any]:
        """
        Detailed description of a declaration.

        Raises:
            KeyError: If not found
        """
        desc = self.get(name).describe()
        desc["entity_types"] = [t for t, n in self._bindings.items() if n == name]
        return desc

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._declarations)

    def __iter__(self) -> Iterator[ViewDeclaration]:
        return iter(self._declarations.values())
