# celine/projection/core/errors.py
"""
Errors raised while resolving view declarations.
"""
from __future__ import annotations


class ProjectionError(Exception):
    pass


class DeclarationNotFound(ProjectionError, LookupError):
    """Raised when no declaration resolves and the default policy declines."""

    def __init__(self, entity_type: str, view: str | None = None) -> None:
        self.entity_type = entity_type
        self.view = view
        if view is not None:
            msg = f"View declaration '{view}' not found for '{entity_type}'"
        else:
            msg = f"No view declaration registered for '{entity_type}'"
        super().__init__(msg)


class ComputedFieldError(ProjectionError):
    """Raised when a computed field (or its condition) fails to evaluate."""

    def __init__(self, view: str, field: str, reason: str = "") -> None:
        self.view = view
        self.field = field
        msg = f"Computed field '{field}' of view '{view}' failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ProjectionDepthError(ProjectionError):
    """Raised when relationship nesting exceeds the configured depth."""

    def __init__(self, view: str, max_depth: int) -> None:
        self.view = view
        self.max_depth = max_depth
        super().__init__(
            f"Relationship nesting exceeded max depth {max_depth} at view '{view}'"
        )


class DeclarationConfigError(ProjectionError, ValueError):
    """Raised when a declarations file is malformed."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)
