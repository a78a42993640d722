# celine/projection/core/presenters.py
"""
Presentation wrappers.

A presenter keeps display-only logic out of the entity: it wraps the
entity, answers for the attributes it defines itself and forwards every
other attribute lookup to the wrapped entity.

    class PostPresenter(Presenter):
        def is_front_page(self) -> bool:
            return self.entity.published_at > self.context.now - timedelta(days=2)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class Presenter:
    def __init__(self, entity: Any, context: Any = None) -> None:
        self.entity = entity
        self.context = context

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails on the presenter itself
        if name in ("entity", "context"):
            raise AttributeError(name)
        entity = self.entity
        if isinstance(entity, Mapping) and name in entity:
            return entity[name]
        return getattr(entity, name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(dir(self.entity)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entity!r})"
