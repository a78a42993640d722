# celine/projection/contracts/context.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(frozen=True)
class RequestContext:
    """
    Ambient request data handed explicitly to computed fields, conditions,
    relationship sources and presenters.

    Attributes:
        viewer: The authenticated viewer, if any
        request_id: Correlation id of the request being served
        now: Time the request started
        extras: Anything else the request layer wants to expose
    """

    viewer: Any = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    extras: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        *,
        viewer: Any = None,
        request_id: str | None = None,
        extras: Mapping[str, Any] | None = None,
    ) -> "RequestContext":
        return cls(
            viewer=viewer,
            request_id=request_id or str(uuid.uuid4()),
            extras=dict(extras or {}),
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.extras.get(key, default)
