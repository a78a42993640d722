# tests/helpers/catalog.py
"""
Small entity catalog shared by the test suite.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel

from celine.projection.core.presenters import Presenter


@dataclass
class User:
    id: int
    name: str
    premium: bool = False
    password: str = "secret"


@dataclass
class Comment:
    id: int
    body: str
    approved: bool = True
    author: User | None = None


@dataclass
class Picture:
    id: int
    url: str


@dataclass
class Item:
    id: int
    name: str
    price: float = 10.0
    comments: list[Comment] = field(default_factory=list)
    pictures: list[Picture] = field(default_factory=list)
    owner: User | None = None
    published_at: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc)
    )


class LineItem:
    def __init__(self, id: int, quantity: int) -> None:
        self.id = id
        self.quantity = quantity
        self._cache = {}


class Tag(BaseModel):
    id: int
    label: str


def item_url(item, ctx) -> str:
    return f"/items/{item.id}"


def discounted_price(item, ctx) -> float:
    return round(item.price * 0.9, 2)


def viewer_is_premium(item, ctx) -> bool:
    return bool(ctx.viewer is not None and ctx.viewer.premium)


def approved_comments(item, ctx) -> list[Comment]:
    return [c for c in item.comments if c.approved]


class ItemPresenter(Presenter):
    def display_name(self) -> str:
        return self.entity.name.title()

    @property
    def is_front_page(self) -> bool:
        return (self.context.now - self.entity.published_at).days < 2
