# tests/conftest.py
from __future__ import annotations

import pytest

from celine.projection.contracts.context import RequestContext
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.resolver import ViewResolver
from tests.helpers.catalog import Comment, Item, Picture, User


@pytest.fixture
def registry() -> DeclarationRegistry:
    return DeclarationRegistry()


@pytest.fixture
def resolver(registry: DeclarationRegistry) -> ViewResolver:
    return ViewResolver(registry)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext.create(viewer=User(id=99, name="viewer"))


@pytest.fixture
def item() -> Item:
    owner = User(id=7, name="ada")
    return Item(
        id=1,
        name="chair",
        price=20.0,
        comments=[
            Comment(id=1, body="nice", author=owner),
            Comment(id=2, body="meh", approved=False),
        ],
        pictures=[Picture(id=10, url="/p/10.png"), Picture(id=11, url="/p/11.png")],
        owner=owner,
    )
