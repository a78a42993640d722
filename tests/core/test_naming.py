# tests/core/test_naming.py
from __future__ import annotations

import pytest

from celine.projection.core.naming import conventional_name, pluralize, underscore
from tests.helpers.catalog import LineItem


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Item", "item"),
        ("LineItem", "line_item"),
        ("HTTPRequest", "http_request"),
        ("Item2Picture", "item2_picture"),
    ],
)
def test_underscore(name, expected):
    assert underscore(name) == expected


@pytest.mark.parametrize(
    "word, expected",
    [
        ("item", "items"),
        ("category", "categories"),
        ("day", "days"),
        ("box", "boxes"),
        ("match", "matches"),
        ("address", "addresses"),
        ("", ""),
    ],
)
def test_pluralize(word, expected):
    assert pluralize(word) == expected


def test_conventional_name():
    assert conventional_name(LineItem) == "line_item"
