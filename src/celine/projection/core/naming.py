# celine/projection/core/naming.py
"""
Conventional key names derived from entity types.
"""
from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")
_VOWELS = "aeiou"


def underscore(name: str) -> str:
    """
    Convert a CamelCase class name into snake_case.

    ``LineItem`` -> ``line_item``, ``HTTPRequest`` -> ``http_request``.
    """
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def pluralize(word: str) -> str:
    """Pluralize an English noun with the regular suffix rules."""
    if not word:
        return word

    lower = word.lower()
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower.endswith(_SIBILANT_ENDINGS):
        return word + "es"
    return word + "s"


def conventional_name(entity_type: type) -> str:
    return underscore(entity_type.__name__)
