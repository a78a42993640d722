# celine/projection/core/entity.py
"""
Read-side access to entities supplied by the data-access layer.

Entities are opaque: mappings are read by key, everything else by
attribute. Nothing in here ever writes to an entity.
"""
from __future__ import annotations

import dataclasses
import inspect
from enum import Enum
from numbers import Number
from collections.abc import Iterable, Mapping
from typing import Any


def type_identifier(entity_or_type: Any) -> str:
    """
    Identifier of an entity type, in the same 'module:qualname' notation
    used by configuration import paths.

    Args:
        entity_or_type: An entity instance or an entity class

    Returns:
        Type identifier string, e.g. 'shop.models:Item'
    """
    cls = entity_or_type if isinstance(entity_or_type, type) else type(entity_or_type)
    return f"{cls.__module__}:{cls.__qualname__}"


def read_field(entity: Any, name: str) -> Any:
    """
    Read a single field from an entity.

    Bound methods found by attribute lookup are called without arguments,
    so presentation methods read like plain attributes.

    Raises:
        KeyError: Mapping entity without that key
        AttributeError: Object entity without that attribute
    """
    if isinstance(entity, Mapping):
        return entity[name]

    value = getattr(entity, name)
    if inspect.ismethod(value):
        return value()
    return value


def public_fields(entity: Any) -> list[str]:
    """
    Names of the public fields of an entity, in definition order.

    Dataclass fields, pydantic model fields, mapping string keys, slots or
    instance attributes; anything starting with an underscore is skipped.
    """
    if isinstance(entity, Mapping):
        names: Iterable[Any] = entity.keys()
    elif dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        names = [f.name for f in dataclasses.fields(entity)]
    elif isinstance(getattr(type(entity), "model_fields", None), dict):
        names = list(type(entity).model_fields)
    elif hasattr(entity, "__dict__"):
        names = list(vars(entity))
    else:
        names = [
            slot
            for cls in reversed(type(entity).__mro__)
            for slot in getattr(cls, "__slots__", ())
            if hasattr(entity, slot)
        ]

    return [n for n in names if isinstance(n, str) and not n.startswith("_")]


def is_many(value: Any) -> bool:
    """True for collections of related entities, False for a single one."""
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return False
    # pydantic models iterate over (name, value) pairs
    if isinstance(getattr(type(value), "model_fields", None), dict):
        return False
    return isinstance(value, Iterable)


def is_entity(value: Any) -> bool:
    """
    True for values that are themselves entities rather than plain data.

    Dataclass instances, pydantic models and objects carrying instance
    attributes count; scalars, enums, mappings and classes do not.
    """
    if value is None or isinstance(value, (str, bytes, Number, Enum, Mapping, type)):
        return False
    if dataclasses.is_dataclass(value):
        return True
    if isinstance(getattr(type(value), "model_fields", None), dict):
        return True
    return hasattr(value, "__dict__") and not callable(value)


def is_entity_collection(value: Any) -> bool:
    """True for a materialized list, tuple or set holding at least one entity."""
    return isinstance(value, (list, tuple, set, frozenset)) and any(
        is_entity(v) for v in value
    )
