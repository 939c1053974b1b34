"""Closed set of filter-entry shapes.

Each ``(key, value)`` entry of a filter tree is classified exactly once into
one of four variants; the translator then dispatches on the variant type
instead of re-inspecting raw values.

================  ==================================================
Variant           Produced for
================  ==================================================
``LogicalGroup``  ``$and`` / ``$or`` / ``$nor`` with a list of trees
``SubQueryRef``   ``field: SubQuery(...)``
``OperatorMap``   ``field: {"$gt": 1, ...}`` (plain mapping)
``LiteralMatch``  ``field: <scalar | list | None>``
================  ==================================================
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from docsql.compile.operators import LOGICAL_OPERATORS, is_operator
from docsql.compile.subquery import SubQuery
from docsql.errors import TranslationError, UnsupportedOperatorError


@dataclass(frozen=True)
class LogicalGroup:
    """``{"$or": [tree, tree, ...]}``."""

    operator: str
    children: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class SubQueryRef:
    """``{"id": SubQuery(...)}`` – implicit membership."""

    field: str
    subquery: SubQuery


@dataclass(frozen=True)
class OperatorMap:
    """``{"age": {"$gte": 18, "$lt": 65}}``."""

    field: str
    entries: Mapping[str, Any]


@dataclass(frozen=True)
class LiteralMatch:
    """``{"name": "Ann"}`` – implicit equality, arrays matched literally."""

    field: str
    value: Any


FilterEntry = Union[LogicalGroup, SubQueryRef, OperatorMap, LiteralMatch]


def is_sequence(value: Any) -> bool:
    """Return ``True`` for list-like operands (strings and bytes excluded)."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def classify_entry(key: str, value: Any, context: str = "root") -> FilterEntry:
    """Classify one filter-tree entry.

    Raises:
        UnsupportedOperatorError: For a top-level ``$`` key that is not a
            logical operator.
        TranslationError: For a logical operator whose value is not a list.
    """
    if is_operator(key):
        if key not in LOGICAL_OPERATORS:
            raise UnsupportedOperatorError("", key, context)
        if not is_sequence(value):
            raise TranslationError(
                f'Logical operator "{key}" expects a list of filters, got {type(value).__name__}',
                context,
            )
        for child in value:
            if not isinstance(child, Mapping):
                raise TranslationError(
                    f'Logical operator "{key}" expects filter objects, got {type(child).__name__}',
                    context,
                )
        return LogicalGroup(key, tuple(value))
    if isinstance(value, SubQuery):
        return SubQueryRef(key, value)
    if isinstance(value, Mapping):
        return OperatorMap(key, value)
    return LiteralMatch(key, value)
