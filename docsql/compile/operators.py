"""Static operator table: filter operator tokens → SQL tokens."""
from __future__ import annotations

#: Sigil that marks an operator key inside a filter tree.
OPERATOR_SIGIL = "$"

#: Field-level comparison operators.
COMPARISON_OPERATORS: dict[str, str] = {
    "$eq": "=",
    "$ne": "<>",
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}

#: Top-level logical operators.
LOGICAL_OPERATORS: dict[str, str] = {
    "$and": "AND",
    "$or": "OR",
    "$nor": "OR",
}

#: Operators whose operand is a sequence of values.
ARRAY_OPERATORS: frozenset[str] = frozenset({"$in", "$nin", "$all"})

#: Aggregate accumulators allowed inside a ``$group`` stage.
AGGREGATE_FUNCTIONS: dict[str, str] = {
    "$sum": "SUM",
    "$avg": "AVG",
    "$min": "MIN",
    "$max": "MAX",
}


def is_operator(key: object) -> bool:
    """Return ``True`` if ``key`` is an operator token (``$``-prefixed string)."""
    return isinstance(key, str) and key.startswith(OPERATOR_SIGIL)
