"""Filter tree → WHERE clause compiler.

``FilterTranslator`` walks a MongoDB-style filter tree and returns the SQL
condition text (without the ``WHERE`` keyword) while appending bound values
to a caller-owned parameter list.  Parameters are appended in exactly the
order their ``?`` placeholders appear in the returned text, including the
parameters contributed by embedded sub-queries.

Dispatch per filter entry
-------------------------
1. ``$and`` / ``$or`` / ``$nor``      → parenthesized, joined children
2. ``field: SubQuery``                → ``field IN (<sub-select>)``
3. ``field: {"$op": operand, ...}``   → operator applications, ANDed
4. ``field: literal``                 → ``field = ?``

Operator resolution order
-------------------------
registry plugin → SubQuery operand → ``$in``/``$nin``/``$all`` →
structural operators (``$exists``, ``$size``, ``$elemMatch``, ``$regex``,
``$like``, ``$not``) → comparison table.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from docsql.compile.base import MySQLDialect, Statement
from docsql.compile.context import CompilationContext
from docsql.compile.operators import (
    ARRAY_OPERATORS,
    COMPARISON_OPERATORS,
    LOGICAL_OPERATORS,
    is_operator,
)
from docsql.compile.registry import OperatorRegistry
from docsql.compile.subquery import SubQuery
from docsql.errors import TranslationError, UnsupportedOperatorError
from docsql.schema.filter_nodes import (
    FilterEntry,
    LiteralMatch,
    LogicalGroup,
    OperatorMap,
    SubQueryRef,
    classify_entry,
    is_sequence,
)

logger = logging.getLogger(__name__)


class FilterTranslator:
    """Compiles filter trees to SQL condition text.

    Args:
        ctx: Compilation context (dialect + plugin registry).  Defaults to
            the process-wide registry.
    """

    def __init__(self, ctx: CompilationContext | None = None) -> None:
        self._ctx = ctx if ctx is not None else CompilationContext.create()

    @property
    def dialect(self) -> MySQLDialect:
        return self._ctx.dialect

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def translate(
        self,
        tree: Mapping[str, Any] | None,
        params: list[Any],
        context: str = "root",
    ) -> str:
        """Translate ``tree`` and append its bound values to ``params``.

        Args:
            tree: The filter tree.  ``None`` and ``{}`` mean "match all".
            params: Parameter list extended in placeholder order.
            context: Recursion path used in error messages.

        Returns:
            Condition text; the always-true predicate for an empty tree.
        """
        if tree is None:
            tree = {}
        if not isinstance(tree, Mapping):
            raise TranslationError(
                f"Filter must be a mapping, got {type(tree).__name__}", context
            )

        conditions: list[str] = []
        for key, value in tree.items():
            entry = classify_entry(key, value, context)
            clause = self._translate_entry(entry, params, context)
            if clause:
                conditions.append(clause)

        result = " AND ".join(conditions) if conditions else self.dialect.always_true
        logger.debug("WHERE fragment (%s): %s params=%r", context, result, params)
        return result

    def apply_operator(
        self,
        field: str,
        operator: str,
        operand: Any,
        params: list[Any],
        context: str = "root",
    ) -> str:
        """Translate a single ``field: {operator: operand}`` application."""
        plugin = self._ctx.registry.get(operator)
        if plugin is not None:
            clause = plugin.apply(field, operand, params, context)
            logger.debug("Plugin %s (%s) for %s: %s", operator, context, field, clause)
            return clause

        if isinstance(operand, SubQuery):
            return self._subquery_membership(field, operand, params, negate=operator == "$nin")

        if operator in ARRAY_OPERATORS:
            return self._apply_array_operator(field, operator, operand, params, context)

        structural = self._STRUCTURAL.get(operator)
        if structural is not None:
            return structural(self, field, operand, params, context)

        sql_operator = COMPARISON_OPERATORS.get(operator)
        if sql_operator is None:
            raise UnsupportedOperatorError(field, operator, context)
        params.append(operand)
        return f"{field} {sql_operator} {self.dialect.placeholder}"

    # ------------------------------------------------------------------
    # Entry dispatch
    # ------------------------------------------------------------------

    def _translate_entry(self, entry: FilterEntry, params: list[Any], context: str) -> str:
        if isinstance(entry, LogicalGroup):
            return self._translate_logical(entry, params, context)
        if isinstance(entry, SubQueryRef):
            return self._subquery_membership(entry.field, entry.subquery, params)
        if isinstance(entry, OperatorMap):
            return self._translate_operator_map(
                entry.field, entry.entries, params, f"{context}->{entry.field}"
            )
        if isinstance(entry, LiteralMatch):
            params.append(entry.value)
            return f"{entry.field} = {self.dialect.placeholder}"
        raise TranslationError(f"Unknown filter entry: {entry!r}", context)

    def _translate_logical(self, group: LogicalGroup, params: list[Any], context: str) -> str:
        always_true = self.dialect.always_true
        clauses: list[str] = []
        for idx, child in enumerate(group.children):
            clause = self.translate(child, params, f"{context}->{group.operator}[{idx}]")
            # A vacuous child never decides a conjunction or a disjunction.
            if clause and clause != always_true:
                clauses.append(clause)

        if group.operator == "$and":
            if not clauses:
                return always_true
            return " AND ".join(f"({c})" for c in clauses)

        joined = f" {LOGICAL_OPERATORS[group.operator]} ".join(f"({c})" for c in clauses)
        if group.operator == "$nor":
            return f"NOT ({joined})" if clauses else always_true
        return f"({joined})" if clauses else self.dialect.always_false

    def _translate_operator_map(
        self,
        field: str,
        entries: Mapping[str, Any],
        params: list[Any],
        context: str,
    ) -> str:
        clauses: list[str] = []
        for key, operand in entries.items():
            if is_operator(key):
                clauses.append(self.apply_operator(field, key, operand, params, context))
            else:
                # Plain sub-key: equality of the field itself against the sub-value.
                params.append(operand)
                clauses.append(f"{field} = {self.dialect.placeholder}")

        if not clauses:
            return ""
        if len(clauses) == 1:
            return clauses[0]
        return "(" + " AND ".join(clauses) + ")"

    # ------------------------------------------------------------------
    # Operator families
    # ------------------------------------------------------------------

    def _subquery_membership(
        self,
        field: str,
        subquery: SubQuery,
        params: list[Any],
        negate: bool = False,
    ) -> str:
        sub_sql, sub_params = subquery.compile()
        params.extend(sub_params)
        keyword = "NOT IN" if negate else "IN"
        return f"{field} {keyword} {sub_sql}"

    def _apply_array_operator(
        self,
        field: str,
        operator: str,
        values: Any,
        params: list[Any],
        context: str,
    ) -> str:
        if not is_sequence(values):
            raise TranslationError(
                f'Operator "{operator}" on field "{field}" expects a list, '
                f"got {type(values).__name__}",
                context,
            )
        values = list(values)
        dialect = self.dialect

        if not values:
            logger.debug("Empty %s list for field %s (%s)", operator, field, context)
            return dialect.always_false if operator == "$in" else dialect.always_true

        if any(isinstance(v, SubQuery) for v in values):
            items: list[str] = []
            for value in values:
                if isinstance(value, SubQuery):
                    sub_sql, sub_params = value.compile()
                    items.append(sub_sql)
                    params.extend(sub_params)
                else:
                    items.append(dialect.placeholder)
                    params.append(value)
            keyword = "NOT IN" if operator == "$nin" else "IN"
            return f"{field} {keyword} ({', '.join(items)})"

        if operator == "$all":
            parts: list[str] = []
            for value in values:
                params.append(dialect.serialize(value))
                parts.append(dialect.json_contains(field))
            return "(" + " AND ".join(parts) + ")"

        placeholders = ", ".join(dialect.placeholder for _ in values)
        params.extend(values)
        keyword = "NOT IN" if operator == "$nin" else "IN"
        return f"{field} {keyword} ({placeholders})"

    def _apply_exists(self, field: str, operand: Any, params: list[Any], context: str) -> str:
        return f"{field} IS NOT NULL" if operand else f"{field} IS NULL"

    def _apply_size(self, field: str, operand: Any, params: list[Any], context: str) -> str:
        params.append(operand)
        return self.dialect.json_length(field)

    def _apply_elem_match(self, field: str, operand: Any, params: list[Any], context: str) -> str:
        params.append(self.dialect.serialize(operand))
        return self.dialect.json_contains(field)

    def _apply_regex(self, field: str, operand: Any, params: list[Any], context: str) -> str:
        params.append(operand.pattern if isinstance(operand, re.Pattern) else operand)
        return self.dialect.regex_match(field)

    def _apply_like(self, field: str, operand: Any, params: list[Any], context: str) -> str:
        params.append(operand)
        return self.dialect.like_match(field)

    def _apply_not(self, field: str, operand: Any, params: list[Any], context: str) -> str:
        if isinstance(operand, (str, re.Pattern)):
            return f"NOT ({self._apply_regex(field, operand, params, context)})"
        if not isinstance(operand, Mapping) or not operand:
            raise TranslationError(
                f'Operator "$not" on field "{field}" expects a non-empty operator object',
                context,
            )
        inner = self._translate_operator_map(field, operand, params, f"{context}->$not")
        return f"NOT ({inner})"

    _STRUCTURAL = {
        "$exists": _apply_exists,
        "$size": _apply_size,
        "$elemMatch": _apply_elem_match,
        "$regex": _apply_regex,
        "$like": _apply_like,
        "$not": _apply_not,
    }


def translate_filter(
    tree: Mapping[str, Any] | None,
    registry: OperatorRegistry | None = None,
) -> Statement:
    """Translate ``tree`` to ``Statement(where_clause_text, params)``."""
    params: list[Any] = []
    translator = FilterTranslator(CompilationContext.create(registry))
    where = translator.translate(tree, params)
    return Statement(sql=where, params=params)
