"""Clause-level SQL builders.

Each class handles exactly one SQL clause and carries no per-statement
state, so one instance can be reused across compilations.

Classes
-------
ProjectionBuilder   — SELECT column list (plain or join-aware aliasing)
JoinClauseBuilder   — ``<type> JOIN <table> [AS <alias>] ON …``
LookupClauseBuilder — ``LEFT JOIN`` rendered from a ``$lookup`` stage
SortClauseBuilder   — ``ORDER BY`` body
GroupClauseBuilder  — SELECT + GROUP BY bodies of a ``$group`` stage
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from docsql.compile.context import CompilationContext
from docsql.compile.operators import AGGREGATE_FUNCTIONS
from docsql.errors import SQLGenerationError
from docsql.schema.joins import JoinConfig
from docsql.schema.pipeline import GroupStage, LookupStage

logger = logging.getLogger(__name__)


def field_ref(value: Any) -> str:
    """Strip the ``$`` of a field reference (``"$amount"`` → ``"amount"``)."""
    if isinstance(value, str) and value.startswith("$"):
        return value[1:]
    return str(value)


class ProjectionBuilder:
    """Builds the column list of a SELECT clause."""

    def columns(self, projection: Iterable[str] | Mapping[str, Any]) -> list[str]:
        """Return projected column expressions.

        A list is taken verbatim.  In a mapping, ``"$field"`` values become
        ``field AS name``, other truthy values include the key, and falsy
        values (exclusions) are skipped.
        """
        return [
            f"{source} AS {alias}" if alias else source
            for source, alias in self._entries(projection)
        ]

    def build(
        self,
        projection: Iterable[str] | Mapping[str, Any] | None,
        table_name: str,
        joins: list[JoinConfig] | None = None,
    ) -> str:
        """Return the SELECT body (``*`` when nothing is projected).

        With joins configured, every source column is qualified and aliased
        once: ``alias.col AS alias_col`` for a reference to a join alias,
        ``table.col AS table_col`` for anything else.  A mapping entry
        ``{"name": "$col"}`` keeps its own alias (``table.col AS name``).
        """
        if projection is None:
            return "*"
        entries = self._entries(projection)
        if not entries:
            return "*"
        if joins:
            aliases = {j.effective_alias for j in joins}
            cols = [self._qualify(source, alias, table_name, aliases) for source, alias in entries]
        else:
            cols = [f"{source} AS {alias}" if alias else source for source, alias in entries]
        result = ", ".join(cols)
        logger.debug("Projection: %s", result)
        return result

    @staticmethod
    def _entries(projection: Iterable[str] | Mapping[str, Any]) -> list[tuple[str, str | None]]:
        if not isinstance(projection, Mapping):
            return [(column, None) for column in projection]
        entries: list[tuple[str, str | None]] = []
        for name, spec in projection.items():
            if isinstance(spec, str) and spec.startswith("$"):
                entries.append((spec[1:], name))
            elif spec:
                entries.append((name, None))
        return entries

    @staticmethod
    def _qualify(source: str, alias: str | None, table_name: str, aliases: set[str]) -> str:
        qualifier, _, column = source.partition(".")
        if not column or (qualifier not in aliases and qualifier != table_name):
            qualifier, column = table_name, source
        if alias is None:
            alias = f"{qualifier}_{column.replace('.', '_')}"
        return f"{qualifier}.{column} AS {alias}"


class JoinClauseBuilder:
    """Builds a single explicit ``JOIN … ON …`` fragment."""

    def build(self, join: JoinConfig) -> str:
        alias_sql = f" AS {join.alias}" if join.alias else ""
        return f"{join.join_type} {join.table_name}{alias_sql} ON {join.on}"


class LookupClauseBuilder:
    """Renders a ``$lookup`` stage as a LEFT JOIN on the pipeline's table."""

    def build(self, lookup: LookupStage, table_name: str) -> str:
        return (
            f"LEFT JOIN {lookup.from_} AS {lookup.as_} "
            f"ON {table_name}.{lookup.local_field} = {lookup.as_}.{lookup.foreign_field}"
        )


class SortClauseBuilder:
    """Builds the ORDER BY body from a direction mapping or a raw string."""

    def build(self, spec: str | Mapping[str, Any] | None) -> str:
        if spec is None:
            return ""
        if isinstance(spec, str):
            return spec
        return ", ".join(
            f"{field} {'DESC' if direction == -1 else 'ASC'}" for field, direction in spec.items()
        )


@dataclass(frozen=True)
class GroupClause:
    """SELECT and GROUP BY bodies produced by one ``$group`` stage."""

    select: str
    group_by: str


class GroupClauseBuilder:
    """Translates a ``$group`` stage.

    Identity forms:

    * ``"$field"``            → ``field AS _id`` / GROUP BY ``field``
    * ``{"k": "$a", ...}``    → ``a, …`` in both SELECT and GROUP BY
      (no per-key aliasing: output names must not collide)
    * literal                 → ``'literal' AS _id``
    * ``None``                → nothing; all rows form one group
    """

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, stage: GroupStage) -> GroupClause:
        select_parts: list[str] = []
        group_parts: list[str] = []

        identity = stage.identity
        if isinstance(identity, Mapping):
            fields = [field_ref(v) for v in identity.values()]
            if fields:
                select_parts.append(", ".join(fields))
                group_parts.append(", ".join(fields))
        elif isinstance(identity, str) and identity.startswith("$"):
            field = identity[1:]
            select_parts.append(f"{field} AS _id")
            group_parts.append(field)
        elif identity is not None and identity != "":
            select_parts.append(f"{self._ctx.dialect.quote_literal(identity)} AS _id")

        for name, accumulator in stage.accumulators.items():
            select_parts.append(self._build_accumulator(name, accumulator))

        if not select_parts:
            raise SQLGenerationError("$group stage produces no output columns", "$group")

        clause = GroupClause(select=", ".join(select_parts), group_by=", ".join(group_parts))
        logger.debug("Group clause: %s", clause)
        return clause

    def _build_accumulator(self, name: str, accumulator: Any) -> str:
        if not isinstance(accumulator, Mapping) or len(accumulator) != 1:
            raise SQLGenerationError(
                f'Group output "{name}" must be a single-operator accumulator object',
                "$group",
            )
        operator, operand = next(iter(accumulator.items()))
        func = AGGREGATE_FUNCTIONS.get(operator)
        if func is None:
            raise SQLGenerationError(f"Unsupported aggregate operator: {operator}", "$group")
        return f"{func}({self._operand(operand)}) AS {name}"

    def _operand(self, operand: Any) -> str:
        if operand is None:
            return "NULL"
        if isinstance(operand, bool):
            return "1" if operand else "0"
        if isinstance(operand, (int, float)):
            return str(operand)
        if isinstance(operand, str) and operand.startswith("$"):
            return operand[1:]
        return self._ctx.dialect.quote_literal(operand)
