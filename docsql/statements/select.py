"""SELECT statement builder."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from docsql.compile.base import Statement
from docsql.compile.clause_builders import JoinClauseBuilder, ProjectionBuilder, SortClauseBuilder
from docsql.compile.registry import OperatorRegistry
from docsql.errors import ConfigurationError
from docsql.schema.joins import JoinConfig
from docsql.statements.base import FilteredBuilder, check_count

logger = logging.getLogger(__name__)


class SelectBuilder(FilteredBuilder):
    """Chainable SELECT builder.

    Example::

        stmt = (
            SelectBuilder("users")
            .query({"age": {"$gte": 18}})
            .project(["id", "name"])
            .sort({"name": 1})
            .limit(20)
            .to_sql()
        )
        # SELECT id, name FROM users WHERE age >= ? ORDER BY name ASC LIMIT 20
    """

    statement_kind = "SELECT"

    def __init__(self, table_name: str, registry: OperatorRegistry | None = None) -> None:
        super().__init__(table_name, registry)
        self._projection: list[str] | dict[str, Any] | None = None
        self._joins: list[JoinConfig] = []
        self._sort: str | dict[str, Any] | None = None
        self._limit: int | None = None
        self._offset: int | None = None
        self._projections = ProjectionBuilder()
        self._join_clauses = JoinClauseBuilder()
        self._sorts = SortClauseBuilder()

    # ------------------------------------------------------------------
    # Chainable setters
    # ------------------------------------------------------------------

    def project(self, fields: Iterable[str] | Mapping[str, Any]) -> SelectBuilder:
        """Set the projected columns (a list, or an inclusion mapping)."""
        if isinstance(fields, str):
            raise ConfigurationError("Projection must be a list or a mapping", self.statement_kind)
        self._projection = dict(fields) if isinstance(fields, Mapping) else list(fields)
        return self

    def join(self, join_configs: JoinConfig | Mapping[str, Any] | Iterable[Any]) -> SelectBuilder:
        """Add one or more explicit joins.

        Each join may be a :class:`JoinConfig` or a mapping with
        ``tableName`` / ``alias`` / ``joinType`` / ``on`` keys.
        """
        if isinstance(join_configs, (JoinConfig, Mapping)):
            join_configs = [join_configs]
        for raw in join_configs:
            self._joins.append(self._parse_join(raw))
        return self

    def sort(self, sort_expr: str | Mapping[str, Any]) -> SelectBuilder:
        """Set ORDER BY from ``{field: 1 | -1}`` or a raw string."""
        if not isinstance(sort_expr, (str, Mapping)):
            raise ConfigurationError(
                "Sort must be a string or a mapping of field to direction", self.statement_kind
            )
        self._sort = sort_expr if isinstance(sort_expr, str) else dict(sort_expr)
        return self

    def limit(self, n: int) -> SelectBuilder:
        self._limit = check_count(n, "limit", self.statement_kind)
        return self

    def offset(self, n: int) -> SelectBuilder:
        self._offset = check_count(n, "offset", self.statement_kind)
        return self

    skip = offset

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def to_sql(self) -> Statement:
        """Compile the accumulated state.

        Clause order: ``SELECT … FROM … [JOIN …] [WHERE …] [ORDER BY …]
        [LIMIT … [OFFSET …]]``.  WHERE is omitted when no filter is set.
        """
        params: list[Any] = []
        parts = [
            f"SELECT {self._projections.build(self._projection, self.table_name, self._joins)}",
            f"FROM {self.table_name}",
        ]
        parts.extend(self._join_clauses.build(join) for join in self._joins)

        if self._filter:
            parts.append(f"WHERE {self._where(params)}")

        order_by = self._sorts.build(self._sort)
        if order_by:
            parts.append(f"ORDER BY {order_by}")

        paging = self._ctx.dialect.paging_clause(self._limit, self._offset)
        if paging:
            parts.append(paging)

        statement = Statement(sql=" ".join(parts), params=params)
        logger.info("SELECT SQL: %s params=%r", statement.sql, statement.params)
        return statement

    def _parse_join(self, raw: Any) -> JoinConfig:
        if isinstance(raw, JoinConfig):
            return raw
        try:
            return JoinConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid join configuration: {exc}", self.statement_kind) from exc
