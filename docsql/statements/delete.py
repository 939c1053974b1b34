"""DELETE statement builder."""
from __future__ import annotations

import logging
from typing import Any

from docsql.compile.base import Statement
from docsql.compile.registry import OperatorRegistry
from docsql.errors import SafetyViolationError
from docsql.statements.base import FilteredBuilder

logger = logging.getLogger(__name__)


class DeleteBuilder(FilteredBuilder):
    """Chainable DELETE builder.

    A filter is mandatory; ``to_sql()`` refuses to emit an unrestricted
    ``DELETE FROM table``.
    """

    statement_kind = "DELETE"

    def __init__(self, table_name: str, registry: OperatorRegistry | None = None) -> None:
        super().__init__(table_name, registry)
        self._single = False

    def single(self) -> DeleteBuilder:
        """Restrict the delete to one row (``LIMIT 1``)."""
        self._single = True
        return self

    def to_sql(self) -> Statement:
        if not self._filter:
            raise SafetyViolationError(
                f"DELETE on {self.table_name} requires a filter (missing filter)", "DELETE"
            )
        params: list[Any] = []
        sql = f"DELETE FROM {self.table_name} WHERE {self._where(params)}"
        if self._single:
            sql += " LIMIT 1"
        statement = Statement(sql=sql, params=params)
        logger.info("DELETE SQL: %s params=%r", statement.sql, statement.params)
        return statement
