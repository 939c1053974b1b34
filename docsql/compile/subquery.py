"""Nested statements embedded as ``IN (...)`` operands."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from docsql.compile.base import Statement

logger = logging.getLogger(__name__)


class StatementSource(Protocol):
    """Anything that compiles to a :class:`Statement` (every builder does)."""

    def to_sql(self) -> Statement: ...


class SubQuery:
    """Wraps a statement builder so it can be used as a filter operand.

    The SubQuery is the only consumer of the wrapped builder's output.
    Every :meth:`compile` runs one ``to_sql()`` pass and caches its text
    and parameters together, so a use never pairs text from one pass with
    parameters from another.  :meth:`to_sql` and :meth:`get_params` read
    the last compiled pair, compiling on first use.

    Args:
        builder: Any object with a ``to_sql()`` method returning a
            :class:`Statement`.
    """

    def __init__(self, builder: StatementSource) -> None:
        if not callable(getattr(builder, "to_sql", None)):
            raise TypeError("SubQuery requires a builder exposing to_sql().")
        self._builder = builder
        self._cached: tuple[str, list[Any]] | None = None

    @property
    def builder(self) -> StatementSource:
        return self._builder

    def compile(self) -> tuple[str, list[Any]]:
        """Compile the wrapped builder and return ``("(<sql>)", params)``."""
        result = self._builder.to_sql()
        sql = f"({result.sql})"
        if self._cached is None or self._cached[0] != sql:
            logger.debug("Cached subquery SQL: %s", sql)
        self._cached = (sql, list(result.params))
        return self._cached[0], list(self._cached[1])

    def to_sql(self) -> str:
        """Return the parenthesized SQL text of the last compilation."""
        if self._cached is None:
            return self.compile()[0]
        return self._cached[0]

    def get_params(self) -> list[Any]:
        """Return the parameters matching :meth:`to_sql`."""
        if self._cached is None:
            return self.compile()[1]
        return list(self._cached[1])

    def __repr__(self) -> str:
        return f"SubQuery({self._builder!r})"


def wrap_as_subquery(builder: StatementSource) -> SubQuery:
    """Return ``builder`` wrapped as a :class:`SubQuery` filter operand."""
    return SubQuery(builder)
