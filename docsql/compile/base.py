"""Statement type and the target SQL dialect.

``Statement`` is the terminal artifact of every compilation.  ``MySQLDialect``
collects every dialect-specific token the engine emits (placeholder style,
truth constants, JSON predicates, upsert syntax and the unbounded LIMIT
sentinel) so no other module hard-codes them.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Statement:
    """The output of a successful compilation.

    Attributes:
        sql: The compiled SQL string with positional ``?`` placeholders.
        params: Values for the placeholders, in left-to-right textual order.
    """

    sql: str
    params: list[Any] = field(default_factory=list)

    def as_tuple(self) -> tuple[str, list[Any]]:
        """Return ``(sql, params)`` ready for ``cursor.execute(*stmt.as_tuple())``."""
        return self.sql, list(self.params)


class MySQLDialect:
    """MySQL-flavoured SQL tokens.

    Parameter style: ``?`` – compatible with ``mysql2``-style and
    ``mysql-connector-python`` prepared statements.
    """

    name = "mysql"

    #: Placeholder for one bound parameter.
    placeholder = "?"

    #: Predicates used for vacuous / impossible conditions.
    always_true = "1=1"
    always_false = "1=0"

    #: LIMIT value used when only an OFFSET was requested (2**64 - 1).
    unbounded_limit = 18446744073709551615

    def json_length(self, field: str) -> str:
        return f"JSON_LENGTH({field}) = {self.placeholder}"

    def json_contains(self, field: str) -> str:
        return f"JSON_CONTAINS({field}, {self.placeholder})"

    def regex_match(self, field: str) -> str:
        return f"{field} REGEXP {self.placeholder}"

    def like_match(self, field: str) -> str:
        return f"{field} LIKE {self.placeholder}"

    def upsert_clause(self, columns: list[str]) -> str:
        """Return the ``ON DUPLICATE KEY UPDATE`` clause for ``columns``."""
        assignments = ", ".join(f"{col} = VALUES({col})" for col in columns)
        return f"ON DUPLICATE KEY UPDATE {assignments}"

    def quote_literal(self, value: Any) -> str:
        """Return ``value`` as a single-quoted SQL string literal."""
        escaped = str(value).replace("'", "''")
        return f"'{escaped}'"

    def paging_clause(self, limit: int | None, offset: int | None) -> str:
        """Render ``LIMIT`` / ``OFFSET``.

        OFFSET alone is not valid MySQL, so an offset without a limit is
        paired with :attr:`unbounded_limit`.
        """
        if limit is not None:
            if offset is not None:
                return f"LIMIT {limit} OFFSET {offset}"
            return f"LIMIT {limit}"
        if offset is not None:
            return f"LIMIT {self.unbounded_limit} OFFSET {offset}"
        return ""

    @staticmethod
    def serialize(value: Any) -> str:
        """Serialize a composite value to its stored JSON text."""
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)

    def storable(self, value: Any) -> Any:
        """Return ``value`` as bound for a column write.

        Mappings and lists are stored as JSON text; scalars pass through.
        """
        if isinstance(value, (Mapping, list, tuple)):
            return self.serialize(value)
        return value


#: Process-wide dialect instance; the engine targets a single grammar.
DIALECT = MySQLDialect()
