"""INSERT statement builder (single, multi-row and upsert)."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from docsql.compile.base import DIALECT, Statement
from docsql.errors import ConfigurationError, SafetyViolationError
from docsql.schema.filter_nodes import is_sequence
from docsql.statements.base import check_table_name

logger = logging.getLogger(__name__)


class InsertBuilder:
    """Chainable INSERT builder.

    The column list is taken from the first document; every other document
    must carry exactly the same keys.  Composite values (mappings, lists)
    are bound as JSON text.

    Example::

        stmt = InsertBuilder("users").insert_one({"id": 1, "name": "Ann"}).upsert().to_sql()
        # INSERT INTO users (id, name) VALUES (?, ?)
        #   ON DUPLICATE KEY UPDATE id = VALUES(id), name = VALUES(name)
    """

    statement_kind = "INSERT"

    def __init__(self, table_name: str) -> None:
        self.table_name = check_table_name(table_name, self.statement_kind)
        self._dialect = DIALECT
        self._documents: list[Mapping[str, Any]] = []
        self._upsert = False
        self._upsert_fields: list[str] | None = None

    def insert_one(self, document: Mapping[str, Any]) -> InsertBuilder:
        if not isinstance(document, Mapping):
            raise ConfigurationError(
                f"Document must be a mapping, got {type(document).__name__}", self.statement_kind
            )
        self._documents = [document]
        return self

    def insert_many(self, documents: Iterable[Mapping[str, Any]]) -> InsertBuilder:
        if not is_sequence(documents):
            raise ConfigurationError("insert_many expects a list of documents", self.statement_kind)
        documents = list(documents)
        for idx, document in enumerate(documents):
            if not isinstance(document, Mapping):
                raise ConfigurationError(f"Document {idx} must be a mapping", self.statement_kind)
        self._documents = documents
        return self

    def upsert(self, enable: bool = True, fields: Iterable[str] | None = None) -> InsertBuilder:
        """Toggle ``ON DUPLICATE KEY UPDATE``.

        Args:
            enable: Whether to emit the upsert clause.
            fields: Columns refreshed on conflict; defaults to all inserted
                columns when omitted.  An explicitly empty list is rejected
                by :meth:`to_sql`.
        """
        self._upsert = enable
        self._upsert_fields = list(fields) if fields is not None else None
        return self

    def to_sql(self) -> Statement:
        """Compile the INSERT.

        Raises:
            SafetyViolationError: No documents were supplied.
            ConfigurationError: Documents disagree on their key sets, or an
                upsert field list is empty or names a column that is not
                inserted.
        """
        if not self._documents:
            raise SafetyViolationError(
                f"INSERT into {self.table_name} requires at least one document", "INSERT"
            )

        columns = list(self._documents[0].keys())
        if not columns:
            raise ConfigurationError("Cannot insert an empty document", self.statement_kind)
        expected = set(columns)
        for idx, document in enumerate(self._documents[1:], start=1):
            if set(document) != expected:
                missing = sorted(expected - set(document))
                extra = sorted(set(document) - expected)
                raise ConfigurationError(
                    f"Document {idx} does not match the columns of document 0 "
                    f"(missing: {missing}, extra: {extra})",
                    self.statement_kind,
                )

        placeholder = self._dialect.placeholder
        row = "(" + ", ".join(placeholder for _ in columns) + ")"
        sql = (
            f"INSERT INTO {self.table_name} ({', '.join(columns)}) "
            f"VALUES {', '.join(row for _ in self._documents)}"
        )
        params = [
            self._dialect.storable(document[column])
            for document in self._documents
            for column in columns
        ]

        if self._upsert:
            fields = columns if self._upsert_fields is None else self._upsert_fields
            if not fields:
                raise ConfigurationError(
                    "Upsert needs at least one field to refresh", self.statement_kind
                )
            unknown = [f for f in fields if f not in expected]
            if unknown:
                raise ConfigurationError(
                    f"Upsert fields are not inserted columns: {unknown}", self.statement_kind
                )
            sql += " " + self._dialect.upsert_clause(fields)

        statement = Statement(sql=sql, params=params)
        logger.info("INSERT SQL: %s params=%r", statement.sql, statement.params)
        return statement
