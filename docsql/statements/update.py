"""UPDATE statement builder.

Two update shapes are supported:

* **Operator update** – a mapping of update operators::

      {"$set": {"status": "active"}, "$inc": {"visits": 1}}

  A mapping without any operator keys is shorthand for ``$set``.

* **Bulk update** – a list of rows, each carrying the identity column.
  Every non-identity column becomes one ``CASE`` expression::

      UPDATE users SET name = CASE id WHEN ? THEN ? WHEN ? THEN ? ELSE name END
      WHERE id IN (?, ?) AND (<filter>)

  Rows lacking a column keep their current value through the ``ELSE``
  branch.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from docsql.compile.base import Statement
from docsql.compile.operators import is_operator
from docsql.compile.registry import OperatorRegistry
from docsql.config import DEFAULT_CONFIG
from docsql.errors import ConfigurationError, SafetyViolationError, SQLGenerationError
from docsql.schema.filter_nodes import is_sequence
from docsql.statements.base import FilteredBuilder

logger = logging.getLogger(__name__)

# Assignment templates for value-carrying update operators.
_UPDATE_TEMPLATES = {
    "$set": "{field} = ?",
    "$inc": "{field} = {field} + ?",
    "$mul": "{field} = {field} * ?",
}


class UpdateBuilder(FilteredBuilder):
    """Chainable UPDATE builder.

    Args:
        table_name: Target table.
        id_field: Identity column used by bulk updates.  Defaults to
            :attr:`DocSQLConfig.id_field`.
        registry: Operator plugin registry for the filter.
    """

    statement_kind = "UPDATE"

    def __init__(
        self,
        table_name: str,
        id_field: str | None = None,
        registry: OperatorRegistry | None = None,
    ) -> None:
        super().__init__(table_name, registry)
        self.id_field = id_field or DEFAULT_CONFIG.id_field
        self._operations: dict[str, Any] | None = None
        self._rows: list[Mapping[str, Any]] | None = None
        self._single = False

    def update(self, data: Mapping[str, Any] | list[Mapping[str, Any]]) -> UpdateBuilder:
        """Set the update payload (operator mapping, plain mapping or row list).

        Raises:
            SQLGenerationError: If operator and plain keys are mixed.
            ConfigurationError: For any other malformed payload.
        """
        if isinstance(data, Mapping):
            if not data:
                raise ConfigurationError("Update payload is empty", self.statement_kind)
            flags = {is_operator(key) for key in data}
            if flags == {True, False}:
                raise SQLGenerationError(
                    "Update payload mixes update operators and plain fields", self.statement_kind
                )
            self._operations = dict(data) if True in flags else {"$set": dict(data)}
            self._rows = None
        elif is_sequence(data):
            rows = list(data)
            for idx, row in enumerate(rows):
                if not isinstance(row, Mapping) or self.id_field not in row:
                    raise ConfigurationError(
                        f'Bulk update row {idx} must be a mapping carrying "{self.id_field}"',
                        self.statement_kind,
                    )
            self._rows = rows
            self._operations = None
        else:
            raise ConfigurationError(
                f"Update payload must be a mapping or a list of rows, got {type(data).__name__}",
                self.statement_kind,
            )
        return self

    def single(self) -> UpdateBuilder:
        """Restrict the update to one row (``LIMIT 1``)."""
        self._single = True
        return self

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def to_sql(self) -> Statement:
        """Compile the UPDATE.

        Raises:
            SafetyViolationError: No filter was supplied.
            ConfigurationError: No payload was supplied.
        """
        if not self._filter:
            raise SafetyViolationError(
                f"UPDATE on {self.table_name} requires a filter (missing filter)", "UPDATE"
            )
        if self._operations is not None:
            sql, params = self._operator_update()
        elif self._rows is not None:
            sql, params = self._bulk_update()
        else:
            raise ConfigurationError("No update payload supplied", self.statement_kind)

        if self._single:
            sql += " LIMIT 1"
        statement = Statement(sql=sql, params=params)
        logger.info("UPDATE SQL: %s params=%r", statement.sql, statement.params)
        return statement

    def _operator_update(self) -> tuple[str, list[Any]]:
        dialect = self._ctx.dialect
        assignments: list[str] = []
        params: list[Any] = []

        for operator, fields in self._operations.items():
            if operator == "$unset":
                if not isinstance(fields, Mapping) and not is_sequence(fields):
                    raise SQLGenerationError(
                        "Invalid $unset update: expected a mapping or a list of fields",
                        self.statement_kind,
                    )
                assignments.extend(f"{name} = NULL" for name in fields)
                continue

            template = _UPDATE_TEMPLATES.get(operator)
            if template is None:
                raise SQLGenerationError(
                    f"Unsupported update operator: {operator}", self.statement_kind
                )
            if not isinstance(fields, Mapping):
                raise SQLGenerationError(
                    f"Invalid {operator} update: expected a mapping of fields",
                    self.statement_kind,
                )
            for name, value in fields.items():
                assignments.append(template.format(field=name))
                params.append(dialect.storable(value) if operator == "$set" else value)

        if not assignments:
            raise SQLGenerationError("No fields to update", self.statement_kind)

        where = self._where(params)
        return (
            f"UPDATE {self.table_name} SET {', '.join(assignments)} WHERE {where}",
            params,
        )

    def _bulk_update(self) -> tuple[str, list[Any]]:
        dialect = self._ctx.dialect
        rows = self._rows
        id_field = self.id_field
        if not rows:
            raise ConfigurationError("Bulk update needs at least one row", self.statement_kind)

        columns: list[str] = []
        for row in rows:
            for key in row:
                if key != id_field and key not in columns:
                    columns.append(key)
        if not columns:
            raise SQLGenerationError(
                f'Bulk update rows carry no columns besides "{id_field}"', self.statement_kind
            )

        params: list[Any] = []
        assignments: list[str] = []
        for column in columns:
            whens: list[str] = []
            for row in rows:
                if column in row:
                    whens.append(f"WHEN {dialect.placeholder} THEN {dialect.placeholder}")
                    params.extend([row[id_field], dialect.storable(row[column])])
            assignments.append(f"{column} = CASE {id_field} {' '.join(whens)} ELSE {column} END")

        params.extend(row[id_field] for row in rows)
        where = f"{id_field} IN ({', '.join(dialect.placeholder for _ in rows)})"

        extra_params: list[Any] = []
        extra = self._where(extra_params)
        if extra != dialect.always_true:
            where += f" AND ({extra})"
            params.extend(extra_params)

        return (
            f"UPDATE {self.table_name} SET {', '.join(assignments)} WHERE {where}",
            params,
        )
