"""Shared base for the statement builders.

Builders are chainable, single-owner objects: each mutating method returns
``self`` and ``to_sql()`` may be called any number of times.  Each call
compiles the accumulated state afresh into a new ``Statement``.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from docsql.compile.context import CompilationContext
from docsql.compile.filter_translator import FilterTranslator
from docsql.compile.registry import OperatorRegistry
from docsql.errors import ConfigurationError


def check_table_name(table_name: Any, builder: str) -> str:
    if not isinstance(table_name, str) or not table_name.strip():
        raise ConfigurationError("Table name must be a non-empty string", builder)
    return table_name


def check_count(value: Any, name: str, builder: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}", builder)
    return value


class FilteredBuilder:
    """Builder holding a table name and an accumulated filter tree.

    Args:
        table_name: Target table.
        registry: Operator plugin registry; defaults to the process-wide one.
    """

    #: Statement keyword, used for error attribution and translation paths.
    statement_kind = "SELECT"

    def __init__(self, table_name: str, registry: OperatorRegistry | None = None) -> None:
        self.table_name = check_table_name(table_name, self.statement_kind)
        self._ctx = CompilationContext.create(registry)
        self._translator = FilterTranslator(self._ctx)
        self._filter: dict[str, Any] = {}
        self._merged = False

    @property
    def filter(self) -> dict[str, Any]:
        """The accumulated filter tree."""
        return self._filter

    def query(self, filter_tree: Mapping[str, Any]) -> FilteredBuilder:
        """AND ``filter_tree`` into the accumulated filter.

        The first non-empty tree is kept as-is; the second converts the
        filter into an explicit ``$and`` list and later trees are appended
        to it.  Caller-owned trees are never modified.
        """
        if not isinstance(filter_tree, Mapping):
            raise ConfigurationError(
                f"Filter must be a mapping, got {type(filter_tree).__name__}",
                self.statement_kind,
            )
        if not filter_tree:
            return self
        if not self._filter:
            self._filter = dict(filter_tree)
        elif self._merged:
            self._filter["$and"].append(filter_tree)
        else:
            self._filter = {"$and": [self._filter, filter_tree]}
            self._merged = True
        return self

    def _where(self, params: list[Any]) -> str:
        return self._translator.translate(self._filter, params, self.statement_kind)
