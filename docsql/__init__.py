"""docsql – MongoDB-style filters and pipelines compiled to parameterized SQL.

Public API
----------
``translate_filter``
    Translate a filter tree to ``Statement(where_text, params)``.

``build_select`` / ``build_update`` / ``build_delete`` / ``build_insert`` /
``build_aggregation``
    Construct the chainable statement builders.

``mongo_to_sql`` / ``mongo_to_sql_with_joins``
    One-call SELECT conveniences.

``wrap_as_subquery``
    Embed a builder as an ``IN (...)`` operand of another filter.

Every compiled statement uses positional ``?`` placeholders; ``params`` is
always in left-to-right placeholder order::

    stmt = docsql.build_select("users").query({"age": {"$gt": 18}}).to_sql()
    cursor.execute(stmt.sql, stmt.params)

Extensibility
-------------
Custom filter operators are registered with::

    @docsql.default_registry.register("$between")
    def _between(field, operand, params, context):
        params.extend(operand)
        return f"{field} BETWEEN ? AND ?"

Registered operators are consulted before every built-in operator.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from docsql.compile.aggregation import PipelineCompiler
from docsql.compile.base import DIALECT, MySQLDialect, Statement
from docsql.compile.filter_translator import FilterTranslator, translate_filter
from docsql.compile.registry import (
    OperatorPlugin,
    OperatorRegistry,
    PluginHandler,
    default_registry,
    register_operator_plugin,
)
from docsql.compile.subquery import SubQuery, wrap_as_subquery
from docsql.config import DEFAULT_CONFIG, DocSQLConfig
from docsql.errors import (
    ConfigurationError,
    DocSQLError,
    SafetyViolationError,
    SQLGenerationError,
    TranslationError,
    UnsupportedOperatorError,
)
from docsql.logging_config import configure_logging
from docsql.schema.joins import JoinConfig
from docsql.schema.pipeline import (
    GroupStage,
    HavingStage,
    LimitStage,
    LookupStage,
    MatchStage,
    ProjectStage,
    SkipStage,
    SortStage,
    Stage,
    UnwindStage,
    parse_pipeline,
)
from docsql.shortcuts import mongo_to_sql, mongo_to_sql_with_joins
from docsql.statements.aggregate import AggregationBuilder
from docsql.statements.delete import DeleteBuilder
from docsql.statements.insert import InsertBuilder
from docsql.statements.select import SelectBuilder
from docsql.statements.update import UpdateBuilder

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Entry points
    "translate_filter",
    "build_select",
    "build_update",
    "build_delete",
    "build_insert",
    "build_aggregation",
    "mongo_to_sql",
    "mongo_to_sql_with_joins",
    "wrap_as_subquery",
    "register_operator_plugin",
    # Builders
    "SelectBuilder",
    "UpdateBuilder",
    "DeleteBuilder",
    "InsertBuilder",
    "AggregationBuilder",
    # Compilation
    "Statement",
    "MySQLDialect",
    "DIALECT",
    "FilterTranslator",
    "PipelineCompiler",
    "SubQuery",
    "OperatorRegistry",
    "OperatorPlugin",
    "PluginHandler",
    "default_registry",
    # Models
    "JoinConfig",
    "Stage",
    "MatchStage",
    "GroupStage",
    "ProjectStage",
    "SortStage",
    "LimitStage",
    "SkipStage",
    "LookupStage",
    "UnwindStage",
    "HavingStage",
    "parse_pipeline",
    # Configuration
    "DocSQLConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
    # Errors
    "DocSQLError",
    "TranslationError",
    "UnsupportedOperatorError",
    "SQLGenerationError",
    "SafetyViolationError",
    "ConfigurationError",
]


def build_select(table_name: str, registry: OperatorRegistry | None = None) -> SelectBuilder:
    return SelectBuilder(table_name, registry)


def build_update(
    table_name: str,
    id_field: str | None = None,
    registry: OperatorRegistry | None = None,
) -> UpdateBuilder:
    return UpdateBuilder(table_name, id_field, registry)


def build_delete(table_name: str, registry: OperatorRegistry | None = None) -> DeleteBuilder:
    return DeleteBuilder(table_name, registry)


def build_insert(table_name: str) -> InsertBuilder:
    return InsertBuilder(table_name)


def build_aggregation(
    table_name: str,
    pipeline: Iterable[Stage | Mapping[str, Any]] | None = None,
    registry: OperatorRegistry | None = None,
) -> AggregationBuilder:
    """Return an :class:`AggregationBuilder`, optionally seeded with ``pipeline``.

    A seeded builder compiles immediately with ``.to_sql()``::

        docsql.build_aggregation("orders", [{"$match": {"status": "paid"}}]).to_sql()
    """
    return AggregationBuilder(table_name, pipeline, registry)
