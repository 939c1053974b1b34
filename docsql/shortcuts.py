"""One-call conveniences wrapping :class:`~docsql.statements.select.SelectBuilder`."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from docsql.compile.base import Statement
from docsql.config import DEFAULT_CONFIG, DocSQLConfig
from docsql.schema.joins import JoinConfig
from docsql.statements.select import SelectBuilder


def mongo_to_sql(
    query: Mapping[str, Any],
    table_name: str,
    limit: int | None = None,
    order_by: str | Mapping[str, Any] | None = None,
    config: DocSQLConfig | None = None,
) -> Statement:
    """Translate a filter into ``SELECT * FROM table WHERE … ORDER BY … LIMIT …``.

    ``limit`` and ``order_by`` default to the config's ``default_limit``
    (10) and ``default_order_by`` (``"id DESC"``)::

        >>> mongo_to_sql({"age": {"$gt": 18}}, "users").sql
        'SELECT * FROM users WHERE age > ? ORDER BY id DESC LIMIT 10'
    """
    config = config or DEFAULT_CONFIG
    return (
        SelectBuilder(table_name)
        .query(query)
        .sort(config.default_order_by if order_by is None else order_by)
        .limit(config.default_limit if limit is None else limit)
        .to_sql()
    )


def mongo_to_sql_with_joins(
    query: Mapping[str, Any],
    table_name: str,
    join_configs: Iterable[JoinConfig | Mapping[str, Any]] | None = None,
    limit: int | None = None,
    order_by: str | Mapping[str, Any] | None = None,
    config: DocSQLConfig | None = None,
) -> Statement:
    """Like :func:`mongo_to_sql` with explicit joins.

    A top-level ``$project`` key in ``query`` is taken as the projection
    (aliased per join) and removed from the filter; ``query`` itself is
    left untouched.  ``limit`` and ``order_by`` fall back to the same
    config defaults as :func:`mongo_to_sql`.
    """
    config = config or DEFAULT_CONFIG
    filter_tree = dict(query)
    projection = filter_tree.pop("$project", None)

    builder = SelectBuilder(table_name)
    if join_configs:
        builder.join(list(join_configs))
    if projection:
        builder.project(projection)
    return (
        builder.query(filter_tree)
        .sort(config.default_order_by if order_by is None else order_by)
        .limit(config.default_limit if limit is None else limit)
        .to_sql()
    )
