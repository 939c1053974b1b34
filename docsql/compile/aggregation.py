"""Aggregation pipeline → SELECT compiler.

``PipelineCompiler`` folds the stages of a pipeline left to right into a
set of clause accumulators, then assembles them in SQL clause order::

    SELECT <select> FROM <table> <joins> <comments>
    WHERE <match conditions> GROUP BY <group> HAVING <having>
    ORDER BY <sort> LIMIT <n> [OFFSET <m>]

Every clause is omitted when empty.  Stage effects:

* ``$match``  – ANDed into WHERE (repeated stages accumulate).
* ``$group``  – replaces the SELECT list and sets GROUP BY.
* ``$project``– replaces the SELECT list, or is prepended to the group
  output once a ``$group`` stage has set it.
* ``$sort`` / ``$limit`` / ``$skip`` – last stage of each kind wins.
* ``$lookup`` – appends a LEFT JOIN.
* ``$unwind`` – appends an inert ``/* UNWIND($path) */`` annotation.
* ``$having`` – ANDed into HAVING.

WHERE parameters always precede HAVING parameters, matching placeholder
order in the assembled text whatever the stage order.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from docsql.compile.base import Statement
from docsql.compile.clause_builders import (
    GroupClauseBuilder,
    LookupClauseBuilder,
    ProjectionBuilder,
    SortClauseBuilder,
)
from docsql.compile.context import CompilationContext
from docsql.compile.filter_translator import FilterTranslator
from docsql.errors import TranslationError
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

logger = logging.getLogger(__name__)


@dataclass
class PipelineState:
    """Clause accumulators for one compilation run."""

    select: str = "*"
    grouped: bool = False
    where: list[str] = field(default_factory=list)
    where_params: list[Any] = field(default_factory=list)
    group_by: str = ""
    having: list[str] = field(default_factory=list)
    having_params: list[Any] = field(default_factory=list)
    sort: str = ""
    limit: int | None = None
    offset: int | None = None
    joins: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)


class PipelineCompiler:
    """Compiles an aggregation pipeline to a single SELECT statement.

    Args:
        ctx: Compilation context; defaults to the process-wide registry.
    """

    def __init__(self, ctx: CompilationContext | None = None) -> None:
        self._ctx = ctx if ctx is not None else CompilationContext.create()
        self._filters = FilterTranslator(self._ctx)
        self._projection = ProjectionBuilder()
        self._group = GroupClauseBuilder(self._ctx)
        self._lookup = LookupClauseBuilder()
        self._sort = SortClauseBuilder()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(self, pipeline: list[Stage | Mapping[str, Any]], table_name: str) -> Statement:
        """Compile ``pipeline`` against ``table_name``.

        Raises:
            TranslationError: For malformed stages or filters.
            SQLGenerationError: For unsupported aggregate functions.
        """
        state = PipelineState()
        for stage in parse_pipeline(pipeline):
            self._apply(stage, state, table_name)
        statement = self._assemble(state, table_name)
        logger.info("Aggregation SQL: %s params=%r", statement.sql, statement.params)
        return statement

    # ------------------------------------------------------------------
    # Stage folding
    # ------------------------------------------------------------------

    def _apply(self, stage: Stage, state: PipelineState, table_name: str) -> None:
        always_true = self._ctx.dialect.always_true

        if isinstance(stage, MatchStage):
            condition = self._filters.translate(stage.filter, state.where_params, "$match")
            if condition != always_true:
                state.where.append(condition)
        elif isinstance(stage, GroupStage):
            clause = self._group.build(stage)
            state.select = clause.select
            state.group_by = clause.group_by
            state.grouped = True
        elif isinstance(stage, ProjectStage):
            cols = self._projection.columns(stage.columns)
            if cols:
                projected = ", ".join(cols)
                state.select = f"{projected}, {state.select}" if state.grouped else projected
        elif isinstance(stage, SortStage):
            state.sort = self._sort.build(stage.spec)
        elif isinstance(stage, LimitStage):
            state.limit = stage.value
        elif isinstance(stage, SkipStage):
            state.offset = stage.value
        elif isinstance(stage, LookupStage):
            state.joins.append(self._lookup.build(stage, table_name))
        elif isinstance(stage, UnwindStage):
            path = stage.path.replace("*/", "")
            state.comments.append(f"/* UNWIND({path}) */")
        elif isinstance(stage, HavingStage):
            condition = self._filters.translate(stage.filter, state.having_params, "$having")
            if condition != always_true:
                state.having.append(condition)
        else:
            raise TranslationError(f"Unknown pipeline stage: {stage!r}", "pipeline")

    def _assemble(self, state: PipelineState, table_name: str) -> Statement:
        parts: list[str] = [f"SELECT {state.select}", f"FROM {table_name}"]
        parts.extend(state.joins)
        parts.extend(state.comments)

        if state.where:
            parts.append(f"WHERE {' AND '.join(state.where)}")
        if state.group_by:
            parts.append(f"GROUP BY {state.group_by}")
        if state.having:
            parts.append(f"HAVING {' AND '.join(state.having)}")
        if state.sort:
            parts.append(f"ORDER BY {state.sort}")

        paging = self._ctx.dialect.paging_clause(state.limit, state.offset)
        if paging:
            parts.append(paging)

        return Statement(sql=" ".join(parts), params=state.where_params + state.having_params)
