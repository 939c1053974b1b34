"""Aggregation pipeline builder."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from docsql.compile.aggregation import PipelineCompiler
from docsql.compile.base import Statement
from docsql.compile.context import CompilationContext
from docsql.compile.registry import OperatorRegistry
from docsql.schema.pipeline import Stage, parse_stage
from docsql.statements.base import check_table_name


class AggregationBuilder:
    """Chainable builder that accumulates pipeline stages.

    Every method parses its stage immediately, so malformed stages fail at
    the call site rather than in ``to_sql()``.

    Example::

        stmt = (
            AggregationBuilder("orders")
            .match({"status": "completed"})
            .group({"_id": "$customerId", "total": {"$sum": "$amount"}})
            .sort({"total": -1})
            .limit(10)
            .to_sql()
        )
    """

    statement_kind = "AGGREGATE"

    def __init__(
        self,
        table_name: str,
        pipeline: Iterable[Stage | Mapping[str, Any]] | None = None,
        registry: OperatorRegistry | None = None,
    ) -> None:
        self.table_name = check_table_name(table_name, self.statement_kind)
        self._registry = registry
        self._pipeline: list[Stage] = []
        for stage in pipeline or ():
            self.add_stage(stage)

    @property
    def pipeline(self) -> list[Stage]:
        return list(self._pipeline)

    def add_stage(self, stage: Stage | Mapping[str, Any]) -> AggregationBuilder:
        """Append a stage model or a raw ``{"$stage": value}`` dict."""
        self._pipeline.append(parse_stage(stage))
        return self

    def match(self, filter_tree: Mapping[str, Any]) -> AggregationBuilder:
        return self.add_stage({"$match": filter_tree})

    def group(self, spec: Mapping[str, Any]) -> AggregationBuilder:
        return self.add_stage({"$group": spec})

    def project(self, fields: Iterable[str] | Mapping[str, Any]) -> AggregationBuilder:
        if not isinstance(fields, (Mapping, str)):
            fields = list(fields)
        return self.add_stage({"$project": fields})

    def sort(self, spec: str | Mapping[str, Any]) -> AggregationBuilder:
        return self.add_stage({"$sort": spec})

    def limit(self, n: int) -> AggregationBuilder:
        return self.add_stage({"$limit": n})

    def skip(self, n: int) -> AggregationBuilder:
        return self.add_stage({"$skip": n})

    def lookup(self, spec: Mapping[str, Any] | None = None, /, **kwargs: Any) -> AggregationBuilder:
        """Append a ``$lookup``.

        Accepts a ``{"from", "localField", "foreignField", "as"}`` mapping,
        keyword arguments (``from_=``, ``local_field=`` …), or both.
        """
        payload = dict(spec or {})
        payload.update(kwargs)
        return self.add_stage({"$lookup": payload})

    def unwind(self, path: str) -> AggregationBuilder:
        return self.add_stage({"$unwind": path})

    def having(self, filter_tree: Mapping[str, Any]) -> AggregationBuilder:
        """AND a condition on grouped rows into HAVING."""
        return self.add_stage({"$having": filter_tree})

    def to_sql(self) -> Statement:
        compiler = PipelineCompiler(CompilationContext.create(self._registry))
        return compiler.compile(self._pipeline, self.table_name)
