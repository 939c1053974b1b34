"""docsql input models: filter entries, pipeline stages, join configs."""
from docsql.schema.filter_nodes import (
    FilterEntry,
    LiteralMatch,
    LogicalGroup,
    OperatorMap,
    SubQueryRef,
    classify_entry,
)
from docsql.schema.joins import JoinConfig
from docsql.schema.pipeline import Stage, parse_pipeline, parse_stage

__all__ = [
    "FilterEntry",
    "JoinConfig",
    "LiteralMatch",
    "LogicalGroup",
    "OperatorMap",
    "Stage",
    "SubQueryRef",
    "classify_entry",
    "parse_pipeline",
    "parse_stage",
]
