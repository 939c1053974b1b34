"""docsql compilation layer: filter trees and pipelines → parameterized SQL."""
from docsql.compile.aggregation import PipelineCompiler
from docsql.compile.base import DIALECT, MySQLDialect, Statement
from docsql.compile.context import CompilationContext
from docsql.compile.filter_translator import FilterTranslator, translate_filter
from docsql.compile.registry import OperatorRegistry, default_registry
from docsql.compile.subquery import SubQuery, wrap_as_subquery

__all__ = [
    "CompilationContext",
    "DIALECT",
    "FilterTranslator",
    "MySQLDialect",
    "OperatorRegistry",
    "PipelineCompiler",
    "Statement",
    "SubQuery",
    "default_registry",
    "translate_filter",
    "wrap_as_subquery",
]
