"""Compilation context value object.

Packages the ``(dialect, registry)`` pair that every translator and clause
builder needs into a single cohesive object.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from docsql.compile.base import DIALECT, MySQLDialect
from docsql.compile.registry import OperatorRegistry, default_registry


@dataclass(frozen=True)
class CompilationContext:
    """Immutable context shared by the translators of one builder.

    Attributes:
        dialect: SQL dialect tokens.
        registry: Operator plugin registry consulted before built-ins.
    """

    dialect: MySQLDialect = DIALECT
    registry: OperatorRegistry = field(default=default_registry)

    @classmethod
    def create(cls, registry: OperatorRegistry | None = None) -> CompilationContext:
        """Return a context using ``registry`` or the process-wide default."""
        return cls(registry=registry if registry is not None else default_registry)
