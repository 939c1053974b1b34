"""Operator plugin registry.

Plugins let callers add custom filter operators without touching
:class:`~docsql.compile.filter_translator.FilterTranslator`.  The translator
consults its registry *before* any built-in operator handling, so a plugin
can also override a built-in token.

A registry is an explicit object injected into the translator.  A
process-wide :data:`default_registry` backs :func:`register_operator_plugin`
and every translator constructed without an explicit registry.

Usage::

    from docsql import register_operator_plugin

    def _between(field, operand, params, context):
        params.extend(operand)
        return f"{field} BETWEEN ? AND ?"

    register_operator_plugin("$between", _between)

Registries are append-only and read without locking.  Register plugins at
start-up, before translations begin on other threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

#: Type alias for a plugin handler.
#: ``(field, operand, params, context) -> sql_fragment``; the handler appends
#: its own bound values to ``params`` in placeholder order.
PluginHandler = Callable[[str, Any, list, str], str]


@dataclass(frozen=True)
class OperatorPlugin:
    """A registered ``(operator token, handler)`` pair."""

    operator: str
    handler: PluginHandler

    def apply(self, field: str, operand: Any, params: list, context: str) -> str:
        return self.handler(field, operand, params, context)


class OperatorRegistry:
    """Ordered, append-only list of operator plugins.

    When several plugins share a token the earliest registration wins.

    Example::

        registry = OperatorRegistry()

        @registry.register("$startsWith")
        def _starts_with(field, operand, params, context):
            params.append(f"{operand}%")
            return f"{field} LIKE ?"
    """

    def __init__(self) -> None:
        self._plugins: list[OperatorPlugin] = []

    def register(self, operator: str) -> Callable[[PluginHandler], PluginHandler]:
        """Decorator that registers a handler under ``operator``.

        Args:
            operator: The operator token (e.g. ``"$startsWith"``).

        Returns:
            A decorator that registers and returns the handler.
        """

        def decorator(handler: PluginHandler) -> PluginHandler:
            self.register_handler(operator, handler)
            return handler

        return decorator

    def register_handler(self, operator: str, handler: PluginHandler) -> None:
        """Register a handler without using the decorator form."""
        if not callable(handler):
            raise TypeError(f"Plugin handler for {operator!r} must be callable.")
        self._plugins.append(OperatorPlugin(operator, handler))
        logger.debug("Registered operator plugin %s", operator)

    def get(self, operator: str) -> OperatorPlugin | None:
        """Return the first plugin registered for ``operator``, or ``None``."""
        for plugin in self._plugins:
            if plugin.operator == operator:
                return plugin
        return None

    def registered_operators(self) -> list[str]:
        """Return the sorted list of operator tokens with a plugin."""
        return sorted({plugin.operator for plugin in self._plugins})

    def __contains__(self, operator: object) -> bool:
        return any(plugin.operator == operator for plugin in self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)


#: Process-wide registry used when no registry is injected.
default_registry = OperatorRegistry()


def register_operator_plugin(operator: str, handler: PluginHandler) -> None:
    """Register ``handler`` for ``operator`` on the process-wide registry.

    Effective for every subsequent translation that uses
    :data:`default_registry`.
    """
    default_registry.register_handler(operator, handler)
