"""Unit tests for the operator plugin registry."""

from __future__ import annotations

import pytest

from docsql.compile.filter_translator import translate_filter
from docsql.compile.registry import OperatorRegistry, default_registry, register_operator_plugin
from docsql.statements.select import SelectBuilder


def _between(field, operand, params, context):
    params.extend(operand)
    return f"{field} BETWEEN ? AND ?"


def test_register_decorator_returns_handler(registry: OperatorRegistry):
    @registry.register("$startsWith")
    def _starts_with(field, operand, params, context):
        params.append(f"{operand}%")
        return f"{field} LIKE ?"

    assert callable(_starts_with)
    assert "$startsWith" in registry
    assert registry.registered_operators() == ["$startsWith"]


def test_plugin_is_used_by_translator(registry: OperatorRegistry):
    registry.register_handler("$between", _between)
    stmt = translate_filter({"age": {"$between": [18, 30]}}, registry)
    assert stmt.sql == "age BETWEEN ? AND ?"
    assert stmt.params == [18, 30]


def test_plugin_overrides_builtin_operator(registry: OperatorRegistry):
    registry.register_handler("$eq", lambda field, operand, params, context: f"{field} IS TRUE")
    assert translate_filter({"flag": {"$eq": True}}, registry).sql == "flag IS TRUE"
    # The default registry is untouched.
    assert translate_filter({"flag": {"$eq": True}}).sql == "flag = ?"


def test_first_registration_wins(registry: OperatorRegistry):
    registry.register_handler("$x", lambda f, o, p, c: "first")
    registry.register_handler("$x", lambda f, o, p, c: "second")
    assert len(registry) == 2
    assert translate_filter({"a": {"$x": 1}}, registry).sql == "first"


def test_plugin_receives_translation_context(registry: OperatorRegistry):
    seen = []

    @registry.register("$probe")
    def _probe(field, operand, params, context):
        seen.append(context)
        return "1=1"

    translate_filter({"$or": [{"a": {"$probe": None}}]}, registry)
    assert seen == ["root->$or[0]->a"]


def test_non_callable_handler_rejected(registry: OperatorRegistry):
    with pytest.raises(TypeError):
        registry.register_handler("$bad", "not callable")


def test_registry_is_injected_into_builders(registry: OperatorRegistry):
    registry.register_handler("$between", _between)
    stmt = SelectBuilder("users", registry).query({"age": {"$between": [1, 2]}}).to_sql()
    assert stmt.sql == "SELECT * FROM users WHERE age BETWEEN ? AND ?"


def test_register_operator_plugin_uses_default_registry():
    register_operator_plugin("$testOnlyHalf", lambda f, o, p, c: f"{f} = {o} / 2")
    assert "$testOnlyHalf" in default_registry
    assert translate_filter({"n": {"$testOnlyHalf": 8}}).sql == "n = 8 / 2"
