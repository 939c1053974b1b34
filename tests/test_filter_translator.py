"""Unit tests for FilterTranslator / translate_filter."""

from __future__ import annotations

import re

import pytest

from docsql.compile.filter_translator import FilterTranslator, translate_filter
from docsql.errors import TranslationError, UnsupportedOperatorError


def _sql(tree):
    stmt = translate_filter(tree)
    return stmt.sql, stmt.params


# ---------------------------------------------------------------------------
# Field-level matching
# ---------------------------------------------------------------------------


def test_comparison_operator():
    assert _sql({"age": {"$gt": 18}}) == ("age > ?", [18])


@pytest.mark.parametrize(
    "op,token",
    [("$eq", "="), ("$ne", "<>"), ("$gt", ">"), ("$gte", ">="), ("$lt", "<"), ("$lte", "<=")],
)
def test_every_comparison_token(op, token):
    assert _sql({"score": {op: 5}}) == (f"score {token} ?", [5])


def test_literal_equality_and_top_level_conjunction():
    assert _sql({"name": "Ann", "active": True}) == ("name = ? AND active = ?", ["Ann", True])


def test_literal_list_is_matched_as_single_value():
    assert _sql({"tags": ["a", "b"]}) == ("tags = ?", [["a", "b"]])


def test_multiple_operators_on_one_field_are_parenthesized():
    assert _sql({"age": {"$gte": 18, "$lt": 65}}) == ("(age >= ? AND age < ?)", [18, 65])


def test_plain_sub_key_compares_the_field_itself():
    assert _sql({"address": {"city": "X"}}) == ("address = ?", ["X"])


def test_plain_sub_key_value_is_bound_untouched():
    assert _sql({"u": {"age": {"$lt": 30}}}) == ("u = ?", [{"$lt": 30}])


def test_plain_sub_key_mixed_with_operator():
    assert _sql({"age": {"$gt": 1, "exact": 5}}) == ("(age > ? AND age = ?)", [1, 5])


def test_empty_tree_is_always_true():
    assert _sql({}) == ("1=1", [])
    assert _sql(None) == ("1=1", [])


# ---------------------------------------------------------------------------
# Logical operators
# ---------------------------------------------------------------------------


def test_or_wraps_children_and_group():
    sql, params = _sql({"$or": [{"status": "active"}, {"age": {"$gt": 30}}]})
    assert sql == "((status = ?) OR (age > ?))"
    assert params == ["active", 30]


def test_and_wraps_children():
    assert _sql({"$and": [{"a": 1}, {"b": 2}]}) == ("(a = ?) AND (b = ?)", [1, 2])


def test_nor_negates_disjunction():
    assert _sql({"$nor": [{"a": 1}, {"b": 2}]}) == ("NOT ((a = ?) OR (b = ?))", [1, 2])


def test_empty_logical_sequences():
    assert _sql({"$and": []}) == ("1=1", [])
    assert _sql({"$or": []}) == ("1=0", [])
    assert _sql({"$nor": []}) == ("1=1", [])


def test_always_true_children_are_dropped_from_disjunction():
    assert _sql({"$or": [{}, {"a": 1}]}) == ("((a = ?))", [1])
    assert _sql({"$or": [{}, {}]}) == ("1=0", [])
    assert _sql({"$nor": [{"$and": []}]}) == ("1=1", [])


def test_nested_logical_groups():
    sql, params = _sql({"$and": [{"$or": [{"a": 1}, {"b": 2}]}, {"c": 3}]})
    assert sql == "(((a = ?) OR (b = ?))) AND (c = ?)"
    assert params == [1, 2, 3]


def test_logical_operator_requires_list():
    with pytest.raises(TranslationError, match="expects a list"):
        translate_filter({"$or": {"a": 1}})


def test_logical_operator_requires_mapping_children():
    with pytest.raises(TranslationError):
        translate_filter({"$and": [1, 2]})


def test_unknown_top_level_operator():
    with pytest.raises(UnsupportedOperatorError) as exc_info:
        translate_filter({"$where": "1"})
    assert exc_info.value.operator == "$where"


# ---------------------------------------------------------------------------
# Array operators
# ---------------------------------------------------------------------------


def test_in_and_nin():
    assert _sql({"status": {"$in": ["a", "b"]}}) == ("status IN (?, ?)", ["a", "b"])
    assert _sql({"status": {"$nin": ["x"]}}) == ("status NOT IN (?)", ["x"])


def test_empty_in_and_nin():
    assert _sql({"status": {"$in": []}}) == ("1=0", [])
    assert _sql({"status": {"$nin": []}}) == ("1=1", [])


def test_all_serializes_each_element():
    sql, params = _sql({"tags": {"$all": ["red", {"k": 1}]}})
    assert sql == "(JSON_CONTAINS(tags, ?) AND JSON_CONTAINS(tags, ?))"
    assert params == ['"red"', '{"k":1}']


def test_array_operator_rejects_scalar():
    with pytest.raises(TranslationError, match="expects a list"):
        translate_filter({"status": {"$in": "active"}})


# ---------------------------------------------------------------------------
# Structural operators
# ---------------------------------------------------------------------------


def test_exists():
    assert _sql({"email": {"$exists": True}}) == ("email IS NOT NULL", [])
    assert _sql({"email": {"$exists": False}}) == ("email IS NULL", [])


def test_size_and_elem_match():
    assert _sql({"tags": {"$size": 3}}) == ("JSON_LENGTH(tags) = ?", [3])
    assert _sql({"items": {"$elemMatch": {"sku": "x"}}}) == (
        "JSON_CONTAINS(items, ?)",
        ['{"sku":"x"}'],
    )


def test_regex_accepts_compiled_pattern():
    assert _sql({"name": {"$regex": "^A"}}) == ("name REGEXP ?", ["^A"])
    assert _sql({"name": {"$regex": re.compile("^B")}}) == ("name REGEXP ?", ["^B"])


def test_like():
    assert _sql({"name": {"$like": "A%"}}) == ("name LIKE ?", ["A%"])


def test_not():
    assert _sql({"age": {"$not": {"$gt": 5}}}) == ("NOT (age > ?)", [5])
    assert _sql({"name": {"$not": "^A"}}) == ("NOT (name REGEXP ?)", ["^A"])


def test_not_rejects_empty_operand():
    with pytest.raises(TranslationError):
        translate_filter({"age": {"$not": {}}})


def test_unsupported_field_operator_reports_path():
    with pytest.raises(UnsupportedOperatorError) as exc_info:
        translate_filter({"$or": [{"age": {"$foo": 1}}]})
    err = exc_info.value
    assert err.field == "age"
    assert err.operator == "$foo"
    assert err.context == "root->$or[0]->age"
    assert err.to_error_response()["details"] == {"field": "age", "operator": "$foo"}


def test_non_mapping_tree_rejected():
    with pytest.raises(TranslationError):
        translate_filter(["age", 3])


# ---------------------------------------------------------------------------
# Parameter bookkeeping
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "tree",
    [
        {"a": 1, "b": {"$in": [1, 2, 3]}},
        {"$or": [{"a": {"$gte": 1, "$lte": 9}}, {"tags": {"$all": ["x", "y"]}}]},
        {"$nor": [{"x": {"$nin": []}}, {"y": {"$regex": "z"}}], "n": {"$size": 2}},
        {"$and": [{"$or": []}, {"q": {"$not": {"$in": ["a"]}}}]},
    ],
)
def test_placeholder_count_matches_params(tree):
    stmt = translate_filter(tree)
    assert stmt.sql.count("?") == len(stmt.params)


def test_translator_appends_to_caller_params():
    params = ["existing"]
    sql = FilterTranslator().translate({"a": 1}, params)
    assert sql == "a = ?"
    assert params == ["existing", 1]


def test_input_tree_is_not_mutated():
    tree = {"$or": [{"a": {"$in": [1, 2]}}], "b": {"$gt": 1}}
    snapshot = repr(tree)
    translate_filter(tree)
    assert repr(tree) == snapshot
