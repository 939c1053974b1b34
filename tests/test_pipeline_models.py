"""Unit tests for the pipeline stage and join models."""

from __future__ import annotations

import pytest

from docsql.errors import TranslationError
from docsql.schema.joins import JoinConfig
from docsql.schema.pipeline import (
    GroupStage,
    LimitStage,
    LookupStage,
    MatchStage,
    UnwindStage,
    parse_pipeline,
    parse_stage,
)


def test_parse_pipeline_returns_typed_stages():
    stages = parse_pipeline(
        [
            {"$match": {"a": 1}},
            {"$group": {"_id": "$a", "n": {"$sum": 1}}},
            {"$limit": 3},
        ]
    )
    assert [type(s) for s in stages] == [MatchStage, GroupStage, LimitStage]


def test_stage_models_pass_through():
    stage = LimitStage(value=4)
    assert parse_stage(stage) is stage


def test_group_stage_splits_identity_and_accumulators():
    stage = GroupStage(spec={"_id": "$k", "n": {"$sum": 1}})
    assert stage.identity == "$k"
    assert stage.accumulators == {"n": {"$sum": 1}}


def test_lookup_accepts_document_keys():
    stage = parse_stage(
        {"$lookup": {"from": "users", "localField": "uid", "foreignField": "id", "as": "u"}}
    )
    assert isinstance(stage, LookupStage)
    assert (stage.from_, stage.local_field, stage.foreign_field, stage.as_) == (
        "users",
        "uid",
        "id",
        "u",
    )


def test_unwind_keeps_path_and_accepts_mapping():
    assert parse_stage({"$unwind": "$items"}) == UnwindStage(path="$items")
    assert parse_stage({"$unwind": {"path": "$items"}}).path == "$items"


@pytest.mark.parametrize(
    "raw",
    [
        {"$limit": -1},
        {"$skip": "ten"},
        {"$match": ["a"]},
        {"$lookup": {"from": "users"}},
        {"$match": {}, "$limit": 1},
        "not a stage",
    ],
)
def test_malformed_stages_raise_translation_error(raw):
    with pytest.raises(TranslationError) as exc_info:
        parse_stage(raw)
    assert exc_info.value.context == "pipeline"


def test_join_config_normalizes_join_type():
    join = JoinConfig.model_validate({"tableName": "orders", "joinType": "left", "on": "a = b"})
    assert join.join_type == "LEFT JOIN"
    assert join.effective_alias == "orders"


def test_join_config_defaults_to_inner_join():
    join = JoinConfig(table_name="orders", alias="o", on="o.uid = users.id")
    assert join.join_type == "INNER JOIN"
    assert join.effective_alias == "o"
