"""Pydantic models for aggregation pipeline stages.

A pipeline is an ordered list of stages.  Stages can be built directly or
parsed from raw MongoDB-style dicts::

    parse_pipeline([
        {"$match": {"status": "completed"}},
        {"$group": {"_id": "$customerId", "total": {"$sum": "$amount"}}},
        {"$sort": {"total": -1}},
        {"$limit": 10},
    ])

Filter trees inside ``MatchStage`` / ``HavingStage`` stay as plain dicts;
the filter translator classifies them at compile time.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docsql.errors import TranslationError

_FORBID = ConfigDict(extra="forbid", arbitrary_types_allowed=True)


class MatchStage(BaseModel):
    """``$match`` – a filter tree ANDed into WHERE."""

    model_config = _FORBID

    filter: dict[str, Any] = Field(default_factory=dict)


class GroupStage(BaseModel):
    """``$group`` – identity (``_id``) plus named accumulators.

    The raw spec is kept as-is because ``_id`` cannot be a pydantic field
    name.  Accumulator shapes are checked when the stage is compiled.
    """

    model_config = _FORBID

    spec: dict[str, Any]

    @property
    def identity(self) -> Any:
        return self.spec.get("_id")

    @property
    def accumulators(self) -> dict[str, Any]:
        return {k: v for k, v in self.spec.items() if k != "_id"}


class ProjectStage(BaseModel):
    """``$project`` – a column list or an inclusion mapping."""

    model_config = _FORBID

    columns: Union[list[str], dict[str, Any]]


class SortStage(BaseModel):
    """``$sort`` – ``{field: 1 | -1}`` or a raw ORDER BY string."""

    model_config = _FORBID

    spec: Union[str, dict[str, Any]]


class LimitStage(BaseModel):
    """``$limit`` – maximum number of rows."""

    model_config = _FORBID

    value: int = Field(ge=0)


class SkipStage(BaseModel):
    """``$skip`` – number of rows to skip."""

    model_config = _FORBID

    value: int = Field(ge=0)


class LookupStage(BaseModel):
    """``$lookup`` – emitted as a LEFT JOIN.

    Accepts MongoDB keys (``from``, ``localField``, ``foreignField``,
    ``as``) or the Python field names.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    from_: str = Field(alias="from")
    local_field: str = Field(alias="localField")
    foreign_field: str = Field(alias="foreignField")
    as_: str = Field(alias="as")


class UnwindStage(BaseModel):
    """``$unwind`` – no relational equivalent; rendered as a comment.

    ``path`` is kept verbatim, sigil included (``"$tags"``).
    """

    model_config = _FORBID

    path: str


class HavingStage(BaseModel):
    """A filter tree applied to grouped rows (``HAVING``)."""

    model_config = _FORBID

    filter: dict[str, Any] = Field(default_factory=dict)


Stage = Union[
    MatchStage,
    GroupStage,
    ProjectStage,
    SortStage,
    LimitStage,
    SkipStage,
    LookupStage,
    UnwindStage,
    HavingStage,
]

_STAGE_TYPES = (
    MatchStage,
    GroupStage,
    ProjectStage,
    SortStage,
    LimitStage,
    SkipStage,
    LookupStage,
    UnwindStage,
    HavingStage,
)


def _unwind(value: Any) -> UnwindStage:
    if isinstance(value, Mapping):
        return UnwindStage(path=value.get("path", ""))
    return UnwindStage(path=value)


_STAGE_PARSERS: dict[str, Callable[[Any], Stage]] = {
    "$match": lambda v: MatchStage(filter=v),
    "$group": lambda v: GroupStage(spec=v),
    "$project": lambda v: ProjectStage(columns=v),
    "$sort": lambda v: SortStage(spec=v),
    "$limit": lambda v: LimitStage(value=v),
    "$skip": lambda v: SkipStage(value=v),
    "$lookup": lambda v: LookupStage.model_validate(v),
    "$unwind": _unwind,
    "$having": lambda v: HavingStage(filter=v),
}


def parse_stage(raw: Stage | Mapping[str, Any]) -> Stage:
    """Parse one MongoDB-style stage dict (stage models pass through).

    Raises:
        TranslationError: If the stage is unknown or malformed.
    """
    if isinstance(raw, _STAGE_TYPES):
        return raw
    if not isinstance(raw, Mapping) or len(raw) != 1:
        raise TranslationError(
            f"Pipeline stage must be a single-key object, got {raw!r}", "pipeline"
        )
    name, value = next(iter(raw.items()))
    parser = _STAGE_PARSERS.get(name)
    if parser is None:
        raise TranslationError(f'Unsupported pipeline stage "{name}"', "pipeline")
    try:
        return parser(value)
    except ValidationError as exc:
        raise TranslationError(f'Invalid "{name}" stage: {exc}', "pipeline") from exc


def parse_pipeline(stages: list[Stage | Mapping[str, Any]]) -> list[Stage]:
    """Parse every stage of ``stages`` in order."""
    return [parse_stage(stage) for stage in stages]
