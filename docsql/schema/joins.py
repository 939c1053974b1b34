"""Join configuration model used by the SELECT builder."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JoinConfig(BaseModel):
    """A single explicit JOIN.

    Accepts both the snake_case field names and the camelCase keys
    (``tableName``, ``joinType``) used by document-style callers.

    Attributes:
        table_name: Joined table.
        alias: Optional alias; defaults to the table name when resolving
            projection references.
        join_type: Join keyword, e.g. ``"LEFT JOIN"``.  A bare type such as
            ``"left"`` is normalized to ``"LEFT JOIN"``.
        on: Raw join predicate, e.g. ``"users.id = orders.user_id"``.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    table_name: str = Field(alias="tableName")
    alias: str | None = None
    join_type: str = Field(default="INNER JOIN", alias="joinType")
    on: str

    @field_validator("join_type")
    @classmethod
    def _normalize_join_type(cls, value: str) -> str:
        value = " ".join(value.upper().split())
        return value if value.endswith("JOIN") else f"{value} JOIN"

    @property
    def effective_alias(self) -> str:
        return self.alias or self.table_name
