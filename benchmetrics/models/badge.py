"""Shields.io endpoint badge model."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Badge(BaseModel):
    """A shields.io endpoint badge: `{schemaVersion, label, message, color}`."""

    schema_version: Literal[1] = Field(default=1, alias="schemaVersion")
    label: str
    message: str
    color: str

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
