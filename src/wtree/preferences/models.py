"""Preference models persisted in the repository's worktree config file."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Preferences(BaseModel):
    """Saved commands, routes and files remembered between runs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    default_command: str | None = Field(default=None, description="Command used by `run -dc`.")
    saved_commands: list[str] = Field(default_factory=list, description="Commands offered in the run menu.")
    default_route: str | None = Field(default=None, description="Route preselected in the route menu.")
    saved_routes: list[str] = Field(default_factory=list, description="Routes offered in the route menu.")
    files_to_copy: list[str] = Field(
        default_factory=lambda: [".env"],
        description="Files offered by the copy command.",
    )

    @field_validator("default_command", "default_route", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("saved_commands", "saved_routes", "files_to_copy", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any):
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(dict.fromkeys(str(item) for item in value if str(item).strip()))
        raise ValueError("Saved commands, routes and files must be lists of strings")


__all__ = ["Preferences"]
