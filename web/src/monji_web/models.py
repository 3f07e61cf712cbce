from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ActionFailure(BaseModel):
    """What a failed form action hands back to its page (rendered as `form` in templates)."""

    status_code: int = Field(default=400, ge=400, le=599)
    error: str
    values: dict[str, Any] = Field(default_factory=dict)


def fail(status_code: int, *, error: str, values: dict[str, Any] | None = None) -> ActionFailure:
    return ActionFailure(status_code=status_code, error=error, values=values or {})
