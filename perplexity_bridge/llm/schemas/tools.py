"""Pydantic request bodies for the tool routes.

Required fields are declared optional; the routes check them and answer 400
with ``{"success": false, "error": ...}``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    query: str | None = None


class AskRequest(BaseModel):
    prompt: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tool_name: str | None = Field(None, alias="toolName")
    arguments: dict[str, Any] | None = None
