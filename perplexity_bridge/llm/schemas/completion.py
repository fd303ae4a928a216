"""Pydantic schemas for Perplexity chat completions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CompletionMessage(BaseModel):
    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionUsage(BaseModel):
    """Token accounting; extra upstream keys (cost, search context) are kept."""

    model_config = ConfigDict(extra="allow")

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class CompletionBody(BaseModel):
    """The subset of the upstream response body the bridge depends on."""

    choices: list[CompletionChoice] = Field(..., min_length=1)
    model: str
    usage: CompletionUsage | None = None
    citations: list[str] | None = None


class ProviderResponse(BaseModel):
    """Outcome of one Perplexity call, already normalised."""

    success: bool
    answer: str | None = None
    model: str | None = None
    usage: CompletionUsage | None = None
    citations: list[str] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_body(cls, body: CompletionBody) -> "ProviderResponse":
        return cls(
            success=True,
            answer=body.choices[0].message.content,
            model=body.model,
            usage=body.usage,
            citations=list(body.citations or []),
        )

    @classmethod
    def failure(cls, message: str) -> "ProviderResponse":
        return cls(success=False, error=message)

    def to_payload(self) -> dict[str, Any]:
        """Wire shape shared by both transports."""

        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "answer": self.answer,
            "model": self.model,
            "usage": self.usage.model_dump(exclude_none=True) if self.usage else None,
            "citations": list(self.citations),
        }
