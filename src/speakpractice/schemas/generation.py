"""Generation data models.

This module defines the request variants sent to the text-generation
provider, the options that tune a call, and the normalized result every
provider response shape is converted into.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import ConfigDict, Field, field_validator

from speakpractice.schemas.base import WireModel

SUGGESTION_COUNT = 3


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class ChatMessage(WireModel):
    """Single message of a chat conversation.

    Attributes:
        role: Author role (system, user, assistant).
        content: Message text.
    """

    role: str = Field(..., description="Author role")
    content: str = Field(..., description="Message text")


class ChatRequest(WireModel):
    """Inline conversation sent to the chat-completions endpoint."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["chat"] = "chat"
    messages: list[ChatMessage] = Field(..., min_length=1)

    @field_validator("messages")
    @classmethod
    def messages_have_content(cls, v: list[ChatMessage]) -> list[ChatMessage]:
        """Reject messages with an empty role or content.

        Raises:
            ValueError: If any message is blank.
        """
        for message in v:
            _require_text(message.role)
            _require_text(message.content)
        return v


class SingleInputRequest(WireModel):
    """Single prompt string sent to the responses endpoint."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["singleInput"] = "singleInput"
    text: str

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        return _require_text(v)


class NamedPromptRequest(WireModel):
    """Reference to a provider-side stored prompt plus its variables."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["namedPrompt"] = "namedPrompt"
    prompt_id: str
    prompt_version: str
    variables: dict[str, str] = Field(default_factory=dict)

    @field_validator("prompt_id", "prompt_version")
    @classmethod
    def reference_not_blank(cls, v: str) -> str:
        return _require_text(v)


GenerationRequest = Annotated[
    ChatRequest | SingleInputRequest | NamedPromptRequest,
    Field(discriminator="kind"),
]


class GenerationOptions(WireModel):
    """Per-call tuning options.

    Options a model family does not support are dropped before the request
    is issued; unknown keys are ignored on input.

    Attributes:
        model: Model identifier overriding the configured default.
        temperature: Sampling temperature.
        max_output_tokens: Generation length limit.
        top_p: Nucleus sampling mass.
        store: Whether the provider stores the response. None lets the
            call site pick its default.
        include: Extra output fields requested from the provider.
    """

    model_config = ConfigDict(extra="ignore")

    model: str | None = Field(None, description="Model identifier override")
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_output_tokens: int | None = Field(None, ge=1)
    top_p: float | None = Field(None, ge=0.0, le=1.0)
    store: bool | None = Field(None, description="Provider-side storage flag")
    include: list[str] | None = Field(None, description="Extra output fields")


class TokenUsage(WireModel):
    """Token usage statistics for a generation.

    Every field defaults to 0 so missing provider fields never leak as null.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)
    total_tokens: int = Field(0, ge=0)
    cached_tokens: int = Field(0, ge=0)
    reasoning_tokens: int = Field(0, ge=0)


class GenerationResult(WireModel):
    """Provider-independent result of a text generation.

    Attributes:
        text: Extracted text; empty string when the response held no text.
        model_id: Model that produced the response.
        usage: Token usage statistics.
        status: Provider-reported completion state.
        provider_request_id: Provider identifier of the response.
        created_at: Creation time reported by the provider.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    text: str = Field("", description="Generated text")
    model_id: str = Field(..., description="Model that produced the response")
    usage: TokenUsage = Field(default_factory=TokenUsage)
    status: Literal["completed", "failed", "in_progress"] = "completed"
    provider_request_id: str = Field("", description="Provider response id")
    created_at: datetime


class SuggestionSet(WireModel):
    """Exactly three non-empty reply suggestions."""

    model_config = ConfigDict(strict=True, extra="forbid")

    suggestions: list[str]

    @field_validator("suggestions")
    @classmethod
    def exactly_three_non_empty(cls, v: list[str]) -> list[str]:
        """Trim suggestions and enforce the fixed count.

        Raises:
            ValueError: If a suggestion is blank or the count is not 3.
        """
        trimmed = [s.strip() for s in v]
        if any(not s for s in trimmed):
            raise ValueError("suggestions must not be empty")
        if len(trimmed) != SUGGESTION_COUNT:
            raise ValueError(
                f"expected {SUGGESTION_COUNT} suggestions, got {len(trimmed)}"
            )
        return trimmed
