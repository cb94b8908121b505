"""HTTP request bodies.

Bodies only describe the JSON shape. Fields are optional so that missing
or blank values reach the request validators, which produce the
caller-facing messages.
"""

from typing import Any

from pydantic import ConfigDict, Field

from speakpractice.schemas.base import WireModel
from speakpractice.schemas.generation import GenerationOptions


class RequestBody(WireModel):
    model_config = ConfigDict(extra="ignore")

    options: GenerationOptions | None = None


class MessagesBody(RequestBody):
    """Body of ``POST /generate/text``."""

    messages: list[Any] | None = None


class CompletionBody(RequestBody):
    """Body of ``POST /generate/completion``."""

    prompt: str | None = None
    system_prompt: str | None = None


class SingleInputBody(RequestBody):
    """Body of ``POST /generate/single``."""

    prompt: str | None = None


class TextBody(RequestBody):
    """Body of ``POST /generate/analyze`` and ``POST /generate/correct``."""

    text: str | None = None


class ExercisesBody(RequestBody):
    """Body of ``POST /generate/exercises``."""

    error_type: str | None = None
    difficulty: str = "intermediate"
    count: int = 5


class ConversationBody(RequestBody):
    """Body of ``POST /generate/conversation``."""

    message: str | None = None
    history: list[Any] = Field(default_factory=list)


class ExplainBody(RequestBody):
    """Body of ``POST /generate/explain``."""

    concept: str | None = None
    level: str = "detailed"


class TopicBody(RequestBody):
    """Body of ``POST /generate/topic``."""

    topic: str | None = None
    initial_message: str | None = None


class SuggestionsBody(RequestBody):
    """Body of ``POST /generate/suggestions``."""

    topic: str | None = None
    conversation_history: str | None = None


class TranslateBody(WireModel):
    """Body of ``POST /translate``."""

    model_config = ConfigDict(extra="ignore")

    text: str | None = None
    target_language: str = "zh-TW"
