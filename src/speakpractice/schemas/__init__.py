"""Pydantic models for speakpractice data structures.

This package contains all data models used throughout the service,
organized by functional domain.
"""

from speakpractice.schemas.envelope import (
    ErrorBody,
    ErrorEnvelope,
    SuccessEnvelope,
    error_payload,
    success_payload,
)
from speakpractice.schemas.generation import (
    SUGGESTION_COUNT,
    ChatMessage,
    ChatRequest,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    NamedPromptRequest,
    SingleInputRequest,
    SuggestionSet,
    TokenUsage,
)
from speakpractice.schemas.practice import (
    AudioFormats,
    AudioUpload,
    TranscriptionOptions,
    TranscriptionResult,
    TranslationResult,
)
from speakpractice.schemas.validation import Validated, ValidationFailure

__all__ = [
    # Generation
    "ChatMessage",
    "ChatRequest",
    "SingleInputRequest",
    "NamedPromptRequest",
    "GenerationRequest",
    "GenerationOptions",
    "TokenUsage",
    "GenerationResult",
    "SuggestionSet",
    "SUGGESTION_COUNT",
    # Practice
    "AudioUpload",
    "AudioFormats",
    "TranscriptionOptions",
    "TranscriptionResult",
    "TranslationResult",
    # Validation
    "ValidationFailure",
    "Validated",
    # Envelopes
    "ErrorBody",
    "ErrorEnvelope",
    "SuccessEnvelope",
    "success_payload",
    "error_payload",
]
