"""AI provider access.

This package provides the provider driver abstraction, the OpenAI
driver, response normalization, model-family gating and error mapping.
"""

from speakpractice.providers.drivers import (
    BaseProviderDriver,
    OpenAIDriver,
    build_openai_client,
)
from speakpractice.providers.errors import map_provider_error
from speakpractice.providers.normalizer import (
    ChatCompletionPayload,
    PromptResponsesPayload,
    ResponsesPayload,
    extract_output_text,
    normalize_response,
    parse_payload,
)
from speakpractice.providers.options import is_reasoning_model, sampling_params

__all__ = [
    "BaseProviderDriver",
    "OpenAIDriver",
    "build_openai_client",
    "map_provider_error",
    "ChatCompletionPayload",
    "ResponsesPayload",
    "PromptResponsesPayload",
    "parse_payload",
    "normalize_response",
    "extract_output_text",
    "is_reasoning_model",
    "sampling_params",
]
