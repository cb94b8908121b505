"""Provider response normalization.

Raw provider responses are first parsed into one of three explicit
payload variants, then converted into a GenerationResult:

- ``chat_completion``: a list of choices, text from the first choice.
- ``response``: an ``output`` list of items, text from the first
  ``output_text`` element of the first ``message`` item.
- ``prompt_response``: same structure as ``response``, produced by a
  stored-prompt request.

Extraction never raises on missing content; absence is an empty string.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing_extensions import assert_never

from speakpractice.logger import get_logger
from speakpractice.schemas.generation import GenerationResult, TokenUsage

logger = get_logger(__name__)

PayloadKind = Literal["chat_completion", "response", "prompt_response"]


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ChatChoiceMessage(_Lenient):
    content: str | None = None


class ChatChoice(_Lenient):
    message: ChatChoiceMessage | None = None


class PromptTokensDetails(_Lenient):
    cached_tokens: int | None = None


class CompletionTokensDetails(_Lenient):
    reasoning_tokens: int | None = None


class ChatUsage(_Lenient):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None
    prompt_tokens_details: PromptTokensDetails | None = None
    completion_tokens_details: CompletionTokensDetails | None = None


class ChatCompletionPayload(_Lenient):
    """Chat-completions response."""

    kind: Literal["chat_completion"] = "chat_completion"
    id: str | None = None
    model: str | None = None
    created: float | None = None
    choices: list[ChatChoice] | None = None
    usage: ChatUsage | None = None


class OutputContent(_Lenient):
    type: str | None = None
    text: str | None = None


class OutputItem(_Lenient):
    type: str | None = None
    content: list[OutputContent] | None = None


class ResponsesUsage(_Lenient):
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None
    input_tokens_details: PromptTokensDetails | None = None
    output_tokens_details: CompletionTokensDetails | None = None


class ResponsesPayload(_Lenient):
    """Responses-API response to an inline input."""

    kind: Literal["response"] = "response"
    id: str | None = None
    model: str | None = None
    created_at: float | None = None
    status: str | None = None
    output: list[OutputItem] | None = None
    usage: ResponsesUsage | None = None


class PromptResponsesPayload(ResponsesPayload):
    """Responses-API response to a stored-prompt reference."""

    kind: Literal["prompt_response"] = "prompt_response"  # type: ignore[assignment]


ProviderPayload = Annotated[
    ChatCompletionPayload | ResponsesPayload | PromptResponsesPayload,
    Field(discriminator="kind"),
]

_payload_adapter: TypeAdapter[Any] = TypeAdapter(ProviderPayload)

_STATUS_MAP: dict[str, Literal["completed", "failed", "in_progress"]] = {
    "completed": "completed",
    "queued": "in_progress",
    "in_progress": "in_progress",
    "failed": "failed",
    "cancelled": "failed",
    "incomplete": "completed",
}


def _as_dict(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return dict(raw)
    if hasattr(raw, "model_dump"):
        return raw.model_dump()
    raise TypeError(f"Unsupported provider response type: {type(raw).__name__}")


def parse_payload(
    kind: PayloadKind, raw: Any
) -> ChatCompletionPayload | ResponsesPayload | PromptResponsesPayload:
    """Parse a raw provider response into its payload variant.

    Args:
        kind: Variant expected for the request that was issued.
        raw: SDK response object or plain dictionary.

    Returns:
        The parsed payload.

    Raises:
        TypeError: If the response is neither a mapping nor a model.
        pydantic.ValidationError: If a field has an impossible type.
    """
    data = _as_dict(raw)
    data["kind"] = kind
    return _payload_adapter.validate_python(data)


def extract_output_text(output: list[OutputItem] | None) -> str:
    """Return the first ``output_text`` of the first ``message`` item.

    Later messages and later text elements are ignored.
    """
    for item in output or []:
        if item.type != "message":
            continue
        for content in item.content or []:
            if content.type == "output_text":
                return content.text or ""
        return ""
    return ""


def extract_choice_text(choices: list[ChatChoice] | None) -> str:
    """Return the message content of the first choice, or ""."""
    if not choices or choices[0].message is None:
        return ""
    return choices[0].message.content or ""


def build_usage(
    prompt: int | None,
    completion: int | None,
    total: int | None,
    cached: int | None = None,
    reasoning: int | None = None,
) -> TokenUsage:
    """Build TokenUsage with every missing field defaulted to 0.

    When both prompt and completion counts are reported the total is
    their sum.
    """
    if prompt is not None and completion is not None:
        total = prompt + completion
    return TokenUsage(
        prompt_tokens=prompt or 0,
        completion_tokens=completion or 0,
        total_tokens=total or 0,
        cached_tokens=cached or 0,
        reasoning_tokens=reasoning or 0,
    )


def _created_at(epoch_s: float | None) -> datetime:
    if epoch_s is None:
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(epoch_s, tz=timezone.utc)


def _map_status(
    raw_status: str | None, request_id: str
) -> Literal["completed", "failed", "in_progress"]:
    if raw_status is None:
        return "completed"
    status = _STATUS_MAP.get(raw_status)
    if status is None:
        logger.warning(
            "Unknown provider status: status=%s, id=%s", raw_status, request_id
        )
        return "completed"
    if raw_status == "incomplete":
        logger.warning("Provider response incomplete: id=%s", request_id)
    return status


def _normalize_chat(payload: ChatCompletionPayload, fallback_model: str) -> GenerationResult:
    usage = payload.usage or ChatUsage()
    return GenerationResult(
        text=extract_choice_text(payload.choices),
        model_id=payload.model or fallback_model,
        usage=build_usage(
            usage.prompt_tokens,
            usage.completion_tokens,
            usage.total_tokens,
            usage.prompt_tokens_details.cached_tokens
            if usage.prompt_tokens_details
            else None,
            usage.completion_tokens_details.reasoning_tokens
            if usage.completion_tokens_details
            else None,
        ),
        status="completed",
        provider_request_id=payload.id or "",
        created_at=_created_at(payload.created),
    )


def _normalize_responses(payload: ResponsesPayload, fallback_model: str) -> GenerationResult:
    usage = payload.usage or ResponsesUsage()
    request_id = payload.id or ""
    return GenerationResult(
        text=extract_output_text(payload.output),
        model_id=payload.model or fallback_model,
        usage=build_usage(
            usage.input_tokens,
            usage.output_tokens,
            usage.total_tokens,
            usage.input_tokens_details.cached_tokens
            if usage.input_tokens_details
            else None,
            usage.output_tokens_details.reasoning_tokens
            if usage.output_tokens_details
            else None,
        ),
        status=_map_status(payload.status, request_id),
        provider_request_id=request_id,
        created_at=_created_at(payload.created_at),
    )


def normalize_response(
    payload: ChatCompletionPayload | ResponsesPayload | PromptResponsesPayload,
    fallback_model: str = "",
) -> GenerationResult:
    """Convert a parsed provider payload into a GenerationResult.

    Args:
        payload: Parsed payload variant.
        fallback_model: Model id used when the provider omitted it.

    Returns:
        Normalized result; ``text`` is "" when nothing was extractable.
    """
    if isinstance(payload, ChatCompletionPayload):
        return _normalize_chat(payload, fallback_model)
    elif isinstance(payload, PromptResponsesPayload):
        return _normalize_responses(payload, fallback_model)
    elif isinstance(payload, ResponsesPayload):
        return _normalize_responses(payload, fallback_model)
    else:
        assert_never(payload)
