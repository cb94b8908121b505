"""Abstract base class and OpenAI implementation of the provider driver.

A driver turns a GenerationRequest into exactly one provider call and
returns the normalized result. Drivers never retry; the single fixed
timeout is configured once on the injected client.
"""

from abc import ABC, abstractmethod
from typing import Any

from openai import AsyncOpenAI
from typing_extensions import assert_never

from speakpractice.config.settings import OpenAIConfig
from speakpractice.logger import get_logger, mask_sensitive
from speakpractice.providers.errors import map_provider_error
from speakpractice.providers.normalizer import PayloadKind, normalize_response, parse_payload
from speakpractice.providers.options import sampling_params, storage_params
from speakpractice.schemas.generation import (
    ChatRequest,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    NamedPromptRequest,
    SingleInputRequest,
)
from speakpractice.schemas.practice import (
    AudioUpload,
    TranscriptionOptions,
    TranscriptionResult,
)

logger = get_logger(__name__)


class BaseProviderDriver(ABC):
    """Abstract base class for AI provider backends.

    Drivers expose text generation over the three request variants and
    speech-to-text. All operations are async; each one suspends only at
    the provider network call.
    """

    @abstractmethod
    async def generate(
        self,
        request: GenerationRequest,
        options: GenerationOptions | None = None,
        operation: str = "generate text",
    ) -> GenerationResult:
        """Generate text for a request variant.

        Args:
            request: Chat, single-input or named-prompt request.
            options: Per-call tuning options.
            operation: Short description used in error messages.

        Returns:
            Normalized generation result.

        Raises:
            ExternalServiceError: If the provider answered with an error.
            InternalError: If anything else failed.
        """
        pass

    @abstractmethod
    async def transcribe(
        self,
        upload: AudioUpload,
        options: TranscriptionOptions | None = None,
        detailed: bool = False,
    ) -> TranscriptionResult:
        """Transcribe an audio upload.

        Args:
            upload: Validated audio payload.
            options: Optional language, prompt and temperature hints.
            detailed: Request word and segment timestamps.

        Returns:
            Transcription text, with timing detail when ``detailed``.

        Raises:
            ExternalServiceError: If the provider answered with an error.
            InternalError: If anything else failed.
        """
        pass

    async def __aenter__(self) -> "BaseProviderDriver":
        """Enter the async context manager.

        Returns:
            Driver instance for use in async with statements.
        """
        return self

    @abstractmethod
    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: Any,
    ) -> None:
        """Exit the async context manager and release the client."""
        pass


def build_openai_client(config: OpenAIConfig) -> AsyncOpenAI:
    """Create the process-wide OpenAI client.

    The client is built once at startup and shared read-only. Automatic
    retries are disabled.

    Args:
        config: Provider configuration.

    Returns:
        Configured async client.
    """
    logger.info(
        "OpenAI client initialized: api_key=%s, timeout_s=%.1f",
        mask_sensitive(config.api_key),
        config.timeout_s,
    )
    return AsyncOpenAI(
        api_key=config.api_key,
        organization=config.organization,
        timeout=config.timeout_s,
        max_retries=0,
    )


class OpenAIDriver(BaseProviderDriver):
    """Provider driver backed by the OpenAI API.

    Chat requests go to chat completions, single inputs and stored-prompt
    references go to the responses API, and audio goes to the
    transcription endpoint.

    Attributes:
        config: Provider configuration (models, defaults, reasoning prefixes).
    """

    def __init__(self, client: AsyncOpenAI, config: OpenAIConfig):
        """Initialize the driver.

        Args:
            client: Shared async client, see ``build_openai_client``.
            config: Provider configuration.
        """
        self._client = client
        self.config = config

        logger.debug(
            "OpenAIDriver configured: gpt_model=%s, whisper_model=%s",
            config.gpt.model,
            config.whisper.model,
        )

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: Any,
    ) -> None:
        """Close the underlying HTTP client."""
        logger.debug("Provider client shutdown started")
        await self._client.close()

    def _chat_params(self, request: ChatRequest, options: GenerationOptions) -> dict[str, Any]:
        model = options.model or self.config.gpt.model
        params: dict[str, Any] = {
            "model": model,
            "messages": [m.model_dump(include={"role", "content"}) for m in request.messages],
            "max_completion_tokens": options.max_output_tokens
            or self.config.gpt.max_output_tokens,
        }
        params.update(
            sampling_params(
                model,
                options,
                self.config.reasoning_model_prefixes,
                default_temperature=self.config.gpt.temperature,
            )
        )
        return params

    def _single_input_params(
        self, request: SingleInputRequest, options: GenerationOptions
    ) -> dict[str, Any]:
        model = options.model or self.config.gpt.model
        params: dict[str, Any] = {"model": model, "input": request.text}
        params.update(storage_params(options, default_store=True))
        if options.max_output_tokens is not None:
            params["max_output_tokens"] = options.max_output_tokens
        params.update(sampling_params(model, options, self.config.reasoning_model_prefixes))
        return params

    def _named_prompt_params(
        self, request: NamedPromptRequest, options: GenerationOptions
    ) -> dict[str, Any]:
        # The stored prompt pins its own model and sampling settings.
        params: dict[str, Any] = {
            "prompt": {
                "id": request.prompt_id,
                "version": request.prompt_version,
                "variables": dict(request.variables),
            },
            "input": [],
            "reasoning": {},
        }
        params.update(storage_params(options, default_store=True))
        if options.temperature is not None or options.top_p is not None:
            logger.warning(
                "Sampling parameters ignored for stored prompt: prompt_id=%s",
                request.prompt_id,
            )
        return params

    async def generate(
        self,
        request: GenerationRequest,
        options: GenerationOptions | None = None,
        operation: str = "generate text",
    ) -> GenerationResult:
        """Issue one provider call for the request variant and normalize it.

        Args:
            request: Chat, single-input or named-prompt request.
            options: Per-call tuning options.
            operation: Short description used in error messages.

        Returns:
            Normalized generation result.

        Raises:
            ExternalServiceError: If the provider answered with an error.
            InternalError: If anything else failed.
        """
        options = options or GenerationOptions()
        kind: PayloadKind

        if isinstance(request, ChatRequest):
            kind = "chat_completion"
            params = self._chat_params(request, options)
            create = self._client.chat.completions.create
        elif isinstance(request, SingleInputRequest):
            kind = "response"
            params = self._single_input_params(request, options)
            create = self._client.responses.create
        elif isinstance(request, NamedPromptRequest):
            kind = "prompt_response"
            params = self._named_prompt_params(request, options)
            create = self._client.responses.create
        else:
            assert_never(request)

        fallback_model = params.get("model", "")
        logger.debug(
            "Provider call started: operation=%s, kind=%s, model=%s",
            operation,
            kind,
            fallback_model or "(stored prompt)",
        )

        try:
            raw = await create(**params)
            result = normalize_response(parse_payload(kind, raw), fallback_model)
        except Exception as e:
            raise map_provider_error(e, operation) from e

        logger.info(
            "Provider call completed: operation=%s, id=%s, model=%s, status=%s, total_tokens=%d",
            operation,
            result.provider_request_id,
            result.model_id,
            result.status,
            result.usage.total_tokens,
        )
        return result

    async def transcribe(
        self,
        upload: AudioUpload,
        options: TranscriptionOptions | None = None,
        detailed: bool = False,
    ) -> TranscriptionResult:
        """Transcribe an audio upload with the configured speech model.

        Args:
            upload: Validated audio payload.
            options: Optional language, prompt and temperature hints.
            detailed: Request verbose output with word and segment timestamps.

        Returns:
            Transcription result.

        Raises:
            ExternalServiceError: If the provider answered with an error.
            InternalError: If anything else failed.
        """
        options = options or TranscriptionOptions()
        whisper = self.config.whisper

        params: dict[str, Any] = {
            "file": (
                upload.filename,
                upload.data,
                upload.content_type or "application/octet-stream",
            ),
            "model": whisper.model,
            "language": options.language or whisper.language,
            "temperature": options.temperature
            if options.temperature is not None
            else whisper.temperature,
            "response_format": "verbose_json" if detailed else whisper.response_format,
        }
        if options.prompt:
            params["prompt"] = options.prompt
        if detailed:
            params["timestamp_granularities"] = ["word", "segment"]

        logger.debug(
            "Transcription started: filename=%s, size=%d, detailed=%s",
            upload.filename,
            upload.size,
            detailed,
        )

        operation = "transcribe audio with timestamps" if detailed else "transcribe audio"
        try:
            raw = await self._client.audio.transcriptions.create(**params)
            if isinstance(raw, str):
                result = TranscriptionResult(text=raw)
            else:
                data = raw if isinstance(raw, dict) else raw.model_dump()
                result = TranscriptionResult.model_validate(data)
        except Exception as e:
            raise map_provider_error(e, operation) from e

        logger.info(
            "Transcription completed: filename=%s, text_chars=%d, duration=%s",
            upload.filename,
            len(result.text),
            result.duration,
        )
        return result
