"""Pytest configuration and standardized factories for speakpractice."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from speakpractice.api.app import create_app
from speakpractice.config.settings import (
    AppSettings,
    NamedPromptConfig,
    OpenAIConfig,
    RateLimitConfig,
    ServerConfig,
)
from speakpractice.providers.drivers import OpenAIDriver
from speakpractice.schemas.practice import AudioUpload

TEST_API_KEY = "sk-test-0123456789abcdef"


def make_fake_client() -> MagicMock:
    """Build a stand-in for AsyncOpenAI with awaitable endpoints."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    client.responses.create = AsyncMock()
    client.audio.transcriptions.create = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def fake_client() -> MagicMock:
    """Fixture providing a fresh fake provider client."""
    return make_fake_client()


@pytest.fixture
def openai_config_factory() -> Callable[..., OpenAIConfig]:
    """Factory to create OpenAIConfig instances with a usable API key.

    Returns:
        A callable that generates OpenAIConfig objects.
    """

    def _make_config(**kwargs: Any) -> OpenAIConfig:
        defaults: dict[str, Any] = {
            "api_key": TEST_API_KEY,
            "topic_prompt": NamedPromptConfig(id="pmpt_topic_123", version="2"),
        }
        return OpenAIConfig(**{**defaults, **kwargs})

    return _make_config


@pytest.fixture
def settings_factory(
    openai_config_factory: Callable[..., OpenAIConfig],
) -> Callable[..., AppSettings]:
    """Factory to create AppSettings for the test environment."""

    def _make_settings(
        openai_config: OpenAIConfig | None = None,
        rate_limit: RateLimitConfig | None = None,
        api_prefix: str = "/api",
    ) -> AppSettings:
        return AppSettings(
            openai=openai_config or openai_config_factory(),
            server=ServerConfig(environment="test", api_prefix=api_prefix),
            rate_limit=rate_limit or RateLimitConfig(),
        )

    return _make_settings


@pytest.fixture
def driver(
    fake_client: MagicMock, openai_config_factory: Callable[..., OpenAIConfig]
) -> OpenAIDriver:
    """Fixture providing an OpenAIDriver wired to the fake client."""
    return OpenAIDriver(fake_client, openai_config_factory())


@pytest.fixture
def api_client(
    fake_client: MagicMock, settings_factory: Callable[..., AppSettings]
) -> TestClient:
    """Fixture providing a TestClient over an app backed by the fake client."""
    app = create_app(settings_factory(), client=fake_client)
    return TestClient(app)


@pytest.fixture
def chat_completion_factory() -> Callable[..., dict[str, Any]]:
    """Factory to create chat-completions response payloads."""

    def _make(
        content: str | None = "Hello there!",
        model: str = "gpt-4.1-mini",
        prompt_tokens: int | None = 12,
        completion_tokens: int | None = 5,
        total_tokens: int | None = 17,
        with_choice: bool = True,
    ) -> dict[str, Any]:
        usage: dict[str, Any] = {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
        }
        choices = (
            [{"index": 0, "message": {"role": "assistant", "content": content}}]
            if with_choice
            else []
        )
        return {
            "id": "chatcmpl-abc123",
            "object": "chat.completion",
            "created": 1_730_000_000,
            "model": model,
            "choices": choices,
            "usage": usage,
        }

    return _make


@pytest.fixture
def responses_factory() -> Callable[..., dict[str, Any]]:
    """Factory to create responses-API payloads."""

    def _make(
        text: str | None = "Hello there!",
        model: str = "gpt-5-nano-2025-08-07",
        status: str | None = "completed",
        output: list[dict[str, Any]] | None = None,
        usage: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if output is None:
            output = [
                {"type": "reasoning", "id": "rs_1", "summary": []},
                {
                    "type": "message",
                    "id": "msg_1",
                    "role": "assistant",
                    "content": [{"type": "output_text", "text": text, "annotations": []}],
                },
            ]
        if usage is None:
            usage = {
                "input_tokens": 20,
                "output_tokens": 8,
                "total_tokens": 28,
                "input_tokens_details": {"cached_tokens": 4},
                "output_tokens_details": {"reasoning_tokens": 3},
            }
        return {
            "id": "resp_abc123",
            "object": "response",
            "created_at": 1_730_000_000,
            "model": model,
            "status": status,
            "output": output,
            "usage": usage,
        }

    return _make


@pytest.fixture
def audio_factory() -> Callable[..., AudioUpload]:
    """Factory to create AudioUpload payloads."""

    def _make(
        filename: str = "recording.mp3",
        content_type: str | None = "audio/mpeg",
        size: int = 1024,
    ) -> AudioUpload:
        return AudioUpload(filename=filename, content_type=content_type, data=b"\x00" * size)

    return _make


def make_status_error(
    status: int,
    message: str = "Provider failure",
    error_type: str | None = "server_error",
    error_code: str | None = None,
    cls: type[openai.APIStatusError] = openai.APIStatusError,
) -> openai.APIStatusError:
    """Build an OpenAI status error as the SDK raises it."""
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(status, request=request)
    body = {"message": message, "type": error_type, "code": error_code}
    return cls(message, response=response, body=body)


def make_connection_error() -> openai.APIConnectionError:
    """Build the SDK error raised when the provider is unreachable."""
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.APIConnectionError(request=request)


@pytest.fixture
def status_error_factory() -> Callable[..., openai.APIStatusError]:
    """Fixture exposing make_status_error."""
    return make_status_error


@pytest.fixture
def connection_error_factory() -> Callable[[], openai.APIConnectionError]:
    """Fixture exposing make_connection_error."""
    return make_connection_error
