"""Unit tests for the practice services.

Services are exercised against a mocked BaseProviderDriver so that the
request variant, operation name and options handed to the driver can be
asserted directly.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from speakpractice.config.settings import NamedPromptConfig, OpenAIConfig
from speakpractice.exceptions import ExternalServiceError, InternalError, RecoveryFailure
from speakpractice.providers.drivers import BaseProviderDriver
from speakpractice.schemas.generation import (
    ChatMessage,
    ChatRequest,
    GenerationOptions,
    GenerationResult,
    NamedPromptRequest,
    SingleInputRequest,
    TokenUsage,
)
from speakpractice.schemas.practice import AudioUpload, TranscriptionOptions, TranscriptionResult
from speakpractice.services import (
    TextGenerationService,
    TranscriptionService,
    TranslationService,
)


def make_result(text: str, model_id: str = "gpt-4.1-mini") -> GenerationResult:
    """Build a normalized generation result."""
    return GenerationResult(
        text=text,
        model_id=model_id,
        usage=TokenUsage(prompt_tokens=10, completion_tokens=4, total_tokens=14),
        provider_request_id="resp_test",
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def mock_driver() -> MagicMock:
    """Fixture providing a driver whose operations are AsyncMocks."""
    driver = MagicMock(spec=BaseProviderDriver)
    driver.generate = AsyncMock(return_value=make_result("ok"))
    driver.transcribe = AsyncMock(return_value=TranscriptionResult(text="hello"))
    return driver


@pytest.fixture
def text_service(
    mock_driver: MagicMock, openai_config_factory: Callable[..., OpenAIConfig]
) -> TextGenerationService:
    return TextGenerationService(mock_driver, openai_config_factory())


@pytest.mark.unit
class TestTranslationService:
    """Tests for TranslationService."""

    @pytest.mark.asyncio
    async def test_translate_should_build_chat_request(
        self, mock_driver: MagicMock, openai_config_factory: Callable[..., OpenAIConfig]
    ) -> None:
        """Verifies the translation request and result.

        Given: A driver returning a padded translation.
        When: "Hello, how are you?" is translated to zh-TW.
        Then: A system+user chat is sent and the trimmed text is returned with source "en".
        """
        mock_driver.generate.return_value = make_result("  你好，你好嗎？ \n")
        service = TranslationService(mock_driver, openai_config_factory())

        result = await service.translate("Hello, how are you?", "zh-TW")

        request = mock_driver.generate.call_args.args[0]
        assert isinstance(request, ChatRequest)
        assert request.messages[0].role == "system"
        assert "Traditional Chinese" in request.messages[0].content
        assert request.messages[1].content == "Hello, how are you?"
        assert mock_driver.generate.call_args.kwargs["operation"] == "translate text"
        assert result.translated_text == "你好，你好嗎？"
        assert result.source_language == "en"
        assert result.target_language == "zh-TW"
        assert result.model == "gpt-4.1-mini"
        assert result.usage.total_tokens == 14

    @pytest.mark.asyncio
    async def test_empty_translation_should_raise(
        self, mock_driver: MagicMock, openai_config_factory: Callable[..., OpenAIConfig]
    ) -> None:
        """Given whitespace-only output, ExternalServiceError is raised."""
        mock_driver.generate.return_value = make_result("   ")
        service = TranslationService(mock_driver, openai_config_factory())

        with pytest.raises(ExternalServiceError, match="No translation received from OpenAI"):
            await service.translate("Hello", "ja")


@pytest.mark.unit
class TestTextGenerationService:
    """Tests for TextGenerationService."""

    @pytest.mark.asyncio
    async def test_completion_should_prepend_system_prompt(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Given a system prompt, it is sent before the user prompt."""
        await text_service.generate_completion("Write a haiku", "Be brief")

        request = mock_driver.generate.call_args.args[0]
        assert [m.role for m in request.messages] == ["system", "user"]
        assert request.messages[1].content == "Write a haiku"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("system_prompt", [None, "", "  \n "])
    async def test_completion_without_system_prompt_should_send_user_only(
        self,
        text_service: TextGenerationService,
        mock_driver: MagicMock,
        system_prompt: str | None,
    ) -> None:
        """Given no system prompt or a blank one, only the user message is sent."""
        await text_service.generate_completion("Write a haiku", system_prompt)

        request = mock_driver.generate.call_args.args[0]
        assert [m.role for m in request.messages] == ["user"]

    @pytest.mark.asyncio
    async def test_conversation_should_keep_history_order(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Verifies conversation assembly.

        Given: A two-message history and a new message.
        When: generate_conversation_response is called.
        Then: Messages are system, history in order, then the new user message.
        """
        history = [
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="assistant", content="Hello! How are you?"),
        ]

        await text_service.generate_conversation_response("I'm fine", history)

        request = mock_driver.generate.call_args.args[0]
        assert [m.role for m in request.messages] == ["system", "user", "assistant", "user"]
        assert request.messages[-1].content == "I'm fine"
        assert (
            mock_driver.generate.call_args.kwargs["operation"]
            == "generate conversation response"
        )

    @pytest.mark.asyncio
    async def test_exercises_should_render_parameters(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Given count and difficulty, the rendered user prompt contains them."""
        await text_service.generate_exercises("prepositions", "advanced", 3)

        request = mock_driver.generate.call_args.args[0]
        assert "Create 3 English practice exercises" in request.messages[0].content
        assert "advanced" in request.messages[0].content
        assert "prepositions" in request.messages[0].content

    @pytest.mark.asyncio
    async def test_single_should_use_single_input(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Given a prompt, a SingleInputRequest is sent."""
        options = GenerationOptions(store=False)

        await text_service.generate_single("Tell me about London", options)

        request = mock_driver.generate.call_args.args[0]
        assert isinstance(request, SingleInputRequest)
        assert request.text == "Tell me about London"
        assert mock_driver.generate.call_args.args[1] is options

    @pytest.mark.asyncio
    async def test_topic_should_use_configured_stored_prompt(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Verifies the topic conversation request.

        Given: A configured stored prompt.
        When: talk_with_specific_topic is called.
        Then: A NamedPromptRequest with topic and initial_message variables is sent.
        """
        await text_service.talk_with_specific_topic("travel", "I just came back from Rome")

        request = mock_driver.generate.call_args.args[0]
        assert isinstance(request, NamedPromptRequest)
        assert request.prompt_id == "pmpt_topic_123"
        assert request.prompt_version == "2"
        assert request.variables == {
            "topic": "travel",
            "initial_message": "I just came back from Rome",
        }

    @pytest.mark.asyncio
    async def test_topic_without_prompt_id_should_raise(
        self, mock_driver: MagicMock, openai_config_factory: Callable[..., OpenAIConfig]
    ) -> None:
        """Given no stored prompt id, InternalError is raised before any call."""
        service = TextGenerationService(
            mock_driver, openai_config_factory(topic_prompt=NamedPromptConfig())
        )

        with pytest.raises(InternalError, match="Topic conversation prompt is not configured"):
            await service.talk_with_specific_topic("travel", "Hi")

        mock_driver.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_suggestions_should_force_store_false(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Verifies suggestion generation.

        Given: A caller asking for store=True and a JSON model reply.
        When: generate_response_suggestions is called.
        Then: The driver receives store=False and three suggestions are returned.
        """
        mock_driver.generate.return_value = make_result(
            '{"suggestions": ["Sure!", "Maybe later.", "What time?"]}'
        )

        result = await text_service.generate_response_suggestions(
            "Making plans", "A: Want to grab lunch?", GenerationOptions(store=True)
        )

        sent_options = mock_driver.generate.call_args.args[1]
        assert sent_options.store is False
        assert isinstance(mock_driver.generate.call_args.args[0], SingleInputRequest)
        assert result.suggestions == ["Sure!", "Maybe later.", "What time?"]

    @pytest.mark.asyncio
    async def test_suggestions_should_raise_on_unusable_output(
        self, text_service: TextGenerationService, mock_driver: MagicMock
    ) -> None:
        """Given a single-line reply, RecoveryFailure is raised."""
        mock_driver.generate.return_value = make_result("I cannot help with that.")

        with pytest.raises(RecoveryFailure):
            await text_service.generate_response_suggestions("Travel", "A: Hi")


@pytest.mark.unit
class TestTranscriptionService:
    """Tests for TranscriptionService."""

    @pytest.mark.asyncio
    async def test_transcribe_should_delegate_to_driver(
        self, mock_driver: MagicMock, audio_factory: Callable[..., AudioUpload]
    ) -> None:
        """Given an upload and options, the driver receives them with the detail flag."""
        service = TranscriptionService(mock_driver)
        upload = audio_factory()
        options = TranscriptionOptions(language="en")

        result = await service.transcribe(upload, options, detailed=True)

        mock_driver.transcribe.assert_awaited_once_with(upload, options, detailed=True)
        assert result.text == "hello"

    def test_supported_formats_should_report_limits(self) -> None:
        """Given the fixed limits, formats and a 25MB ceiling are reported."""
        formats = TranscriptionService.supported_formats()

        assert "mp3" in formats.formats
        assert formats.max_file_size == 26214400
        assert formats.max_file_size_mb == 25.0
