"""English-to-target-language translation."""

from speakpractice.config.settings import OpenAIConfig
from speakpractice.constants import LANGUAGE_NAMES
from speakpractice.exceptions import ExternalServiceError
from speakpractice.logger import get_logger
from speakpractice.prompts import TRANSLATION_TEMPLATE
from speakpractice.providers.drivers import BaseProviderDriver
from speakpractice.schemas.generation import ChatMessage, ChatRequest, GenerationOptions
from speakpractice.schemas.practice import TranslationResult

logger = get_logger(__name__)

SOURCE_LANGUAGE = "en"


class TranslationService:
    """Translate English text with a chat model.

    Attributes:
        config: Provider configuration.
    """

    def __init__(self, driver: BaseProviderDriver, config: OpenAIConfig):
        self._driver = driver
        self.config = config

    async def translate(
        self,
        text: str,
        target_language: str,
        options: GenerationOptions | None = None,
    ) -> TranslationResult:
        """Translate English text into a supported target language.

        Args:
            text: English source text.
            target_language: Code from the supported language list.
            options: Per-call tuning options.

        Returns:
            Translation with the model and token usage.

        Raises:
            ExternalServiceError: If the provider fails or returns no text.
            KeyError: If the language code is not supported; callers
                validate first.
        """
        language_name = LANGUAGE_NAMES[target_language]
        logger.info(
            "Translating text: text_chars=%d, target_language=%s",
            len(text),
            target_language,
        )

        request = ChatRequest(
            messages=[
                ChatMessage(
                    role="system",
                    content=TRANSLATION_TEMPLATE.render(language_name=language_name),
                ),
                ChatMessage(role="user", content=text),
            ]
        )
        result = await self._driver.generate(request, options, operation="translate text")

        translated = result.text.strip()
        if not translated:
            logger.error(
                "Empty translation received: id=%s, model=%s",
                result.provider_request_id,
                result.model_id,
            )
            raise ExternalServiceError("No translation received from OpenAI")

        logger.info(
            "Translation completed: target_language=%s, output_chars=%d",
            target_language,
            len(translated),
        )
        return TranslationResult(
            translated_text=translated,
            source_language=SOURCE_LANGUAGE,
            target_language=target_language,
            model=result.model_id,
            usage=result.usage,
        )
