"""Text generation practice features.

Each operation builds one GenerationRequest variant, hands it to the
provider driver and returns the normalized result. Inputs are expected
to have passed the request validators already.
"""

from speakpractice.config.settings import OpenAIConfig
from speakpractice.exceptions import InternalError
from speakpractice.logger import get_logger
from speakpractice.prompts import (
    ANALYZE_TEMPLATE,
    CONVERSATION_TEMPLATE,
    CORRECT_TEMPLATE,
    EXERCISES_TEMPLATE,
    EXPLAIN_TEMPLATE,
    SUGGESTIONS_TEMPLATE,
)
from speakpractice.providers.drivers import BaseProviderDriver
from speakpractice.recovery import recover_suggestions
from speakpractice.schemas.generation import (
    ChatMessage,
    ChatRequest,
    GenerationOptions,
    GenerationResult,
    NamedPromptRequest,
    SingleInputRequest,
    SuggestionSet,
)

logger = get_logger(__name__)


def _preview(text: str, length: int = 50) -> str:
    return text if len(text) <= length else text[:length] + "..."


class TextGenerationService:
    """Practice operations backed by text generation.

    Attributes:
        config: Provider configuration, used for the stored topic prompt.
    """

    def __init__(self, driver: BaseProviderDriver, config: OpenAIConfig):
        """Initialize the service.

        Args:
            driver: Provider driver shared by all requests.
            config: Provider configuration.
        """
        self._driver = driver
        self.config = config

    async def _chat(
        self,
        messages: list[ChatMessage],
        options: GenerationOptions | None,
        operation: str,
    ) -> GenerationResult:
        return await self._driver.generate(
            ChatRequest(messages=messages), options, operation=operation
        )

    async def generate_text(
        self, messages: list[ChatMessage], options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Generate a reply to a caller-supplied conversation."""
        logger.info("Generating text from messages: message_count=%d", len(messages))
        return await self._chat(messages, options, "generate text")

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: str | None = None,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Complete a prompt, optionally preceded by a system message.

        Args:
            prompt: User prompt.
            system_prompt: Optional system instruction.
            options: Per-call tuning options.

        Returns:
            Normalized generation result.
        """
        logger.info(
            "Generating completion: prompt_chars=%d, has_system_prompt=%s",
            len(prompt),
            bool(system_prompt),
        )
        messages = []
        if system_prompt and system_prompt.strip():
            messages.append(ChatMessage(role="system", content=system_prompt))
        messages.append(ChatMessage(role="user", content=prompt))
        return await self._chat(messages, options, "generate completion")

    async def analyze_text(
        self, text: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Analyze a learner's English text."""
        logger.info("Analyzing English text: text_chars=%d", len(text))
        messages = [
            ChatMessage(role="system", content=ANALYZE_TEMPLATE.render()),
            ChatMessage(role="user", content=text),
        ]
        return await self._chat(messages, options, "analyze text")

    async def correct_grammar(
        self, text: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Correct the grammar of a learner's text."""
        logger.info("Correcting grammar: text_chars=%d", len(text))
        messages = [
            ChatMessage(role="system", content=CORRECT_TEMPLATE.render()),
            ChatMessage(role="user", content=text),
        ]
        return await self._chat(messages, options, "correct grammar")

    async def generate_exercises(
        self,
        error_type: str,
        difficulty: str = "intermediate",
        count: int = 5,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate practice exercises targeting one type of mistake.

        Args:
            error_type: Mistake category (e.g., "past tense").
            difficulty: Learner level.
            count: Number of exercises.
            options: Per-call tuning options.

        Returns:
            Normalized generation result holding the exercises.
        """
        logger.info(
            "Generating exercises: error_type=%s, difficulty=%s, count=%d",
            _preview(error_type),
            difficulty,
            count,
        )
        prompt = EXERCISES_TEMPLATE.render(
            count=count, difficulty=difficulty, error_type=error_type
        )
        return await self._chat(
            [ChatMessage(role="user", content=prompt)], options, "generate exercises"
        )

    async def generate_conversation_response(
        self,
        message: str,
        history: list[ChatMessage] | None = None,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Reply as a conversation partner, continuing the given history."""
        history = history or []
        logger.info(
            "Generating conversation response: message_chars=%d, history_length=%d",
            len(message),
            len(history),
        )
        messages = [ChatMessage(role="system", content=CONVERSATION_TEMPLATE.render())]
        messages.extend(history)
        messages.append(ChatMessage(role="user", content=message))
        return await self._chat(messages, options, "generate conversation response")

    async def explain_concept(
        self,
        concept: str,
        level: str = "detailed",
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Explain a grammar concept at the requested depth."""
        logger.info("Explaining grammar concept: concept=%s, level=%s", _preview(concept), level)
        prompt = EXPLAIN_TEMPLATE.render(concept=concept, level=level)
        return await self._chat(
            [ChatMessage(role="user", content=prompt)], options, "explain concept"
        )

    async def generate_single(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """Generate text from a single inline prompt via the responses API.

        The response is stored provider-side unless ``options.store`` is
        False.
        """
        logger.info("Generating text response: prompt=%s", _preview(prompt))
        return await self._driver.generate(
            SingleInputRequest(text=prompt), options, operation="generate text"
        )

    async def talk_with_specific_topic(
        self,
        topic: str,
        initial_message: str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Continue a topic conversation through the stored topic prompt.

        Args:
            topic: Conversation scenario.
            initial_message: Opening message of the conversation.
            options: ``store`` and ``include`` are honored.

        Returns:
            Normalized generation result.

        Raises:
            InternalError: If no stored topic prompt is configured.
        """
        prompt_ref = self.config.topic_prompt
        if not prompt_ref.id.strip():
            logger.error("Topic prompt is not configured: field=openai.topic_prompt.id")
            raise InternalError("Topic conversation prompt is not configured")

        logger.info(
            "Generating topic conversation: topic=%s, initial_message=%s",
            _preview(topic),
            _preview(initial_message),
        )
        request = NamedPromptRequest(
            prompt_id=prompt_ref.id,
            prompt_version=prompt_ref.version,
            variables={"topic": topic, "initial_message": initial_message},
        )
        return await self._driver.generate(
            request, options, operation="generate topic conversation"
        )

    async def generate_response_suggestions(
        self,
        topic: str,
        conversation_history: str,
        options: GenerationOptions | None = None,
    ) -> SuggestionSet:
        """Suggest three replies the learner could say next.

        The response is never stored provider-side. Model output goes
        through structured-output recovery.

        Args:
            topic: Conversation topic.
            conversation_history: Recent conversation as plain text.
            options: Per-call tuning options; ``store`` is forced to False.

        Returns:
            Exactly three suggestions.

        Raises:
            RecoveryFailure: If the model output holds fewer than three
                usable suggestions.
        """
        logger.info(
            "Generating response suggestions: topic_chars=%d, history_chars=%d",
            len(topic),
            len(conversation_history),
        )
        options = (options or GenerationOptions()).model_copy(update={"store": False})
        prompt = SUGGESTIONS_TEMPLATE.render(
            topic=topic, conversation_history=conversation_history
        )
        result = await self._driver.generate(
            SingleInputRequest(text=prompt),
            options,
            operation="generate response suggestions",
        )

        suggestions = recover_suggestions(result.text)
        logger.info(
            "Response suggestions generated: count=%d", len(suggestions.suggestions)
        )
        return suggestions
