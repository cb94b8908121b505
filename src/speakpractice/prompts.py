"""Prompt templating for the practice features using Jinja2.

Every prompt sent to the provider is rendered from a PromptTemplate that
checks its required variables before rendering.
"""

from typing import Any

from jinja2 import StrictUndefined, Template, TemplateError

from speakpractice.exceptions import ConfigError
from speakpractice.logger import get_logger

logger = get_logger(__name__)


class PromptTemplate:
    """Jinja2-based prompt template with validation.

    Attributes:
        input_variables: List of required variable names.
    """

    def __init__(self, template: str, input_variables: list[str]):
        """Initialize the prompt template.

        Args:
            template: Jinja2 template string with {{ variable }} placeholders.
            input_variables: List of required variable names.

        Raises:
            ConfigError: If template syntax is invalid.
        """
        try:
            self._jinja_template = Template(
                template, undefined=StrictUndefined, keep_trailing_newline=False
            )
        except TemplateError as e:
            logger.error("Invalid template syntax")
            logger.debug("Template error details: %s", e, exc_info=True)
            raise ConfigError(f"Invalid template syntax: {e}") from e

        self.input_variables = input_variables

    def render(self, **kwargs: Any) -> str:
        """Render the template with provided variables.

        Args:
            **kwargs: Template variables as keyword arguments.

        Returns:
            Rendered prompt string, stripped of surrounding whitespace.

        Raises:
            ConfigError: If required variables are missing or rendering fails.
        """
        missing = set(self.input_variables) - set(kwargs.keys())
        if missing:
            logger.error("Missing template variables: %s", missing)
            raise ConfigError(f"Missing required template variables: {missing}")

        try:
            rendered = self._jinja_template.render(**kwargs).strip()
        except TemplateError as e:
            logger.error("Template rendering failed")
            logger.debug("Rendering error details: %s", e, exc_info=True)
            raise ConfigError(f"Template rendering failed: {e}") from e

        logger.debug("Template rendered: output_len=%d", len(rendered))
        return rendered


ANALYZE_TEMPLATE = PromptTemplate(
    template="""You are an experienced English teacher. Analyze the English text provided by the learner.

Cover the following points:
1. Grammar mistakes, each with the corrected form
2. Vocabulary choice and more natural alternatives
3. Sentence structure and fluency
4. An overall proficiency estimate (beginner, intermediate or advanced)

Be encouraging and concise.""",
    input_variables=[],
)

CORRECT_TEMPLATE = PromptTemplate(
    template="""You are an English grammar checker. Correct the grammar, spelling and punctuation of the learner's text.

Reply with the corrected text first, then a short list explaining each change. If the text is already correct, say so.""",
    input_variables=[],
)

EXERCISES_TEMPLATE = PromptTemplate(
    template="""Create {{ count }} English practice exercise{{ "s" if count != 1 else "" }} for a learner at the {{ difficulty }} level.

The exercises must target this type of mistake: {{ error_type }}

For each exercise give:
- the question or sentence to complete
- the correct answer
- a one-sentence explanation""",
    input_variables=["count", "difficulty", "error_type"],
)

CONVERSATION_TEMPLATE = PromptTemplate(
    template="""You are a friendly English conversation partner helping a learner practice speaking.

Keep replies short and natural, ask follow-up questions to keep the conversation going, and gently point out a mistake when the learner makes one.""",
    input_variables=[],
)

EXPLAIN_TEMPLATE = PromptTemplate(
    template="""Explain the English grammar concept "{{ concept }}" to a learner.
{% if level == "simple" %}
Use plain words and one or two short examples. Avoid technical terms.
{% elif level == "advanced" %}
Give a thorough explanation including exceptions, edge cases and common confusions, with several examples.
{% else %}
Give a clear explanation with the rule, when to use it, and a few examples.
{% endif %}""",
    input_variables=["concept", "level"],
)

SUGGESTIONS_TEMPLATE = PromptTemplate(
    template="""Based on the following conversation topic and history, generate exactly 3 helpful response suggestions that the user could say next.

Topic: {{ topic }}

Conversation History:
{{ conversation_history }}

IMPORTANT: Your response must be a valid JSON object with this exact structure:
{
  "suggestions": [
    "First suggestion as a complete, natural sentence",
    "Second suggestion as a complete, natural sentence",
    "Third suggestion as a complete, natural sentence"
  ]
}

Each suggestion should be relevant, helpful, conversational, and different from each other. Provide ONLY the JSON object, no other text.""",
    input_variables=["topic", "conversation_history"],
)

TRANSLATION_TEMPLATE = PromptTemplate(
    template="""You are a professional translator. Translate the given English text to {{ language_name }}. Only provide the translation without any additional explanation or commentary.""",
    input_variables=["language_name"],
)
