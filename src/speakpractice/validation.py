"""Request validators.

One validator per endpoint shape. Validators are pure functions of their
input: they never raise for an expected rejection and instead return a
``Validated`` carrying the first violated rule. Rules are checked in a
fixed order, so a given input always fails on the same rule.
"""

from collections.abc import Mapping, Sequence
from pathlib import PurePath
from typing import Any

from speakpractice.constants import (
    ALLOWED_AUDIO_MIME_TYPES,
    DIFFICULTIES,
    EXERCISE_COUNT_MAX,
    EXERCISE_COUNT_MIN,
    EXPLAIN_LEVELS,
    MAX_AUDIO_FILE_SIZE,
    MAX_LANGUAGE_CODE,
    MAX_LONG_TEXT,
    MAX_MEDIUM_TEXT,
    MAX_SHORT_TEXT,
    SUPPORTED_AUDIO_FORMATS,
    SUPPORTED_LANGUAGES,
)
from speakpractice.exceptions import ErrorCode
from speakpractice.schemas.generation import ChatMessage
from speakpractice.schemas.practice import (
    AudioUpload,
    CompletionInput,
    ConversationInput,
    ExercisesInput,
    ExplainInput,
    SuggestionsInput,
    TopicInput,
    TranscriptionInput,
    TranscriptionOptions,
    TranslationInput,
)
from speakpractice.schemas.validation import Validated, ValidationFailure


def _failure(
    field: str,
    constraint: str,
    message: str,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> ValidationFailure:
    return ValidationFailure(field=field, constraint=constraint, message=message, code=code)


def check_text(
    field: str, label: str, value: Any, max_length: int
) -> ValidationFailure | None:
    """Check a required free-text field.

    Args:
        field: Wire name of the field.
        label: Human-readable name used in messages.
        value: Raw value.
        max_length: Inclusive character ceiling.

    Returns:
        The violated rule, or None if the value is acceptable.
    """
    if not isinstance(value, str) or not value.strip():
        return _failure(
            field, "required", f"{label} is required and must be a non-empty string"
        )
    if len(value) > max_length:
        return _failure(
            field,
            "max_length",
            f"{label} is too long. Maximum {max_length} characters allowed.",
        )
    return None


def check_optional_text(
    field: str, label: str, value: Any, max_length: int
) -> ValidationFailure | None:
    """Check an optional free-text field; None and blank strings pass."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return check_text(field, label, value, max_length)


def check_choice(
    field: str, label: str, value: Any, allowed: Sequence[str]
) -> ValidationFailure | None:
    """Check that a value belongs to a fixed allow-list."""
    if value not in allowed:
        return _failure(
            field, "one_of", f"{label} must be one of: {', '.join(allowed)}"
        )
    return None


def check_int_range(
    field: str, label: str, value: Any, minimum: int, maximum: int
) -> ValidationFailure | None:
    """Check that a value is an integer in the inclusive range."""
    if isinstance(value, bool) or not isinstance(value, int):
        return _failure(field, "type", f"{label} must be an integer")
    if value < minimum or value > maximum:
        return _failure(
            field, "range", f"{label} must be between {minimum} and {maximum}"
        )
    return None


def _message_at(
    field: str, index: int, raw: Any, max_length: int | None
) -> ChatMessage | ValidationFailure:
    if isinstance(raw, ChatMessage):
        role, content = raw.role, raw.content
    elif isinstance(raw, Mapping):
        role, content = raw.get("role"), raw.get("content")
    else:
        role = content = None

    if not isinstance(role, str) or not role.strip() or not isinstance(content, str) or not content.strip():
        return _failure(
            field,
            "message_shape",
            f"Each message must have role and content (invalid message at index {index})",
        )
    if max_length is not None and len(content) > max_length:
        return _failure(
            field,
            "max_length",
            f"Message content is too long at index {index}. "
            f"Maximum {max_length} characters allowed.",
        )
    return ChatMessage(role=role.strip(), content=content)


def check_messages(
    field: str, raw: Any, allow_empty: bool = False, max_length: int | None = None
) -> list[ChatMessage] | ValidationFailure:
    """Check a message array and convert it to ChatMessage instances.

    Args:
        field: Wire name of the field.
        raw: Raw value, expected to be a list of {role, content} objects.
        allow_empty: Accept an empty list.
        max_length: Optional per-message content ceiling.

    Returns:
        Parsed messages, or the first violated rule.
    """
    if raw is None and not allow_empty:
        raw = []
    if not isinstance(raw, list):
        return _failure(field, "type", f"{field} must be an array")
    if not raw and not allow_empty:
        return _failure(
            field, "non_empty", "Messages array is required and cannot be empty"
        )

    messages: list[ChatMessage] = []
    for index, item in enumerate(raw):
        parsed = _message_at(field, index, item, max_length)
        if isinstance(parsed, ValidationFailure):
            return parsed
        messages.append(parsed)
    return messages


def _first(*checks: ValidationFailure | None) -> ValidationFailure | None:
    for failure in checks:
        if failure is not None:
            return failure
    return None


def validate_messages(messages: Any) -> Validated[list[ChatMessage]]:
    """Validate a ``/generate/text`` request."""
    parsed = check_messages("messages", messages)
    if isinstance(parsed, ValidationFailure):
        return Validated(failure=parsed)
    return Validated.success(parsed)


def validate_completion(prompt: Any, system_prompt: Any) -> Validated[CompletionInput]:
    """Validate a ``/generate/completion`` request."""
    failure = _first(
        check_text("prompt", "Prompt", prompt, MAX_LONG_TEXT),
        check_optional_text("systemPrompt", "System prompt", system_prompt, MAX_MEDIUM_TEXT),
    )
    if failure:
        return Validated(failure=failure)
    return Validated.success(
        CompletionInput(
            prompt=prompt,
            system_prompt=system_prompt if system_prompt and system_prompt.strip() else None,
        )
    )


def validate_single_input(prompt: Any) -> Validated[str]:
    """Validate a ``/generate/single`` request."""
    failure = check_text("prompt", "Prompt", prompt, MAX_LONG_TEXT)
    if failure:
        return Validated(failure=failure)
    return Validated.success(prompt)


def validate_analysis(text: Any) -> Validated[str]:
    """Validate a ``/generate/analyze`` request."""
    failure = check_text("text", "Text", text, MAX_LONG_TEXT)
    if failure:
        return Validated(failure=failure)
    return Validated.success(text)


def validate_correction(text: Any) -> Validated[str]:
    """Validate a ``/generate/correct`` request."""
    failure = check_text("text", "Text", text, MAX_LONG_TEXT)
    if failure:
        return Validated(failure=failure)
    return Validated.success(text)


def validate_exercises(
    error_type: Any, difficulty: Any, count: Any
) -> Validated[ExercisesInput]:
    """Validate a ``/generate/exercises`` request."""
    failure = _first(
        check_text("errorType", "Error type", error_type, MAX_SHORT_TEXT),
        check_choice("difficulty", "Difficulty", difficulty, DIFFICULTIES),
        check_int_range("count", "Count", count, EXERCISE_COUNT_MIN, EXERCISE_COUNT_MAX),
    )
    if failure:
        return Validated(failure=failure)
    return Validated.success(
        ExercisesInput(error_type=error_type, difficulty=difficulty, count=count)
    )


def validate_conversation(message: Any, history: Any) -> Validated[ConversationInput]:
    """Validate a ``/generate/conversation`` request."""
    failure = check_text("message", "Message", message, MAX_MEDIUM_TEXT)
    if failure:
        return Validated(failure=failure)

    parsed = check_messages(
        "history", history if history is not None else [], allow_empty=True,
        max_length=MAX_MEDIUM_TEXT,
    )
    if isinstance(parsed, ValidationFailure):
        return Validated(failure=parsed)
    return Validated.success(ConversationInput(message=message, history=parsed))


def validate_explain(concept: Any, level: Any) -> Validated[ExplainInput]:
    """Validate a ``/generate/explain`` request."""
    failure = _first(
        check_text("concept", "Concept", concept, MAX_SHORT_TEXT),
        check_choice("level", "Level", level, EXPLAIN_LEVELS),
    )
    if failure:
        return Validated(failure=failure)
    return Validated.success(ExplainInput(concept=concept, level=level))


def validate_topic(topic: Any, initial_message: Any) -> Validated[TopicInput]:
    """Validate a ``/generate/topic`` request."""
    failure = _first(
        check_text("topic", "Topic", topic, MAX_SHORT_TEXT),
        check_text("initialMessage", "Initial message", initial_message, MAX_MEDIUM_TEXT),
    )
    if failure:
        return Validated(failure=failure)
    return Validated.success(TopicInput(topic=topic, initial_message=initial_message))


def validate_suggestions(
    topic: Any, conversation_history: Any
) -> Validated[SuggestionsInput]:
    """Validate a ``/generate/suggestions`` request."""
    failure = _first(
        check_text("topic", "Topic", topic, MAX_SHORT_TEXT),
        check_text(
            "conversationHistory",
            "Conversation history",
            conversation_history,
            MAX_LONG_TEXT,
        ),
    )
    if failure:
        return Validated(failure=failure)
    return Validated.success(
        SuggestionsInput(topic=topic, conversation_history=conversation_history)
    )


def validate_translation(text: Any, target_language: Any) -> Validated[TranslationInput]:
    """Validate a ``/translate`` request.

    The target language must be one of the supported codes; the failure
    message enumerates them.
    """
    failure = check_text("text", "Text", text, MAX_LONG_TEXT)
    if failure:
        return Validated(failure=failure)

    if not isinstance(target_language, str):
        return Validated.reject(
            "targetLanguage", "type", "Target language must be a string"
        )
    if target_language not in SUPPORTED_LANGUAGES:
        return Validated.reject(
            "targetLanguage",
            "one_of",
            f"Unsupported target language: {target_language}. "
            f"Supported languages are: {', '.join(SUPPORTED_LANGUAGES)}",
        )
    return Validated.success(
        TranslationInput(text=text, target_language=target_language)
    )


def is_supported_audio_format(filename: str) -> bool:
    """Check a filename's extension against the supported audio formats."""
    suffix = PurePath(filename).suffix.lower().lstrip(".")
    return suffix in SUPPORTED_AUDIO_FORMATS


def _is_allowed_mime_type(content_type: str | None) -> bool:
    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime in ("", "application/octet-stream"):
        return True
    return mime in ALLOWED_AUDIO_MIME_TYPES or mime.startswith("audio/")


def _parse_temperature(raw: Any) -> float | None | ValidationFailure:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return _failure("temperature", "type", "Temperature must be a number")
    if not 0.0 <= value <= 1.0:
        return _failure("temperature", "range", "Temperature must be between 0 and 1")
    return value


def validate_transcription(
    upload: AudioUpload | None,
    language: Any = None,
    prompt: Any = None,
    temperature: Any = None,
) -> Validated[TranscriptionInput]:
    """Validate an audio transcription request.

    Checks run in order: presence, extension, mime type, size, then the
    optional hints.
    """
    if upload is None or not upload.filename:
        return Validated.reject(
            "audio", "required", "No audio file provided", ErrorCode.AUDIO_FILE_MISSING
        )
    if not is_supported_audio_format(upload.filename):
        return Validated.reject(
            "audio",
            "format",
            "Unsupported audio format. Supported formats: "
            + ", ".join(SUPPORTED_AUDIO_FORMATS),
            ErrorCode.INVALID_AUDIO_FORMAT,
        )
    if not _is_allowed_mime_type(upload.content_type):
        return Validated.reject(
            "audio",
            "mime_type",
            "Invalid file type. Only audio files are allowed.",
            ErrorCode.INVALID_AUDIO_FORMAT,
        )
    if upload.size > MAX_AUDIO_FILE_SIZE:
        return Validated.reject(
            "audio",
            "max_size",
            f"File size exceeds maximum limit of {MAX_AUDIO_FILE_SIZE // (1024 * 1024)}MB",
            ErrorCode.AUDIO_FILE_TOO_LARGE,
        )

    failure = _first(
        check_optional_text("language", "Language", language, MAX_LANGUAGE_CODE),
        check_optional_text("prompt", "Prompt", prompt, MAX_SHORT_TEXT),
    )
    if failure:
        return Validated(failure=failure)

    parsed_temperature = _parse_temperature(temperature)
    if isinstance(parsed_temperature, ValidationFailure):
        return Validated(failure=parsed_temperature)

    options = TranscriptionOptions(
        language=language.strip() if isinstance(language, str) and language.strip() else None,
        prompt=prompt if isinstance(prompt, str) and prompt.strip() else None,
        temperature=parsed_temperature,
    )
    return Validated.success(TranscriptionInput(upload=upload, options=options))
