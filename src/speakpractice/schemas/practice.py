"""Practice feature data models.

Translation and transcription results plus the validated inputs the
practice services consume.
"""

from pydantic import BaseModel, ConfigDict, Field

from speakpractice.schemas.base import WireModel
from speakpractice.schemas.generation import ChatMessage, TokenUsage


class TranslationResult(WireModel):
    """Result of an English-to-target translation.

    Attributes:
        translated_text: Translated text, never empty.
        source_language: Always "en".
        target_language: Requested target language code.
        model: Model that produced the translation.
        usage: Token usage statistics.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    translated_text: str = Field(..., min_length=1)
    source_language: str = "en"
    target_language: str
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)


class TranscriptionWord(WireModel):
    """Word with its start and end offsets in seconds."""

    model_config = ConfigDict(extra="ignore")

    word: str
    start: float
    end: float


class TranscriptionSegment(WireModel):
    """Segment of a verbose transcription."""

    model_config = ConfigDict(extra="ignore")

    id: int
    seek: int | None = None
    start: float
    end: float
    text: str
    tokens: list[int] = Field(default_factory=list)
    temperature: float | None = None
    avg_logprob: float | None = None
    compression_ratio: float | None = None
    no_speech_prob: float | None = None


class TranscriptionResult(WireModel):
    """Speech-to-text result; timing detail is present for verbose output."""

    model_config = ConfigDict(extra="ignore")

    text: str = ""
    language: str | None = None
    duration: float | None = None
    words: list[TranscriptionWord] | None = None
    segments: list[TranscriptionSegment] | None = None


class AudioFormats(WireModel):
    """Accepted audio formats and the upload size ceiling."""

    formats: list[str]
    max_file_size: int
    max_file_size_mb: float = Field(..., alias="maxFileSizeMB")


class AudioUpload(BaseModel):
    """Uploaded audio payload as received from the HTTP layer."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str | None = None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class TranscriptionOptions(BaseModel):
    """Optional transcription hints; None falls back to configuration."""

    model_config = ConfigDict(extra="forbid")

    language: str | None = None
    prompt: str | None = None
    temperature: float | None = Field(None, ge=0.0, le=1.0)


class TranslationInput(BaseModel):
    """Validated translation request."""

    text: str
    target_language: str


class ExercisesInput(BaseModel):
    """Validated exercise-generation request."""

    error_type: str
    difficulty: str
    count: int


class ExplainInput(BaseModel):
    """Validated concept-explanation request."""

    concept: str
    level: str


class CompletionInput(BaseModel):
    """Validated completion request."""

    prompt: str
    system_prompt: str | None = None


class ConversationInput(BaseModel):
    """Validated conversation request."""

    message: str
    history: list[ChatMessage] = Field(default_factory=list)


class TopicInput(BaseModel):
    """Validated topic conversation request."""

    topic: str
    initial_message: str


class SuggestionsInput(BaseModel):
    """Validated reply-suggestion request."""

    topic: str
    conversation_history: str


class TranscriptionInput(BaseModel):
    """Validated transcription request."""

    upload: AudioUpload
    options: TranscriptionOptions
