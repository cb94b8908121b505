"""Fixed allow-lists and limits shared by validators and services."""

LANGUAGE_NAMES: dict[str, str] = {
    "zh-CN": "Simplified Chinese",
    "zh-TW": "Traditional Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
}

SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(LANGUAGE_NAMES)

DEFAULT_TARGET_LANGUAGE = "zh-TW"

SUPPORTED_AUDIO_FORMATS: tuple[str, ...] = (
    "mp3",
    "mp4",
    "mpeg",
    "mpga",
    "m4a",
    "wav",
    "webm",
)

# Provider upload limit
MAX_AUDIO_FILE_SIZE = 25 * 1024 * 1024

ALLOWED_AUDIO_MIME_TYPES: frozenset[str] = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/mp4",
        "audio/wav",
        "audio/webm",
        "audio/m4a",
        "audio/x-m4a",
        "video/mp4",
    }
)

DIFFICULTIES: tuple[str, ...] = ("beginner", "intermediate", "advanced")

EXPLAIN_LEVELS: tuple[str, ...] = ("simple", "detailed", "advanced")

EXERCISE_COUNT_MIN = 1
EXERCISE_COUNT_MAX = 20

MAX_LONG_TEXT = 5000
MAX_MEDIUM_TEXT = 2000
MAX_SHORT_TEXT = 1000
MAX_LANGUAGE_CODE = 10
