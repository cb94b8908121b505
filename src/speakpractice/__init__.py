"""speakpractice - AI-backed English speaking practice service.

This package provides audio transcription, text generation practice
features and translation behind a small HTTP API, with request
validation, provider response normalization and structured-output
recovery.
"""

__version__ = "1.0.0"

from speakpractice.exceptions import (
    ConfigError,
    ExternalServiceError,
    InternalError,
    InvalidRequestError,
    RateLimitExceededError,
    RecoveryFailure,
    SpeakPracticeError,
)

__all__ = [
    "__version__",
    "SpeakPracticeError",
    "ConfigError",
    "InvalidRequestError",
    "ExternalServiceError",
    "InternalError",
    "RecoveryFailure",
    "RateLimitExceededError",
]
