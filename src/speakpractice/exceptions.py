"""Core exception hierarchy for speakpractice.

This module defines every custom exception used by the service. All
exceptions inherit from SpeakPracticeError and carry the error code and
HTTP status the API layer renders into the error envelope.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from speakpractice.schemas.validation import ValidationFailure


class ErrorCode(str, Enum):
    """Stable error codes exposed in the error envelope."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    AUDIO_FILE_MISSING = "AUDIO_FILE_MISSING"
    AUDIO_FILE_TOO_LARGE = "AUDIO_FILE_TOO_LARGE"
    INVALID_AUDIO_FORMAT = "INVALID_AUDIO_FORMAT"
    OPENAI_API_ERROR = "OPENAI_API_ERROR"
    RECOVERY_FAILED = "RECOVERY_FAILED"


class SpeakPracticeError(Exception):
    """Base exception for all speakpractice errors.

    Attributes:
        code: Error code rendered in the error envelope.
        status_code: HTTP status the API layer responds with.
    """

    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR
    status_code: int = 500

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            cause: Optional underlying exception that triggered this error.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message

    @property
    def details(self) -> Any:
        """Structured details safe to expose to API callers."""
        return None


class ConfigError(SpeakPracticeError):
    """Raised when configuration validation fails.

    This includes invalid YAML files, missing environment variables,
    type mismatches, or an unusable provider API key.
    """

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        cause: Exception | None = None,
    ):
        """Initialize the configuration error.

        Args:
            message: Human-readable error description.
            field_path: Optional dotted path to the problematic field (e.g., "openai.api_key").
            cause: Optional underlying exception.
        """
        super().__init__(message, cause)
        self.field_path = field_path

    def __str__(self) -> str:
        """Return string representation including field path."""
        base_msg = super().__str__()
        if self.field_path:
            return f"{base_msg} (field: {self.field_path})"
        return base_msg


class ConfigOverrideError(ConfigError):
    """Raised when applying invalid configuration overrides."""

    pass


class InvalidRequestError(SpeakPracticeError):
    """Raised when caller input violates a documented constraint.

    Wraps the ValidationFailure produced by a request validator so the
    API layer can answer with HTTP 400 before any provider call is made.
    """

    status_code = 400

    def __init__(self, failure: "ValidationFailure"):
        """Initialize from a validation failure.

        Args:
            failure: The rule violation reported by a validator.
        """
        super().__init__(failure.message)
        self.failure = failure
        self.code = failure.code

    @property
    def details(self) -> Any:
        return {"field": self.failure.field, "constraint": self.failure.constraint}


class ExternalServiceError(SpeakPracticeError):
    """Raised when the AI provider answers with an error.

    The provider's HTTP status is preserved so that, for example, a 429
    from the provider reaches the caller as a 429.
    """

    code = ErrorCode.OPENAI_API_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        error_code: str | None = None,
        cause: Exception | None = None,
    ):
        """Initialize the external service error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status reported by the provider (defaults to 500).
            error_type: Provider error type, if any.
            error_code: Provider error code, if any.
            cause: Optional underlying exception.
        """
        super().__init__(message, cause)
        self.status_code = status_code or 500
        self.error_type = error_type
        self.error_code = error_code


class InternalError(SpeakPracticeError):
    """Raised for unexpected failures.

    Only ``message`` is shown to callers; the cause is kept for logs.
    """

    code = ErrorCode.INTERNAL_SERVER_ERROR


class RecoveryFailure(InternalError):
    """Raised when model output cannot be coerced into the expected shape.

    The caller's input was already validated, so this is reported as a
    server-side failure rather than a validation error.
    """

    code = ErrorCode.RECOVERY_FAILED

    def __init__(
        self,
        message: str,
        sample: str | None = None,
        cause: Exception | None = None,
    ):
        """Initialize the recovery failure.

        Args:
            message: Human-readable error description.
            sample: Truncated sample of the offending model output.
            cause: Optional underlying exception.
        """
        super().__init__(message, cause)
        self.sample = sample


class RateLimitExceededError(SpeakPracticeError):
    """Raised when a client exceeds its request budget for the window."""

    code = ErrorCode.RATE_LIMIT_EXCEEDED
    status_code = 429

    def __init__(self, message: str, retry_after_s: float | None = None):
        """Initialize the rate limit error.

        Args:
            message: Human-readable error description.
            retry_after_s: Seconds until the current window resets.
        """
        super().__init__(message)
        self.retry_after_s = retry_after_s
