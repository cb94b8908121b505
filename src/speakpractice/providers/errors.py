"""Translation of provider exceptions into the service error taxonomy."""

import openai

from speakpractice.exceptions import (
    ExternalServiceError,
    InternalError,
    SpeakPracticeError,
)
from speakpractice.logger import get_logger

logger = get_logger(__name__)


def map_provider_error(exc: Exception, operation: str) -> SpeakPracticeError:
    """Map an exception raised around a provider call.

    Already-typed service errors are returned unchanged. OpenAI API errors
    keep the provider's HTTP status (500 when it has none, as for
    connection failures and timeouts). Anything else becomes an
    InternalError whose public message hides the original detail.

    The mapping is logged once here.

    Args:
        exc: Exception caught around the provider call.
        operation: Short description used in messages (e.g., "translate text").

    Returns:
        Exception to raise in place of ``exc``.
    """
    if isinstance(exc, SpeakPracticeError):
        return exc

    if isinstance(exc, openai.APIError):
        status_code = getattr(exc, "status_code", None)
        logger.error(
            "Provider request failed: operation=%s, status=%s, type=%s, code=%s, message=%s",
            operation,
            status_code,
            exc.type,
            exc.code,
            exc.message,
        )
        logger.debug("Provider failure details: %s", exc, exc_info=exc)
        return ExternalServiceError(
            f"OpenAI API Error: {exc.message}",
            status_code=status_code,
            error_type=exc.type,
            error_code=exc.code,
            cause=exc,
        )

    logger.error(
        "Unexpected failure: operation=%s, error_type=%s", operation, type(exc).__name__
    )
    logger.debug("Unexpected failure details: %s", exc, exc_info=exc)
    return InternalError(f"Failed to {operation}", cause=exc)
