"""Response envelopes returned by every HTTP route."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ErrorBody(BaseModel):
    """Error code, caller-facing message and optional structured details."""

    code: str
    message: str
    details: Any = None


class SuccessEnvelope(BaseModel):
    """Envelope wrapping a successful result."""

    success: Literal[True] = True
    data: Any = None
    message: str | None = None
    timestamp: str = Field(default_factory=utc_timestamp)


class ErrorEnvelope(BaseModel):
    """Envelope wrapping a failure."""

    success: Literal[False] = False
    error: ErrorBody
    timestamp: str = Field(default_factory=utc_timestamp)


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


def success_payload(data: Any, message: str | None = None) -> dict[str, Any]:
    """Build the JSON-ready success envelope.

    Args:
        data: Result model or plain JSON value.
        message: Optional human-readable summary.

    Returns:
        Serialized envelope with camelCase keys.
    """
    envelope = SuccessEnvelope(data=_dump(data), message=message)
    return envelope.model_dump(mode="json", exclude_none=True)


def error_payload(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the JSON-ready error envelope.

    Args:
        code: Error code.
        message: Caller-facing message.
        details: Optional structured details.

    Returns:
        Serialized envelope; ``details`` is omitted when None.
    """
    envelope = ErrorEnvelope(
        error=ErrorBody(code=code, message=message, details=_dump(details))
    )
    return envelope.model_dump(mode="json", exclude_none=True)
