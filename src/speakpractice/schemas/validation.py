"""Validation outcome models.

Request validators return a ``Validated`` value instead of raising, so
expected rejections stay in the normal return path. ``unwrap`` converts a
failure into an InvalidRequestError at the HTTP boundary.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from speakpractice.exceptions import ErrorCode, InvalidRequestError

T = TypeVar("T")


class ValidationFailure(BaseModel):
    """A single violated request constraint.

    Attributes:
        field: Request field that failed (e.g., "targetLanguage").
        constraint: Rule that was violated (e.g., "max_length", "one_of").
        message: Caller-facing explanation naming the bound or allow-list.
        code: Error code rendered in the error envelope.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str
    constraint: str
    message: str
    code: ErrorCode = ErrorCode.VALIDATION_ERROR


class Validated(BaseModel, Generic[T]):
    """Either a validated value or the first violated rule."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T | None = None
    failure: ValidationFailure | None = Field(None)

    @classmethod
    def success(cls, value: T) -> "Validated[T]":
        return cls(value=value)

    @classmethod
    def reject(
        cls,
        field: str,
        constraint: str,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ) -> "Validated[T]":
        return cls(
            failure=ValidationFailure(
                field=field, constraint=constraint, message=message, code=code
            )
        )

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        """Return the validated value.

        Raises:
            InvalidRequestError: If validation failed.
        """
        if self.failure is not None:
            raise InvalidRequestError(self.failure)
        return self.value  # type: ignore[return-value]
