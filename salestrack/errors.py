"""Error taxonomy for the event-query subsystem."""
from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Error codes surfaced to API callers."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    STORE_FAILURE = "STORE_FAILURE"
    REQUEST_FAILED = "REQUEST_FAILED"


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class SalesTrackError(Exception):
    """Base error with code and user-safe message."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(SalesTrackError):
    """Raised when input fails one or more field rules."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, details: list[FieldError]) -> None:
        if not details:
            raise ValueError("ValidationError requires at least one field error")
        super().__init__("Validation error")
        self.details = list(details)

    @property
    def fields(self) -> list[str]:
        return [d.field for d in self.details]


class NotFoundError(SalesTrackError):
    """Raised when an event id is unknown to the store."""

    code = ErrorCode.EVENT_NOT_FOUND

    def __init__(self, event_id: str) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class StoreError(SalesTrackError):
    """Raised when the persistence backend fails."""

    code = ErrorCode.STORE_FAILURE

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        super().__init__(f"Store operation '{operation}' failed")
        self.operation = operation
        self.cause = cause
