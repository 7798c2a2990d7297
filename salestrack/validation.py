"""Validation of raw event input.

``validate_event`` is the single entry point for turning untyped request data
into an ``EventCreate``. Every field rule is checked; a failing call reports
all offending fields at once, in declaration order.
"""
from collections.abc import Mapping
import math
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .errors import FieldError, ValidationError
from .event_models import EventCreate, EventType

# date, "T", hh:mm[:ss[.fff]], optional Z or offset
ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$", re.IGNORECASE
)

FIELD_MESSAGES = {
    "type": "Type must be 'payment' or 'upsell'",
    "name": "Name is required",
    "email": "Invalid email",
    "value": "Value must be a positive number",
    "timestamp": "Timestamp must be a valid ISO-8601 date-time",
}


class EventInput(BaseModel):
    """Field rules for inbound events. Unknown keys (e.g. ``age``) are ignored."""
    model_config = ConfigDict(extra="ignore")

    type: EventType
    name: str = Field(min_length=1)
    email: EmailStr
    value: Decimal = Field(gt=0, allow_inf_nan=False)
    timestamp: datetime | None = None

    @field_validator("name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError(FIELD_MESSAGES["name"])
        return v

    @field_validator("value", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError(FIELD_MESSAGES["value"])
        return v

    @field_validator("value")
    @classmethod
    def _representable(cls, v: Decimal) -> Decimal:
        # the wire format is a JSON number; 1e400 or 1e-400 would not survive it
        as_float = float(v)
        if not math.isfinite(as_float) or as_float <= 0:
            raise ValueError(FIELD_MESSAGES["value"])
        return v

    @field_validator("timestamp", mode="before")
    @classmethod
    def _require_string(cls, v: Any) -> Any:
        if v is None or isinstance(v, datetime):
            return v
        if not isinstance(v, str) or not ISO_DATETIME.match(v.strip()):
            raise ValueError(FIELD_MESSAGES["timestamp"])
        return v

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def _field_errors(exc: pydantic.ValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    seen: set[str] = set()
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "body"
        if field in seen:
            continue
        seen.add(field)
        errors.append(FieldError(field=field, message=FIELD_MESSAGES.get(field, err["msg"])))
    return errors


def validate_event(raw: Any) -> EventCreate:
    """
    Validate raw input into an event-construction payload.

    Args:
        raw: Untyped key/value data (usually a decoded JSON body)

    Returns:
        EventCreate with ``type`` and ``value`` exactly as given

    Raises:
        ValidationError: With one FieldError per offending field
    """
    if not isinstance(raw, Mapping):
        raise ValidationError([FieldError(field="body", message="Event must be a JSON object")])

    try:
        parsed = EventInput.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(_field_errors(exc)) from exc

    return EventCreate(**parsed.model_dump())
