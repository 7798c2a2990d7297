"""Filter parsing and predicate construction for event queries.

Date policy:
- no ``date_from``/``date_to``: no time constraint at all
- ``date_from``: start of that calendar day, inclusive
- ``date_to``: end of that calendar day (23:59:59.999), inclusive
- ``date_from`` alone: upper bound is the end of the current day

Calendar days are interpreted in the configured timezone.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo, timezone
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, field_validator

from .errors import FieldError, ValidationError
from .event_models import Event, EventType

FILTER_FIELDS = ("date_from", "date_to", "type", "name", "email")

FILTER_MESSAGES = {
    "date_from": "date_from must be a calendar date (YYYY-MM-DD)",
    "date_to": "date_to must be a calendar date (YYYY-MM-DD)",
    "type": "type must be 'payment' or 'upsell'",
}

END_OF_DAY = time(23, 59, 59, 999000)


class EventFilter(BaseModel):
    """Caller-supplied optional constraints on an event query."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    date_from: date | None = None
    date_to: date | None = None
    type: EventType | None = None
    name: str | None = None
    email: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _calendar_date_only(cls, v: Any) -> Any:
        # "2024-01-01T10:00" would otherwise be truncated silently
        if isinstance(v, str):
            return date.fromisoformat(v.strip()) if v.strip() else None
        return v


@dataclass(frozen=True)
class Predicate:
    """Normalized, store-executable form of an EventFilter."""

    timestamp_gte: datetime | None = None
    timestamp_lte: datetime | None = None
    type: EventType | None = None
    name_contains: str | None = None
    email_contains: str | None = None

    def matches(self, event: Event) -> bool:
        if self.timestamp_gte is not None and event.timestamp < self.timestamp_gte:
            return False
        if self.timestamp_lte is not None and event.timestamp > self.timestamp_lte:
            return False
        if self.type is not None and event.type != self.type:
            return False
        if self.name_contains is not None and self.name_contains.casefold() not in event.name.casefold():
            return False
        if self.email_contains is not None and self.email_contains.casefold() not in event.email.casefold():
            return False
        return True


def parse_filter(params: Mapping[str, Any]) -> EventFilter:
    """
    Build an EventFilter from raw query parameters.

    Raises:
        ValidationError: If a date or the type is malformed
    """
    try:
        return EventFilter.model_validate({k: params.get(k) for k in FILTER_FIELDS})
    except pydantic.ValidationError as exc:
        details = []
        for err in exc.errors():
            field = str(err["loc"][0])
            details.append(FieldError(field=field, message=FILTER_MESSAGES.get(field, err["msg"])))
        raise ValidationError(details) from exc


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=tz)


def build_predicate(
    filt: EventFilter | None = None,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
) -> Predicate:
    """
    Translate a filter into a Predicate.

    Args:
        filt: Optional filter; None means "match everything"
        now: Reference instant for open-ended ranges (defaults to current time)
        tz: Zone used to interpret calendar dates

    Returns:
        Predicate with concrete, inclusive timestamp bounds
    """
    if filt is None:
        return Predicate()

    gte = lte = None
    if filt.date_from is not None:
        gte = start_of_day(filt.date_from, tz)
    if filt.date_to is not None:
        lte = end_of_day(filt.date_to, tz)
    elif filt.date_from is not None:
        today = (now or datetime.now(tz)).astimezone(tz).date()
        lte = end_of_day(today, tz)

    return Predicate(
        timestamp_gte=gte,
        timestamp_lte=lte,
        type=filt.type,
        name_contains=filt.name,
        email_contains=filt.email,
    )


def order_events(events: Iterable[Event]) -> list[Event]:
    """Most recent timestamp first; ties broken by most recent creation."""
    return sorted(events, key=lambda e: (e.timestamp, e.created_at), reverse=True)
