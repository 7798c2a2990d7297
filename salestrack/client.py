"""Async HTTP client for the events API, as used by the dashboard."""
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

import httpx
import orjson
import structlog

from .aggregation import summarize
from .errors import ErrorCode, FieldError, NotFoundError, SalesTrackError, ValidationError
from .event_models import Event, EventSummary
from .query import EventFilter

log = structlog.get_logger()


class ClientError(SalesTrackError):
    """Raised for non-domain HTTP failures (5xx, unexpected statuses)."""

    code = ErrorCode.REQUEST_FAILED

    def __init__(self, status_code: int, body: Any = None) -> None:
        super().__init__(f"Request failed with status {status_code}")
        self.status_code = status_code
        self.body = body


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def _filter_params(filt: EventFilter | None) -> dict[str, str]:
    if filt is None:
        return {}
    params = {}
    for key, value in filt.model_dump(exclude_none=True).items():
        if isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        params[key] = value
    return params


class EventsClient:
    """
    Client for the salestrack HTTP API.

    Usage:
        async with EventsClient("http://localhost:3001") as client:
            events, summary = await client.dashboard(EventFilter(date_from=...))
    """

    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 10.0):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "EventsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _raise_for_error(response: httpx.Response, event_id: str | None = None) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.status_code == 400 and isinstance(body, dict):
            details = [FieldError(**d) for d in body.get("details", [])]
            if not details:
                details = [FieldError(field="body", message=body.get("message", "Invalid request"))]
            raise ValidationError(details)
        if response.status_code == 404 and event_id is not None:
            raise NotFoundError(event_id)

        log.warning("client.request_failed", status=response.status_code, url=str(response.url))
        raise ClientError(response.status_code, body)

    async def get_events(self, filt: EventFilter | None = None) -> list[Event]:
        response = await self._http.get("/events", params=_filter_params(filt))
        self._raise_for_error(response)
        return [Event.model_validate(item) for item in response.json()]

    async def get_summary(self, filt: EventFilter | None = None) -> EventSummary:
        response = await self._http.get("/events/summary", params=_filter_params(filt))
        self._raise_for_error(response)
        return EventSummary.model_validate(response.json())

    async def create_event(self, data: Mapping[str, Any]) -> Event:
        response = await self._http.post(
            "/events",
            content=orjson.dumps(dict(data), default=_json_default),
            headers={"content-type": "application/json"},
        )
        self._raise_for_error(response)
        return Event.model_validate(response.json())

    async def delete_event(self, event_id: str) -> None:
        response = await self._http.delete(f"/events/{event_id}")
        self._raise_for_error(response, event_id=event_id)

    async def dashboard(self, filt: EventFilter | None = None) -> tuple[list[Event], EventSummary]:
        """Fetch events and compute the summary cards over them."""
        events = await self.get_events(filt)
        return events, summarize(events)
