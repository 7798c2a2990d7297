"""Event service: validation, querying and aggregation over an injected store."""
from datetime import tzinfo, timezone
from typing import Any
import time

import structlog

from ..adapters.base import EventStore
from ..aggregation import summarize
from ..errors import ValidationError
from ..event_models import Event, EventSummary
from ..metrics import Metrics
from ..query import EventFilter, build_predicate
from ..validation import validate_event

log = structlog.get_logger()


class EventService:
    """
    Orchestrates the core operations for the transport layer.

    The store is owned by the composition root; the service never creates one.
    """

    def __init__(self, store: EventStore, metrics: Metrics | None = None, tz: tzinfo = timezone.utc):
        self._store = store
        self._metrics = metrics
        self._tz = tz

    @property
    def store(self) -> EventStore:
        return self._store

    async def create_event(self, raw: Any) -> Event:
        """Validate raw input, then store it. Nothing is stored on failure."""
        try:
            payload = validate_event(raw)
        except ValidationError as e:
            log.info("event.validation_failed", fields=e.fields)
            if self._metrics:
                self._metrics.record_validation_failure(e.fields)
            raise

        event = await self._store.create(payload)

        if self._metrics:
            self._metrics.record_event_created(event.type.value, event.value)
        log.info("event.created", id=event.id, type=event.type.value)
        return event

    async def list_events(self, filt: EventFilter | None = None) -> list[Event]:
        """Events matching the filter, most recent timestamp first."""
        start_time = time.time()
        predicate = build_predicate(filt, tz=self._tz)

        events = await self._store.find_many(predicate)

        if self._metrics:
            self._metrics.record_query(len(events))
        log.info(
            "events.queried",
            count=len(events),
            timestamp_gte=predicate.timestamp_gte.isoformat() if predicate.timestamp_gte else None,
            timestamp_lte=predicate.timestamp_lte.isoformat() if predicate.timestamp_lte else None,
            type=predicate.type.value if predicate.type else None,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return events

    async def summary(self, filt: EventFilter | None = None) -> EventSummary:
        return summarize(await self.list_events(filt))

    async def delete_event(self, event_id: str) -> None:
        await self._store.delete_by_id(event_id)
        if self._metrics:
            self._metrics.record_event_deleted()
        log.info("event.deleted", id=event_id)
