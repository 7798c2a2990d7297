"""In-memory event store."""
import structlog
from .base import EventStore
from ..errors import NotFoundError
from ..event_models import Event, EventCreate
from ..query import Predicate, order_events

log = structlog.get_logger()


class InMemoryEventStore(EventStore):
    """In-memory implementation of the event store."""

    def __init__(self):
        super().__init__()
        self._events: dict[str, Event] = {}

    async def create(self, payload: EventCreate) -> Event:
        event = self._build_event(payload)
        self._events[event.id] = event
        log.info("event.stored", id=event.id, type=event.type.value, adapter="memory")
        return event

    async def find_many(self, predicate: Predicate) -> list[Event]:
        return order_events(e for e in self._events.values() if predicate.matches(e))

    async def delete_by_id(self, event_id: str) -> None:
        if self._events.pop(event_id, None) is None:
            raise NotFoundError(event_id)
        log.info("event.removed", id=event_id, adapter="memory")

    async def health_check(self) -> bool:
        """In-memory store is always healthy."""
        return True

    def __len__(self) -> int:
        return len(self._events)
