"""Base interface for event store backends."""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from ..event_models import Event, EventCreate
from ..query import Predicate


class EventStore(ABC):
    """Abstract interface for event persistence implementations.

    Stores assign ``id`` and ``created_at``; ``created_at`` never goes
    backwards within one store instance.
    """

    def __init__(self):
        self._last_created_at: datetime | None = None

    def _build_event(self, payload: EventCreate) -> Event:
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return Event(
            type=payload.type,
            name=payload.name,
            email=str(payload.email),
            value=payload.value,
            timestamp=payload.timestamp or now,
            created_at=now,
        )

    @abstractmethod
    async def create(self, payload: EventCreate) -> Event:
        """
        Persist a validated event.

        Args:
            payload: The validated construction payload

        Returns:
            The stored event with assigned ID and creation time

        Raises:
            StoreError: If the backend fails
        """

    @abstractmethod
    async def find_many(self, predicate: Predicate) -> list[Event]:
        """
        Retrieve events matching a predicate.

        Args:
            predicate: Normalized query constraints

        Returns:
            Matching events, most recent timestamp first

        Raises:
            StoreError: If the backend fails
        """

    @abstractmethod
    async def delete_by_id(self, event_id: str) -> None:
        """
        Delete an event.

        Raises:
            NotFoundError: If no event has this id
            StoreError: If the backend fails
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the backend is healthy and accessible.

        Returns:
            True if backend is healthy, False otherwise
        """

    async def close(self) -> None:
        """Release backend resources."""
