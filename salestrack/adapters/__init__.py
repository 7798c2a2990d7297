"""Event store adapters.

Exports:
    - EventStore: Abstract store interface
    - InMemoryEventStore: Process-local store (default)
    - RedisEventStore: Redis hash + sorted-set store
    - create_store: Build the store selected by configuration
"""
import structlog

from .base import EventStore
from .memory import InMemoryEventStore
from .redis_store import RedisEventStore
from ..config import Settings, get_settings

log = structlog.get_logger()


def create_store(settings: Settings | None = None) -> EventStore:
    """
    Create the store selected by the STORE_ADAPTER setting.

    Falls back to memory when redis is requested without REDIS_URL.
    """
    settings = settings or get_settings()
    if settings.STORE_ADAPTER == "redis":
        if not settings.REDIS_URL:
            log.warning(
                "store.fallback",
                requested="redis",
                actual="memory",
                reason="REDIS_URL not configured"
            )
            return InMemoryEventStore()

        log.info("store.selected", type="redis", url=str(settings.REDIS_URL))
        return RedisEventStore(
            redis_url=str(settings.REDIS_URL),
            key_prefix=settings.REDIS_KEY_PREFIX,
        )
    log.info("store.selected", type="memory")
    return InMemoryEventStore()


__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "RedisEventStore",
    "create_store",
]
