"""Redis-backed event store."""
import structlog
import orjson
import pydantic
from redis import Redis
from redis.exceptions import RedisError
from .base import EventStore
from ..config import get_settings
from ..errors import NotFoundError, StoreError
from ..event_models import Event, EventCreate
from ..query import Predicate, order_events

log = structlog.get_logger()
settings = get_settings()


class RedisEventStore(EventStore):
    """Redis implementation of the event store.

    Events are kept as JSON documents in a hash keyed by id. A sorted set
    scored by the event timestamp turns date bounds into a score range.
    """

    def __init__(self, redis_url: str | None = None, key_prefix: str | None = None):
        """
        Initialize Redis event store.

        Args:
            redis_url: Redis connection URL (defaults to settings.REDIS_URL)
            key_prefix: Key namespace (defaults to settings.REDIS_KEY_PREFIX)
        """
        super().__init__()
        self.redis_url = redis_url or str(settings.REDIS_URL)
        prefix = key_prefix or settings.REDIS_KEY_PREFIX
        self._client: Redis | None = None
        self._hash_key = f"{prefix}:events"
        self._index_key = f"{prefix}:events:by_ts"

    def _get_client(self) -> Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=False,  # documents are orjson bytes
                socket_connect_timeout=5,
                socket_timeout=5
            )
        return self._client

    @staticmethod
    def _encode(event: Event) -> bytes:
        data = event.model_dump(mode="json")
        # keep the exact decimal rather than the float used on the wire
        data["value"] = str(event.value)
        return orjson.dumps(data)

    @staticmethod
    def _decode(raw: bytes) -> Event:
        return Event.model_validate(orjson.loads(raw))

    async def create(self, payload: EventCreate) -> Event:
        event = self._build_event(payload)
        try:
            pipe = self._get_client().pipeline(transaction=True)
            pipe.hset(self._hash_key, event.id, self._encode(event))
            pipe.zadd(self._index_key, {event.id: event.timestamp.timestamp()})
            pipe.execute()
        except RedisError as e:
            log.error("redis.create_failed", error=str(e), event_id=event.id)
            raise StoreError("create", e) from e

        log.info("event.stored", id=event.id, type=event.type.value, adapter="redis")
        return event

    async def find_many(self, predicate: Predicate) -> list[Event]:
        low = predicate.timestamp_gte.timestamp() if predicate.timestamp_gte else "-inf"
        high = predicate.timestamp_lte.timestamp() if predicate.timestamp_lte else "+inf"
        try:
            client = self._get_client()
            ids = client.zrevrangebyscore(self._index_key, high, low)
            if not ids:
                return []
            docs = client.hmget(self._hash_key, ids)
        except RedisError as e:
            log.error("redis.find_failed", error=str(e))
            raise StoreError("find_many", e) from e

        try:
            events = [self._decode(doc) for doc in docs if doc is not None]
        except (orjson.JSONDecodeError, pydantic.ValidationError) as e:
            log.error("redis.decode_failed", error=str(e))
            raise StoreError("find_many", e) from e

        return order_events(e for e in events if predicate.matches(e))

    async def delete_by_id(self, event_id: str) -> None:
        try:
            pipe = self._get_client().pipeline(transaction=True)
            pipe.hdel(self._hash_key, event_id)
            pipe.zrem(self._index_key, event_id)
            removed, _ = pipe.execute()
        except RedisError as e:
            log.error("redis.delete_failed", error=str(e), event_id=event_id)
            raise StoreError("delete_by_id", e) from e

        if not removed:
            raise NotFoundError(event_id)
        log.info("event.removed", id=event_id, adapter="redis")

    async def health_check(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if Redis is accessible, False otherwise
        """
        try:
            return bool(self._get_client().ping())
        except RedisError as e:
            log.warning("redis.health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
