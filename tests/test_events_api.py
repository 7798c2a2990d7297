"""Tests for the /events HTTP API."""
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from salestrack.adapters import InMemoryEventStore
from salestrack.errors import StoreError
from salestrack.event_models import EventCreate
from salestrack.main import create_app

UTC = timezone.utc


class FailingStore(InMemoryEventStore):
    """Store whose backend is down."""

    async def create(self, payload):
        raise StoreError("create", ConnectionError("backend down"))

    async def find_many(self, predicate):
        raise StoreError("find_many", ConnectionError("backend down"))


@pytest.fixture
def store():
    return InMemoryEventStore()


@pytest_asyncio.fixture
async def client(store):
    transport = ASGITransport(app=create_app(store=store))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def seed(store, type, value, ts, name="Maria Souza", email="maria@acme.com"):
    return await store.create(
        EventCreate(type=type, name=name, email=email, value=Decimal(value), timestamp=ts)
    )


@pytest.mark.asyncio
async def test_create_event(client):
    """Test that a valid event is created and serialized."""
    response = await client.post(
        "/events",
        json={
            "type": "payment",
            "name": "Maria Souza",
            "email": "maria@acme.com",
            "value": 100,
            "timestamp": "2024-01-01T10:00:00.000Z",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert set(data) == {"id", "type", "name", "email", "value", "timestamp", "createdAt"}
    assert data["type"] == "payment"
    assert data["value"] == 100
    assert datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00")) == datetime(2024, 1, 1, 10, tzinfo=UTC)
    assert data["createdAt"]


@pytest.mark.asyncio
async def test_create_event_without_timestamp_defaults_to_now(client):
    before = datetime.now(UTC)
    response = await client.post(
        "/events",
        json={"type": "upsell", "name": "Joao", "email": "joao@acme.com", "value": 49.9},
    )

    assert response.status_code == 201
    ts = datetime.fromisoformat(response.json()["timestamp"].replace("Z", "+00:00"))
    assert ts >= before


@pytest.mark.asyncio
async def test_create_event_validation_error(client, store):
    """Test that every invalid field is reported and nothing is stored."""
    response = await client.post(
        "/events",
        json={"type": "refund", "name": "", "email": "nope", "value": 0},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Validation error"
    assert [d["field"] for d in data["details"]] == ["type", "name", "email", "value"]
    assert all(d["message"] for d in data["details"])
    assert len(store) == 0


@pytest.mark.asyncio
async def test_create_event_non_object_body(client):
    response = await client.post("/events", json=[1, 2, 3])
    assert response.status_code == 400
    assert response.json()["details"] == [{"field": "body", "message": "Event must be a JSON object"}]


@pytest.mark.asyncio
async def test_create_event_empty_body(client):
    response = await client.post("/events")
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "body"


@pytest.mark.asyncio
async def test_list_events_no_filters_returns_all_most_recent_first(client, store):
    await seed(store, "payment", "10", datetime(2023, 6, 1, tzinfo=UTC))
    await seed(store, "upsell", "20", datetime(2024, 6, 1, tzinfo=UTC))
    await seed(store, "payment", "30", datetime(2024, 1, 1, tzinfo=UTC))

    response = await client.get("/events")

    assert response.status_code == 200
    values = [e["value"] for e in response.json()]
    assert values == [20, 30, 10]


@pytest.mark.asyncio
async def test_list_events_single_day_range(client, store):
    """Test that date_from=date_to returns exactly that calendar day."""
    await seed(store, "payment", "1", datetime(2023, 12, 31, 23, 59, 59, 999999, tzinfo=UTC))
    await seed(store, "payment", "2", datetime(2024, 1, 1, 0, 0, tzinfo=UTC))
    await seed(store, "upsell", "3", datetime(2024, 1, 1, 23, 59, 59, 999000, tzinfo=UTC))
    await seed(store, "payment", "4", datetime(2024, 1, 2, 0, 0, tzinfo=UTC))

    response = await client.get("/events", params={"date_from": "2024-01-01", "date_to": "2024-01-01"})

    assert response.status_code == 200
    assert [e["value"] for e in response.json()] == [3, 2]


@pytest.mark.asyncio
async def test_list_events_type_filter(client, store):
    await seed(store, "payment", "10", datetime(2024, 1, 1, tzinfo=UTC))
    await seed(store, "upsell", "20", datetime(2024, 1, 2, tzinfo=UTC))
    await seed(store, "payment", "30", datetime(2024, 1, 3, tzinfo=UTC), name="Joao")

    response = await client.get("/events", params={"type": "payment"})
    assert {e["type"] for e in response.json()} == {"payment"}
    assert len(response.json()) == 2

    response = await client.get("/events", params={"type": "payment", "name": "maria"})
    assert [e["value"] for e in response.json()] == [10]


@pytest.mark.asyncio
async def test_list_events_text_filters(client, store):
    await seed(store, "payment", "10", datetime(2024, 1, 1, tzinfo=UTC), name="Maria Souza", email="maria@acme.com")
    await seed(store, "payment", "20", datetime(2024, 1, 2, tzinfo=UTC), name="Joao Lima", email="joao@globex.com")

    response = await client.get("/events", params={"email": "GLOBEX"})
    assert [e["name"] for e in response.json()] == ["Joao Lima"]

    response = await client.get("/events", params={"name": "souza", "email": ""})
    assert [e["name"] for e in response.json()] == ["Maria Souza"]


@pytest.mark.asyncio
async def test_list_events_invalid_filter(client):
    response = await client.get("/events", params={"date_from": "01/02/2024", "type": "refund"})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Validation error"
    assert [d["field"] for d in data["details"]] == ["date_from", "type"]


@pytest.mark.asyncio
async def test_events_summary(client, store):
    await seed(store, "payment", "100", datetime(2024, 1, 1, tzinfo=UTC))
    await seed(store, "upsell", "50", datetime(2024, 1, 1, 12, tzinfo=UTC))
    await seed(store, "payment", "999", datetime(2024, 2, 1, tzinfo=UTC))

    response = await client.get("/events/summary", params={"date_from": "2024-01-01", "date_to": "2024-01-31"})

    assert response.status_code == 200
    assert response.json() == {"totalValue": 150, "paymentCount": 1, "upsellCount": 1}


@pytest.mark.asyncio
async def test_events_summary_empty(client):
    response = await client.get("/events/summary")
    assert response.json() == {"totalValue": 0, "paymentCount": 0, "upsellCount": 0}


@pytest.mark.asyncio
async def test_delete_event(client, store):
    event = await seed(store, "payment", "10", datetime(2024, 1, 1, tzinfo=UTC))

    response = await client.delete(f"/events/{event.id}")

    assert response.status_code == 204
    assert response.content == b""
    assert (await client.get("/events")).json() == []


@pytest.mark.asyncio
async def test_delete_unknown_event_is_not_found(client):
    """Test that deleting a non-existent id is a client error, not a silent success."""
    response = await client.delete("/events/does-not-exist")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Not found"
    assert data["id"] == "does-not-exist"


@pytest.mark.asyncio
async def test_store_failure_is_server_error():
    """Test that store failures surface as 500, never as empty results."""
    transport = ASGITransport(app=create_app(store=FailingStore()))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/events")
        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"

        response = await client.post(
            "/events",
            json={"type": "payment", "name": "Maria", "email": "maria@acme.com", "value": 10},
        )
        assert response.status_code == 500


@pytest.mark.asyncio
async def test_huge_value_rejected_not_stored(client, store):
    """Test that a value overflowing a JSON number is a validation error."""
    response = await client.post(
        "/events",
        json={"type": "payment", "name": "Maria", "email": "maria@acme.com", "value": "1e400"},
    )

    assert response.status_code == 400
    assert [d["field"] for d in response.json()["details"]] == ["value"]
    assert len(store) == 0
