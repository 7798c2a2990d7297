"""Tests for middleware components."""
import pytest
from httpx import AsyncClient, ASGITransport
from salestrack.adapters import InMemoryEventStore
from salestrack.config import get_settings
from salestrack.main import create_app

settings = get_settings()


def make_client():
    transport = ASGITransport(app=create_app(store=InMemoryEventStore()))
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.asyncio
async def test_correlation_id_injection():
    """Test that correlation ID is auto-generated if not provided."""
    async with make_client() as client:
        response = await client.get("/events")
        assert response.status_code == 200
        assert response.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_correlation_id_preserved():
    """Test that provided correlation ID is preserved."""
    async with make_client() as client:
        correlation_id = "test-correlation-123"
        response = await client.get("/events", headers={"X-Correlation-ID": correlation_id})
        assert response.headers["X-Correlation-ID"] == correlation_id


@pytest.mark.asyncio
async def test_correlation_id_in_error_body():
    async with make_client() as client:
        response = await client.delete("/events/missing", headers={"X-Correlation-ID": "corr-404"})
        assert response.status_code == 404
        assert response.json()["correlation_id"] == "corr-404"


@pytest.mark.asyncio
async def test_payload_too_large_rejection():
    """Test that oversized payloads are rejected."""
    async with make_client() as client:
        response = await client.post(
            "/events",
            json={
                "type": "payment",
                "name": "x" * (settings.MAX_EVENT_SIZE + 1000),
                "email": "maria@acme.com",
                "value": 10,
            },
        )
        assert response.status_code == 413
        data = response.json()
        assert data["error"] == "PayloadTooLarge"
        assert data["max_size"] == settings.MAX_EVENT_SIZE


@pytest.mark.asyncio
async def test_invalid_json_rejection():
    """Test that invalid JSON is rejected."""
    async with make_client() as client:
        response = await client.post(
            "/events",
            content=b"{invalid json}",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidJSON"


@pytest.mark.asyncio
async def test_metrics_endpoint_records_business_metrics():
    async with make_client() as client:
        await client.post(
            "/events",
            json={"type": "upsell", "name": "Maria", "email": "maria@acme.com", "value": 25},
        )
        await client.post("/events", json={"type": "upsell"})

        response = await client.get("/metrics/")
        assert response.status_code == 200
        content = response.text
        assert 'salestrack_events_created_total{event_type="upsell"} 1.0' in content
        assert 'salestrack_event_value_total{event_type="upsell"} 25.0' in content
        assert 'salestrack_validation_failures_total{field="name"} 1.0' in content
        assert "http_requests_total" in content
        assert "http_request_duration_seconds" in content
        assert "app_up" in content


@pytest.mark.asyncio
async def test_http_metrics_use_route_template():
    async with make_client() as client:
        await client.delete("/events/abc")
        await client.delete("/events/def")

        content = (await client.get("/metrics/")).text
        assert 'path="/events/{event_id}"' in content
        assert 'path="/events/abc"' not in content
