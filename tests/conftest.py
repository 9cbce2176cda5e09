"""Pytest configuration and fixtures for the booking portal tests."""
import json
from datetime import date, datetime

import httpx
import pytest
from fastapi.testclient import TestClient

from cleangreen import rate_limiter
from cleangreen.backend import BackendClient, create_http_client
from cleangreen.query_cache import QueryCache


class FakeBackend:
    """In-process stand-in for the backend REST API.

    Routes are registered per (method, path) with either a static JSON body or a
    handler taking the httpx.Request and returning (status, body). Every request
    is recorded so tests can assert on what was (or was not) sent.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, body=None, status=200, handler=None):
        self.routes[(method.upper(), path)] = handler or (lambda request: (status, body))
        return self

    def calls(self, method, path):
        return [r for r in self.requests if r["method"] == method.upper() and r["path"] == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append(
            {
                "method": request.method,
                "path": request.url.path,
                "params": dict(request.url.params),
                "json": body,
                "headers": dict(request.headers),
            }
        )
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        status, payload = route(request)
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)


@pytest.fixture(scope="function")
def fake_backend():
    """Create an empty fake backend for each test."""
    return FakeBackend()


@pytest.fixture(scope="function")
def query_cache():
    return QueryCache(ttl=60)


@pytest.fixture(scope="function")
def backend(fake_backend, query_cache):
    """BackendClient wired to the fake backend with no caller credentials."""
    http = create_http_client(transport=httpx.MockTransport(fake_backend))
    return BackendClient(http, query_cache)


@pytest.fixture(scope="function")
def client(backend, query_cache):
    """TestClient for the app with the fake backend on app.state.

    The lifespan is not entered, so the fixtures' backend and cache stay in place.
    """
    from cleangreen.main import app

    app.state.backend = backend
    app.state.query_cache = query_cache
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Each test starts with empty rate limit windows."""
    with rate_limiter.cache_lock:
        rate_limiter.memory_cache.clear()
    yield


@pytest.fixture(scope="function")
def today():
    return date(2025, 6, 1)


@pytest.fixture(scope="function")
def sample_booking():
    """A confirmed booking as the backend returns it."""
    return {
        "id": "b-100",
        "service": "Residential Cleaning",
        "propertySize": "Medium (1000-2000 sq ft)",
        "date": "2025-06-10",
        "timeSlot": "10:00 AM",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "(555) 123-4567",
        "address": "123 Main St, Beverly Hills, CA 90210",
        "status": "confirmed",
        "paymentMethodId": "pm_card_visa",
        "cancellationFeeStatus": "not_applicable",
        "managementToken": "tok123",
    }


@pytest.fixture(scope="function")
def slot_counts():
    """Mutable slot counts served by the fake /api/available-slots."""
    return {"10:00 AM": {"available": 1, "capacity": 3}}


@pytest.fixture(scope="function")
def slots_route(fake_backend, slot_counts):
    """Register /api/available-slots backed by slot_counts."""

    def handler(request):
        return 200, {
            "date": request.url.params.get("date"),
            "slots": [
                {"timeSlot": slot, **counts} for slot, counts in slot_counts.items()
            ],
        }

    fake_backend.on("GET", "/api/available-slots", handler=handler)
    return fake_backend


@pytest.fixture(scope="function")
def base_time():
    """Noon the day before the sample booking."""
    return datetime(2025, 6, 9, 12, 0)
