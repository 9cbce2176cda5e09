"""Tests for the query cache and the backend gateway."""
import httpx
import pytest

from cleangreen.backend import BackendClient, create_http_client
from cleangreen.errors import BackendRequestError
from cleangreen.query_cache import QueryCache, make_key


class TestQueryCache:
    """Keys, TTL and prefix invalidation."""

    def test_make_key_stringifies_parts(self):
        assert make_key("/api/available-slots", "2025-06-10", None) == (
            "/api/available-slots",
            "2025-06-10",
            "",
        )

    def test_expired_entry_is_a_miss(self):
        cache = QueryCache(ttl=0)
        cache.set(("/api/services",), [1])
        assert cache.get(("/api/services",)) is None

    def test_expired_entries_swept_on_set(self):
        cache = QueryCache(ttl=0)
        for day in range(1000):
            cache.set(("/api/available-slots", f"2025-06-{day}", "public"), {"slots": []})

        cache.set(("/api/services", "public"), [])

        assert cache.stats()["entries"] == 1

    def test_size_is_bounded(self):
        cache = QueryCache(ttl=60, max_entries=3)
        cache.set(("/api/customer/a@example.com",), 1)
        cache.set(("/api/customer/b@example.com",), 2)
        cache.set(("/api/customer/c@example.com",), 3)
        cache.set(("/api/customer/a@example.com",), 4)

        cache.set(("/api/customer/d@example.com",), 5)

        assert cache.stats()["entries"] == 3
        assert cache.get(("/api/customer/b@example.com",)) is None
        assert cache.get(("/api/customer/a@example.com",)) == 4
        assert cache.get(("/api/customer/d@example.com",)) == 5

    def test_invalidate_by_prefix(self, query_cache):
        query_cache.set(("/api/available-slots", "2025-06-10", "public"), {"slots": []})
        query_cache.set(("/api/available-slots", "2025-06-11", "public"), {"slots": []})
        query_cache.set(("/api/services", "public"), [])

        assert query_cache.invalidate("/api/available-slots", "2025-06-10") == 1
        assert query_cache.get(("/api/available-slots", "2025-06-11", "public")) is not None
        assert query_cache.invalidate("/api/available-slots") == 1
        assert query_cache.get(("/api/services", "public")) == []

    def test_bare_path_covers_sub_paths(self, query_cache):
        query_cache.set(("/api/bookings/manage/tok123", "public"), {"id": "b-100"})
        query_cache.set(("/api/bookings-archive", "public"), [])

        assert query_cache.invalidate("/api/bookings") == 1
        assert query_cache.get(("/api/bookings-archive", "public")) == []

    @pytest.mark.asyncio
    async def test_fetch_loads_once(self, query_cache):
        calls = []

        async def loader():
            calls.append(1)
            return {"ok": True}

        key = ("/api/settings", "public")
        assert await query_cache.fetch(key, loader) == {"ok": True}
        assert await query_cache.fetch(key, loader) == {"ok": True}
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_failed_load_is_not_cached(self, query_cache):
        async def failing():
            raise BackendRequestError("boom", status=500)

        with pytest.raises(BackendRequestError):
            await query_cache.fetch(("/api/settings",), failing)
        assert query_cache.stats()["entries"] == 0


class TestBackendClient:
    """Error mapping, credential forwarding and cached reads."""

    @pytest.mark.asyncio
    async def test_query_reads_through_cache(self, backend, fake_backend):
        fake_backend.on("GET", "/api/services", [{"name": "Residential Cleaning"}])

        await backend.query("/api/services")
        await backend.query("/api/services")

        assert len(fake_backend.calls("GET", "/api/services")) == 1

    @pytest.mark.asyncio
    async def test_server_message_is_used(self, backend, fake_backend):
        fake_backend.on("POST", "/api/bookings", {"error": "Slot is full"}, status=409)

        with pytest.raises(BackendRequestError) as exc_info:
            await backend.post("/api/bookings", {})

        assert exc_info.value.message == "Slot is full"
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_server_error_maps_to_bad_gateway(self, backend, fake_backend):
        fake_backend.on("GET", "/api/settings", {"message": "db down"}, status=500)

        with pytest.raises(BackendRequestError) as exc_info:
            await backend.get("/api/settings")

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_transport_error_maps_to_unavailable(self, query_cache):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = BackendClient(create_http_client(httpx.MockTransport(refuse)), query_cache)
        with pytest.raises(BackendRequestError) as exc_info:
            await client.get("/api/settings")

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_credentials_are_forwarded_and_scoped(self, backend, fake_backend):
        fake_backend.on("GET", "/api/employee/permissions", [])
        employee = backend.with_credentials({"cookie": "session=abc", "user-agent": "pytest"})

        await employee.get("/api/employee/permissions")

        sent = fake_backend.requests[-1]["headers"]
        assert sent["cookie"] == "session=abc"
        assert employee.cache_scope != backend.cache_scope == "public"
