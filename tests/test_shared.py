"""Tests for validators, ZIP checks, CSV export and the error taxonomy."""
from datetime import time

import pytest
import redis

from cleangreen import rate_limiter
from cleangreen.errors import BackendRequestError, StepValidationError
from cleangreen.services.service_area_checker import ServiceAreaChecker, lookup_zipcode
from cleangreen.shared.validators import (
    extract_zip_code,
    normalize_zipcode,
    parse_slot_start,
    validate_email,
    validate_us_phone,
)
from cleangreen.utils.csv_export import header_for, to_csv


class TestValidators:
    def test_phone_normalized(self):
        assert validate_us_phone("(555) 123-4567") == "+15551234567"
        with pytest.raises(ValueError):
            validate_us_phone("12345")

    def test_email(self):
        assert validate_email(" Jane@Example.com ") == "jane@example.com"
        with pytest.raises(ValueError):
            validate_email("jane@")

    def test_slot_start(self):
        assert parse_slot_start("12:00 PM") == time(12, 0)
        assert parse_slot_start("9:00 AM - 11:00 AM") == time(9, 0)
        assert parse_slot_start("12:30 am") == time(0, 30)

    def test_zip_helpers(self):
        assert normalize_zipcode("90210-1234") == "90210"
        assert normalize_zipcode("9021") is None
        assert extract_zip_code("123 Main St, Beverly Hills, CA 90210") == "90210"


class TestServiceAreaChecker:
    def test_lookup_known_zip(self):
        location = lookup_zipcode("90210")
        assert location["state"] == "CA"

    @pytest.mark.asyncio
    async def test_served_zip(self, backend, fake_backend):
        fake_backend.on("GET", "/api/service-areas/check/90210", {"served": True})

        result = await ServiceAreaChecker(backend).check_zipcode("90210")

        assert result.served is True
        assert result.city == "Beverly Hills"

    @pytest.mark.asyncio
    async def test_unknown_zip_not_served_without_request(self, backend, fake_backend):
        result = await ServiceAreaChecker(backend).check_zipcode("00000")

        assert result.served is False
        assert fake_backend.requests == []

    @pytest.mark.asyncio
    async def test_failed_check_is_unknown(self, backend, fake_backend):
        fake_backend.on("GET", "/api/service-areas/check/90210", {"error": "boom"}, status=500)

        result = await ServiceAreaChecker(backend).check_address("1 Rodeo Dr, CA 90210")

        assert result.served is None


class TestCsvExport:
    def test_quoting_and_empty_values(self):
        text = to_csv(
            [
                {"id": "b1", "name": 'Jane "JD" Doe', "notes": None, "address": "1 Main St, Apt 2"},
                {"id": "b2", "name": "Sam", "notes": "line one\nline two", "tags": ["a", "b"]},
            ]
        )
        lines = text.split("\n")

        assert lines[0] == "Id,Name,Notes,Address,Tags"
        assert lines[1] == 'b1,"Jane ""JD"" Doe",,"1 Main St, Apt 2",'
        assert '"[""a"", ""b""]"' in text

    def test_headers_from_camel_case(self):
        assert header_for("cancellationFeeStatus") == "Cancellation Fee Status"


class TestErrors:
    def test_step_error_lists_missing_fields(self):
        body = StepValidationError(2, ["date", "timeSlot"]).to_dict()
        assert body["missing"] == ["date", "timeSlot"]
        assert body["notice"]["variant"] == "destructive"

    @pytest.mark.parametrize("backend_status, expected", [(404, 404), (500, 502), (0, 503), (503, 503)])
    def test_backend_status_mapping(self, backend_status, expected):
        assert BackendRequestError("x", status=backend_status).status_code == expected


class TestRedisConnection:
    @pytest.fixture
    def unreachable_redis(self, monkeypatch):
        attempts = []

        class DownRedis:
            def ping(self):
                raise redis.ConnectionError("Connection refused")

        def from_url(url, **kwargs):
            attempts.append(url)
            return DownRedis()

        monkeypatch.setattr(rate_limiter, "REDIS_URL", "redis://localhost:6390/0")
        monkeypatch.setattr(rate_limiter, "redis_client", None)
        monkeypatch.setattr(rate_limiter, "last_redis_failure", None)
        monkeypatch.setattr(rate_limiter.redis, "from_url", from_url)
        return attempts

    def test_failed_connection_not_retried_within_interval(self, unreachable_redis):
        assert rate_limiter.get_redis_client() is None
        assert rate_limiter.get_redis_client() is None

        assert len(unreachable_redis) == 1

    def test_reconnects_after_interval(self, unreachable_redis, monkeypatch):
        rate_limiter.get_redis_client()
        monkeypatch.setattr(
            rate_limiter, "last_redis_failure", rate_limiter.last_redis_failure - rate_limiter.REDIS_RETRY_INTERVAL
        )

        rate_limiter.get_redis_client()

        assert len(unreachable_redis) == 2
