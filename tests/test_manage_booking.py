"""Tests for token-based booking management."""
import json
from datetime import date, datetime

import pytest

from cleangreen.domain.booking.policy import cancellation_quote, fee_badge, validate_reschedule
from cleangreen.domain.manage.service import ManageBookingService
from cleangreen.errors import (
    AcknowledgmentRequiredError,
    BackendRequestError,
    DomainRejection,
    ValidationFailed,
)

MANAGE_PATH = "/api/bookings/manage/tok123"


@pytest.fixture
def manage_routes(fake_backend, sample_booking, slots_route):
    """The backend keeps the booking's date until an admin approves a reschedule."""
    booking = dict(sample_booking)

    def patch_booking(request):
        body = json.loads(request.content)
        if body.get("status") == "cancelled":
            booking["status"] = "cancelled"
            booking["cancellationFeeStatus"] = "pending"
            return 200, booking
        booking["status"] = "pending_reschedule"
        return 200, {"message": "Reschedule request submitted"}

    fake_backend.on("GET", MANAGE_PATH, handler=lambda request: (200, booking))
    fake_backend.on("PATCH", MANAGE_PATH, handler=patch_booking)
    return fake_backend


@pytest.fixture
def service(backend, base_time, today):
    return ManageBookingService(backend, now=base_time, today=today)


class TestPolicy:
    def test_late_cancellation_quote(self, sample_booking, base_time):
        quote = cancellation_quote(sample_booking, base_time)
        assert quote.lateCancellation is True
        assert quote.feeCents == 3500
        assert quote.fee == "$35.00"

    def test_early_cancellation_quote(self, sample_booking):
        quote = cancellation_quote(sample_booking, datetime(2025, 6, 1, 9, 0))
        assert quote.lateCancellation is False
        assert quote.feeCents == 0

    def test_unknown_fee_status_shows_no_fee(self):
        assert fee_badge("mystery").label == "No Fee"
        assert fee_badge("charged").variant == "destructive"

    def test_reschedule_needs_date_and_slot(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_reschedule(None, None, date(2025, 6, 1))
        assert "date and time slot" in exc_info.value.message


class TestManageBooking:
    @pytest.mark.asyncio
    async def test_view(self, service, manage_routes):
        view = await service.get_view("tok123")
        assert view.canCancel is True
        assert view.cancellationQuote.lateCancellation is True
        assert view.feeBadge.label == "No Fee"

    @pytest.mark.asyncio
    async def test_unknown_token(self, service, fake_backend):
        fake_backend.on("GET", "/api/bookings/manage/missing", {"error": "Booking not found"}, status=404)
        with pytest.raises(BackendRequestError) as exc_info:
            await service.get_view("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_cancel_blocked_without_acknowledgment(self, service, manage_routes):
        with pytest.raises(AcknowledgmentRequiredError):
            await service.cancel("tok123", acknowledged_fee=False)
        assert manage_routes.requests == []

    @pytest.mark.asyncio
    async def test_cancel_with_acknowledgment(self, service, manage_routes):
        result = await service.cancel("tok123", acknowledged_fee=True)

        assert manage_routes.calls("PATCH", MANAGE_PATH)[0]["json"] == {"status": "cancelled"}
        assert result.view.booking.status == "cancelled"
        assert result.view.feeBadge.label == "Fee Pending"
        assert result.view.canCancel is False

    @pytest.mark.asyncio
    async def test_cancel_twice_rejected(self, service, manage_routes):
        await service.cancel("tok123", acknowledged_fee=True)
        with pytest.raises(DomainRejection):
            await service.cancel("tok123", acknowledged_fee=True)

    @pytest.mark.asyncio
    async def test_reschedule_keeps_current_date(self, service, manage_routes):
        result = await service.request_reschedule("tok123", "2025-06-12", "10:00 AM", "Gate code 1234")

        sent = manage_routes.calls("PATCH", MANAGE_PATH)[0]["json"]
        assert sent == {"date": "2025-06-12", "timeSlot": "10:00 AM", "customerNotes": "Gate code 1234"}
        assert result.view.booking.date == "2025-06-10"
        assert result.view.booking.timeSlot == "10:00 AM"
        assert result.view.reschedulePending is True
        assert result.notices[0].description == "Reschedule request submitted"

    @pytest.mark.asyncio
    async def test_second_reschedule_rejected_while_pending(self, service, manage_routes):
        await service.request_reschedule("tok123", "2025-06-12", "10:00 AM")
        with pytest.raises(DomainRejection):
            await service.request_reschedule("tok123", "2025-06-13", "10:00 AM")

    @pytest.mark.asyncio
    async def test_reschedule_into_full_slot_rejected(self, service, manage_routes, slot_counts):
        slot_counts["10:00 AM"]["available"] = 0
        with pytest.raises(DomainRejection):
            await service.request_reschedule("tok123", "2025-06-12", "10:00 AM")
        assert manage_routes.calls("PATCH", MANAGE_PATH) == []
