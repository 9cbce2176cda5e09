"""Tests for the customer portal."""
from datetime import date

import pytest

from cleangreen.domain.customer_portal.service import CustomerPortalService, customer_email
from cleangreen.errors import DomainRejection, ValidationFailed

EMAIL = "jane@example.com"


@pytest.fixture
def service(backend):
    return CustomerPortalService(backend, today=date(2025, 6, 5))


def test_email_is_required():
    with pytest.raises(ValidationFailed):
        customer_email("  ")


def test_email_normalized():
    assert customer_email(" Jane@Example.COM ") == EMAIL


class TestCustomerPortal:
    @pytest.mark.asyncio
    async def test_bookings_with_fee_badges(self, service, fake_backend, sample_booking):
        fake_backend.on(
            "GET",
            f"/api/bookings/customer/{EMAIL}",
            [
                dict(sample_booking, id="b1", date="2025-05-20", status="cancelled", cancellationFeeStatus="charged"),
                dict(sample_booking, id="b2", date="2025-06-10"),
            ],
        )

        rows = await service.bookings("Jane@example.com")

        assert [row.booking.id for row in rows] == ["b2", "b1"]
        assert rows[0].isUpcoming is True
        assert rows[1].feeBadge.label == "Fee Charged"

    @pytest.mark.asyncio
    async def test_referral_stats(self, service, fake_backend):
        fake_backend.on(
            "GET",
            f"/api/referrals/customer-stats/{EMAIL}",
            {"referralCode": "JANE-2025", "successfulReferrals": 2, "availableCredits": 4000, "tierLevel": 2, "nextTierAmount": 3},
        )

        stats = await service.referral_stats(EMAIL)

        assert stats.referralCode == "JANE-2025"
        assert stats.referrals == []

    @pytest.mark.asyncio
    async def test_pause_recurring(self, service, fake_backend):
        plan = {
            "id": "rb1",
            "service": "Residential Cleaning",
            "propertySize": "Small (< 1000 sq ft)",
            "frequency": "weekly",
            "preferredTimeSlot": "10:00 AM",
            "name": "Jane Doe",
            "email": EMAIL,
            "phone": "5551234567",
            "address": "123 Main St",
            "startDate": "2025-06-01",
            "nextOccurrence": "2025-06-08",
            "status": "active",
        }
        fake_backend.on("GET", f"/api/customer-portal/recurring-bookings/{EMAIL}", [plan])
        fake_backend.on("POST", "/api/customer-portal/recurring-bookings/rb1/pause", dict(plan, status="paused"))

        result = await service.pause_recurring("rb1", EMAIL)

        assert result.notices[0].title == "Subscription paused"
        assert len(fake_backend.calls("POST", "/api/customer-portal/recurring-bookings/rb1/pause")) == 1

    @pytest.mark.asyncio
    async def test_other_customers_plan_rejected(self, service, fake_backend):
        fake_backend.on("GET", f"/api/customer-portal/recurring-bookings/{EMAIL}", [])

        with pytest.raises(DomainRejection):
            await service.resume_recurring("rb9", EMAIL)
        assert fake_backend.calls("POST", "/api/customer-portal/recurring-bookings/rb9/resume") == []
