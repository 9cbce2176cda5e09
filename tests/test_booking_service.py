"""Tests for the booking flow against the fake backend."""
import pytest

from cleangreen.domain.booking.schemas import ContactInput, Step2, Step3, Step4, Submitted
from cleangreen.domain.booking.service import BookingService
from cleangreen.errors import (
    BookingSubmissionError,
    DomainRejection,
    InvalidTransitionError,
    StepValidationError,
    ValidationFailed,
)

SCHEDULE = {
    "propertySize": "Medium (1000-2000 sq ft)",
    "date": "2025-06-10",
    "timeSlot": "10:00 AM",
}

CONTACT = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "phone": "(555) 123-4567",
    "address": "123 Main St, Beverly Hills, CA 90210",
}


@pytest.fixture
def booking_routes(slots_route, slot_counts):
    """Backend routes for a full booking: ZIP check, setup intent and booking creation."""

    def create_booking(request):
        slot_counts["10:00 AM"]["available"] -= 1
        return 201, {"id": 42, "status": "pending"}

    slots_route.on("GET", "/api/service-areas/check/90210", {"served": True})
    slots_route.on("POST", "/api/create-setup-intent", {"clientSecret": "seti_123_secret"})
    slots_route.on("POST", "/api/bookings", handler=create_booking)
    return slots_route


@pytest.fixture
def service(backend, today):
    return BookingService(backend, today=today)


async def walk_to_payment(service):
    state = service.start().state
    state = (await service.advance(state, {"service": "Residential Cleaning"})).state
    state = (await service.advance(state, SCHEDULE)).state
    return await service.advance(state, CONTACT)


@pytest.mark.integration
class TestBookingScenario:
    """Last place in a slot: bookable once, then disabled for everyone else."""

    @pytest.mark.asyncio
    async def test_last_slot_becomes_disabled(self, service, booking_routes):
        options = await service.get_slot_options("2025-06-10")
        ten = next(o for o in options if o.timeSlot == "10:00 AM")
        assert (ten.available, ten.capacity, ten.disabled) == (1, 3, False)

        response = await walk_to_payment(service)
        assert isinstance(response.state, Step4)
        assert response.state.zipCodeServed is True
        assert response.clientSecret == "seti_123_secret"

        result = await service.submit(response.state, "pm_card_visa", True)

        assert isinstance(result.state, Submitted)
        assert result.state.bookingId == "42"
        assert result.notices[0].title == "Booking Confirmed!"
        sent = booking_routes.calls("POST", "/api/bookings")[0]["json"]
        assert sent["timeSlot"] == "10:00 AM"
        assert sent["paymentMethodId"] == "pm_card_visa"

        options = await service.get_slot_options("2025-06-10")
        ten = next(o for o in options if o.timeSlot == "10:00 AM")
        assert (ten.available, ten.disabled) == (0, True)

    @pytest.mark.asyncio
    async def test_next_customer_cannot_pick_full_slot(self, service, booking_routes, slot_counts):
        slot_counts["10:00 AM"]["available"] = 0
        state = service.start().state
        state = (await service.advance(state, {"service": "Residential Cleaning"})).state
        assert isinstance(state, Step2)

        with pytest.raises(DomainRejection):
            await service.advance(state, SCHEDULE)


class TestBookingService:
    @pytest.mark.asyncio
    async def test_unserved_zip_warns_but_continues(self, service, booking_routes):
        booking_routes.on("GET", "/api/service-areas/check/90210", {"served": False})

        response = await walk_to_payment(service)

        assert isinstance(response.state, Step4)
        assert response.state.zipCodeServed is False
        assert response.notices[0].title == "Outside our service area"

    @pytest.mark.asyncio
    async def test_promo_only_on_contact_step(self, service):
        with pytest.raises(InvalidTransitionError):
            await service.apply_promo(service.start().state, "SAVE10")

    @pytest.mark.asyncio
    async def test_promo_applied_on_contact_step(self, service, booking_routes):
        booking_routes.on(
            "POST",
            "/api/promo-codes/validate",
            {"valid": True, "discountAmount": 1000, "promoCode": {"id": "p1", "discountType": "fixed", "discountValue": 1000}},
        )
        state = service.start().state
        state = (await service.advance(state, {"service": "Residential Cleaning"})).state
        state = (await service.advance(state, SCHEDULE)).state
        assert isinstance(state, Step3)

        response = await service.apply_promo(state, "save10")

        assert response.state.discounts.promo.promoCodeId == "p1"
        assert service.remove_promo(response.state).state.discounts.promo is None

    @pytest.mark.asyncio
    async def test_failed_submission_returns_state(self, service, booking_routes):
        booking_routes.on("POST", "/api/bookings", {"error": "Card declined"}, status=402)
        response = await walk_to_payment(service)

        with pytest.raises(BookingSubmissionError) as exc_info:
            await service.submit(response.state, "pm_card_visa", True)

        error = exc_info.value
        assert error.message == "Card declined"
        assert error.to_dict()["state"]["step"] == 4
        assert error.notice.title == "Booking Failed"

    @pytest.mark.asyncio
    async def test_submission_requires_payment_step(self, service):
        with pytest.raises(InvalidTransitionError):
            await service.submit(service.start().state, "pm_card_visa", True)


class TestSubmitRechecksState:
    """The payment-step state comes back from the client and is checked again."""

    def forged(self, step4, **changes):
        data = step4.model_dump()
        for section, values in changes.items():
            data[section].update(values)
        return Step4.model_validate(data)

    @pytest.mark.asyncio
    async def test_blank_contact_rejected(self, service, booking_routes):
        step4 = (await walk_to_payment(service)).state
        state = self.forged(step4, contact={"name": "", "email": "", "phone": "", "address": ""})

        with pytest.raises(StepValidationError) as exc_info:
            await service.submit(state, "pm_card_visa", True)

        assert exc_info.value.step == 3
        assert booking_routes.calls("POST", "/api/bookings") == []

    @pytest.mark.asyncio
    async def test_past_date_and_unknown_slot_rejected(self, service, booking_routes):
        step4 = (await walk_to_payment(service)).state

        with pytest.raises(ValidationFailed):
            await service.submit(self.forged(step4, schedule={"date": "1999-01-01"}), "pm_card_visa", True)
        with pytest.raises(ValidationFailed):
            await service.submit(self.forged(step4, schedule={"timeSlot": "banana"}), "pm_card_visa", True)

        assert booking_routes.calls("POST", "/api/bookings") == []

    @pytest.mark.asyncio
    async def test_slot_filled_since_schedule_step(self, service, booking_routes, slot_counts):
        step4 = (await walk_to_payment(service)).state
        slot_counts["10:00 AM"]["available"] = 0
        service.availability.invalidate("2025-06-10")

        with pytest.raises(DomainRejection):
            await service.submit(step4, "pm_card_visa", True)

        assert booking_routes.calls("POST", "/api/bookings") == []

    @pytest.mark.asyncio
    async def test_promo_amount_taken_from_backend(self, service, booking_routes):
        booking_routes.on(
            "POST",
            "/api/promo-codes/validate",
            {"valid": True, "discountAmount": 1000, "promoCode": {"id": "p1", "discountType": "fixed", "discountValue": 1000}},
        )
        step4 = (await walk_to_payment(service)).state
        state = self.forged(
            step4,
            discounts={"promo": {"promoCodeId": "999", "code": "SAVE10", "discountAmount": 100000}},
        )

        await service.submit(state, "pm_card_visa", True)

        sent = booking_routes.calls("POST", "/api/bookings")[0]["json"]
        assert (sent["promoCodeId"], sent["discountAmount"]) == ("p1", 1000)

    @pytest.mark.asyncio
    async def test_promo_no_longer_valid(self, service, booking_routes):
        booking_routes.on("POST", "/api/promo-codes/validate", {"error": "Promo code has expired"}, status=400)
        step4 = (await walk_to_payment(service)).state
        state = self.forged(
            step4, discounts={"promo": {"promoCodeId": "p1", "code": "SAVE10", "discountAmount": 1000}}
        )

        with pytest.raises(DomainRejection) as exc_info:
            await service.submit(state, "pm_card_visa", True)

        assert exc_info.value.message == "Promo code has expired"
        assert booking_routes.calls("POST", "/api/bookings") == []


class TestReferralContact:
    @pytest.mark.asyncio
    async def test_contact_typed_so_far_is_sent(self, service, booking_routes):
        booking_routes.on("POST", "/api/referrals/validate", {"valid": True, "discountAmount": 500})
        state = service.start().state
        state = (await service.advance(state, {"service": "Residential Cleaning"})).state
        state = (await service.advance(state, SCHEDULE)).state
        assert state.prefill is None

        response = await service.apply_referral(
            state, "friend", ContactInput(email="jane@example.com", address="123 Main St", phone=" ")
        )

        sent = booking_routes.calls("POST", "/api/referrals/validate")[0]["json"]
        assert sent == {"code": "FRIEND", "email": "jane@example.com", "address": "123 Main St"}
        assert response.state.discounts.referral.discountAmount == 500
