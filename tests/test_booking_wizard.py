"""Tests for the booking wizard state machine."""
from datetime import date

import pytest

from cleangreen.domain.booking import wizard
from cleangreen.domain.booking.schemas import (
    AppliedDiscounts,
    PromoDiscount,
    ScheduleDetails,
    ServiceSelection,
    Step1,
    Step2,
    Step3,
    Step4,
    Submitted,
)
from cleangreen.errors import (
    AcknowledgmentRequiredError,
    InvalidTransitionError,
    StepValidationError,
    ValidationFailed,
)

TODAY = date(2025, 6, 1)

SCHEDULE = {
    "propertySize": "Medium (1000-2000 sq ft)",
    "date": "2025-06-10",
    "timeSlot": "10:00 AM",
}

CONTACT = {
    "name": "Jane Doe",
    "email": "Jane@Example.com",
    "phone": "(555) 123-4567",
    "address": "123 Main St, Beverly Hills, CA 90210",
}


@pytest.fixture
def step2():
    return Step2(service=ServiceSelection(service="Residential Cleaning"))


@pytest.fixture
def step3():
    return Step3(
        service=ServiceSelection(service="Residential Cleaning"),
        schedule=ScheduleDetails(**SCHEDULE),
    )


@pytest.fixture
def step4(step3):
    return wizard.set_contact(step3, CONTACT)


class TestStepGating:
    """Forward moves require the step's fields; failures leave the state untouched."""

    def test_service_required(self):
        with pytest.raises(StepValidationError) as exc_info:
            wizard.advance(wizard.start(), {"service": "  "})
        assert exc_info.value.step == 1
        assert exc_info.value.missing == ["service"]

    def test_service_selected(self):
        state = wizard.advance(wizard.start(), {"service": "Residential Cleaning"})
        assert isinstance(state, Step2)
        assert state.service.service == "Residential Cleaning"

    def test_schedule_lists_every_missing_field(self, step2):
        with pytest.raises(StepValidationError) as exc_info:
            wizard.advance(step2, {"propertySize": "Medium (1000-2000 sq ft)"}, today=TODAY)
        assert exc_info.value.missing == ["date", "timeSlot"]

    def test_past_date_rejected(self, step2):
        with pytest.raises(ValidationFailed):
            wizard.advance(step2, dict(SCHEDULE, date="2025-05-31"), today=TODAY)

    def test_malformed_date_rejected(self, step2):
        with pytest.raises(ValidationFailed):
            wizard.advance(step2, dict(SCHEDULE, date="06/10/2025"), today=TODAY)

    def test_unknown_time_slot_rejected(self, step2):
        with pytest.raises(ValidationFailed) as exc_info:
            wizard.advance(step2, dict(SCHEDULE, timeSlot="9:30 PM"), today=TODAY)
        assert exc_info.value.title == "Invalid time slot"

    def test_unknown_property_size_rejected(self, step2):
        with pytest.raises(ValidationFailed) as exc_info:
            wizard.advance(step2, dict(SCHEDULE, propertySize="Castle"), today=TODAY)
        assert exc_info.value.title == "Invalid property size"

    def test_schedule_accepted(self, step2):
        state = wizard.advance(step2, SCHEDULE, today=TODAY)
        assert isinstance(state, Step3)
        assert state.schedule.timeSlot == "10:00 AM"
        assert state.schedule.isRecurring is False

    def test_recurring_defaults_to_weekly(self, step2):
        state = wizard.advance(step2, dict(SCHEDULE, isRecurring=True), today=TODAY)
        assert state.schedule.recurringFrequency == "weekly"

    def test_recurring_end_before_start_rejected(self, step2):
        with pytest.raises(ValidationFailed):
            wizard.advance(
                step2,
                dict(SCHEDULE, isRecurring=True, recurringEndDate="2025-06-01"),
                today=TODAY,
            )

    def test_contact_requires_all_fields(self, step3):
        with pytest.raises(StepValidationError) as exc_info:
            wizard.advance(step3, {"name": "Jane Doe", "email": "jane@example.com"})
        assert exc_info.value.step == 3
        assert exc_info.value.missing == ["phone", "address"]

    def test_contact_rejects_bad_email(self, step3):
        with pytest.raises(ValidationFailed):
            wizard.advance(step3, dict(CONTACT, email="not-an-email"))

    def test_contact_accepted(self, step4):
        assert isinstance(step4, Step4)
        assert step4.contact.email == "jane@example.com"

    def test_payment_step_cannot_advance(self, step4):
        with pytest.raises(InvalidTransitionError):
            wizard.advance(step4, {})


class TestBackNavigation:
    """Going back keeps what the customer entered as prefill."""

    def test_back_from_step2_prefills_service(self, step2):
        state = wizard.back(step2)
        assert isinstance(state, Step1)
        assert state.prefill.service == "Residential Cleaning"

    def test_prefill_used_when_input_blank(self, step2):
        previous = wizard.back(step2)
        state = wizard.advance(previous, {"service": ""})
        assert state.service.service == "Residential Cleaning"

    def test_back_from_step4_keeps_contact_and_discounts(self, step3):
        discounts = AppliedDiscounts(
            promo=PromoDiscount(promoCodeId="p1", code="SAVE10", discountAmount=1000)
        )
        step4 = wizard.set_contact(wizard.with_discounts(step3, discounts), CONTACT)

        state = wizard.back(step4)

        assert isinstance(state, Step3)
        assert state.prefill.name == "Jane Doe"
        assert state.discounts.promo.code == "SAVE10"

    def test_back_from_step1_rejected(self):
        with pytest.raises(InvalidTransitionError):
            wizard.back(Step1())


class TestSubmission:
    def test_policy_acknowledgment_required(self, step4):
        with pytest.raises(AcknowledgmentRequiredError):
            wizard.build_booking_payload(step4, "pm_123", False)

    def test_payment_method_required(self, step4):
        with pytest.raises(ValidationFailed):
            wizard.build_booking_payload(step4, "", True)

    def test_payload_carries_promo(self, step3):
        discounts = AppliedDiscounts(
            promo=PromoDiscount(promoCodeId="p1", code="SAVE10", discountAmount=1500)
        )
        step4 = wizard.set_contact(wizard.with_discounts(step3, discounts), CONTACT)

        payload = wizard.build_booking_payload(step4, "pm_123", True)

        assert payload["promoCodeId"] == "p1"
        assert payload["discountAmount"] == 1500
        assert payload["status"] == "pending"
        assert payload["recurringFrequency"] is None

    def test_submitted_state(self, step4):
        state = wizard.submitted(step4, {"id": 42, "status": "pending"})
        assert isinstance(state, Submitted)
        assert state.bookingId == "42"
        assert (state.date, state.timeSlot) == ("2025-06-10", "10:00 AM")



class TestReplay:
    """A payment-step state is run through every gate again before submission."""

    def test_valid_state_survives(self, step4):
        replayed = wizard.replay(step4, today=TODAY)
        assert replayed.contact.email == "jane@example.com"
        assert replayed.schedule == step4.schedule

    def test_blank_service_rejected(self, step4):
        forged = step4.model_copy(update={"service": ServiceSelection(service="")})
        with pytest.raises(StepValidationError) as exc_info:
            wizard.replay(forged, today=TODAY)
        assert exc_info.value.step == 1

    def test_bad_email_rejected(self, step4):
        contact = step4.contact.model_copy(update={"email": "not-an-email"})
        with pytest.raises(ValidationFailed):
            wizard.replay(step4.model_copy(update={"contact": contact}), today=TODAY)
