"""Booking service - runs the wizard against the backend"""

import logging
from datetime import date as date_type
from typing import Optional

from ...backend import BackendClient
from ...config import (
    CANCELLATION_FEE_CENTS,
    PROPERTY_SIZES,
    RECURRING_FREQUENCIES,
    STRIPE_PUBLISHABLE_KEY,
    TIME_SLOTS,
)
from ...errors import BackendRequestError, BookingSubmissionError, InvalidTransitionError
from ...notices import Notice, failure, format_cents, success
from ...services.service_area_checker import ServiceAreaChecker
from . import discounts as discount_rules
from . import wizard
from .availability import SlotAvailability
from .discounts import DiscountResolver
from .repository import BookingRepository
from .schemas import (
    BookingOptionsResponse,
    ContactInput,
    PaymentSetupResponse,
    SlotOption,
    Step2,
    Step3,
    Step4,
    WizardResponse,
)

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for the customer booking wizard"""

    def __init__(self, backend: BackendClient, today: Optional[date_type] = None):
        self.repo = BookingRepository(backend)
        self.availability = SlotAvailability(backend)
        self.discounts = DiscountResolver(backend)
        self.service_areas = ServiceAreaChecker(backend)
        self.today = today

    async def get_options(self) -> BookingOptionsResponse:
        """Everything the wizard needs to render its choices"""
        services = await self.repo.get_services()
        settings = await self.repo.get_settings()
        return BookingOptionsResponse(
            services=services,
            propertySizes=PROPERTY_SIZES,
            timeSlots=TIME_SLOTS,
            recurringFrequencies=RECURRING_FREQUENCIES,
            cancellationPolicy=settings.cancellationPolicy,
            cancellationFee=format_cents(CANCELLATION_FEE_CENTS),
            stripePublishableKey=STRIPE_PUBLISHABLE_KEY,
        )

    async def get_slot_options(self, date: str) -> list[SlotOption]:
        return await self.availability.get_slot_options(date)

    def start(self) -> WizardResponse:
        return WizardResponse(state=wizard.start())

    async def advance(self, state, data: Optional[dict] = None) -> WizardResponse:
        """
        Move the wizard forward.

        Step 2 also refuses a slot the server reports as full. Step 3 checks the
        address ZIP (never blocking) and prepares the payment element.
        """
        next_state = wizard.advance(state, data, today=self.today)
        notices: list[Notice] = []
        client_secret = None

        if isinstance(next_state, Step2):
            logger.info(f"🧽 Service selected: {next_state.service.service}")

        elif isinstance(next_state, Step3):
            schedule = next_state.schedule
            await self.availability.ensure_selectable(schedule.date, schedule.timeSlot)
            logger.info(f"📅 Schedule set: {schedule.date} {schedule.timeSlot} ({schedule.propertySize})")

        elif isinstance(next_state, Step4):
            zip_check = await self.service_areas.check_address(next_state.contact.address)
            next_state = next_state.model_copy(update={"zipCodeServed": zip_check.served})
            if zip_check.served is False:
                notices.append(
                    failure("Outside our service area", zip_check.message)
                )
            client_secret = await self.create_payment_setup_secret()

        return WizardResponse(state=next_state, notices=notices, clientSecret=client_secret)

    def back(self, state) -> WizardResponse:
        return WizardResponse(state=wizard.back(state))

    def _require_contact_step(self, state) -> Step3:
        if not isinstance(state, Step3):
            raise InvalidTransitionError("Codes can only be applied on the contact step")
        return state

    async def apply_promo(self, state, code: Optional[str]) -> WizardResponse:
        state = self._require_contact_step(state)
        discounts, notice = await self.discounts.apply_promo(state.discounts, code)
        return WizardResponse(state=wizard.with_discounts(state, discounts), notices=[notice])

    async def apply_referral(
        self, state, code: Optional[str], contact: Optional[ContactInput] = None
    ) -> WizardResponse:
        """
        Validate a referral code.

        The backend checks the referee's address, email and phone, taken from the
        contact form as typed so far and falling back to the step's prefill.
        """
        state = self._require_contact_step(state)
        values = state.prefill.model_dump() if state.prefill else {}
        if contact is not None:
            values.update({k: v for k, v in contact.model_dump().items() if v and v.strip()})
        discounts, notice = await self.discounts.apply_referral(
            state.discounts,
            code,
            address=values.get("address"),
            email=values.get("email"),
            phone=values.get("phone"),
        )
        return WizardResponse(state=wizard.with_discounts(state, discounts), notices=[notice])

    def remove_promo(self, state) -> WizardResponse:
        state = self._require_contact_step(state)
        return WizardResponse(
            state=wizard.with_discounts(state, discount_rules.remove_promo(state.discounts))
        )

    def remove_referral(self, state) -> WizardResponse:
        state = self._require_contact_step(state)
        return WizardResponse(
            state=wizard.with_discounts(state, discount_rules.remove_referral(state.discounts))
        )

    async def create_payment_setup_secret(self) -> str:
        client_secret = await self.repo.create_setup_intent()
        if not client_secret:
            raise BackendRequestError("Failed to initialize payment. Please try again.")
        return client_secret

    async def payment_setup(self) -> PaymentSetupResponse:
        return PaymentSetupResponse(
            clientSecret=await self.create_payment_setup_secret(),
            publishableKey=STRIPE_PUBLISHABLE_KEY,
        )

    async def submit(
        self, state, payment_method_id: Optional[str], agreed_to_cancellation_policy: bool
    ) -> WizardResponse:
        """
        Create the booking.

        The state arrives from the client, so the step gates, the slot and the
        applied codes are all checked again first. If the backend refuses the
        booking, the caller gets a "Booking Failed" notice and the same Step4
        state back; nothing is retried.
        """
        if not isinstance(state, Step4):
            raise InvalidTransitionError("Complete the previous steps before submitting")

        state = wizard.replay(state, today=self.today)
        wizard.require_payment_confirmation(payment_method_id, agreed_to_cancellation_policy)
        await self.availability.ensure_selectable(state.schedule.date, state.schedule.timeSlot)

        contact = state.contact
        discounts = await self.discounts.revalidate(
            state.discounts, address=contact.address, email=contact.email, phone=contact.phone
        )
        state = state.model_copy(update={"discounts": discounts})
        payload = wizard.build_booking_payload(state, payment_method_id, agreed_to_cancellation_policy)
        logger.info(
            f"📥 Submitting booking for {state.contact.email}: "
            f"{state.service.service} on {state.schedule.date} {state.schedule.timeSlot}"
        )

        try:
            booking = await self.repo.create_booking(payload)
        except BackendRequestError as e:
            logger.error(f"❌ Booking submission failed for {state.contact.email}: {e.message}")
            raise BookingSubmissionError(
                e.message if 400 <= e.backend_status < 500
                else "There was an error submitting your booking. Please try again.",
                status=e.backend_status,
                state=state.model_dump(),
            ) from e

        self.availability.invalidate(state.schedule.date)
        result = wizard.submitted(state, booking if isinstance(booking, dict) else None)
        logger.info(f"✅ Booking created: {result.bookingId}")
        return WizardResponse(
            state=result,
            notices=[
                success(
                    "Booking Confirmed!",
                    "We've received your booking request. We'll contact you shortly to confirm.",
                )
            ],
        )
