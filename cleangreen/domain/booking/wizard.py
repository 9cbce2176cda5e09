"""
Booking wizard state machine

Step1 (service) -> Step2 (schedule) -> Step3 (contact, discounts) -> Step4 (payment) -> Submitted

Forward moves are gated by per-step required-field checks; backward moves never
validate and hand the step's data back as prefill so nothing the customer typed
is lost. Every function here is pure - backend calls live in service.py.
"""

from datetime import date as date_type
from typing import Optional, Union

from ...config import PROPERTY_SIZES, RECURRING_FREQUENCIES, TIME_SLOTS
from ...errors import (
    AcknowledgmentRequiredError,
    InvalidTransitionError,
    StepValidationError,
    ValidationFailed,
)
from ...shared.validators import parse_iso_date, validate_email
from .schemas import (
    AppliedDiscounts,
    ContactDetails,
    ContactInput,
    ScheduleDetails,
    ScheduleInput,
    ServiceInput,
    ServiceSelection,
    Step1,
    Step2,
    Step3,
    Step4,
    Submitted,
)

State = Union[Step1, Step2, Step3, Step4, Submitted]


def start() -> Step1:
    return Step1()


def _merged(prefill, data: dict) -> dict:
    """Input values over prefill values; blank input falls back to prefill"""
    values = prefill.model_dump() if prefill is not None else {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip() and values.get(key):
            continue
        values[key] = value
    return values


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _missing(values: dict, required: dict[str, str]) -> list[str]:
    return [label for field, label in required.items() if _blank(values.get(field))]


def select_service(state: Step1, data: dict) -> Step2:
    values = _merged(state.prefill, ServiceInput.model_validate(data).model_dump())
    missing = _missing(values, {"service": "service"})
    if missing:
        raise StepValidationError(1, missing)
    return Step2(service=ServiceSelection(service=values["service"].strip()))


def set_schedule(state: Step2, data: dict, today: Optional[date_type] = None) -> Step3:
    values = _merged(state.prefill, ScheduleInput.model_validate(data).model_dump())
    missing = _missing(
        values, {"propertySize": "propertySize", "date": "date", "timeSlot": "timeSlot"}
    )
    if missing:
        raise StepValidationError(2, missing)

    if values["propertySize"].strip() not in PROPERTY_SIZES:
        raise ValidationFailed(
            f"Property size must be one of: {', '.join(PROPERTY_SIZES)}",
            title="Invalid property size",
        )
    if values["timeSlot"].strip() not in TIME_SLOTS:
        raise ValidationFailed(
            f"Time slot must be one of: {', '.join(TIME_SLOTS)}",
            title="Invalid time slot",
        )

    try:
        appointment_date = parse_iso_date(values["date"])
    except ValueError as e:
        raise ValidationFailed(str(e), title="Invalid date") from e
    if appointment_date < (today or date_type.today()):
        raise ValidationFailed(
            "Cannot book appointments in the past. Please select a future date.",
            title="Invalid date",
        )

    is_recurring = bool(values.get("isRecurring"))
    frequency = None
    end_date = None
    if is_recurring:
        frequency = values.get("recurringFrequency") or RECURRING_FREQUENCIES[0]
        if frequency not in RECURRING_FREQUENCIES:
            raise ValidationFailed(
                f"Recurring frequency must be one of: {', '.join(RECURRING_FREQUENCIES)}",
                title="Invalid recurring schedule",
            )
        end_date = values.get("recurringEndDate") or None
        if end_date:
            try:
                parsed_end = parse_iso_date(end_date)
            except ValueError as e:
                raise ValidationFailed(str(e), title="Invalid recurring schedule") from e
            if parsed_end < appointment_date:
                raise ValidationFailed(
                    "Recurring end date cannot be before the first appointment",
                    title="Invalid recurring schedule",
                )

    schedule = ScheduleDetails(
        propertySize=values["propertySize"].strip(),
        date=values["date"],
        timeSlot=values["timeSlot"].strip(),
        isRecurring=is_recurring,
        recurringFrequency=frequency,
        recurringEndDate=end_date,
    )
    return Step3(service=state.service, schedule=schedule)


def set_contact(state: Step3, data: dict) -> Step4:
    values = _merged(state.prefill, ContactInput.model_validate(data).model_dump())
    missing = _missing(
        values, {"name": "name", "email": "email", "phone": "phone", "address": "address"}
    )
    if missing:
        raise StepValidationError(3, missing)

    try:
        email = validate_email(values["email"])
    except ValueError as e:
        raise ValidationFailed(str(e), title="Invalid email") from e

    contact = ContactDetails(
        name=values["name"].strip(),
        email=email,
        phone=values["phone"].strip(),
        address=values["address"].strip(),
    )
    return Step4(
        service=state.service,
        schedule=state.schedule,
        contact=contact,
        discounts=state.discounts,
    )


def advance(
    state: State, data: Optional[dict] = None, today: Optional[date_type] = None
) -> Union[Step2, Step3, Step4]:
    """Move forward one step; a failed gate raises and leaves the state as it was"""
    data = data or {}
    if isinstance(state, Step1):
        return select_service(state, data)
    if isinstance(state, Step2):
        return set_schedule(state, data, today)
    if isinstance(state, Step3):
        return set_contact(state, data)
    if isinstance(state, Step4):
        raise InvalidTransitionError("Submit the booking to finish this step")
    raise InvalidTransitionError("This booking has already been submitted")


def replay(state: Step4, today: Optional[date_type] = None) -> Step4:
    """
    Run a payment-step state through every forward gate again.

    The state travels through the client between requests, so its service,
    schedule and contact are re-checked before anything is sent to the backend.
    Discounts are carried over unchanged; the caller re-validates them.
    """
    step2 = select_service(Step1(), state.service.model_dump())
    step3 = set_schedule(step2, state.schedule.model_dump(), today)
    step4 = set_contact(step3, state.contact.model_dump())
    return step4.model_copy(
        update={"discounts": state.discounts, "zipCodeServed": state.zipCodeServed}
    )


def back(state: State) -> Union[Step1, Step2, Step3]:
    if isinstance(state, Step2):
        return Step1(prefill=state.service)
    if isinstance(state, Step3):
        return Step2(service=state.service, prefill=state.schedule)
    if isinstance(state, Step4):
        return Step3(
            service=state.service,
            schedule=state.schedule,
            prefill=state.contact,
            discounts=state.discounts,
        )
    if isinstance(state, Step1):
        raise InvalidTransitionError("Already at the first step")
    raise InvalidTransitionError("This booking has already been submitted")


def with_discounts(state: Step3, discounts: AppliedDiscounts) -> Step3:
    return state.model_copy(update={"discounts": discounts})


def require_payment_confirmation(
    payment_method_id: Optional[str], agreed_to_cancellation_policy: bool
) -> None:
    if not agreed_to_cancellation_policy:
        raise AcknowledgmentRequiredError("Please agree to the cancellation policy to continue.")
    if _blank(payment_method_id):
        raise ValidationFailed("A payment method is required to hold your booking.", title="Payment method required")


def build_booking_payload(
    state: Step4, payment_method_id: Optional[str], agreed_to_cancellation_policy: bool
) -> dict:
    """
    Booking body for POST /api/bookings.

    Requires the payment-method token captured by the hosted payment element and
    the cancellation policy checkbox.
    """
    require_payment_confirmation(payment_method_id, agreed_to_cancellation_policy)

    schedule = state.schedule
    discounts = state.discounts
    return {
        "service": state.service.service,
        "propertySize": schedule.propertySize,
        "date": schedule.date,
        "timeSlot": schedule.timeSlot,
        "name": state.contact.name,
        "email": state.contact.email,
        "phone": state.contact.phone,
        "address": state.contact.address,
        "status": "pending",
        "paymentMethodId": payment_method_id,
        "promoCodeId": discounts.promo.promoCodeId if discounts.promo else None,
        "discountAmount": discounts.promo.discountAmount if discounts.promo else 0,
        "referralCode": discounts.referral.code if discounts.referral else None,
        "isRecurring": schedule.isRecurring,
        "recurringFrequency": schedule.recurringFrequency if schedule.isRecurring else None,
        "recurringEndDate": schedule.recurringEndDate if schedule.isRecurring else None,
    }


def submitted(state: Step4, booking: Optional[dict]) -> Submitted:
    booking = booking or {}
    booking_id = booking.get("id")
    return Submitted(
        bookingId=str(booking_id) if booking_id is not None else None,
        status=booking.get("status") or "pending",
        date=state.schedule.date,
        timeSlot=state.schedule.timeSlot,
    )
