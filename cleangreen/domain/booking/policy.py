"""
Cancellation and reschedule policy

Late cancellations (inside the window before the appointment start) carry a flat
fee. Whether the fee is actually charged is decided by the backend; the portal
warns, requires acknowledgment and shows the backend's fee status.
"""

from datetime import date as date_type
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ...config import CANCELLATION_FEE_CENTS, CANCELLATION_WINDOW_HOURS
from ...errors import ValidationFailed
from ...notices import format_cents
from ...shared.validators import appointment_datetime, parse_iso_date

FEE_STATUS_LABELS = {
    "not_applicable": "No Fee",
    "pending": "Fee Pending",
    "dismissed": "Fee Waived",
    "charged": "Fee Charged",
}

FEE_STATUS_VARIANTS = {
    "not_applicable": "outline",
    "pending": "default",
    "dismissed": "secondary",
    "charged": "destructive",
}


class FeeBadge(BaseModel):
    status: str
    label: str
    variant: str


class CancellationQuote(BaseModel):
    lateCancellation: bool
    feeCents: int
    fee: str
    hoursUntilAppointment: Optional[float] = None
    windowHours: int
    requiresAcknowledgment: bool = True
    message: str


def fee_badge(status: Optional[str]) -> FeeBadge:
    """Badge for a cancellation fee status; unknown values show as "No Fee" """
    key = status if status in FEE_STATUS_LABELS else "not_applicable"
    return FeeBadge(status=key, label=FEE_STATUS_LABELS[key], variant=FEE_STATUS_VARIANTS[key])


def _field(booking: Any, name: str) -> Any:
    if isinstance(booking, dict):
        return booking.get(name)
    return getattr(booking, name, None)


def hours_until_appointment(booking: Any, now: Optional[datetime] = None) -> Optional[float]:
    """Hours from now to the slot start; None when the date or slot cannot be read"""
    try:
        starts_at = appointment_datetime(_field(booking, "date"), _field(booking, "timeSlot"))
    except (TypeError, ValueError):
        return None
    now = now or datetime.now()
    return (starts_at - now).total_seconds() / 3600


def cancellation_quote(booking: Any, now: Optional[datetime] = None) -> CancellationQuote:
    """Warning shown before a customer cancels - not a decision about the fee"""
    hours = hours_until_appointment(booking, now)
    late = hours is not None and hours < CANCELLATION_WINDOW_HOURS
    fee = format_cents(CANCELLATION_FEE_CENTS)

    if late:
        message = (
            f"Your appointment is less than {CANCELLATION_WINDOW_HOURS} hours away. "
            f"A {fee} cancellation fee may be charged to your card on file."
        )
    else:
        message = (
            f"Cancellations made less than {CANCELLATION_WINDOW_HOURS} hours before the "
            f"appointment may incur a {fee} fee."
        )

    return CancellationQuote(
        lateCancellation=late,
        feeCents=CANCELLATION_FEE_CENTS if late else 0,
        fee=fee,
        hoursUntilAppointment=round(hours, 2) if hours is not None else None,
        windowHours=CANCELLATION_WINDOW_HOURS,
        message=message,
    )


def validate_reschedule(date: Optional[str], time_slot: Optional[str], today: Optional[date_type] = None) -> None:
    """A reschedule request needs a date and a slot, and the date cannot be in the past"""
    missing = [name for name, value in (("date", date), ("time slot", time_slot)) if not value]
    if missing:
        raise ValidationFailed(f"Please select a new {' and '.join(missing)}")

    try:
        requested = parse_iso_date(date)
    except ValueError as e:
        raise ValidationFailed(str(e), title="Invalid date") from e

    if requested < (today or date_type.today()):
        raise ValidationFailed("Please select a date in the future", title="Invalid date")
