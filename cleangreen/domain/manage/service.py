"""Manage-booking service - token-based view, cancellation and reschedule requests"""

import logging
from datetime import date as date_type
from datetime import datetime
from typing import Optional

from ...backend import BackendClient
from ...errors import AcknowledgmentRequiredError, DomainRejection
from ...notices import success
from ...schemas import Booking
from ..booking.availability import SlotAvailability
from ..booking.policy import cancellation_quote, fee_badge, validate_reschedule
from .schemas import ManageActionResponse, ManageBookingView

logger = logging.getLogger(__name__)

MANAGE_PATH = "/api/bookings/manage"
CLOSED_STATUSES = ("cancelled", "completed", "rejected")


class ManageBookingService:
    """Service layer for the customer's manage-booking page"""

    def __init__(
        self,
        backend: BackendClient,
        now: Optional[datetime] = None,
        today: Optional[date_type] = None,
    ):
        self.backend = backend
        self.availability = SlotAvailability(backend)
        self.now = now
        self.today = today

    def _path(self, token: str) -> str:
        return f"{MANAGE_PATH}/{token}"

    async def get_booking(self, token: str) -> Booking:
        data = await self.backend.query(self._path(token), ttl=15)
        if not isinstance(data, dict) or not data:
            raise DomainRejection("Booking not found or invalid token", title="Booking not found")
        return Booking.model_validate(data)

    def build_view(self, booking: Booking) -> ManageBookingView:
        open_booking = booking.status not in CLOSED_STATUSES
        return ManageBookingView(
            booking=booking,
            feeBadge=fee_badge(booking.cancellationFeeStatus),
            cancellationQuote=cancellation_quote(booking, self.now) if open_booking else None,
            canCancel=open_booking,
            canReschedule=open_booking and booking.status != "pending_reschedule",
            reschedulePending=booking.status == "pending_reschedule",
        )

    async def get_view(self, token: str) -> ManageBookingView:
        return self.build_view(await self.get_booking(token))

    async def cancel(self, token: str, acknowledged_fee: bool) -> ManageActionResponse:
        """
        Cancel a booking.

        Nothing is sent until the customer has ticked the fee acknowledgment.
        The backend decides whether the late fee applies.
        """
        if not acknowledged_fee:
            raise AcknowledgmentRequiredError(
                "Please acknowledge the cancellation policy before cancelling."
            )

        booking = await self.get_booking(token)
        if booking.status == "cancelled":
            raise DomainRejection("This booking has already been cancelled", title="Already cancelled")
        if booking.status in CLOSED_STATUSES:
            raise DomainRejection(f"A {booking.status} booking cannot be cancelled", title="Cannot cancel")

        await self.backend.patch(self._path(token), {"status": "cancelled"})
        self.backend.invalidate(self._path(token))
        self.availability.invalidate(booking.date)
        logger.info(f"🗑️ Booking {booking.id} cancelled via manage token")

        view = await self.get_view(token)
        return ManageActionResponse(
            view=view,
            notices=[success("Booking Cancelled", "Your booking has been cancelled successfully.")],
        )

    async def request_reschedule(
        self,
        token: str,
        date: Optional[str],
        time_slot: Optional[str],
        customer_notes: Optional[str] = None,
    ) -> ManageActionResponse:
        """
        Ask for a new date and time.

        This only creates a pending request for an admin; the booking keeps its
        current date and time until the request is approved.
        """
        validate_reschedule(date, time_slot, self.today)

        booking = await self.get_booking(token)
        if booking.status in CLOSED_STATUSES:
            raise DomainRejection(f"A {booking.status} booking cannot be rescheduled", title="Cannot reschedule")
        if booking.status == "pending_reschedule":
            raise DomainRejection(
                "A reschedule request for this booking is already awaiting review",
                title="Request pending",
            )

        await self.availability.ensure_selectable(date, time_slot)

        payload = {"date": date, "timeSlot": time_slot}
        if customer_notes:
            payload["customerNotes"] = customer_notes
        result = await self.backend.patch(self._path(token), payload) or {}
        self.backend.invalidate(self._path(token))
        logger.info(f"🔁 Reschedule requested for booking {booking.id}: {date} {time_slot}")

        view = await self.get_view(token)
        message = result.get("message") if isinstance(result, dict) else None
        return ManageActionResponse(
            view=view,
            notices=[
                success(
                    "Reschedule Requested",
                    message or "Your request has been submitted. You'll receive an email once it's reviewed.",
                )
            ],
        )
