"""Customer portal service - everything a customer sees after entering their email"""

import logging
from datetime import date
from typing import Any, Optional
from urllib.parse import quote

from ...backend import BackendClient
from ...errors import DomainRejection, ValidationFailed
from ...notices import success
from ...schemas import Booking, Invoice, RecurringBooking, parse_records
from ...shared.validators import validate_email
from ..booking.policy import fee_badge
from .schemas import PortalActionResponse, PortalBooking, PreferencesUpdate, ReferralStats

logger = logging.getLogger(__name__)

BOOKINGS_PATH = "/api/bookings/customer"
REFERRAL_STATS_PATH = "/api/referrals/customer-stats"
PORTAL_PATH = "/api/customer-portal"
CUSTOMER_PATH = f"{PORTAL_PATH}/customer"
INVOICES_PATH = f"{PORTAL_PATH}/invoices"
RECURRING_PATH = f"{PORTAL_PATH}/recurring-bookings"
REVIEWS_PATH = f"{PORTAL_PATH}/reviews"
MESSAGES_PATH = f"{PORTAL_PATH}/messages"
PREFERENCES_PATH = f"{PORTAL_PATH}/preferences"

OPEN_STATUSES = ("pending", "confirmed")


def customer_email(email: Optional[str]) -> str:
    """Normalized lookup email; blank or malformed input is rejected before any request"""
    if not email or not email.strip():
        raise ValidationFailed("Please enter your email address")
    try:
        return validate_email(email)
    except ValueError as e:
        raise ValidationFailed(str(e), title="Invalid email") from e


def _by_email(path: str, email: str) -> str:
    return f"{path}/{quote(email, safe='@')}"


class CustomerPortalService:
    def __init__(self, backend: BackendClient, today: Optional[date] = None):
        self.backend = backend
        self.today = today

    async def _list(self, path: str, email: str) -> list:
        data = await self.backend.query(_by_email(path, customer_email(email)))
        return data if isinstance(data, list) else []

    async def bookings(self, email: str) -> list[PortalBooking]:
        """The customer's bookings, newest date first, each with its fee badge"""
        bookings = parse_records(Booking, await self._list(BOOKINGS_PATH, email))
        today = (self.today or date.today()).isoformat()
        rows = [
            PortalBooking(
                booking=b,
                feeBadge=fee_badge(b.cancellationFeeStatus),
                isUpcoming=b.status in OPEN_STATUSES and b.date >= today,
            )
            for b in bookings
        ]
        return sorted(rows, key=lambda row: row.booking.date, reverse=True)

    async def referral_stats(self, email: str) -> ReferralStats:
        data = await self.backend.query(_by_email(REFERRAL_STATS_PATH, customer_email(email)))
        return ReferralStats.model_validate(data if isinstance(data, dict) else {})

    async def customer(self, email: str) -> Any:
        return await self.backend.query(_by_email(CUSTOMER_PATH, customer_email(email)))

    async def invoices(self, email: str) -> list[Invoice]:
        return parse_records(Invoice, await self._list(INVOICES_PATH, email))

    async def recurring_bookings(self, email: str) -> list[RecurringBooking]:
        return parse_records(RecurringBooking, await self._list(RECURRING_PATH, email))

    async def reviews(self, email: str) -> list:
        return await self._list(REVIEWS_PATH, email)

    async def messages(self, email: str) -> list:
        return await self._list(MESSAGES_PATH, email)

    async def update_preferences(self, data: PreferencesUpdate) -> PortalActionResponse:
        payload = data.model_dump(exclude_none=True)
        payload["email"] = customer_email(data.email)
        result = await self.backend.put(PREFERENCES_PATH, payload)
        self.backend.invalidate(CUSTOMER_PATH)
        logger.info("⚙️ Customer preferences updated")
        return PortalActionResponse(
            data=result,
            notices=[success("Preferences saved", "Your preferences have been updated successfully")],
        )

    async def _set_recurring(self, recurring_id: str, email: str, action: str) -> Any:
        plans = await self.recurring_bookings(email)
        plan = next((p for p in plans if p.id == recurring_id), None)
        if plan is None:
            raise DomainRejection("Recurring booking not found", title="Not found")
        if plan.status == "cancelled":
            raise DomainRejection("This recurring booking has been cancelled", title="Cannot change subscription")
        result = await self.backend.post(f"{RECURRING_PATH}/{recurring_id}/{action}", {})
        self.backend.invalidate(RECURRING_PATH)
        self.backend.invalidate("/api/recurring-bookings")
        logger.info(f"🔁 Recurring booking {recurring_id}: {action}")
        return result

    async def pause_recurring(self, recurring_id: str, email: str) -> PortalActionResponse:
        result = await self._set_recurring(recurring_id, email, "pause")
        return PortalActionResponse(
            data=result,
            notices=[success("Subscription paused", "Your recurring booking has been paused")],
        )

    async def resume_recurring(self, recurring_id: str, email: str) -> PortalActionResponse:
        result = await self._set_recurring(recurring_id, email, "resume")
        return PortalActionResponse(
            data=result,
            notices=[success("Subscription resumed", "Your recurring booking has been resumed")],
        )
