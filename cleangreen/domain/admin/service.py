"""Admin service - bookings, cancellations, reschedule requests and catalog rules"""

import logging
from datetime import datetime
from typing import Any, Optional

from ...backend import BackendClient
from ...errors import DomainRejection, ValidationFailed
from ...notices import format_cents, success
from ...schemas import Booking, RescheduleRequest, parse_records
from ...services.service_area_checker import validate_zip_list
from ..booking.policy import fee_badge
from .resources import (
    BOOKINGS,
    PROMO_CODES,
    RECURRING_BOOKINGS,
    SERVICE_AREAS,
    AdminResource,
)
from .schemas import (
    CancellationsResponse,
    CancelledBookingRow,
    ManualBookingCreate,
    MutationResponse,
    PromoCodeInput,
    RescheduleRequestsResponse,
    ServiceAreaInput,
)

logger = logging.getLogger(__name__)

CANCELLATIONS_PATH = "/api/admin/cancellations"
RESCHEDULE_REQUESTS_PATH = "/api/admin/reschedule-requests"
ANALYTICS_PATH = "/api/analytics"
ANALYTICS_REPORTS = (
    "metrics",
    "revenue-trends",
    "booking-stats",
    "top-services",
    "customer-acquisition",
    "top-customers",
)


def _cancelled_sort_key(booking: Booking) -> tuple:
    """Newest cancellation first, bookings without cancelledAt last"""
    if booking.cancelledAt is None:
        return (1, 0.0)
    return (0, -booking.cancelledAt.timestamp())


def sort_cancellations(bookings: list[Booking]) -> list[Booking]:
    return sorted(bookings, key=_cancelled_sort_key)


def parse_max_uses(value: Optional[str]) -> Optional[int]:
    """Blank means unlimited; anything else must be a positive whole number"""
    if value is None or not str(value).strip():
        return None
    try:
        max_uses = int(str(value).strip())
    except ValueError as e:
        raise ValidationFailed("Max uses must be a whole number", title="Invalid promo code") from e
    if max_uses < 1:
        raise ValidationFailed("Max uses must be at least 1", title="Invalid promo code")
    return max_uses


def promo_code_payload(data: PromoCodeInput, partial: bool = False) -> dict:
    """Normalize the promo code form for the backend (code upper-cased, maxUses as int or null)"""
    payload = data.model_dump(exclude_unset=partial)

    if "code" in payload:
        code = (payload.get("code") or "").strip().upper()
        if not code:
            raise ValidationFailed("Promo code is required", title="Invalid promo code")
        payload["code"] = code

    if "maxUses" in payload:
        payload["maxUses"] = parse_max_uses(payload["maxUses"])

    if not partial:
        missing = [f for f in ("discountType", "discountValue") if payload.get(f) is None]
        if missing:
            raise ValidationFailed(f"Please complete: {', '.join(missing)}", title="Invalid promo code")

    discount_type = payload.get("discountType")
    discount_value = payload.get("discountValue")
    if discount_value is not None:
        if discount_value < 0:
            raise ValidationFailed("Discount value cannot be negative", title="Invalid promo code")
        if discount_type == "percentage" and discount_value > 100:
            raise ValidationFailed("Percentage discounts cannot exceed 100%", title="Invalid promo code")

    return payload


class AdminBookingService:
    """Bookings, late cancellations and reschedule requests"""

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.bookings = AdminResource(backend, BOOKINGS)

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    async def list_bookings(self, status: Optional[str] = None) -> list[dict]:
        rows = await self.bookings.list()
        if status and status != "all":
            rows = [r for r in rows if r.get("status") == status]
        return rows

    async def update_status(self, booking_id: str, status: str) -> MutationResponse:
        result = await self.bookings.action(booking_id, "status", {"status": status})
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Booking updated", f"Status changed to {status}")],
        )

    async def assign_employees(self, booking_id: str, employee_ids: list[str]) -> MutationResponse:
        result = await self.bookings.action(booking_id, "assign", {"employeeIds": employee_ids})
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Employees assigned", f"{len(employee_ids)} employee(s) assigned")],
        )

    async def create_manual_booking(self, data: ManualBookingCreate) -> MutationResponse:
        result = await self.backend.post(f"{BOOKINGS.path}/manual", data.model_dump(exclude_none=True))
        self.bookings.invalidate()
        logger.info(f"📥 Manual booking created for {data.email} on {data.date} {data.timeSlot}")
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Booking created", "The booking has been added to the schedule.")],
        )

    async def delete_booking(self, booking_id: str) -> MutationResponse:
        await self.bookings.delete(booking_id)
        return MutationResponse(notices=[success("Booking deleted")])

    # ------------------------------------------------------------------
    # Cancellations
    # ------------------------------------------------------------------

    async def list_cancellations(self, tab: str = "all") -> CancellationsResponse:
        rows = await self.backend.query(CANCELLATIONS_PATH)
        bookings = sort_cancellations(
            [b for b in parse_records(Booking, rows) if b.status == "cancelled"]
        )
        pending = [b for b in bookings if b.cancellationFeeStatus == "pending"]
        if tab != "all":
            bookings = [b for b in bookings if b.cancellationFeeStatus == tab]
        return CancellationsResponse(
            tab=tab,
            pendingCount=len(pending),
            bookings=[
                CancelledBookingRow(
                    booking=b,
                    feeBadge=fee_badge(b.cancellationFeeStatus),
                    canCharge=b.cancellationFeeStatus == "pending",
                )
                for b in bookings
            ],
        )

    async def _cancelled_booking(self, booking_id: str) -> Booking:
        rows = await self.backend.query(CANCELLATIONS_PATH)
        for booking in parse_records(Booking, rows):
            if booking.id == booking_id:
                return booking
        raise DomainRejection("Cancelled booking not found", title="Not found")

    async def dismiss_fee(self, booking_id: str) -> MutationResponse:
        """Waive a pending late-cancellation fee"""
        booking = await self._cancelled_booking(booking_id)
        if booking.cancellationFeeStatus != "pending":
            raise DomainRejection("Cancellation fee is not pending", title="Cannot waive fee")

        result = await self.backend.patch(f"{CANCELLATIONS_PATH}/{booking_id}/dismiss", {})
        self.backend.invalidate(CANCELLATIONS_PATH)
        self.backend.invalidate(BOOKINGS.path)
        logger.info(f"🧾 Cancellation fee waived for booking {booking_id}")
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Fee Waived", "The cancellation fee has been dismissed.")],
        )

    async def charge_fee(self, booking_id: str) -> MutationResponse:
        """Charge the flat late-cancellation fee; only pending fees can be charged"""
        booking = await self._cancelled_booking(booking_id)
        if booking.cancellationFeeStatus != "pending":
            raise DomainRejection("Cancellation fee is not pending", title="Cannot charge fee")
        if not booking.paymentMethodId:
            raise DomainRejection("No payment method on file for this booking", title="Cannot charge fee")

        result = await self.backend.post(f"{CANCELLATIONS_PATH}/{booking_id}/charge", {})
        self.backend.invalidate(CANCELLATIONS_PATH)
        self.backend.invalidate(BOOKINGS.path)
        self.backend.invalidate(ANALYTICS_PATH)
        logger.info(f"💳 Cancellation fee charged for booking {booking_id}")
        amount = result.get("amount") if isinstance(result, dict) else None
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Fee Charged", f"{format_cents(amount) if amount else 'The cancellation fee'} was charged to the card on file.")],
        )

    # ------------------------------------------------------------------
    # Reschedule requests
    # ------------------------------------------------------------------

    async def list_reschedule_requests(self, tab: str = "pending") -> RescheduleRequestsResponse:
        requests = parse_records(RescheduleRequest, await self.backend.query(RESCHEDULE_REQUESTS_PATH))
        requests.sort(key=lambda r: r.createdAt.timestamp() if r.createdAt else 0.0, reverse=True)
        counts = {
            status: sum(1 for r in requests if r.status == status)
            for status in ("pending", "approved", "denied")
        }
        if tab != "all":
            requests = [r for r in requests if r.status == tab]
        return RescheduleRequestsResponse(tab=tab, counts=counts, requests=requests)

    async def _pending_request(self, request_id: str) -> RescheduleRequest:
        requests = parse_records(RescheduleRequest, await self.backend.query(RESCHEDULE_REQUESTS_PATH))
        for request in requests:
            if request.id == request_id:
                if request.status != "pending":
                    raise DomainRejection("Reschedule request is not pending", title="Already decided")
                return request
        raise DomainRejection("Reschedule request not found", title="Not found")

    def _invalidate_reschedules(self) -> None:
        self.backend.invalidate(RESCHEDULE_REQUESTS_PATH)
        self.backend.invalidate(BOOKINGS.path)
        self.backend.invalidate("/api/available-slots")

    async def approve_reschedule(self, request_id: str, reason: Optional[str] = None) -> MutationResponse:
        """Approve a request - the backend moves the booking to the requested date and slot"""
        request = await self._pending_request(request_id)
        payload = {"reason": reason.strip()} if reason and reason.strip() else {}
        result = await self.backend.patch(f"{RESCHEDULE_REQUESTS_PATH}/{request_id}/approve", payload)
        self._invalidate_reschedules()
        logger.info(
            f"✅ Reschedule {request_id} approved: booking {request.bookingId} -> "
            f"{request.requestedDate} {request.requestedTimeSlot}"
        )
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Reschedule approved", "The booking has been moved and the customer notified.")],
        )

    async def deny_reschedule(self, request_id: str, reason: Optional[str]) -> MutationResponse:
        """Deny a request - a reason is required and the booking keeps its date"""
        if not reason or not reason.strip():
            raise ValidationFailed("Reason is required when denying", title="Reason required")
        request = await self._pending_request(request_id)
        result = await self.backend.patch(
            f"{RESCHEDULE_REQUESTS_PATH}/{request_id}/deny", {"reason": reason.strip()}
        )
        self._invalidate_reschedules()
        logger.info(f"🚫 Reschedule {request_id} denied for booking {request.bookingId}")
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success("Reschedule denied", "The customer has been notified.")],
        )


class CatalogService:
    """Promo codes, service areas and recurring bookings"""

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.promo_codes = AdminResource(backend, PROMO_CODES)
        self.service_areas = AdminResource(backend, SERVICE_AREAS)
        self.recurring = AdminResource(backend, RECURRING_BOOKINGS)

    async def create_promo_code(self, data: PromoCodeInput) -> Any:
        payload = promo_code_payload(data)
        logger.info(f"🏷️ Creating promo code {payload['code']}")
        return await self.promo_codes.create(payload)

    async def update_promo_code(self, promo_id: str, data: PromoCodeInput) -> Any:
        return await self.promo_codes.update(promo_id, promo_code_payload(data, partial=True))

    def service_area_payload(self, data: ServiceAreaInput, partial: bool = False) -> dict:
        payload = data.model_dump(exclude_unset=partial)
        if "name" in payload or not partial:
            name = (payload.get("name") or "").strip()
            if not name:
                raise ValidationFailed("Service area name is required")
            payload["name"] = name
        if "zipCodes" in payload or not partial:
            payload["zipCodes"] = validate_zip_list(payload.get("zipCodes") or [])
        if not partial and payload.get("isActive") is None:
            payload["isActive"] = True
        return payload

    async def create_service_area(self, data: ServiceAreaInput) -> Any:
        return await self.service_areas.create(self.service_area_payload(data))

    async def update_service_area(self, area_id: str, data: ServiceAreaInput) -> Any:
        return await self.service_areas.update(area_id, self.service_area_payload(data, partial=True))

    async def set_recurring_status(self, recurring_id: str, status: str) -> MutationResponse:
        """Pause, resume or cancel a recurring booking"""
        current = await self.recurring.get(recurring_id)
        if current.get("status") == "cancelled" and status != "cancelled":
            raise DomainRejection("A cancelled recurring booking cannot be resumed", title="Cannot update")
        result = await self.recurring.update(recurring_id, {"status": status})
        titles = {"active": "Recurring booking resumed", "paused": "Recurring booking paused", "cancelled": "Recurring booking cancelled"}
        return MutationResponse(
            data=result if isinstance(result, dict) else None,
            notices=[success(titles[status])],
        )


class AnalyticsService:
    """Read-only metric reports computed by the backend"""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def report(self, name: str, params: Optional[dict] = None) -> Any:
        if name not in ANALYTICS_REPORTS:
            raise DomainRejection(f"Unknown report: {name}", title="Not found")
        params = {k: v for k, v in (params or {}).items() if v is not None}
        parts = [f"{k}={params[k]}" for k in sorted(params)]
        return await self.backend.query(f"{ANALYTICS_PATH}/{name}", *parts, params=params or None)

    async def dashboard(self, period: str = "month", top_limit: int = 10) -> dict:
        """Every report for the analytics page in one response"""
        results: dict[str, Any] = {}
        for name in ANALYTICS_REPORTS:
            params = None
            if name == "revenue-trends":
                params = {"period": period}
            elif name == "top-customers":
                params = {"limit": top_limit}
            results[name] = await self.report(name, params)
        results["generatedAt"] = datetime.now().isoformat()
        return results
