"""Customer portal router - lookups by email plus self-service actions"""

from fastapi import APIRouter, Depends, Query

from ...backend import BackendClient
from ...dependencies import get_backend
from ...rate_limiter import create_rate_limiter
from ...schemas import Invoice, RecurringBooking
from .schemas import PortalActionResponse, PortalBooking, PreferencesUpdate, ReferralStats
from .service import CustomerPortalService

router = APIRouter(prefix="/portal", tags=["Customer Portal"])

rate_limit_lookup = create_rate_limiter(limit=30, window_seconds=60, key_prefix="customer_portal")


def get_portal_service(backend: BackendClient = Depends(get_backend)) -> CustomerPortalService:
    return CustomerPortalService(backend)


@router.get("/bookings", response_model=list[PortalBooking])
async def get_bookings(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    """Bookings for an email, newest first, each with its cancellation fee badge"""
    return await service.bookings(email)


@router.get("/referrals", response_model=ReferralStats)
async def get_referral_stats(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    return await service.referral_stats(email)


@router.get("/customer")
async def get_customer(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    return await service.customer(email)


@router.get("/invoices", response_model=list[Invoice])
async def get_invoices(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    return await service.invoices(email)


@router.get("/recurring-bookings", response_model=list[RecurringBooking])
async def get_recurring_bookings(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    return await service.recurring_bookings(email)


@router.get("/reviews")
async def get_reviews(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    return await service.reviews(email)


@router.get("/messages")
async def get_messages(
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
    _: None = Depends(rate_limit_lookup),
):
    return await service.messages(email)


@router.put("/preferences", response_model=PortalActionResponse)
async def update_preferences(
    data: PreferencesUpdate,
    service: CustomerPortalService = Depends(get_portal_service),
):
    return await service.update_preferences(data)


@router.post("/recurring-bookings/{recurring_id}/pause", response_model=PortalActionResponse)
async def pause_recurring_booking(
    recurring_id: str,
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
):
    return await service.pause_recurring(recurring_id, email)


@router.post("/recurring-bookings/{recurring_id}/resume", response_model=PortalActionResponse)
async def resume_recurring_booking(
    recurring_id: str,
    email: str = Query(...),
    service: CustomerPortalService = Depends(get_portal_service),
):
    return await service.resume_recurring(recurring_id, email)
