"""Manage-booking router - token-authenticated customer endpoints"""

from fastapi import APIRouter, Depends, Query

from ...backend import BackendClient
from ...dependencies import get_public_backend
from ...rate_limiter import create_rate_limiter
from ..booking.schemas import SlotOptionsResponse
from .schemas import (
    CancelBookingRequest,
    ManageActionResponse,
    ManageBookingView,
    RescheduleBookingRequest,
)
from .service import ManageBookingService

router = APIRouter(prefix="/manage", tags=["Manage Booking"])

rate_limit_manage = create_rate_limiter(limit=30, window_seconds=60, key_prefix="manage_booking")


def get_manage_service(backend: BackendClient = Depends(get_public_backend)) -> ManageBookingService:
    """Dependency injection for ManageBookingService"""
    return ManageBookingService(backend)


@router.get("/{token}", response_model=ManageBookingView)
async def get_managed_booking(
    token: str,
    service: ManageBookingService = Depends(get_manage_service),
    _: None = Depends(rate_limit_manage),
):
    """Booking details, fee badge and the cancellation warning"""
    return await service.get_view(token)


@router.get("/{token}/slots", response_model=SlotOptionsResponse)
async def get_reschedule_slots(
    token: str,
    date: str = Query(..., description="YYYY-MM-DD"),
    service: ManageBookingService = Depends(get_manage_service),
    _: None = Depends(rate_limit_manage),
):
    await service.get_booking(token)
    return SlotOptionsResponse(date=date, slots=await service.availability.get_slot_options(date))


@router.post("/{token}/cancel", response_model=ManageActionResponse)
async def cancel_booking(
    token: str,
    data: CancelBookingRequest,
    service: ManageBookingService = Depends(get_manage_service),
    _: None = Depends(rate_limit_manage),
):
    return await service.cancel(token, data.acknowledgedFee)


@router.post("/{token}/reschedule", response_model=ManageActionResponse)
async def reschedule_booking(
    token: str,
    data: RescheduleBookingRequest,
    service: ManageBookingService = Depends(get_manage_service),
    _: None = Depends(rate_limit_manage),
):
    """Submit a reschedule request for admin review"""
    return await service.request_reschedule(token, data.date, data.timeSlot, data.customerNotes)
