"""Booking router - FastAPI endpoints for the customer booking wizard"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...backend import BackendClient
from ...dependencies import get_public_backend
from ...rate_limiter import create_rate_limiter
from ...schemas import PromoCode, ServiceArea
from ...services.service_area_checker import ServiceAreaChecker, ZipCheckResult
from .schemas import (
    AdvanceRequest,
    BookingOptionsResponse,
    CodeRequest,
    PaymentSetupResponse,
    SlotOptionsResponse,
    StateRequest,
    SubmitRequest,
    WizardResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/booking", tags=["Booking"])

rate_limit_codes = create_rate_limiter(limit=20, window_seconds=60, key_prefix="code_validation")
rate_limit_zip = create_rate_limiter(limit=30, window_seconds=60, key_prefix="zip_check")
rate_limit_submit = create_rate_limiter(limit=5, window_seconds=300, key_prefix="booking_submit")


def get_booking_service(backend: BackendClient = Depends(get_public_backend)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(backend)


# ============================================================================
# REFERENCE DATA
# ============================================================================


@router.get("/options", response_model=BookingOptionsResponse)
async def get_booking_options(service: BookingService = Depends(get_booking_service)):
    """Services, property sizes, time slots and the cancellation policy"""
    return await service.get_options()


@router.get("/slots", response_model=SlotOptionsResponse)
async def get_slots(
    date: str = Query(..., description="YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    """Fixed daily slots annotated with remaining capacity; full slots are disabled"""
    return SlotOptionsResponse(date=date, slots=await service.get_slot_options(date))


@router.get("/zip-check/{zip_code}", response_model=ZipCheckResult)
async def check_zip(
    zip_code: str,
    backend: BackendClient = Depends(get_public_backend),
    _: None = Depends(rate_limit_zip),
):
    return await ServiceAreaChecker(backend).check_zipcode(zip_code)


@router.get("/service-areas", response_model=list[ServiceArea])
async def get_service_areas(backend: BackendClient = Depends(get_public_backend)):
    return await ServiceAreaChecker(backend).public_service_areas()


@router.get("/active-promo", response_model=Optional[PromoCode])
async def get_active_promo(service: BookingService = Depends(get_booking_service)):
    """Promotion banner shown above the wizard; null when nothing is running"""
    return await service.repo.get_active_promo()


# ============================================================================
# WIZARD
# ============================================================================


@router.post("/start", response_model=WizardResponse)
async def start_booking(service: BookingService = Depends(get_booking_service)):
    return service.start()


@router.post("/advance", response_model=WizardResponse)
async def advance_step(data: AdvanceRequest, service: BookingService = Depends(get_booking_service)):
    """Validate the current step and move to the next one"""
    return await service.advance(data.state, data.input)


@router.post("/back", response_model=WizardResponse)
async def previous_step(data: StateRequest, service: BookingService = Depends(get_booking_service)):
    return service.back(data.state)


@router.post("/promo", response_model=WizardResponse)
async def apply_promo_code(
    data: CodeRequest,
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_codes),
):
    return await service.apply_promo(data.state, data.code)


@router.post("/promo/remove", response_model=WizardResponse)
async def remove_promo_code(data: StateRequest, service: BookingService = Depends(get_booking_service)):
    return service.remove_promo(data.state)


@router.post("/referral", response_model=WizardResponse)
async def apply_referral_code(
    data: CodeRequest,
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_codes),
):
    return await service.apply_referral(data.state, data.code, data.contact)


@router.post("/referral/remove", response_model=WizardResponse)
async def remove_referral_code(data: StateRequest, service: BookingService = Depends(get_booking_service)):
    return service.remove_referral(data.state)


@router.post("/payment-setup", response_model=PaymentSetupResponse)
async def payment_setup(service: BookingService = Depends(get_booking_service)):
    """Client secret for the hosted payment element"""
    return await service.payment_setup()


@router.post("/submit", response_model=WizardResponse)
async def submit_booking(
    data: SubmitRequest,
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_submit),
):
    """Create the booking - requires a payment method and the cancellation policy checkbox"""
    return await service.submit(data.state, data.paymentMethodId, data.agreedToCancellationPolicy)
