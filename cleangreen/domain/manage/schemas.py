"""Manage-booking schemas"""

from typing import Optional

from pydantic import BaseModel, Field

from ...notices import Notice
from ...schemas import Booking
from ..booking.policy import CancellationQuote, FeeBadge


class ManageBookingView(BaseModel):
    booking: Booking
    feeBadge: FeeBadge
    cancellationQuote: Optional[CancellationQuote] = None
    canCancel: bool
    canReschedule: bool
    reschedulePending: bool = False


class CancelBookingRequest(BaseModel):
    acknowledgedFee: bool = False


class RescheduleBookingRequest(BaseModel):
    date: Optional[str] = None
    timeSlot: Optional[str] = None
    customerNotes: Optional[str] = None


class ManageActionResponse(BaseModel):
    view: ManageBookingView
    notices: list[Notice] = Field(default_factory=list)
