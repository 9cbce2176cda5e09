"""Admin domain schemas - request bodies and list views for the back-office"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...notices import Notice
from ...schemas import Booking, RescheduleRequest
from ...shared.validators import validate_email, validate_us_phone
from ..booking.policy import FeeBadge

CancellationTab = Literal["all", "pending", "dismissed", "charged", "not_applicable"]
RescheduleTab = Literal["all", "pending", "approved", "denied"]


class BookingStatusUpdate(BaseModel):
    status: Literal["pending", "confirmed", "completed", "cancelled"]


class AssignEmployeesRequest(BaseModel):
    employeeIds: list[str] = Field(default_factory=list)


class ManualBookingCreate(BaseModel):
    """Booking entered by staff (phone or walk-in customers)"""

    service: str
    propertySize: str
    date: str
    timeSlot: str
    name: str
    email: str
    phone: str
    address: str
    status: Literal["pending", "confirmed"] = "confirmed"
    leadType: Optional[str] = None
    actualPrice: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class CancelledBookingRow(BaseModel):
    booking: Booking
    feeBadge: FeeBadge
    canCharge: bool


class CancellationsResponse(BaseModel):
    tab: str
    pendingCount: int
    bookings: list[CancelledBookingRow]


class RescheduleDecision(BaseModel):
    reason: Optional[str] = None


class RescheduleRequestsResponse(BaseModel):
    tab: str
    counts: dict[str, int]
    requests: list[RescheduleRequest]


class PromoCodeInput(BaseModel):
    """Promo code form - maxUses arrives as free text and blank means unlimited"""

    code: Optional[str] = None
    description: Optional[str] = None
    discountType: Optional[Literal["percentage", "fixed"]] = None
    discountValue: Optional[int] = None
    validFrom: Optional[str] = None
    validTo: Optional[str] = None
    maxUses: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None


class ServiceAreaInput(BaseModel):
    name: Optional[str] = None
    zipCodes: Optional[list[str]] = None
    isActive: Optional[bool] = None


class MutationResponse(BaseModel):
    data: Optional[dict] = None
    notices: list[Notice] = Field(default_factory=list)
