"""Records exchanged with the backend. Field names follow the backend's camelCase JSON."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

BookingStatus = Literal[
    "pending", "confirmed", "completed", "cancelled", "pending_reschedule", "rejected"
]
CancellationFeeStatus = Literal["not_applicable", "pending", "dismissed", "charged"]


class BackendRecord(BaseModel):
    """Base for backend records - unknown fields are kept as-is"""

    id: Optional[str] = None

    class Config:
        extra = "allow"
        coerce_numbers_to_str = True


class Booking(BackendRecord):
    customerId: Optional[str] = None
    leadType: Optional[str] = None
    service: str
    propertySize: str
    date: str
    timeSlot: str
    name: str
    email: str
    phone: str
    address: str
    status: str = "pending"
    assignedEmployeeIds: Optional[list[str]] = None
    paymentMethodId: Optional[str] = None
    cancellationFeeStatus: str = "not_applicable"
    cancelledAt: Optional[datetime] = None
    managementToken: Optional[str] = None
    promoCode: Optional[str] = None
    discountAmount: Optional[int] = 0
    actualPrice: Optional[int] = None
    recurringBookingId: Optional[str] = None
    createdAt: Optional[datetime] = None


class PromoCode(BackendRecord):
    code: str
    description: Optional[str] = None
    discountType: Literal["percentage", "fixed"]
    discountValue: int
    validFrom: Optional[datetime] = None
    validTo: Optional[datetime] = None
    maxUses: Optional[int] = None
    currentUses: int = 0
    status: str = "active"


class ServiceArea(BackendRecord):
    name: str
    zipCodes: list[str] = Field(default_factory=list)
    isActive: bool = True


class RecurringBooking(BackendRecord):
    customerId: Optional[str] = None
    service: str
    propertySize: str
    frequency: str
    preferredTimeSlot: str
    name: str
    email: str
    phone: str
    address: str
    startDate: str
    endDate: Optional[str] = None
    nextOccurrence: str
    status: str = "active"
    assignedEmployeeIds: Optional[list[str]] = None
    promoCode: Optional[str] = None


class RescheduleRequest(BackendRecord):
    bookingId: str
    originalDate: Optional[str] = None
    originalTimeSlot: Optional[str] = None
    requestedDate: str
    requestedTimeSlot: str
    customerNotes: Optional[str] = None
    status: str = "pending"
    decisionReason: Optional[str] = None
    createdAt: Optional[datetime] = None


class Service(BackendRecord):
    name: str
    description: Optional[str] = None
    basePrice: int = 0
    featured: bool = False
    active: bool = True


class BusinessSettings(BackendRecord):
    businessName: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    cancellationPolicy: Optional[str] = None
    maxBookingsPerSlot: Optional[int] = None
    minLeadHours: Optional[int] = None


class Customer(BackendRecord):
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class Employee(BackendRecord):
    name: str
    email: str
    phone: Optional[str] = None
    role: str = "employee"
    active: bool = True


class EmployeePermission(BaseModel):
    feature: str
    actions: list[str] = Field(default_factory=list)


class Invoice(BackendRecord):
    invoiceNumber: Optional[str] = None
    bookingId: Optional[str] = None
    customerName: Optional[str] = None
    customerEmail: Optional[str] = None
    amount: int = 0
    discountAmount: Optional[int] = 0
    tax: int = 0
    total: int = 0
    status: str = "draft"


class Review(BackendRecord):
    customerName: str
    customerEmail: Optional[str] = None
    rating: int
    comment: str
    status: str = "pending"


class CmsContent(BackendRecord):
    section: str
    key: str
    value: str = ""


class CmsSection(BackendRecord):
    section: str
    title: Optional[str] = None
    visible: bool = True


class CmsAsset(BackendRecord):
    section: str
    key: str
    url: Optional[str] = None
    altText: Optional[str] = None


def parse_records(model: type[BaseModel], rows: Any) -> list:
    """Parse a backend list response; anything that is not a list is treated as empty"""
    if not isinstance(rows, list):
        return []
    return [model.model_validate(row) for row in rows]
