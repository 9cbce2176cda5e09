"""Booking domain schemas - wizard states, step inputs and responses"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from ...notices import Notice


# ============================================================================
# STEP DATA
# ============================================================================


class ServiceSelection(BaseModel):
    service: str


class ScheduleDetails(BaseModel):
    propertySize: str
    date: str
    timeSlot: str
    isRecurring: bool = False
    recurringFrequency: Optional[str] = None
    recurringEndDate: Optional[str] = None


class ContactDetails(BaseModel):
    name: str
    email: str
    phone: str
    address: str


class PromoDiscount(BaseModel):
    promoCodeId: str
    code: str
    discountAmount: int = 0
    label: Optional[str] = None
    description: Optional[str] = None


class ReferralDiscount(BaseModel):
    code: str
    referrerName: Optional[str] = None
    discountAmount: int = 0
    tier: Optional[Any] = None


class AppliedDiscounts(BaseModel):
    """At most one promo code and one referral code per booking"""

    promo: Optional[PromoDiscount] = None
    referral: Optional[ReferralDiscount] = None


# ============================================================================
# WIZARD STATES
# ============================================================================


class Step1(BaseModel):
    """Service selection"""

    step: Literal[1] = 1
    prefill: Optional[ServiceSelection] = None


class Step2(BaseModel):
    """Property size, date, time slot and optional recurring schedule"""

    step: Literal[2] = 2
    service: ServiceSelection
    prefill: Optional[ScheduleDetails] = None


class Step3(BaseModel):
    """Contact details plus promo and referral codes"""

    step: Literal[3] = 3
    service: ServiceSelection
    schedule: ScheduleDetails
    prefill: Optional[ContactDetails] = None
    discounts: AppliedDiscounts = Field(default_factory=AppliedDiscounts)


class Step4(BaseModel):
    """Payment method and cancellation policy"""

    step: Literal[4] = 4
    service: ServiceSelection
    schedule: ScheduleDetails
    contact: ContactDetails
    discounts: AppliedDiscounts = Field(default_factory=AppliedDiscounts)
    zipCodeServed: Optional[bool] = None


class Submitted(BaseModel):
    step: Literal["submitted"] = "submitted"
    bookingId: Optional[str] = None
    status: str = "pending"
    date: str
    timeSlot: str


WizardState = Annotated[Union[Step1, Step2, Step3, Step4, Submitted], Field(discriminator="step")]


# ============================================================================
# STEP INPUTS - everything optional, the step gates report what is missing
# ============================================================================


class ServiceInput(BaseModel):
    service: Optional[str] = None


class ScheduleInput(BaseModel):
    propertySize: Optional[str] = None
    date: Optional[str] = None
    timeSlot: Optional[str] = None
    isRecurring: Optional[bool] = None
    recurringFrequency: Optional[str] = None
    recurringEndDate: Optional[str] = None


class ContactInput(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


# ============================================================================
# REQUESTS / RESPONSES
# ============================================================================


class SlotOption(BaseModel):
    """A fixed daily slot annotated with the server's counts"""

    timeSlot: str
    available: Optional[int] = None
    capacity: Optional[int] = None
    disabled: bool = False


class SlotOptionsResponse(BaseModel):
    date: str
    slots: list[SlotOption]


class BookingOptionsResponse(BaseModel):
    services: list[dict]
    propertySizes: list[str]
    timeSlots: list[str]
    recurringFrequencies: list[str]
    cancellationPolicy: Optional[str] = None
    cancellationFee: str
    stripePublishableKey: Optional[str] = None


class StateRequest(BaseModel):
    state: WizardState


class AdvanceRequest(BaseModel):
    state: WizardState
    input: dict = Field(default_factory=dict)


class CodeRequest(BaseModel):
    state: WizardState
    code: str = ""
    contact: Optional[ContactInput] = None


class SubmitRequest(BaseModel):
    state: WizardState
    paymentMethodId: Optional[str] = None
    agreedToCancellationPolicy: bool = False


class PaymentSetupResponse(BaseModel):
    clientSecret: str
    publishableKey: Optional[str] = None


class WizardResponse(BaseModel):
    state: WizardState
    notices: list[Notice] = Field(default_factory=list)
    clientSecret: Optional[str] = None
