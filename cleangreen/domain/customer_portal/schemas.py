"""Customer portal models"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from ...notices import Notice
from ...schemas import BackendRecord, Booking
from ..booking.policy import FeeBadge


class PortalBooking(BaseModel):
    booking: Booking
    feeBadge: FeeBadge
    isUpcoming: bool = False


class ReferralEntry(BackendRecord):
    referredCustomerName: Optional[str] = None
    creditAmount: int = 0
    status: str = "pending"
    createdAt: Optional[str] = None


class ReferralStats(BaseModel):
    referralCode: Optional[str] = None
    successfulReferrals: int = 0
    availableCredits: int = 0
    tierLevel: int = 1
    nextTierAmount: int = 0
    referrals: list[ReferralEntry] = Field(default_factory=list)

    class Config:
        extra = "allow"


class PreferencesUpdate(BaseModel):
    email: str
    notificationPreferences: Optional[dict[str, Any]] = None
    savedPreferences: Optional[dict[str, Any]] = None


class PortalActionResponse(BaseModel):
    data: Any = None
    notices: list[Notice] = Field(default_factory=list)
