"""Booking repository - backend reads and writes used by the booking flow"""

from typing import Any, Optional

from ...backend import BackendClient
from ...schemas import BusinessSettings, PromoCode

SERVICES_PATH = "/api/services"
SETTINGS_PATH = "/api/settings"
BOOKINGS_PATH = "/api/bookings"
SETUP_INTENT_PATH = "/api/create-setup-intent"
ACTIVE_PROMO_PATH = "/api/public/active-promo"


class BookingRepository:
    """Repository for booking-flow backend operations"""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def get_services(self) -> list[dict]:
        """Active services offered in step 1"""
        data = await self.backend.query(SERVICES_PATH)
        if not isinstance(data, list):
            return []
        return [s for s in data if isinstance(s, dict) and s.get("active", True)]

    async def get_settings(self) -> BusinessSettings:
        data = await self.backend.query(SETTINGS_PATH)
        return BusinessSettings.model_validate(data if isinstance(data, dict) else {})

    async def get_active_promo(self) -> Optional[PromoCode]:
        """The promotion currently advertised on the booking page, if any"""
        data = await self.backend.query(ACTIVE_PROMO_PATH)
        if not isinstance(data, dict) or not data.get("code"):
            return None
        return PromoCode.model_validate(data)

    async def create_booking(self, payload: dict) -> Any:
        booking = await self.backend.post(BOOKINGS_PATH, payload)
        self.backend.invalidate(BOOKINGS_PATH)
        return booking

    async def create_setup_intent(self) -> Optional[str]:
        data = await self.backend.post(SETUP_INTENT_PATH) or {}
        return data.get("clientSecret")
