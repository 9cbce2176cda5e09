"""
Employee portal service.

Staff accounts reach the same records as the admin, but through the
/api/employee/* paths and only where their grant list allows it. Grants are
read from /api/employee/permissions once per caller and cached in the
caller's query-cache scope.
"""

import logging
from typing import Any, Optional

from ...backend import BackendClient
from ...errors import PermissionDenied
from ...schemas import EmployeePermission
from ..admin.resources import AdminResource, ResourceSpec
from .permissions import Action, Feature, has_permission

logger = logging.getLogger(__name__)

PERMISSIONS_PATH = "/api/employee/permissions"
AUTH_USER_PATH = "/api/employee/auth/user"
ALL_BOOKINGS_PATH = "/api/employee/all-bookings"
PERMISSIONS_TTL_SECONDS = 60

BOOKINGS = ResourceSpec(
    "bookings",
    "/api/employee/bookings",
    "Booking",
    invalidates=(ALL_BOOKINGS_PATH, "/api/available-slots", "/api/bookings"),
)
QUOTES = ResourceSpec("quotes", "/api/employee/quotes", "Quote")
INVOICES = ResourceSpec("invoices", "/api/employee/invoices", "Invoice")
CUSTOMERS = ResourceSpec("customers", "/api/employee/customers", "Customer")
EMPLOYEES = ResourceSpec("employees", "/api/employee/employees", "Employee")
REVIEWS = ResourceSpec(
    "reviews", "/api/employee/reviews", "Review", invalidates=("/api/reviews/approved",)
)
TEAM = ResourceSpec("team", "/api/employee/team", "Team member")
MESSAGES = ResourceSpec("messages", "/api/employee/messages", "Message")
NEWSLETTER = ResourceSpec("newsletter", "/api/employee/newsletter", "Subscriber")
ACTIVITY_LOGS = ResourceSpec("activity-logs", "/api/employee/activity-logs", "Activity log")


class EmployeePortalService:
    """Permission checks plus resource access for one signed-in employee"""

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self._permissions: Optional[list[EmployeePermission]] = None

    async def current_user(self) -> Any:
        return await self.backend.query(AUTH_USER_PATH, ttl=PERMISSIONS_TTL_SECONDS)

    async def permissions(self) -> list[EmployeePermission]:
        if self._permissions is None:
            data = await self.backend.query(PERMISSIONS_PATH, ttl=PERMISSIONS_TTL_SECONDS)
            if isinstance(data, dict):
                data = data.get("permissions", [])
            self._permissions = [
                EmployeePermission.model_validate(item)
                for item in (data or [])
                if isinstance(item, dict)
            ]
        return self._permissions

    async def can(self, feature: Feature, action: Action) -> bool:
        return has_permission(await self.permissions(), feature, action)

    async def require(self, feature: Feature, action: Action) -> None:
        if not await self.can(feature, action):
            logger.warning(f"🚫 Employee lacks {feature.value}:{action.value}")
            raise PermissionDenied(f"You don't have permission to {action.value} {feature.value.replace('_', ' ')}")

    def resource(self, spec: ResourceSpec) -> AdminResource:
        return AdminResource(self.backend, spec)

    async def all_bookings(self) -> list[dict]:
        data = await self.backend.query(ALL_BOOKINGS_PATH)
        return data if isinstance(data, list) else []

    async def update_status(self, spec: ResourceSpec, item_id: str, status: str) -> Any:
        return await self.resource(spec).action(item_id, "status", {"status": status})

    async def send_payment_link(self, invoice_id: str) -> Any:
        return await self.resource(INVOICES).action(invoice_id, "send-payment-link", method="POST")
