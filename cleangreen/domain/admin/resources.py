"""
Generic admin resources - list/get/create/update/delete over backend REST paths.

Each mutation drops the cached reads of every path the resource lists as
affected, so the next list call sees the change.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ...backend import BackendClient
from ...errors import DomainRejection, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceSpec:
    """Where a resource lives on the backend"""

    name: str
    path: str
    label: str
    list_path: Optional[str] = None
    invalidates: tuple[str, ...] = field(default_factory=tuple)

    @property
    def read_path(self) -> str:
        return self.list_path or self.path

    @property
    def affected_paths(self) -> tuple[str, ...]:
        paths = [self.path]
        if self.list_path:
            paths.append(self.list_path)
        return tuple(paths) + self.invalidates


CUSTOMERS = ResourceSpec("customers", "/api/customers", "Customer")
EMPLOYEES = ResourceSpec("employees", "/api/employees", "Employee")
INVOICES = ResourceSpec("invoices", "/api/invoices", "Invoice")
REVIEWS = ResourceSpec(
    "reviews", "/api/reviews", "Review", invalidates=("/api/reviews/approved",)
)
TEAM = ResourceSpec("team", "/api/team", "Team member")
CONTACT_MESSAGES = ResourceSpec("contact-messages", "/api/contact-messages", "Message")
FAQ = ResourceSpec("faq", "/api/faq", "FAQ", list_path="/api/admin/faq")
SERVICES = ResourceSpec("services", "/api/services", "Service", list_path="/api/admin/services")
GALLERY = ResourceSpec("gallery", "/api/gallery", "Gallery image", list_path="/api/admin/gallery")
PROMO_CODES = ResourceSpec(
    "promo-codes", "/api/promo-codes", "Promo code", invalidates=("/api/public/active-promo",)
)
SERVICE_AREAS = ResourceSpec(
    "service-areas",
    "/api/service-areas",
    "Service area",
    invalidates=("/api/public/service-areas", "/api/service-areas/check"),
)
RECURRING_BOOKINGS = ResourceSpec("recurring-bookings", "/api/recurring-bookings", "Recurring booking")
BOOKINGS = ResourceSpec(
    "bookings",
    "/api/bookings",
    "Booking",
    invalidates=("/api/available-slots", "/api/admin/cancellations", "/api/analytics"),
)

# Resources served by the generic CRUD routes
GENERIC_RESOURCES = (
    CUSTOMERS,
    EMPLOYEES,
    INVOICES,
    REVIEWS,
    TEAM,
    CONTACT_MESSAGES,
    FAQ,
    SERVICES,
    GALLERY,
)


class AdminResource:
    """CRUD access to one backend resource"""

    def __init__(self, backend: BackendClient, spec: ResourceSpec):
        self.backend = backend
        self.spec = spec

    def _item_path(self, item_id: str) -> str:
        if not item_id:
            raise ValidationFailed(f"{self.spec.label} id is required")
        return f"{self.spec.path}/{item_id}"

    def invalidate(self) -> None:
        for path in self.spec.affected_paths:
            self.backend.invalidate(path)

    async def list(self) -> list[dict]:
        data = await self.backend.query(self.spec.read_path)
        return data if isinstance(data, list) else []

    async def get(self, item_id: str) -> dict:
        data = await self.backend.query(self._item_path(item_id))
        if not isinstance(data, dict):
            raise DomainRejection(f"{self.spec.label} not found", title="Not found")
        return data

    async def create(self, payload: dict) -> Any:
        if not payload:
            raise ValidationFailed(f"{self.spec.label} details are required")
        result = await self.backend.post(self.spec.path, payload)
        self.invalidate()
        logger.info(f"✅ {self.spec.label} created")
        return result

    async def update(self, item_id: str, payload: dict) -> Any:
        result = await self.backend.patch(self._item_path(item_id), payload)
        self.invalidate()
        logger.info(f"✏️ {self.spec.label} {item_id} updated")
        return result

    async def delete(self, item_id: str) -> Any:
        result = await self.backend.delete(self._item_path(item_id))
        self.invalidate()
        logger.info(f"🗑️ {self.spec.label} {item_id} deleted")
        return result

    async def action(self, item_id: str, action: str, payload: Optional[dict] = None, method: str = "PATCH") -> Any:
        """Named action on one item, e.g. PATCH /api/reviews/{id}/approve"""
        result = await self.backend.request(
            method, f"{self._item_path(item_id)}/{action}", json=payload if payload is not None else {}
        )
        self.invalidate()
        logger.info(f"✅ {self.spec.label} {item_id}: {action}")
        return result
