"""Admin router - FastAPI endpoints for the back-office"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...backend import BackendClient
from ...dependencies import get_backend
from ...utils.csv_export import csv_response
from .resources import (
    GENERIC_RESOURCES,
    INVOICES,
    PROMO_CODES,
    RECURRING_BOOKINGS,
    REVIEWS,
    SERVICE_AREAS,
    AdminResource,
    ResourceSpec,
)
from .schemas import (
    AssignEmployeesRequest,
    BookingStatusUpdate,
    CancellationsResponse,
    CancellationTab,
    ManualBookingCreate,
    MutationResponse,
    PromoCodeInput,
    RescheduleDecision,
    RescheduleRequestsResponse,
    RescheduleTab,
    ServiceAreaInput,
)
from .service import AdminBookingService, AnalyticsService, CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

ExportFormat = Optional[Literal["json", "csv"]]

SETTINGS_PATH = "/api/settings"


def get_admin_booking_service(backend: BackendClient = Depends(get_backend)) -> AdminBookingService:
    """Dependency injection for AdminBookingService"""
    return AdminBookingService(backend)


def get_catalog_service(backend: BackendClient = Depends(get_backend)) -> CatalogService:
    return CatalogService(backend)


def get_analytics_service(backend: BackendClient = Depends(get_backend)) -> AnalyticsService:
    return AnalyticsService(backend)


def _list_or_csv(rows, name: str, format: ExportFormat):
    if format == "csv":
        return csv_response(rows, name)
    return rows


# ============================================================================
# BOOKINGS
# ============================================================================


@router.get("/bookings")
async def list_bookings(
    status: Optional[str] = Query(None),
    format: ExportFormat = Query(None),
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    """All bookings, optionally filtered by status; ?format=csv downloads them"""
    return _list_or_csv(await service.list_bookings(status), "bookings", format)


@router.post("/bookings/manual", response_model=MutationResponse)
async def create_manual_booking(
    data: ManualBookingCreate,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.create_manual_booking(data)


@router.patch("/bookings/{booking_id}/status", response_model=MutationResponse)
async def update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.update_status(booking_id, data.status)


@router.patch("/bookings/{booking_id}/assign", response_model=MutationResponse)
async def assign_booking_employees(
    booking_id: str,
    data: AssignEmployeesRequest,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.assign_employees(booking_id, data.employeeIds)


@router.delete("/bookings/{booking_id}", response_model=MutationResponse)
async def delete_booking(
    booking_id: str,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.delete_booking(booking_id)


# ============================================================================
# CANCELLATIONS
# ============================================================================


@router.get("/cancellations")
async def list_cancellations(
    tab: CancellationTab = Query("all"),
    format: ExportFormat = Query(None),
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    """Cancelled bookings, newest first, filtered by fee status"""
    result: CancellationsResponse = await service.list_cancellations(tab)
    if format == "csv":
        return csv_response(
            [dict(row.booking.model_dump(), feeStatus=row.feeBadge.label) for row in result.bookings],
            "cancellations",
        )
    return result


@router.patch("/cancellations/{booking_id}/dismiss", response_model=MutationResponse)
async def dismiss_cancellation_fee(
    booking_id: str,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.dismiss_fee(booking_id)


@router.post("/cancellations/{booking_id}/charge", response_model=MutationResponse)
async def charge_cancellation_fee(
    booking_id: str,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.charge_fee(booking_id)


# ============================================================================
# RESCHEDULE REQUESTS
# ============================================================================


@router.get("/reschedule-requests", response_model=RescheduleRequestsResponse)
async def list_reschedule_requests(
    tab: RescheduleTab = Query("pending"),
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.list_reschedule_requests(tab)


@router.patch("/reschedule-requests/{request_id}/approve", response_model=MutationResponse)
async def approve_reschedule_request(
    request_id: str,
    data: Optional[RescheduleDecision] = None,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    """Approve a reschedule request; the reason is optional"""
    return await service.approve_reschedule(request_id, data.reason if data else None)


@router.patch("/reschedule-requests/{request_id}/deny", response_model=MutationResponse)
async def deny_reschedule_request(
    request_id: str,
    data: RescheduleDecision,
    service: AdminBookingService = Depends(get_admin_booking_service),
):
    return await service.deny_reschedule(request_id, data.reason)


# ============================================================================
# PROMO CODES
# ============================================================================


@router.get("/promo-codes")
async def list_promo_codes(
    format: ExportFormat = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    return _list_or_csv(await service.promo_codes.list(), PROMO_CODES.name, format)


@router.post("/promo-codes")
async def create_promo_code(data: PromoCodeInput, service: CatalogService = Depends(get_catalog_service)):
    return await service.create_promo_code(data)


@router.patch("/promo-codes/{promo_id}")
async def update_promo_code(
    promo_id: str, data: PromoCodeInput, service: CatalogService = Depends(get_catalog_service)
):
    return await service.update_promo_code(promo_id, data)


@router.delete("/promo-codes/{promo_id}")
async def delete_promo_code(promo_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.promo_codes.delete(promo_id)


# ============================================================================
# SERVICE AREAS
# ============================================================================


@router.get("/service-areas")
async def list_service_areas(
    format: ExportFormat = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    return _list_or_csv(await service.service_areas.list(), SERVICE_AREAS.name, format)


@router.post("/service-areas")
async def create_service_area(data: ServiceAreaInput, service: CatalogService = Depends(get_catalog_service)):
    """Create a service area; every ZIP must be a real US ZIP code"""
    return await service.create_service_area(data)


@router.patch("/service-areas/{area_id}")
async def update_service_area(
    area_id: str, data: ServiceAreaInput, service: CatalogService = Depends(get_catalog_service)
):
    return await service.update_service_area(area_id, data)


@router.delete("/service-areas/{area_id}")
async def delete_service_area(area_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.service_areas.delete(area_id)


# ============================================================================
# RECURRING BOOKINGS
# ============================================================================


@router.get("/recurring-bookings")
async def list_recurring_bookings(
    status: Optional[str] = Query(None),
    format: ExportFormat = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    rows = await service.recurring.list()
    if status and status != "all":
        rows = [r for r in rows if r.get("status") == status]
    return _list_or_csv(rows, RECURRING_BOOKINGS.name, format)


@router.post("/recurring-bookings")
async def create_recurring_booking(
    data: dict = Body(...), service: CatalogService = Depends(get_catalog_service)
):
    return await service.recurring.create(data)


@router.patch("/recurring-bookings/{recurring_id}")
async def update_recurring_booking(
    recurring_id: str, data: dict = Body(...), service: CatalogService = Depends(get_catalog_service)
):
    return await service.recurring.update(recurring_id, data)


@router.delete("/recurring-bookings/{recurring_id}")
async def delete_recurring_booking(recurring_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.recurring.delete(recurring_id)


@router.post("/recurring-bookings/{recurring_id}/pause", response_model=MutationResponse)
async def pause_recurring_booking(recurring_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.set_recurring_status(recurring_id, "paused")


@router.post("/recurring-bookings/{recurring_id}/resume", response_model=MutationResponse)
async def resume_recurring_booking(recurring_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.set_recurring_status(recurring_id, "active")


@router.post("/recurring-bookings/{recurring_id}/cancel", response_model=MutationResponse)
async def cancel_recurring_booking(recurring_id: str, service: CatalogService = Depends(get_catalog_service)):
    return await service.set_recurring_status(recurring_id, "cancelled")


# ============================================================================
# REVIEWS / INVOICES ACTIONS
# ============================================================================


@router.patch("/reviews/{review_id}/{decision}")
async def decide_review(
    review_id: str,
    decision: Literal["approve", "deny"],
    backend: BackendClient = Depends(get_backend),
):
    return await AdminResource(backend, REVIEWS).action(review_id, decision)


@router.post("/invoices/{invoice_id}/mark-paid")
async def mark_invoice_paid(invoice_id: str, backend: BackendClient = Depends(get_backend)):
    return await AdminResource(backend, INVOICES).action(invoice_id, "mark-paid", method="POST")


# ============================================================================
# SETTINGS / ANALYTICS
# ============================================================================


@router.get("/settings")
async def get_settings(backend: BackendClient = Depends(get_backend)):
    return await backend.query(SETTINGS_PATH)


@router.post("/settings")
async def update_settings(data: dict = Body(...), backend: BackendClient = Depends(get_backend)):
    result = await backend.post(SETTINGS_PATH, data)
    backend.invalidate(SETTINGS_PATH)
    logger.info("⚙️ Business settings updated")
    return result


@router.get("/analytics")
async def get_analytics_dashboard(
    period: str = Query("month"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.dashboard(period)


@router.get("/analytics/{report}")
async def get_analytics_report(
    report: str,
    period: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.report(report, {"period": period, "limit": limit})


# ============================================================================
# GENERIC RESOURCES
# ============================================================================


def register_resource_routes(spec: ResourceSpec) -> None:
    """List (with CSV export), get, create, update and delete routes for one resource"""

    def get_resource(backend: BackendClient = Depends(get_backend)) -> AdminResource:
        return AdminResource(backend, spec)

    @router.get(f"/{spec.name}", name=f"list_{spec.name}")
    async def list_items(format: ExportFormat = Query(None), resource: AdminResource = Depends(get_resource)):
        return _list_or_csv(await resource.list(), spec.name, format)

    @router.get(f"/{spec.name}/{{item_id}}", name=f"get_{spec.name}")
    async def get_item(item_id: str, resource: AdminResource = Depends(get_resource)):
        return await resource.get(item_id)

    @router.post(f"/{spec.name}", name=f"create_{spec.name}")
    async def create_item(data: dict = Body(...), resource: AdminResource = Depends(get_resource)):
        return await resource.create(data)

    @router.patch(f"/{spec.name}/{{item_id}}", name=f"update_{spec.name}")
    async def update_item(item_id: str, data: dict = Body(...), resource: AdminResource = Depends(get_resource)):
        return await resource.update(item_id, data)

    @router.delete(f"/{spec.name}/{{item_id}}", name=f"delete_{spec.name}")
    async def delete_item(item_id: str, resource: AdminResource = Depends(get_resource)):
        return await resource.delete(item_id)


for _spec in GENERIC_RESOURCES:
    register_resource_routes(_spec)
