"""Employee router - permission-gated endpoints for staff accounts"""

from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...backend import BackendClient
from ...dependencies import get_backend
from ...utils.csv_export import csv_response
from ..admin.resources import ResourceSpec
from ..admin.schemas import BookingStatusUpdate
from .permissions import DEFAULT_TEMPLATES, Action, Feature, metadata_table
from .schemas import StatusUpdate
from .service import (
    ACTIVITY_LOGS,
    BOOKINGS,
    CUSTOMERS,
    EMPLOYEES,
    INVOICES,
    MESSAGES,
    NEWSLETTER,
    QUOTES,
    REVIEWS,
    TEAM,
    EmployeePortalService,
)

router = APIRouter(prefix="/employee", tags=["Employee"])

ExportFormat = Optional[Literal["json", "csv"]]


def get_employee_service(backend: BackendClient = Depends(get_backend)) -> EmployeePortalService:
    """Dependency injection for EmployeePortalService (one per request)"""
    return EmployeePortalService(backend)


def require_permission(feature: Feature, action: Action):
    """Dependency that rejects the request with 403 unless the employee holds the grant"""

    async def checker(service: EmployeePortalService = Depends(get_employee_service)) -> EmployeePortalService:
        await service.require(feature, action)
        return service

    return checker


async def _list(service: EmployeePortalService, spec: ResourceSpec, format: ExportFormat):
    rows = await service.resource(spec).list()
    if format == "csv":
        return csv_response(rows, spec.name)
    return rows


# ============================================================================
# ACCOUNT
# ============================================================================


@router.get("/me")
async def get_current_employee(service: EmployeePortalService = Depends(get_employee_service)):
    return await service.current_user()


@router.get("/permissions")
async def get_my_permissions(service: EmployeePortalService = Depends(get_employee_service)):
    """The caller's grants plus the catalogue used to render them"""
    permissions = await service.permissions()
    return {
        "permissions": [p.model_dump() for p in permissions],
        "features": metadata_table(),
    }


@router.get("/permission-templates")
async def list_permission_templates():
    return {
        key: {
            "name": template["name"],
            "description": template["description"],
            "permissions": [p.model_dump() for p in template["permissions"]],
        }
        for key, template in DEFAULT_TEMPLATES.items()
    }


# ============================================================================
# BOOKINGS
# ============================================================================


@router.get("/bookings")
async def list_assigned_bookings(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.BOOKINGS, Action.VIEW)),
):
    """Bookings assigned to the signed-in employee"""
    return await _list(service, BOOKINGS, format)


@router.get("/all-bookings")
async def list_all_bookings(
    service: EmployeePortalService = Depends(require_permission(Feature.BOOKINGS, Action.VIEW)),
):
    return await service.all_bookings()


@router.patch("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    service: EmployeePortalService = Depends(require_permission(Feature.BOOKINGS, Action.EDIT)),
):
    return await service.update_status(BOOKINGS, booking_id, data.status)


@router.delete("/bookings/{booking_id}")
async def delete_booking(
    booking_id: str,
    service: EmployeePortalService = Depends(require_permission(Feature.BOOKINGS, Action.DELETE)),
):
    return await service.resource(BOOKINGS).delete(booking_id)


# ============================================================================
# QUOTES
# ============================================================================


@router.get("/quotes")
async def list_quotes(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.QUOTES, Action.VIEW)),
):
    return await _list(service, QUOTES, format)


@router.patch("/quotes/{quote_id}/status")
async def update_quote_status(
    quote_id: str,
    data: StatusUpdate,
    service: EmployeePortalService = Depends(require_permission(Feature.QUOTES, Action.EDIT)),
):
    return await service.update_status(QUOTES, quote_id, data.status)


@router.delete("/quotes/{quote_id}")
async def delete_quote(
    quote_id: str,
    service: EmployeePortalService = Depends(require_permission(Feature.QUOTES, Action.DELETE)),
):
    return await service.resource(QUOTES).delete(quote_id)


# ============================================================================
# INVOICES
# ============================================================================


@router.get("/invoices")
async def list_invoices(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.INVOICES, Action.VIEW)),
):
    return await _list(service, INVOICES, format)


@router.post("/invoices/{invoice_id}/send-payment-link")
async def send_invoice_payment_link(
    invoice_id: str,
    service: EmployeePortalService = Depends(require_permission(Feature.INVOICES, Action.SEND)),
):
    return await service.send_payment_link(invoice_id)


# ============================================================================
# CUSTOMERS / EMPLOYEES
# ============================================================================


@router.get("/customers")
async def list_customers(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.CUSTOMERS, Action.VIEW)),
):
    return await _list(service, CUSTOMERS, format)


@router.get("/employees")
async def list_employees(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.EMPLOYEES, Action.VIEW)),
):
    return await _list(service, EMPLOYEES, format)


# ============================================================================
# REVIEWS
# ============================================================================


@router.get("/reviews")
async def list_reviews(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.REVIEWS, Action.VIEW)),
):
    return await _list(service, REVIEWS, format)


@router.patch("/reviews/{review_id}/{decision}")
async def decide_review(
    review_id: str,
    decision: Literal["approve", "deny"],
    service: EmployeePortalService = Depends(require_permission(Feature.REVIEWS, Action.APPROVE)),
):
    return await service.resource(REVIEWS).action(review_id, decision)


@router.delete("/reviews/{review_id}")
async def delete_review(
    review_id: str,
    service: EmployeePortalService = Depends(require_permission(Feature.REVIEWS, Action.DELETE)),
):
    return await service.resource(REVIEWS).delete(review_id)


# ============================================================================
# TEAM
# ============================================================================


@router.get("/team")
async def list_team(
    service: EmployeePortalService = Depends(require_permission(Feature.TEAM, Action.VIEW)),
):
    return await service.resource(TEAM).list()


@router.post("/team")
async def create_team_member(
    data: dict = Body(...),
    service: EmployeePortalService = Depends(require_permission(Feature.TEAM, Action.CREATE)),
):
    return await service.resource(TEAM).create(data)


@router.patch("/team/{member_id}")
async def update_team_member(
    member_id: str,
    data: dict = Body(...),
    service: EmployeePortalService = Depends(require_permission(Feature.TEAM, Action.EDIT)),
):
    return await service.resource(TEAM).update(member_id, data)


@router.delete("/team/{member_id}")
async def delete_team_member(
    member_id: str,
    service: EmployeePortalService = Depends(require_permission(Feature.TEAM, Action.DELETE)),
):
    return await service.resource(TEAM).delete(member_id)


# ============================================================================
# MESSAGES
# ============================================================================


@router.get("/messages")
async def list_messages(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.MESSAGES, Action.VIEW)),
):
    return await _list(service, MESSAGES, format)


@router.patch("/messages/{message_id}/status")
async def update_message_status(
    message_id: str,
    data: StatusUpdate,
    service: EmployeePortalService = Depends(require_permission(Feature.MESSAGES, Action.EDIT)),
):
    return await service.update_status(MESSAGES, message_id, data.status)


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: str,
    service: EmployeePortalService = Depends(require_permission(Feature.MESSAGES, Action.DELETE)),
):
    return await service.resource(MESSAGES).delete(message_id)


# ============================================================================
# NEWSLETTER / ACTIVITY
# ============================================================================


@router.get("/newsletter")
async def list_newsletter_subscribers(
    format: ExportFormat = Query(None),
    service: EmployeePortalService = Depends(require_permission(Feature.NEWSLETTER, Action.VIEW)),
):
    return await _list(service, NEWSLETTER, format)


@router.get("/activity-logs")
async def list_activity_logs(
    service: EmployeePortalService = Depends(require_permission(Feature.ACTIVITY_LOGS, Action.VIEW)),
):
    return await service.resource(ACTIVITY_LOGS).list()
