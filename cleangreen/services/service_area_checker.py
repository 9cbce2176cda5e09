"""
Service Area Checker

Answers "do we clean at this ZIP code?" for the booking wizard and validates
ZIP lists entered by admins. Coverage is decided by the backend's service
areas; the zipcodes library supplies US ZIP data so typos are caught before
they reach the backend and served areas can be shown with a city name.
"""

import logging
from typing import Optional

import zipcodes
from pydantic import BaseModel

from ..backend import BackendClient
from ..errors import BackendRequestError, ValidationFailed
from ..schemas import ServiceArea, parse_records
from ..shared.validators import extract_zip_code, normalize_zipcode

logger = logging.getLogger(__name__)

NOT_SERVED_MESSAGE = "Sorry, but we don't serve your area yet, maybe in the future."


class ZipCheckResult(BaseModel):
    zipCode: Optional[str] = None
    served: Optional[bool] = None
    city: Optional[str] = None
    state: Optional[str] = None
    message: Optional[str] = None


def lookup_zipcode(zipcode: str) -> Optional[dict[str, str]]:
    """
    Location data for a ZIP code from the zipcodes dataset.
    Returns None for malformed or unknown codes.
    """
    zipcode = normalize_zipcode(zipcode)
    if not zipcode:
        return None

    matches = zipcodes.matching(zipcode)
    if not matches:
        logger.debug(f"ZIP code {zipcode} not found in database")
        return None

    zip_data = matches[0]
    state = zip_data.get("state")
    city = zip_data.get("city")
    if not state or not city:
        return None

    return {
        "zipcode": zipcode,
        "city": city.title(),
        "state": state.upper(),
        "county": zip_data.get("county") or "",
    }


def validate_zip_list(codes: list[str]) -> list[str]:
    """
    Normalize a ZIP list for a service area.

    Every entry must be a real US ZIP code; duplicates are dropped and order is kept.

    Raises:
        ValidationFailed: listing the entries that are not real ZIP codes
    """
    normalized: list[str] = []
    invalid: list[str] = []
    for raw in codes:
        raw = (raw or "").strip()
        if not raw:
            continue
        zipcode = normalize_zipcode(raw)
        if not zipcode or lookup_zipcode(zipcode) is None:
            invalid.append(raw)
        elif zipcode not in normalized:
            normalized.append(zipcode)

    if invalid:
        raise ValidationFailed(f"Invalid ZIP codes: {', '.join(invalid)}", title="Invalid ZIP codes")
    if not normalized:
        raise ValidationFailed("At least one ZIP code is required")
    return normalized


class ServiceAreaChecker:
    """Checks ZIP codes against the business's active service areas"""

    CHECK_PATH = "/api/service-areas/check"

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def check_zipcode(self, zipcode: str) -> ZipCheckResult:
        """
        Ask the backend whether a ZIP is served.

        A ZIP that does not exist is reported as not served without a backend call.
        """
        normalized = normalize_zipcode(zipcode)
        if not normalized:
            raise ValidationFailed("Invalid ZIP code format")

        location = lookup_zipcode(normalized)
        if location is None:
            return ZipCheckResult(zipCode=normalized, served=False, message="Unable to verify ZIP code location")

        data = await self.backend.query(f"{self.CHECK_PATH}/{normalized}")
        served = bool((data or {}).get("served"))
        logger.info(f"📍 ZIP {normalized} served={served}")

        return ZipCheckResult(
            zipCode=normalized,
            served=served,
            city=location["city"],
            state=location["state"],
            message=None if served else NOT_SERVED_MESSAGE,
        )

    async def check_address(self, address: Optional[str]) -> ZipCheckResult:
        """
        ZIP coverage for a free-form address.

        No ZIP in the address, or a failed check, yields served=None ("unknown");
        the booking flow never blocks on it.
        """
        zipcode = extract_zip_code(address)
        if not zipcode:
            return ZipCheckResult()
        try:
            return await self.check_zipcode(zipcode)
        except BackendRequestError as e:
            logger.warning(f"⚠️ ZIP check failed for {zipcode}: {e.message}")
            return ZipCheckResult(zipCode=zipcode)

    async def public_service_areas(self) -> list[ServiceArea]:
        """Active service areas as published to visitors"""
        data = await self.backend.query("/api/public/service-areas")
        return parse_records(ServiceArea, data)
