"""Slot availability - annotates the fixed daily slots with the server's counts"""

import logging
from typing import Any, Optional

from ...backend import BackendClient
from ...config import TIME_SLOTS
from ...errors import DomainRejection, ValidationFailed
from ...shared.validators import parse_iso_date
from .schemas import SlotOption

logger = logging.getLogger(__name__)

AVAILABLE_SLOTS_PATH = "/api/available-slots"


def annotate_slots(response: Any, time_slots: Optional[list[str]] = None) -> list[SlotOption]:
    """
    One SlotOption per fixed slot, in the fixed order.

    Counts are taken from the response as-is. A slot with available <= 0 is
    disabled; a slot the response does not mention has no availability info and
    stays selectable. Response entries outside the fixed set are ignored.
    """
    time_slots = TIME_SLOTS if time_slots is None else time_slots
    entries = (response or {}).get("slots") if isinstance(response, dict) else None

    by_slot: dict[str, dict] = {}
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("timeSlot") in time_slots:
            by_slot[entry["timeSlot"]] = entry

    options = []
    for slot in time_slots:
        entry = by_slot.get(slot)
        if entry is None:
            options.append(SlotOption(timeSlot=slot))
            continue
        available = entry.get("available")
        options.append(
            SlotOption(
                timeSlot=slot,
                available=available,
                capacity=entry.get("capacity"),
                disabled=available is not None and available <= 0,
            )
        )
    return options


class SlotAvailability:
    """Reads slot counts for a date through the query cache"""

    def __init__(self, backend: BackendClient, time_slots: Optional[list[str]] = None):
        self.backend = backend
        self.time_slots = TIME_SLOTS if time_slots is None else time_slots

    async def get_slot_options(self, date: str) -> list[SlotOption]:
        try:
            parse_iso_date(date)
        except ValueError as e:
            raise ValidationFailed(str(e), title="Invalid date") from e

        response = await self.backend.query(AVAILABLE_SLOTS_PATH, date, params={"date": date})
        options = annotate_slots(response, self.time_slots)
        logger.info(
            f"📅 Slots for {date}: {sum(1 for o in options if not o.disabled)}/{len(options)} selectable"
        )
        return options

    async def ensure_selectable(self, date: str, time_slot: str) -> SlotOption:
        """Reject a slot outside the fixed set or one the server reports as full"""
        if time_slot not in self.time_slots:
            raise ValidationFailed(
                f"Time slot must be one of: {', '.join(self.time_slots)}",
                title="Invalid time slot",
            )
        for option in await self.get_slot_options(date):
            if option.timeSlot == time_slot:
                if option.disabled:
                    raise DomainRejection(
                        "This time slot is fully booked. Please select a different time.",
                        title="Time slot unavailable",
                    )
                return option
        return SlotOption(timeSlot=time_slot)

    def invalidate(self, date: Optional[str] = None) -> int:
        if date is None:
            return self.backend.invalidate(AVAILABLE_SLOTS_PATH)
        return self.backend.invalidate(AVAILABLE_SLOTS_PATH, date)
