"""Shared validation utilities"""

import re
from datetime import date, datetime, time
from typing import Optional

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SLOT_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
ZIP_IN_ADDRESS_PATTERN = re.compile(r"\b\d{5}\b")


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+1XXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD date string, raising ValueError on anything else"""
    if not value or not ISO_DATE_PATTERN.match(value):
        raise ValueError("Invalid date format. Expected YYYY-MM-DD")
    return date.fromisoformat(value)


def parse_slot_start(time_slot: str) -> time:
    """
    Start time of a slot label.

    Handles "9:00 AM", "9:00AM", "09:00 am" and ranges like "9:00 AM - 11:00 AM".
    """
    start = (time_slot or "").split("-")[0].strip()
    match = SLOT_TIME_PATTERN.search(start)
    if not match:
        raise ValueError(f"Invalid time slot: {time_slot!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = match.group(3).upper()

    if meridiem == "PM" and hours != 12:
        hours += 12
    elif meridiem == "AM" and hours == 12:
        hours = 0

    return time(hours, minutes)


def appointment_datetime(date_str: str, time_slot: str) -> datetime:
    """Combine a booking's date and slot label into a naive datetime"""
    return datetime.combine(parse_iso_date(date_str), parse_slot_start(time_slot))


def normalize_zipcode(zipcode: Optional[str]) -> Optional[str]:
    """Normalize ZIP code to 5-digit format (ZIP+4 is truncated)."""
    if not zipcode:
        return None

    digits = re.sub(r"\D", "", zipcode)

    if len(digits) == 5:
        return digits
    elif len(digits) == 9:
        return digits[:5]
    else:
        return None


def extract_zip_code(address: Optional[str]) -> Optional[str]:
    """First standalone 5-digit group in a free-form address"""
    if not address:
        return None
    match = ZIP_IN_ADDRESS_PATTERN.search(address)
    return match.group(0) if match else None
