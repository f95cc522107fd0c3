"""
Field validators for chat input.

Each returns a ValidationResult and never raises; the conversation flow
decides between re-prompting and advancing from the result alone.
"""

from __future__ import annotations

import re
from datetime import datetime

from servicebot.application.utils.time_windows import build_tomorrow_window, map_label_to_range
from servicebot.domain.entities.validation import ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"[\d\s\-()+]{7,}")
BOOKING_ID_PREFIX = "bk"
MIN_ADDRESS_LENGTH = 5


def validate_address(address: str) -> ValidationResult:
    trimmed = (address or "").strip()
    if not trimmed:
        return ValidationResult.fail("Address cannot be empty")
    if len(trimmed) < MIN_ADDRESS_LENGTH:
        return ValidationResult.fail("Please provide a complete address")
    return ValidationResult.ok(trimmed)


def validate_contact_info(contact_info: str) -> ValidationResult:
    trimmed = (contact_info or "").strip()
    if not trimmed:
        return ValidationResult.fail("Contact information cannot be empty")
    if not EMAIL_PATTERN.match(trimmed) and not PHONE_PATTERN.search(trimmed):
        return ValidationResult.fail("Please provide a valid email or phone number")
    return ValidationResult.ok(trimmed)


def validate_time_window(time_window: str, now: datetime | None = None) -> ValidationResult:
    """Accept exactly morning, afternoon, evening or asap and map it onto tomorrow."""
    hours = map_label_to_range(time_window or "")
    if hours is None:
        return ValidationResult.fail("Please select a valid time window (morning, afternoon, evening, or asap)")
    start_hour, end_hour = hours
    return ValidationResult.ok(build_tomorrow_window(start_hour, end_hour, now))


def validate_booking_id(value: str) -> ValidationResult:
    """Parse BK10245 or 10245 into a positive integer booking id."""
    trimmed = (value or "").strip()
    if trimmed.lower().startswith(BOOKING_ID_PREFIX):
        trimmed = trimmed[len(BOOKING_ID_PREFIX):]

    digits = re.sub(r"\D", "", trimmed)
    if not digits:
        return ValidationResult.fail("Please provide a valid booking ID (e.g., BK10245 or 10245)")

    try:
        booking_id = int(digits)
    except ValueError:
        return ValidationResult.fail("Invalid booking ID format")
    if booking_id <= 0:
        return ValidationResult.fail("Booking ID must be a positive number")
    return ValidationResult.ok(booking_id)
