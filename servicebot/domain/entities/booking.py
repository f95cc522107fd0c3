from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from servicebot.domain.entities.booking_draft import TimeWindow


class BookingStatus(str, Enum):
    PENDING = "pending"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Booking:
    id: int
    status: BookingStatus
    service_category: str
    address: str
    time_window: TimeWindow
    contact_info: str
    notes: str = ""
    created_at: int | None = None  # epoch nanoseconds
    updated_at: int | None = None


@dataclass(frozen=True)
class ActionOutcome:
    """Result of an external booking operation, reported back into the conversation."""

    success: bool
    error: str | None = None
    booking_id: int | None = None
    booking: Booking | None = None

    @staticmethod
    def succeeded(booking_id: int | None = None, booking: Booking | None = None) -> "ActionOutcome":
        return ActionOutcome(success=True, booking_id=booking_id, booking=booking)

    @staticmethod
    def failed(error: str) -> "ActionOutcome":
        return ActionOutcome(success=False, error=error)
