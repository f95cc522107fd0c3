from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"  # accepted from storage, never extracted


class TimePreference(str, Enum):
    ASAP = "asap"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


@dataclass(frozen=True)
class TimeWindow:
    start: int  # epoch nanoseconds
    end: int


@dataclass(frozen=True)
class BookingDraft:
    service_category: str | None = None
    address: str | None = None
    time_window: TimeWindow | None = None
    contact_info: str | None = None
    notes: str | None = None
    customer_name: str | None = None
    # Extracted from the first utterance, not yet confirmed by the user
    area: str | None = None
    priority: Priority | None = None
    time_preference: TimePreference | None = None
    location: str | None = None
