from __future__ import annotations

from datetime import datetime, time, timedelta

from servicebot.domain.entities.booking_draft import TimeWindow

TIME_WINDOW_RANGES = {
    "morning": (8, 12),
    "afternoon": (12, 17),
    "evening": (17, 20),
    "asap": (8, 20),
}

NANOS_PER_SECOND = 1_000_000_000


def map_label_to_range(label: str) -> tuple[int, int] | None:
    """Map a time-window label to (start_hour, end_hour). Returns None if unknown."""
    normalized = label.lower().strip()
    return TIME_WINDOW_RANGES.get(normalized)


def to_epoch_nanos(moment: datetime) -> int:
    return int(moment.timestamp()) * NANOS_PER_SECOND


def from_epoch_nanos(value: int) -> datetime:
    return datetime.fromtimestamp(value / NANOS_PER_SECOND)


def build_tomorrow_window(start_hour: int, end_hour: int, now: datetime | None = None) -> TimeWindow:
    """Build a window on the local day after `now` between the given hours."""
    if now is None:
        now = datetime.now()
    tomorrow = now.date() + timedelta(days=1)
    start = datetime.combine(tomorrow, time(hour=start_hour), tzinfo=now.tzinfo)
    end = datetime.combine(tomorrow, time(hour=end_hour), tzinfo=now.tzinfo)
    return TimeWindow(start=to_epoch_nanos(start), end=to_epoch_nanos(end))
