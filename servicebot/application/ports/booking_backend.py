from __future__ import annotations

from abc import ABC, abstractmethod

from servicebot.domain.entities.booking import Booking
from servicebot.domain.entities.booking_draft import TimeWindow


class BookingBackendPort(ABC):
    """Remote booking operations. Implementations raise BookingBackendError on failure."""

    @abstractmethod
    def get_service_categories(self) -> list[str]:
        """Ordered, distinct category names offered for booking."""
        raise NotImplementedError

    @abstractmethod
    def create_booking(
        self,
        service_category: str,
        address: str,
        time_window: TimeWindow,
        contact_info: str,
        notes: str,
    ) -> int:
        """Create a booking. Returns the new booking id."""
        raise NotImplementedError

    @abstractmethod
    def cancel_booking(self, booking_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def reschedule_booking(self, booking_id: int, time_window: TimeWindow) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_booking_details(self, booking_id: int) -> Booking:
        """Raises BookingNotFoundError when the id is unknown."""
        raise NotImplementedError
