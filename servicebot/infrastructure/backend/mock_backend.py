from __future__ import annotations

import logging
import time
from dataclasses import replace

from servicebot.application.exceptions import BookingBackendError, BookingNotFoundError
from servicebot.application.ports.booking_backend import BookingBackendPort
from servicebot.domain.entities.booking import Booking, BookingStatus
from servicebot.domain.entities.booking_draft import TimeWindow

DEFAULT_CATEGORIES = ("Cleaning", "Plumbing", "Electrical", "HVAC", "Handyman")


class MockBookingBackend(BookingBackendPort):
    def __init__(self, categories: list[str] | None = None, first_booking_id: int = 1) -> None:
        self._categories = list(categories) if categories is not None else list(DEFAULT_CATEGORIES)
        self._bookings: dict[int, Booking] = {}
        self._next_id = first_booking_id
        self._logger = logging.getLogger(__name__)

    def get_service_categories(self) -> list[str]:
        return list(self._categories)

    def create_booking(
        self,
        service_category: str,
        address: str,
        time_window: TimeWindow,
        contact_info: str,
        notes: str,
    ) -> int:
        if time_window.end <= time_window.start:
            raise BookingBackendError("Time window end must be after start")

        booking_id = self._next_id
        self._next_id += 1
        now_ns = time.time_ns()
        self._bookings[booking_id] = Booking(
            id=booking_id,
            status=BookingStatus.PENDING,
            service_category=service_category,
            address=address,
            time_window=time_window,
            contact_info=contact_info,
            notes=notes,
            created_at=now_ns,
            updated_at=now_ns,
        )
        self._logger.info(
            "Mock booking created",
            extra={"booking_id": booking_id, "service_category": service_category},
        )
        return booking_id

    def cancel_booking(self, booking_id: int) -> None:
        booking = self._get(booking_id)
        if booking.status is BookingStatus.CANCELLED:
            raise BookingBackendError("Booking is already cancelled")

        self._bookings[booking_id] = replace(booking, status=BookingStatus.CANCELLED, updated_at=time.time_ns())
        self._logger.info("Mock booking cancelled", extra={"booking_id": booking_id})

    def reschedule_booking(self, booking_id: int, time_window: TimeWindow) -> None:
        booking = self._get(booking_id)
        if booking.status is BookingStatus.CANCELLED:
            raise BookingBackendError("Cannot reschedule a cancelled booking")
        if time_window.end <= time_window.start:
            raise BookingBackendError("Time window end must be after start")

        self._bookings[booking_id] = replace(booking, time_window=time_window, updated_at=time.time_ns())
        self._logger.info("Mock booking rescheduled", extra={"booking_id": booking_id})

    def get_booking_details(self, booking_id: int) -> Booking:
        return self._get(booking_id)

    def _get(self, booking_id: int) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking
