"""
Tests for the booking backend adapters.
"""

from __future__ import annotations

import json

import httpx
import pytest

from servicebot.application.exceptions import BookingBackendError, BookingNotFoundError
from servicebot.domain.entities.booking import BookingStatus
from servicebot.domain.entities.booking_draft import TimeWindow
from servicebot.infrastructure.backend.http_backend import HttpBookingBackend
from servicebot.infrastructure.backend.mock_backend import MockBookingBackend

WINDOW = TimeWindow(start=1_773_216_000 * 10**9, end=1_773_230_400 * 10**9)
LATER = TimeWindow(start=1_773_234_000 * 10**9, end=1_773_244_800 * 10**9)


def test_mock_backend_lifecycle():
    backend = MockBookingBackend(first_booking_id=10245)
    booking_id = backend.create_booking("Plumbing", "12 MG Road", WINDOW, "9876543210", "")
    assert booking_id == 10245

    backend.reschedule_booking(booking_id, LATER)
    assert backend.get_booking_details(booking_id).time_window == LATER

    backend.cancel_booking(booking_id)
    assert backend.get_booking_details(booking_id).status is BookingStatus.CANCELLED

    with pytest.raises(BookingBackendError):
        backend.cancel_booking(booking_id)
    with pytest.raises(BookingBackendError):
        backend.reschedule_booking(booking_id, WINDOW)


def test_mock_backend_unknown_booking():
    backend = MockBookingBackend()
    with pytest.raises(BookingNotFoundError):
        backend.get_booking_details(5)
    with pytest.raises(BookingNotFoundError):
        backend.cancel_booking(5)


def test_mock_backend_rejects_inverted_window():
    backend = MockBookingBackend()
    with pytest.raises(BookingBackendError):
        backend.create_booking("Cleaning", "12 MG Road", TimeWindow(start=2, end=1), "a@b.co", "")


def _http_backend(handler) -> HttpBookingBackend:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpBookingBackend(base_url="https://bookings.test/api", api_key="secret", client=client)


def test_http_backend_creates_booking():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": 77})

    backend = _http_backend(handler)
    booking_id = backend.create_booking("Cleaning", "12 MG Road", WINDOW, "a@b.co", "Ring twice")

    assert booking_id == 77
    assert seen["path"] == "/api/bookings"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["timeWindow"] == {"start": WINDOW.start, "end": WINDOW.end}
    assert seen["body"]["serviceCategory"] == "Cleaning"


def test_http_backend_parses_booking_details():
    payload = {
        "id": 9,
        "status": "pending",
        "serviceCategory": "HVAC",
        "address": "4 Lake View Road",
        "timeWindow": {"start": WINDOW.start, "end": WINDOW.end},
        "contactInfo": "9876543210",
        "notes": "",
        "createdAt": 1,
        "updatedAt": 2,
    }
    backend = _http_backend(lambda request: httpx.Response(200, json=payload))
    booking = backend.get_booking_details(9)

    assert booking.status is BookingStatus.PENDING
    assert booking.time_window == WINDOW
    assert booking.updated_at == 2


def test_http_backend_maps_errors():
    backend = _http_backend(lambda request: httpx.Response(404, json={"detail": "Booking not found"}))
    with pytest.raises(BookingNotFoundError, match="Booking not found"):
        backend.cancel_booking(1)

    backend = _http_backend(lambda request: httpx.Response(409, json={"error": "Booking is already cancelled"}))
    with pytest.raises(BookingBackendError, match="already cancelled"):
        backend.cancel_booking(1)


def test_http_backend_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    backend = _http_backend(handler)
    with pytest.raises(BookingBackendError, match="unavailable"):
        backend.get_service_categories()


def test_http_backend_deduplicates_categories():
    backend = _http_backend(lambda request: httpx.Response(200, json=["Cleaning", "HVAC", "Cleaning"]))
    assert backend.get_service_categories() == ["Cleaning", "HVAC"]
