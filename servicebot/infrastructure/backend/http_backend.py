from __future__ import annotations

import logging
from typing import Any

import httpx

from servicebot.application.exceptions import BookingBackendError, BookingNotFoundError
from servicebot.application.ports.booking_backend import BookingBackendPort
from servicebot.core.config import settings
from servicebot.domain.entities.booking import Booking, BookingStatus
from servicebot.domain.entities.booking_draft import TimeWindow


class HttpBookingBackend(BookingBackendPort):
    """Booking backend reached over a JSON HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BACKEND_BASE_URL or "").rstrip("/")
        self._api_key = api_key or settings.BACKEND_API_KEY
        timeout = timeout_seconds if timeout_seconds is not None else settings.BACKEND_TIMEOUT_SECONDS
        self._client = client or httpx.Client(timeout=timeout)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BACKEND_BASE_URL is required for the HTTP booking backend")

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _request(self, method: str, path: str, booking_id: int | None = None, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._client.request(method, url, headers=self._headers(), **kwargs)
            response.raise_for_status()
            return response.json() if response.content else None
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            self._logger.error(
                "Booking backend returned an error",
                extra={"booking_id": booking_id, "status_code": e.response.status_code, "error": detail},
            )
            if e.response.status_code == 404:
                raise BookingNotFoundError(detail or "Booking not found") from e
            raise BookingBackendError(detail or f"Booking service error ({e.response.status_code})") from e
        except httpx.HTTPError as e:
            self._logger.error("Booking backend unreachable", extra={"booking_id": booking_id, "error": str(e)})
            raise BookingBackendError("Booking service is unavailable") from e
        except ValueError as e:
            self._logger.error("Booking backend sent invalid JSON", extra={"booking_id": booking_id, "error": str(e)})
            raise BookingBackendError("Booking service sent an invalid response") from e

    def get_service_categories(self) -> list[str]:
        data = self._request("GET", "/service-categories")
        if not isinstance(data, list):
            raise BookingBackendError("Booking service sent an invalid category list")
        seen: list[str] = []
        for item in data:
            name = str(item)
            if name not in seen:
                seen.append(name)
        return seen

    def create_booking(
        self,
        service_category: str,
        address: str,
        time_window: TimeWindow,
        contact_info: str,
        notes: str,
    ) -> int:
        payload = {
            "serviceCategory": service_category,
            "address": address,
            "timeWindow": {"start": time_window.start, "end": time_window.end},
            "contactInfo": contact_info,
            "notes": notes,
        }
        data = self._request("POST", "/bookings", json=payload)
        booking_id = data.get("id") if isinstance(data, dict) else data
        try:
            booking_id = int(booking_id)
        except (TypeError, ValueError) as e:
            raise BookingBackendError("No booking ID returned from booking service") from e

        self._logger.info("Booking created", extra={"booking_id": booking_id, "service_category": service_category})
        return booking_id

    def cancel_booking(self, booking_id: int) -> None:
        self._request("POST", f"/bookings/{booking_id}/cancel", booking_id=booking_id)
        self._logger.info("Booking cancelled", extra={"booking_id": booking_id})

    def reschedule_booking(self, booking_id: int, time_window: TimeWindow) -> None:
        payload = {"timeWindow": {"start": time_window.start, "end": time_window.end}}
        self._request("POST", f"/bookings/{booking_id}/reschedule", booking_id=booking_id, json=payload)
        self._logger.info("Booking rescheduled", extra={"booking_id": booking_id})

    def get_booking_details(self, booking_id: int) -> Booking:
        data = self._request("GET", f"/bookings/{booking_id}", booking_id=booking_id)
        try:
            return _parse_booking(data)
        except (KeyError, TypeError, ValueError) as e:
            self._logger.error("Malformed booking payload", extra={"booking_id": booking_id, "error": str(e)})
            raise BookingBackendError("Booking service sent an invalid booking") from e


def _parse_booking(data: dict[str, Any]) -> Booking:
    window = data["timeWindow"]
    created_at = data.get("createdAt")
    updated_at = data.get("updatedAt")
    return Booking(
        id=int(data["id"]),
        status=BookingStatus(data["status"]),
        service_category=str(data["serviceCategory"]),
        address=str(data["address"]),
        time_window=TimeWindow(start=int(window["start"]), end=int(window["end"])),
        contact_info=str(data["contactInfo"]),
        notes=str(data.get("notes") or ""),
        created_at=int(created_at) if created_at is not None else None,
        updated_at=int(updated_at) if updated_at is not None else None,
    )


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error") or body.get("message")
        return str(detail) if detail else None
    return None
