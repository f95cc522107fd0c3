from __future__ import annotations

import logging

from servicebot.application.exceptions import BookingBackendError
from servicebot.application.ports.booking_backend import BookingBackendPort
from servicebot.application.use_cases.conversation_flow import is_draft_complete
from servicebot.domain.entities.booking import ActionOutcome
from servicebot.domain.entities.booking_draft import BookingDraft


class ConfirmBookingUseCase:
    def __init__(self, backend: BookingBackendPort) -> None:
        self._backend = backend
        self._logger = logging.getLogger(__name__)

    def execute(self, draft: BookingDraft) -> ActionOutcome:
        """Submit a completed draft. Returns the new booking id on success."""
        if not is_draft_complete(draft):
            return ActionOutcome.failed("Some booking details are missing.")

        try:
            booking_id = self._backend.create_booking(
                service_category=draft.service_category,
                address=draft.address,
                time_window=draft.time_window,
                contact_info=draft.contact_info,
                notes=draft.notes or "",
            )
        except BookingBackendError as e:
            self._logger.error("Error creating booking", extra={"service_category": draft.service_category, "error": str(e)})
            return ActionOutcome.failed(str(e))

        self._logger.info("Booking created", extra={"booking_id": booking_id, "service_category": draft.service_category})
        return ActionOutcome.succeeded(booking_id=booking_id)
