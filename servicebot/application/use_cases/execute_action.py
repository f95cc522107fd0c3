from __future__ import annotations

import logging

from servicebot.application.exceptions import BookingBackendError
from servicebot.application.ports.booking_backend import BookingBackendPort
from servicebot.domain.entities.booking import ActionOutcome
from servicebot.domain.entities.conversation_state import ConversationState, ConversationStep
from servicebot.domain.entities.intent import Intent


class ExecuteActionUseCase:
    """Perform the cancel / reschedule / inquiry operation a conversation is parked on."""

    def __init__(self, backend: BookingBackendPort) -> None:
        self._backend = backend
        self._logger = logging.getLogger(__name__)

    def execute(self, state: ConversationState) -> ActionOutcome:
        booking_id = state.target_booking_id
        if state.step is not ConversationStep.EXECUTE_ACTION or booking_id is None:
            return ActionOutcome.failed("There is no pending booking action.")

        intent = state.active_intent
        try:
            if intent is Intent.CANCELLATION:
                self._backend.cancel_booking(booking_id)
                outcome = ActionOutcome.succeeded(booking_id=booking_id)
            elif intent is Intent.RESCHEDULE:
                if state.draft.time_window is None:
                    return ActionOutcome.failed("No new time window was selected.")
                self._backend.reschedule_booking(booking_id, state.draft.time_window)
                outcome = ActionOutcome.succeeded(booking_id=booking_id)
            elif intent is Intent.INQUIRY:
                booking = self._backend.get_booking_details(booking_id)
                outcome = ActionOutcome.succeeded(booking_id=booking_id, booking=booking)
            else:
                return ActionOutcome.failed("This conversation has no booking action to perform.")
        except BookingBackendError as e:
            self._logger.error(
                "Booking action failed",
                extra={"intent": intent.value if intent else None, "booking_id": booking_id, "error": str(e)},
            )
            return ActionOutcome.failed(str(e))

        self._logger.info("Booking action completed", extra={"intent": intent.value, "booking_id": booking_id})
        return outcome
