from __future__ import annotations

import logging
from dataclasses import dataclass

from servicebot.application.exceptions import BookingBackendError
from servicebot.application.ports.booking_backend import BookingBackendPort
from servicebot.application.ports.session_store import SessionStorePort
from servicebot.application.use_cases.confirm_booking import ConfirmBookingUseCase
from servicebot.application.use_cases.conversation_flow import (
    create_initial_state,
    process_user_input,
    record_action_result,
    record_booking_confirmation,
)
from servicebot.application.use_cases.execute_action import ExecuteActionUseCase
from servicebot.application.utils.message_rules import is_confirmation, is_restart_command
from servicebot.application.utils.state_helpers import add_user_message
from servicebot.domain.entities.conversation_state import ConversationState, ConversationStep
from servicebot.domain.entities.message import ChatMessage


@dataclass(frozen=True)
class ChatTurnResult:
    state: ConversationState
    new_messages: tuple[ChatMessage, ...]


class HandleChatMessageUseCase:
    """
    Run one chat turn for a session.

    Loads the saved conversation (or starts fresh), applies the user's text,
    performs any backend operation the conversation is waiting on, records
    its outcome, and saves the result.
    """

    def __init__(
        self,
        store: SessionStorePort,
        backend: BookingBackendPort,
        execute_action: ExecuteActionUseCase,
        confirm_booking: ConfirmBookingUseCase,
        default_session_id: str,
        fallback_categories: list[str],
    ) -> None:
        self._store = store
        self._backend = backend
        self._execute_action = execute_action
        self._confirm_booking = confirm_booking
        self._default_session_id = default_session_id
        self._fallback_categories = list(fallback_categories)
        self._logger = logging.getLogger(__name__)

    def get_state(self, session_id: str | None = None) -> ConversationState:
        session_id = session_id or self._default_session_id
        state = self._store.load(session_id)
        if state is None:
            state = create_initial_state()
            self._store.save(session_id, state)
        return state

    def get_categories(self) -> list[str]:
        """Fetch the catalog fresh for every turn, falling back to configured categories."""
        try:
            categories = self._backend.get_service_categories()
        except BookingBackendError as e:
            self._logger.warning("Service categories unavailable, using fallback", extra={"error": str(e)})
            return list(self._fallback_categories)
        return categories or list(self._fallback_categories)

    def restart(self, session_id: str | None = None) -> ConversationState:
        session_id = session_id or self._default_session_id
        self._store.clear(session_id)
        state = create_initial_state()
        self._store.save(session_id, state)
        self._logger.info("Session restarted", extra={"session_id": session_id})
        return state

    def handle(self, text: str, session_id: str | None = None) -> ChatTurnResult:
        session_id = session_id or self._default_session_id
        state = self.get_state(session_id)
        before = len(state.messages)

        if is_restart_command(text):
            state = self.restart(session_id)
            return ChatTurnResult(state=state, new_messages=state.messages)

        if state.step is ConversationStep.CONFIRMATION and is_confirmation(text):
            state = add_user_message(state, text)
            outcome = self._confirm_booking.execute(state.draft)
            state = record_booking_confirmation(state, outcome)
        else:
            state = process_user_input(state, text, self.get_categories())

        if state.step is ConversationStep.EXECUTE_ACTION:
            outcome = self._execute_action.execute(state)
            state = record_action_result(state, outcome)

        self._store.save(session_id, state)
        self._logger.info(
            "Chat turn processed",
            extra={
                "session_id": session_id,
                "step": state.step.value,
                "intent": state.active_intent.value if state.active_intent else None,
                "language": state.detected_language.value if state.detected_language else None,
            },
        )
        return ChatTurnResult(state=state, new_messages=state.messages[before:])
