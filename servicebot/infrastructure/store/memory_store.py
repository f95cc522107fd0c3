from __future__ import annotations

import time

from servicebot.application.ports.session_store import SessionStorePort
from servicebot.domain.entities.conversation_state import ConversationState

DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60


class MemorySessionStore(SessionStorePort):
    def __init__(self, max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS) -> None:
        self._states: dict[str, ConversationState] = {}
        self._saved_at: dict[str, float] = {}
        self._max_age_seconds = max_age_seconds

    def load(self, session_id: str, now_ts: float | None = None) -> ConversationState | None:
        if now_ts is None:
            now_ts = time.time()

        state = self._states.get(session_id)
        if state is None:
            return None

        if now_ts - self._saved_at.get(session_id, 0.0) > self._max_age_seconds:
            self.clear(session_id)
            return None
        return state

    def save(self, session_id: str, state: ConversationState, now_ts: float | None = None) -> None:
        self._states[session_id] = state
        self._saved_at[session_id] = now_ts if now_ts is not None else time.time()

    def clear(self, session_id: str) -> None:
        self._states.pop(session_id, None)
        self._saved_at.pop(session_id, None)
