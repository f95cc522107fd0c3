from abc import ABC, abstractmethod

from servicebot.domain.entities.conversation_state import ConversationState


class SessionStorePort(ABC):
    @abstractmethod
    def load(self, session_id: str, now_ts: float | None = None) -> ConversationState | None:
        """
        Restore the saved conversation for session_id.

        Returns None when nothing usable is stored: no record, an unknown
        schema version, undecodable data, or a record older than the
        freshness window. Discarded records are cleared.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, session_id: str, state: ConversationState, now_ts: float | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self, session_id: str) -> None:
        raise NotImplementedError
