from __future__ import annotations

import time
import uuid
from dataclasses import replace

from servicebot.domain.entities.conversation_state import ConversationState
from servicebot.domain.entities.message import ChatMessage, MessageRole


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_message(role: MessageRole, content: str, quick_replies: list[str] | tuple[str, ...] | None = None) -> ChatMessage:
    return ChatMessage(
        id=str(uuid.uuid4()),
        role=role,
        content=content,
        timestamp=_now_ms(),
        quick_replies=tuple(quick_replies) if quick_replies is not None else None,
    )


def append_message(state: ConversationState, message: ChatMessage) -> ConversationState:
    """Return a copy of state with message appended; earlier messages are untouched."""
    return replace(state, messages=state.messages + (message,))


def add_user_message(state: ConversationState, content: str) -> ConversationState:
    return append_message(state, new_message(MessageRole.USER, content))


def add_bot_message(
    state: ConversationState,
    content: str,
    quick_replies: list[str] | tuple[str, ...] | None = None,
) -> ConversationState:
    return append_message(state, new_message(MessageRole.BOT, content, quick_replies))


def add_system_message(state: ConversationState, content: str) -> ConversationState:
    return append_message(state, new_message(MessageRole.SYSTEM, content))
