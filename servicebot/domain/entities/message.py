from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MessageRole(str, Enum):
    USER = "user"
    BOT = "bot"
    SYSTEM = "system"


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: MessageRole
    content: str
    timestamp: int  # epoch milliseconds
    quick_replies: tuple[str, ...] | None = None
