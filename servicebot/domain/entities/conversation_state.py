from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from servicebot.domain.entities.booking_draft import BookingDraft
from servicebot.domain.entities.intent import Intent, Language
from servicebot.domain.entities.message import ChatMessage


class ConversationStep(str, Enum):
    WELCOME = "welcome"
    SERVICE_SELECTION = "service-selection"
    CUSTOMER_NAME = "customer-name"
    ADDRESS = "address"
    TIME_WINDOW = "time-window"
    CONTACT_INFO = "contact-info"
    NOTES = "notes"
    CONFIRMATION = "confirmation"
    COMPLETE = "complete"
    # Non-booking intents
    COLLECT_BOOKING_ID = "collect-booking-id"
    COLLECT_RESCHEDULE_TIME = "collect-reschedule-time"
    EXECUTE_ACTION = "execute-action"
    SHOW_RESULT = "show-result"


@dataclass(frozen=True)
class ConversationState:
    step: ConversationStep = ConversationStep.WELCOME
    draft: BookingDraft = BookingDraft()
    messages: tuple[ChatMessage, ...] = ()  # append-only
    active_intent: Intent | None = None  # fixed until restart
    detected_language: Language | None = None
    target_booking_id: int | None = None
    reschedule_time: str | None = None
