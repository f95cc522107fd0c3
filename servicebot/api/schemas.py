from __future__ import annotations

from pydantic import BaseModel, Field

from servicebot.domain.entities.booking_draft import BookingDraft, Priority, TimePreference
from servicebot.domain.entities.conversation_state import ConversationState, ConversationStep
from servicebot.domain.entities.intent import Intent, Language
from servicebot.domain.entities.message import ChatMessage, MessageRole


class ChatMessageRequestSchema(BaseModel):
    text: str = Field(max_length=2000)


class TimeWindowSchema(BaseModel):
    start: int  # epoch nanoseconds
    end: int


class BookingDraftSchema(BaseModel):
    service_category: str | None = None
    address: str | None = None
    time_window: TimeWindowSchema | None = None
    contact_info: str | None = None
    notes: str | None = None
    customer_name: str | None = None
    area: str | None = None
    priority: Priority | None = None
    time_preference: TimePreference | None = None
    location: str | None = None

    @classmethod
    def from_entity(cls, draft: BookingDraft) -> "BookingDraftSchema":
        time_window = None
        if draft.time_window:
            time_window = TimeWindowSchema(start=draft.time_window.start, end=draft.time_window.end)
        return cls(
            service_category=draft.service_category,
            address=draft.address,
            time_window=time_window,
            contact_info=draft.contact_info,
            notes=draft.notes,
            customer_name=draft.customer_name,
            area=draft.area,
            priority=draft.priority,
            time_preference=draft.time_preference,
            location=draft.location,
        )


class ChatMessageSchema(BaseModel):
    id: str
    role: MessageRole
    content: str
    timestamp: int  # epoch milliseconds
    quick_replies: list[str] | None = None

    @classmethod
    def from_entity(cls, message: ChatMessage) -> "ChatMessageSchema":
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            quick_replies=list(message.quick_replies) if message.quick_replies is not None else None,
        )


class ConversationStateSchema(BaseModel):
    step: ConversationStep
    draft: BookingDraftSchema
    messages: list[ChatMessageSchema] = Field(default_factory=list)
    active_intent: Intent | None = None
    detected_language: Language | None = None
    target_booking_id: int | None = None
    reschedule_time: str | None = None

    @classmethod
    def from_entity(cls, state: ConversationState) -> "ConversationStateSchema":
        return cls(
            step=state.step,
            draft=BookingDraftSchema.from_entity(state.draft),
            messages=[ChatMessageSchema.from_entity(m) for m in state.messages],
            active_intent=state.active_intent,
            detected_language=state.detected_language,
            target_booking_id=state.target_booking_id,
            reschedule_time=state.reschedule_time,
        )


class ChatTurnResponseSchema(BaseModel):
    state: ConversationStateSchema
    new_messages: list[ChatMessageSchema]


class CategoriesResponseSchema(BaseModel):
    categories: list[str]
