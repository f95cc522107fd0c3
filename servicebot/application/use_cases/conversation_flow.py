"""
Conversation state machine for the booking assistant.

Every public function here is pure: it takes a ConversationState and returns
a new one. Nothing is persisted and no backend is called. When the flow
reaches execute-action (or the user confirms the booking summary) the caller
performs the real operation and reports the outcome through
record_action_result / record_booking_confirmation.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from servicebot.application.utils.entity_extraction import extract_entities
from servicebot.application.utils.intent_detection import detect_intent_and_language
from servicebot.application.utils.message_rules import (
    is_help_command,
    is_none_answer,
    is_restart_command,
    is_skip,
    match_option,
    normalize_command,
)
from servicebot.application.utils.state_helpers import add_bot_message, add_user_message
from servicebot.application.utils.time_windows import from_epoch_nanos
from servicebot.application.utils.validators import (
    validate_address,
    validate_booking_id,
    validate_contact_info,
    validate_time_window,
)
from servicebot.domain.entities.booking import ActionOutcome, Booking, BookingStatus
from servicebot.domain.entities.booking_draft import BookingDraft, Priority, TimePreference
from servicebot.domain.entities.conversation_state import ConversationState, ConversationStep
from servicebot.domain.entities.intent import Confidence, Intent

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "👋 Hi! I'm ServiceBot, your home service booking assistant. I can help you book services, "
    "check booking status, cancel, or reschedule. Just tell me what you need in English, Hindi, or Hinglish!"
)
HELP_MESSAGE = (
    "I can help you:\n"
    "• Book a new service\n"
    "• Check booking status\n"
    "• Cancel a booking\n"
    "• Reschedule a booking\n\n"
    "Just tell me what you need! Type 'restart' anytime to start over."
)
ANYTHING_ELSE = 'Is there anything else I can help you with? Type "restart" to start a new conversation.'
CONFIRM_HINT = 'Type "confirm" to place your booking or "restart" to start over.'

NAME_QUICK_REPLIES = ("Skip",)
NOTES_QUICK_REPLIES = ("None",)
TIME_QUICK_REPLIES = ("Morning", "Afternoon", "Evening")
URGENT_TIME_QUICK_REPLIES = ("ASAP",) + TIME_QUICK_REPLIES
CONFIRMATION_QUICK_REPLIES = ("Confirm", "Start Over")

BOOKING_ID_PROMPTS = {
    Intent.CANCELLATION: "I can help you cancel your booking. Please provide your booking ID (e.g., BK10245 or 10245):",
    Intent.INQUIRY: "I can check your booking status. Please provide your booking ID (e.g., BK10245 or 10245):",
    Intent.RESCHEDULE: "I can help you reschedule your booking. Please provide your booking ID (e.g., BK10245 or 10245):",
}

# Shown when the user types at a step that waits on the caller, or has ended.
PARKED_STEP_MESSAGES = {
    ConversationStep.CONFIRMATION: f"Please review the booking summary above. {CONFIRM_HINT}",
    ConversationStep.COMPLETE: 'Your booking is confirmed. Type "restart" to start a new conversation.',
    ConversationStep.EXECUTE_ACTION: (
        'I\'m still working on your request. Please wait a moment, or type "restart" to start over.'
    ),
    ConversationStep.SHOW_RESULT: ANYTHING_ELSE,
}
FALLBACK_MESSAGE = 'Sorry, I lost track of where we were. Type "restart" to start over.'


def booking_reference(booking_id: int | None) -> str:
    return f"BK{booking_id}" if booking_id is not None else "your booking"


def create_initial_state() -> ConversationState:
    return add_bot_message(ConversationState(), WELCOME_MESSAGE)


def process_user_input(
    state: ConversationState,
    user_input: str,
    service_categories: list[str],
    *,
    now: datetime | None = None,
) -> ConversationState:
    """
    Apply one user utterance to the conversation.

    Restart and help commands are handled first. Otherwise the utterance is
    echoed as a user message and routed by (active intent, step). Always
    returns a structurally valid state; validation failures re-prompt the
    same step.
    """
    text = user_input or ""
    categories = list(service_categories or [])

    if is_restart_command(text):
        logger.debug("Conversation restarted", extra={"step": state.step.value})
        return create_initial_state()

    if is_help_command(text):
        return add_bot_message(state, HELP_MESSAGE)

    echoed = add_user_message(state, text)

    if state.step is ConversationStep.WELCOME or state.active_intent is None:
        return _dispatch_first_turn(echoed, text, categories)

    if state.active_intent is Intent.NEW_BOOKING:
        handler = NEW_BOOKING_HANDLERS.get(state.step)
    else:
        handler = NON_BOOKING_HANDLERS.get(state.step)

    if handler is None:
        return add_bot_message(echoed, PARKED_STEP_MESSAGES.get(state.step, FALLBACK_MESSAGE))

    updated = handler(echoed, text, categories, now)
    if updated.step is not state.step:
        logger.debug(
            "Conversation step advanced",
            extra={"step": updated.step.value, "intent": state.active_intent.value},
        )
    return updated


def record_action_result(state: ConversationState, outcome: ActionOutcome) -> ConversationState:
    """Turn the caller's cancel/reschedule/inquiry outcome into the show-result message."""
    if state.step is not ConversationStep.EXECUTE_ACTION:
        logger.warning("Action result ignored outside execute-action", extra={"step": state.step.value})
        return state

    content = _format_action_success(state, outcome) if outcome.success else _format_action_failure(state, outcome)
    return add_bot_message(replace(state, step=ConversationStep.SHOW_RESULT), content)


def record_booking_confirmation(state: ConversationState, outcome: ActionOutcome) -> ConversationState:
    """Record the outcome of submitting the confirmed draft to the backend."""
    if state.step is not ConversationStep.CONFIRMATION:
        logger.warning("Booking confirmation ignored outside confirmation", extra={"step": state.step.value})
        return state

    if not outcome.success:
        return add_bot_message(
            state,
            f"❌ Failed to create booking: {outcome.error}\n\n{CONFIRM_HINT}",
            CONFIRMATION_QUICK_REPLIES,
        )

    reference = f" Your booking ID is {booking_reference(outcome.booking_id)}." if outcome.booking_id else ""
    return add_bot_message(
        replace(state, step=ConversationStep.COMPLETE),
        f"🎉 Your booking has been confirmed!{reference} Thank you for using ServiceBot!",
    )


def is_draft_complete(draft: BookingDraft) -> bool:
    return bool(draft.service_category and draft.address and draft.time_window and draft.contact_info)


def summarize_draft(draft: BookingDraft) -> str:
    if draft.time_preference is TimePreference.ASAP:
        time_label = "ASAP"
    elif draft.time_preference is not None:
        time_label = f"{draft.time_preference.value.capitalize()} tomorrow"
    else:
        time_label = "Tomorrow"

    lines = [
        "Perfect! Let me summarize your booking:",
        "",
        f"Service: {draft.service_category}",
    ]
    if draft.customer_name:
        lines.append(f"Name: {draft.customer_name}")
    lines.append(f"Address: {draft.address}")
    lines.append(f"Time: {time_label}")
    if draft.priority is not None:
        lines.append(f"Priority: {draft.priority.value.upper()}")
    lines.append(f"Contact: {draft.contact_info}")
    if draft.notes:
        lines.append(f"Notes: {draft.notes}")
    lines.extend(["", CONFIRM_HINT])
    return "\n".join(lines)


def format_booking_details(booking: Booking) -> str:
    badge = "❌" if booking.status is BookingStatus.CANCELLED else "⏳"
    start = from_epoch_nanos(booking.time_window.start)
    lines = [
        f"{badge} Booking Details:",
        "",
        f"ID: {booking_reference(booking.id)}",
        f"Service: {booking.service_category}",
        f"Address: {booking.address}",
        f"Time: {start.strftime('%d %b %Y %I:%M %p')}",
        f"Status: {booking.status.value}",
        f"Contact: {booking.contact_info}",
    ]
    if booking.notes:
        lines.append(f"Notes: {booking.notes}")
    return "\n".join(lines)


def _dispatch_first_turn(state: ConversationState, text: str, categories: list[str]) -> ConversationState:
    detection = detect_intent_and_language(text)
    logger.debug(
        "Intent detected",
        extra={
            "intent": detection.intent.value,
            "language": detection.language.value,
            "confidence": detection.confidence.value,
        },
    )

    if detection.intent in BOOKING_ID_PROMPTS:
        started = replace(
            state,
            step=ConversationStep.COLLECT_BOOKING_ID,
            active_intent=detection.intent,
            detected_language=detection.language,
        )
        return add_bot_message(started, BOOKING_ID_PROMPTS[detection.intent])

    draft = _seed_draft(text, categories) if detection.intent is Intent.NEW_BOOKING else BookingDraft()
    started = replace(
        state,
        draft=draft,
        active_intent=Intent.NEW_BOOKING,
        detected_language=detection.language,
    )
    return _prompt_for_service(started, categories)


def _seed_draft(text: str, categories: list[str]) -> BookingDraft:
    extraction = extract_entities(text, categories)
    entities = extraction.entities
    return BookingDraft(
        service_category=entities.service_category if extraction.confidence is Confidence.HIGH else None,
        address=entities.location,
        area=entities.area,
        priority=entities.priority,
        time_preference=entities.time_preference,
        location=entities.location,
    )


def _prompt_for_service(state: ConversationState, categories: list[str]) -> ConversationState:
    category = state.draft.service_category
    if category:
        return add_bot_message(
            replace(state, step=ConversationStep.CUSTOMER_NAME),
            f'Great! I detected you need {category} service. May I have your name? '
            f'(You can type "Skip" if you prefer not to share)',
            NAME_QUICK_REPLIES,
        )
    return add_bot_message(
        replace(state, step=ConversationStep.SERVICE_SELECTION),
        "What type of service do you need?",
        categories,
    )


def _time_quick_replies(draft: BookingDraft) -> tuple[str, ...]:
    return URGENT_TIME_QUICK_REPLIES if draft.priority is Priority.URGENT else TIME_QUICK_REPLIES


def _handle_service_selection(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    selected = match_option(text, categories)
    if selected is None:
        return add_bot_message(
            state,
            f"I don't recognize that service. Please choose from: {', '.join(categories)}.",
            categories,
        )

    return add_bot_message(
        replace(state, step=ConversationStep.CUSTOMER_NAME, draft=replace(state.draft, service_category=selected)),
        f'Great! You\'ve selected {selected}. May I have your name? (You can type "Skip" if you prefer not to share)',
        NAME_QUICK_REPLIES,
    )


def _handle_customer_name(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    skipped = is_skip(text) or not text.strip()
    customer_name = None if skipped else text
    greeting = "No problem!" if skipped else f"Nice to meet you, {customer_name}!"
    updated = replace(state, step=ConversationStep.ADDRESS, draft=replace(state.draft, customer_name=customer_name))

    address = state.draft.address
    if address:
        return add_bot_message(
            updated,
            f"{greeting} I have your address as: {address}. Tap it to confirm, or type the full service address.",
            (address,),
        )
    return add_bot_message(updated, f"{greeting} What's the service address?")


def _handle_address(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    result = validate_address(text)
    if not result.valid:
        return add_bot_message(state, result.error)

    urgent = state.draft.priority is Priority.URGENT
    return add_bot_message(
        replace(state, step=ConversationStep.TIME_WINDOW, draft=replace(state.draft, address=result.parsed)),
        "I see this is urgent! When would you like the service?"
        if urgent
        else "When would you like the service? Choose a time window:",
        _time_quick_replies(state.draft),
    )


def _handle_time_window(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    result = validate_time_window(text, now)
    if not result.valid:
        return add_bot_message(state, result.error, _time_quick_replies(state.draft))

    preference = TimePreference(normalize_command(text))
    time_label = "as soon as possible" if preference is TimePreference.ASAP else f"{preference.value} tomorrow"
    return add_bot_message(
        replace(
            state,
            step=ConversationStep.CONTACT_INFO,
            draft=replace(state.draft, time_window=result.parsed, time_preference=preference),
        ),
        f"Perfect! I've scheduled it for {time_label}. What's the best way to contact you? (email or phone)",
    )


def _handle_contact_info(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    result = validate_contact_info(text)
    if not result.valid:
        return add_bot_message(state, result.error)

    return add_bot_message(
        replace(state, step=ConversationStep.NOTES, draft=replace(state.draft, contact_info=result.parsed)),
        'Got it! Any special instructions or notes for the service provider? (or type "none" to skip)',
        NOTES_QUICK_REPLIES,
    )


def _handle_notes(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    notes = "" if is_none_answer(text) else text
    draft = replace(state.draft, notes=notes)
    return add_bot_message(
        replace(state, step=ConversationStep.CONFIRMATION, draft=draft),
        summarize_draft(draft),
        CONFIRMATION_QUICK_REPLIES,
    )


def _handle_booking_id(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    result = validate_booking_id(text)
    if not result.valid:
        return add_bot_message(state, result.error)

    booking_id = result.parsed
    if state.active_intent is Intent.RESCHEDULE:
        return add_bot_message(
            replace(state, step=ConversationStep.COLLECT_RESCHEDULE_TIME, target_booking_id=booking_id),
            "When would you like to reschedule to?",
            TIME_QUICK_REPLIES,
        )

    if state.active_intent is Intent.CANCELLATION:
        pending = f"Cancelling booking {booking_reference(booking_id)}..."
    else:
        pending = f"Looking up booking {booking_reference(booking_id)}..."
    return add_bot_message(
        replace(state, step=ConversationStep.EXECUTE_ACTION, target_booking_id=booking_id),
        pending,
    )


def _handle_reschedule_time(
    state: ConversationState, text: str, categories: list[str], now: datetime | None
) -> ConversationState:
    result = validate_time_window(text, now)
    if not result.valid:
        return add_bot_message(state, result.error, TIME_QUICK_REPLIES)

    label = normalize_command(text)
    return add_bot_message(
        replace(
            state,
            step=ConversationStep.EXECUTE_ACTION,
            draft=replace(state.draft, time_window=result.parsed),
            reschedule_time=label,
        ),
        f"Rescheduling booking {booking_reference(state.target_booking_id)} to {label} tomorrow...",
    )


def _format_action_success(state: ConversationState, outcome: ActionOutcome) -> str:
    reference = booking_reference(state.target_booking_id)
    if state.active_intent is Intent.CANCELLATION:
        return f"✅ Your booking ({reference}) has been cancelled successfully.\n\n{ANYTHING_ELSE}"
    if state.active_intent is Intent.RESCHEDULE:
        return f"✅ Your booking ({reference}) has been rescheduled to {state.reschedule_time} successfully!\n\n{ANYTHING_ELSE}"
    if outcome.booking is not None:
        return f"{format_booking_details(outcome.booking)}\n\n{ANYTHING_ELSE}"
    return f"✅ Booking {reference} was found.\n\n{ANYTHING_ELSE}"


def _format_action_failure(state: ConversationState, outcome: ActionOutcome) -> str:
    if state.active_intent is Intent.CANCELLATION:
        return f'❌ Failed to cancel booking: {outcome.error}\n\nPlease try again or type "restart" to start over.'
    if state.active_intent is Intent.RESCHEDULE:
        return f'❌ Failed to reschedule booking: {outcome.error}\n\nPlease try again or type "restart" to start over.'
    return (
        f"❌ Sorry, I couldn't find that booking. {outcome.error}\n\n"
        'Please check the booking ID and try again, or type "restart" to start over.'
    )


Handler = Callable[[ConversationState, str, list[str], datetime | None], ConversationState]

NEW_BOOKING_HANDLERS: dict[ConversationStep, Handler] = {
    ConversationStep.SERVICE_SELECTION: _handle_service_selection,
    ConversationStep.CUSTOMER_NAME: _handle_customer_name,
    ConversationStep.ADDRESS: _handle_address,
    ConversationStep.TIME_WINDOW: _handle_time_window,
    ConversationStep.CONTACT_INFO: _handle_contact_info,
    ConversationStep.NOTES: _handle_notes,
}

NON_BOOKING_HANDLERS: dict[ConversationStep, Handler] = {
    ConversationStep.COLLECT_BOOKING_ID: _handle_booking_id,
    ConversationStep.COLLECT_RESCHEDULE_TIME: _handle_reschedule_time,
}
