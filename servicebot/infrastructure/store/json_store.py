from __future__ import annotations

import json
import logging
import re
import threading
import time
from pathlib import Path
from typing import Any

from servicebot.application.ports.session_store import SessionStorePort
from servicebot.domain.entities.booking_draft import BookingDraft, Priority, TimePreference, TimeWindow
from servicebot.domain.entities.conversation_state import ConversationState, ConversationStep
from servicebot.domain.entities.intent import Intent, Language
from servicebot.domain.entities.message import ChatMessage, MessageRole

SCHEMA_VERSION = "2.0"
# 1.0 records predate intent tracking; their intent fields load as absent.
MIGRATABLE_VERSIONS = ("1.0",)
DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60
SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class JsonSessionStore(SessionStorePort):
    def __init__(self, data_dir: str = "./data/sessions", max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._max_age_seconds = max_age_seconds
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, session_id: str) -> threading.Lock:
        """Get or create a lock for a session_id."""
        with self._lock_lock:
            if session_id not in self._locks:
                self._locks[session_id] = threading.Lock()
            return self._locks[session_id]

    def _get_file_path(self, session_id: str) -> Path:
        """Session ids become file names, so only plain tokens are accepted."""
        if not SESSION_ID_PATTERN.fullmatch(session_id or ""):
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self._data_dir / f"{session_id}.json"

    def _read_record(self, session_id: str) -> dict[str, Any] | None:
        file_path = self._get_file_path(session_id)
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning("Unreadable session record", extra={"session_id": session_id, "error": str(e)})
            return {}
        return data if isinstance(data, dict) else {}

    def _write_record(self, session_id: str, data: dict[str, Any]) -> None:
        """Save the record atomically via a temp file."""
        file_path = self._get_file_path(session_id)
        temp_path = file_path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def _discard(self, session_id: str, reason: str) -> None:
        self._logger.info("Discarding stored session", extra={"session_id": session_id, "reason": reason})
        self._get_file_path(session_id).unlink(missing_ok=True)

    def load(self, session_id: str, now_ts: float | None = None) -> ConversationState | None:
        if now_ts is None:
            now_ts = time.time()

        with self._get_lock(session_id):
            data = self._read_record(session_id)
            if data is None:
                return None

            version = data.get("version")
            if version != SCHEMA_VERSION and version not in MIGRATABLE_VERSIONS:
                self._discard(session_id, f"unsupported version {version!r}")
                return None

            saved_at = data.get("timestamp")
            if not isinstance(saved_at, (int, float)) or now_ts - saved_at > self._max_age_seconds:
                self._discard(session_id, "expired")
                return None

            try:
                return self._deserialize_state(data.get("state") or {}, migrate=version != SCHEMA_VERSION)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self._logger.warning("Malformed session state", extra={"session_id": session_id, "error": str(e)})
                self._discard(session_id, "malformed state")
                return None

    def save(self, session_id: str, state: ConversationState, now_ts: float | None = None) -> None:
        if now_ts is None:
            now_ts = time.time()
        record = {
            "version": SCHEMA_VERSION,
            "session_id": session_id,
            "timestamp": now_ts,
            "state": self._serialize_state(state),
        }
        with self._get_lock(session_id):
            self._write_record(session_id, record)

    def clear(self, session_id: str) -> None:
        with self._get_lock(session_id):
            self._get_file_path(session_id).unlink(missing_ok=True)

    def _serialize_state(self, state: ConversationState) -> dict[str, Any]:
        return {
            "step": state.step.value,
            "draft": self._serialize_draft(state.draft),
            "messages": [self._serialize_message(message) for message in state.messages],
            "active_intent": state.active_intent.value if state.active_intent else None,
            "detected_language": state.detected_language.value if state.detected_language else None,
            "target_booking_id": state.target_booking_id,
            "reschedule_time": state.reschedule_time,
        }

    def _deserialize_state(self, data: dict[str, Any], migrate: bool = False) -> ConversationState:
        base = ConversationState(
            step=ConversationStep(data.get("step", ConversationStep.WELCOME.value)),
            draft=self._deserialize_draft(data.get("draft") or {}),
            messages=tuple(self._deserialize_message(item) for item in data.get("messages", [])),
        )
        if migrate:
            return base

        active_intent = data.get("active_intent")
        language = data.get("detected_language")
        target_booking_id = data.get("target_booking_id")
        return ConversationState(
            step=base.step,
            draft=base.draft,
            messages=base.messages,
            active_intent=Intent(active_intent) if active_intent else None,
            detected_language=Language(language) if language else None,
            target_booking_id=int(target_booking_id) if target_booking_id is not None else None,
            reschedule_time=data.get("reschedule_time"),
        )

    def _serialize_draft(self, draft: BookingDraft) -> dict[str, Any]:
        time_window = None
        if draft.time_window:
            time_window = {"start": draft.time_window.start, "end": draft.time_window.end}

        return {
            "service_category": draft.service_category,
            "address": draft.address,
            "time_window": time_window,
            "contact_info": draft.contact_info,
            "notes": draft.notes,
            "customer_name": draft.customer_name,
            "area": draft.area,
            "priority": draft.priority.value if draft.priority else None,
            "time_preference": draft.time_preference.value if draft.time_preference else None,
            "location": draft.location,
        }

    def _deserialize_draft(self, data: dict[str, Any]) -> BookingDraft:
        time_window = None
        if data.get("time_window"):
            time_window = TimeWindow(
                start=int(data["time_window"]["start"]),
                end=int(data["time_window"]["end"]),
            )

        priority = data.get("priority")
        time_preference = data.get("time_preference")
        return BookingDraft(
            service_category=data.get("service_category"),
            address=data.get("address"),
            time_window=time_window,
            contact_info=data.get("contact_info"),
            notes=data.get("notes"),
            customer_name=data.get("customer_name"),
            area=data.get("area"),
            priority=Priority(priority) if priority else None,
            time_preference=TimePreference(time_preference) if time_preference else None,
            location=data.get("location"),
        )

    def _serialize_message(self, message: ChatMessage) -> dict[str, Any]:
        return {
            "id": message.id,
            "role": message.role.value,
            "content": message.content,
            "timestamp": message.timestamp,
            "quick_replies": list(message.quick_replies) if message.quick_replies is not None else None,
        }

    def _deserialize_message(self, data: dict[str, Any]) -> ChatMessage:
        quick_replies = data.get("quick_replies")
        return ChatMessage(
            id=str(data["id"]),
            role=MessageRole(data["role"]),
            content=str(data.get("content", "")),
            timestamp=int(data.get("timestamp", 0)),
            quick_replies=tuple(quick_replies) if quick_replies is not None else None,
        )
