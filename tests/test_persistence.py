"""
Tests for durable conversation session persistence.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from servicebot.application.use_cases.conversation_flow import create_initial_state, process_user_input
from servicebot.domain.entities.booking_draft import Priority, TimePreference
from servicebot.domain.entities.conversation_state import ConversationState, ConversationStep
from servicebot.domain.entities.intent import Intent, Language
from servicebot.infrastructure.store.json_store import JsonSessionStore
from servicebot.infrastructure.store.memory_store import MemorySessionStore

CATALOG = ["Cleaning", "Plumbing", "Electrical", "HVAC", "Handyman"]
SAVED_AT = 1_760_000_000.0
HOUR = 60 * 60


def _conversation() -> ConversationState:
    state = create_initial_state()
    for text in ("urgent plumbing leak in kitchen", "Plumbing", "Asha", "kitchen", "asap"):
        state = process_user_input(state, text, CATALOG)
    return state


def test_json_store_round_trip():
    """Test that JSON store persists and retrieves state correctly."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir)
        state = _conversation()

        store.save("session_1", state, now_ts=SAVED_AT)
        retrieved = store.load("session_1", now_ts=SAVED_AT + 60)

        assert retrieved == state
        assert retrieved.step is ConversationStep.CONTACT_INFO
        assert retrieved.draft.priority is Priority.URGENT
        assert retrieved.draft.time_preference is TimePreference.ASAP
        assert retrieved.draft.time_window == state.draft.time_window
        assert retrieved.active_intent is Intent.NEW_BOOKING


def test_saved_record_layout():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir)
        store.save("session_2", _conversation(), now_ts=SAVED_AT)

        data = json.loads((Path(tmpdir) / "session_2.json").read_text(encoding="utf-8"))
        assert data["version"] == "2.0"
        assert data["timestamp"] == SAVED_AT
        assert data["state"]["step"] == "contact-info"
        assert isinstance(data["state"]["draft"]["time_window"]["start"], int)
        assert data["state"]["messages"][-1]["role"] == "bot"


def test_missing_session_loads_as_none():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir)
        assert store.load("nobody") is None


def test_version_1_record_is_migrated():
    """1.0 records predate intent tracking; those fields come back empty."""
    with tempfile.TemporaryDirectory() as tmpdir:
        record = {
            "version": "1.0",
            "timestamp": SAVED_AT,
            "state": {
                "step": "address",
                "draft": {"service_category": "Cleaning", "customer_name": "Asha"},
                "messages": [
                    {"id": "m1", "role": "bot", "content": "What's the service address?", "timestamp": 1},
                ],
                "active_intent": "cancellation",
            },
        }
        (Path(tmpdir) / "legacy.json").write_text(json.dumps(record), encoding="utf-8")

        store = JsonSessionStore(data_dir=tmpdir)
        state = store.load("legacy", now_ts=SAVED_AT + HOUR)

        assert state is not None
        assert state.step is ConversationStep.ADDRESS
        assert state.draft.service_category == "Cleaning"
        assert state.active_intent is None
        assert state.detected_language is None
        assert state.target_booking_id is None
        assert state.messages[0].quick_replies is None


def test_unknown_version_is_discarded():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "future.json"
        path.write_text(json.dumps({"version": "3.0", "timestamp": SAVED_AT, "state": {}}), encoding="utf-8")

        store = JsonSessionStore(data_dir=tmpdir)
        assert store.load("future", now_ts=SAVED_AT) is None
        assert not path.exists()


def test_stale_record_is_discarded():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir)
        store.save("old", _conversation(), now_ts=SAVED_AT)

        assert store.load("old", now_ts=SAVED_AT + 23 * HOUR) is not None
        assert store.load("old", now_ts=SAVED_AT + 25 * HOUR) is None
        assert not (Path(tmpdir) / "old.json").exists()


def test_corrupt_records_start_fresh():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "garbled.json").write_text("{not json", encoding="utf-8")
        bad_state = {"version": "2.0", "timestamp": SAVED_AT, "state": {"step": "dancing"}}
        (Path(tmpdir) / "bad_step.json").write_text(json.dumps(bad_state), encoding="utf-8")

        store = JsonSessionStore(data_dir=tmpdir)
        assert store.load("garbled", now_ts=SAVED_AT) is None
        assert store.load("bad_step", now_ts=SAVED_AT) is None
        assert not (Path(tmpdir) / "bad_step.json").exists()


def test_clear_removes_session():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir)
        store.save("session_3", create_initial_state())
        store.clear("session_3")
        store.clear("session_3")

        assert store.load("session_3") is None


def test_language_and_booking_target_persist():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir)
        state = create_initial_state()
        for text in ("mujhe booking cancel karna hai", "BK10245"):
            state = process_user_input(state, text, CATALOG)

        store.save("session_4", state, now_ts=SAVED_AT)
        retrieved = store.load("session_4", now_ts=SAVED_AT)

        assert retrieved.detected_language is Language.HINGLISH
        assert retrieved.active_intent is Intent.CANCELLATION
        assert retrieved.target_booking_id == 10245
        assert retrieved.step is ConversationStep.EXECUTE_ACTION


def test_memory_store_applies_freshness_window():
    store = MemorySessionStore()
    state = _conversation()

    store.save("session_5", state, now_ts=SAVED_AT)
    assert store.load("session_5", now_ts=SAVED_AT + HOUR) is state
    assert store.load("session_5", now_ts=SAVED_AT + 25 * HOUR) is None
    assert store.load("session_5", now_ts=SAVED_AT) is None


def test_wrongly_shaped_records_start_fresh():
    """A state, draft or message that is not an object is discarded rather than raised."""
    with tempfile.TemporaryDirectory() as tmpdir:
        records = {
            "state_list": {"version": "2.0", "timestamp": SAVED_AT, "state": ["oops"]},
            "draft_text": {"version": "2.0", "timestamp": SAVED_AT, "state": {"draft": "oops"}},
            "message_text": {"version": "2.0", "timestamp": SAVED_AT, "state": {"messages": [7]}},
        }
        for name, record in records.items():
            (Path(tmpdir) / f"{name}.json").write_text(json.dumps(record), encoding="utf-8")

        store = JsonSessionStore(data_dir=tmpdir)
        for name in records:
            assert store.load(name, now_ts=SAVED_AT) is None
            assert not (Path(tmpdir) / f"{name}.json").exists()


def test_session_ids_cannot_leave_the_data_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        data_dir = Path(tmpdir) / "sessions"
        store = JsonSessionStore(data_dir=str(data_dir))

        for session_id in ("../escaped", "a/b", "", "x" * 65):
            with pytest.raises(ValueError):
                store.save(session_id, create_initial_state())
            with pytest.raises(ValueError):
                store.load(session_id)
            with pytest.raises(ValueError):
                store.clear(session_id)

        assert not (Path(tmpdir) / "escaped.json").exists()
        assert list(data_dir.iterdir()) == []
