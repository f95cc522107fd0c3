"""
Tests for the chat HTTP API.
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from servicebot.application.use_cases.confirm_booking import ConfirmBookingUseCase
from servicebot.application.use_cases.execute_action import ExecuteActionUseCase
from servicebot.application.use_cases.handle_chat_message import HandleChatMessageUseCase
from servicebot.infrastructure.backend.mock_backend import MockBookingBackend
from servicebot.infrastructure.store.memory_store import MemorySessionStore
from servicebot.main import ContextFormatter, app
from servicebot.wiring.dependencies import get_handle_chat_message_use_case


@pytest.fixture
def client():
    backend = MockBookingBackend()
    use_case = HandleChatMessageUseCase(
        store=MemorySessionStore(),
        backend=backend,
        execute_action=ExecuteActionUseCase(backend=backend),
        confirm_booking=ConfirmBookingUseCase(backend=backend),
        default_session_id="api_session",
        fallback_categories=["Cleaning"],
    )
    app.dependency_overrides[get_handle_chat_message_use_case] = lambda: use_case
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_get_state_starts_with_welcome(client):
    response = client.get("/chat/state")
    assert response.status_code == 200

    data = response.json()
    assert data["step"] == "welcome"
    assert data["active_intent"] is None
    assert len(data["messages"]) == 1
    assert data["messages"][0]["role"] == "bot"


def test_post_message_advances_conversation(client):
    response = client.post("/chat/messages", json={"text": "I need cleaning service"})
    assert response.status_code == 200

    data = response.json()
    assert data["state"]["step"] == "customer-name"
    assert data["state"]["active_intent"] == "new-booking"
    assert data["state"]["draft"]["service_category"] == "Cleaning"
    assert [m["role"] for m in data["new_messages"]] == ["user", "bot"]
    assert data["new_messages"][-1]["quick_replies"] == ["Skip"]


def test_time_window_is_serialized_as_integers(client):
    for text in ("I need cleaning service", "skip", "12 MG Road"):
        client.post("/chat/messages", json={"text": text})
    data = client.post("/chat/messages", json={"text": "Evening"}).json()

    window = data["state"]["draft"]["time_window"]
    assert isinstance(window["start"], int)
    assert window["end"] - window["start"] == 3 * 60 * 60 * 10**9


def test_cancellation_over_http(client):
    client.post("/chat/messages", json={"text": "cancel my booking"})
    data = client.post("/chat/messages", json={"text": "BK42"}).json()

    assert data["state"]["step"] == "show-result"
    assert data["state"]["target_booking_id"] == 42
    assert "Booking 42 not found" in data["new_messages"][-1]["content"]


def test_restart_endpoint(client):
    client.post("/chat/messages", json={"text": "I need cleaning service"})
    response = client.post("/chat/restart")

    assert response.status_code == 200
    assert response.json()["step"] == "welcome"
    assert client.get("/chat/state").json()["step"] == "welcome"


def test_session_id_query_parameter(client):
    client.post("/chat/messages", params={"session_id": "other"}, json={"text": "cancel my booking"})

    assert client.get("/chat/state", params={"session_id": "other"}).json()["step"] == "collect-booking-id"
    assert client.get("/chat/state").json()["step"] == "welcome"


def test_categories(client):
    response = client.get("/chat/categories")
    assert response.status_code == 200
    assert response.json()["categories"] == ["Cleaning", "Plumbing", "Electrical", "HVAC", "Handyman"]


def test_message_text_is_required(client):
    response = client.post("/chat/messages", json={})
    assert response.status_code == 422


def test_unsafe_session_ids_are_rejected(client):
    assert client.get("/chat/state", params={"session_id": "../x"}).status_code == 422
    assert client.post("/chat/restart", params={"session_id": "a/b"}).status_code == 422

    response = client.post("/chat/messages", params={"session_id": "../x"}, json={"text": "hi"})
    assert response.status_code == 422


def test_context_formatter_renders_log_extras():
    record = logging.LogRecord("servicebot.test", logging.INFO, __file__, 1, "Intent detected", None, None)
    record.confidence = "high"
    record.base_url = "https://bookings.test/api"
    record.session_id = ""

    line = ContextFormatter("%(levelname)s:%(name)s:%(message)s").format(record)
    assert line == "INFO:servicebot.test:Intent detected | confidence=high base_url=https://bookings.test/api"
