from functools import lru_cache
import logging

from servicebot.core.config import settings
from servicebot.infrastructure.backend.http_backend import HttpBookingBackend
from servicebot.infrastructure.backend.mock_backend import MockBookingBackend
from servicebot.infrastructure.store.json_store import JsonSessionStore
from servicebot.infrastructure.store.memory_store import MemorySessionStore
from servicebot.application.ports.booking_backend import BookingBackendPort
from servicebot.application.ports.session_store import SessionStorePort
from servicebot.application.use_cases.confirm_booking import ConfirmBookingUseCase
from servicebot.application.use_cases.execute_action import ExecuteActionUseCase
from servicebot.application.use_cases.handle_chat_message import HandleChatMessageUseCase


_session_store: SessionStorePort | None = None


def get_session_store() -> SessionStorePort:
    global _session_store
    if _session_store is None:
        max_age_seconds = settings.SESSION_MAX_AGE_HOURS * 60 * 60
        if settings.STORE_PROVIDER.lower() == "memory":
            _session_store = MemorySessionStore(max_age_seconds=max_age_seconds)
        else:
            _session_store = JsonSessionStore(data_dir=settings.SESSION_DATA_DIR, max_age_seconds=max_age_seconds)
    return _session_store


@lru_cache
def get_booking_backend() -> BookingBackendPort:
    logger = logging.getLogger(__name__)
    if settings.BACKEND_PROVIDER.lower() == "http":
        logger.info("Using HttpBookingBackend", extra={"base_url": settings.BACKEND_BASE_URL})
        return HttpBookingBackend()

    logger.info("Using MockBookingBackend (BACKEND_PROVIDER=%s)", settings.BACKEND_PROVIDER)
    return MockBookingBackend(categories=settings.SERVICE_CATEGORIES)


def get_handle_chat_message_use_case() -> HandleChatMessageUseCase:
    backend = get_booking_backend()
    return HandleChatMessageUseCase(
        store=get_session_store(),
        backend=backend,
        execute_action=ExecuteActionUseCase(backend=backend),
        confirm_booking=ConfirmBookingUseCase(backend=backend),
        default_session_id=settings.SESSION_ID,
        fallback_categories=settings.SERVICE_CATEGORIES,
    )
