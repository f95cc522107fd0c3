import logging

from fastapi import FastAPI

from servicebot.api.chat import router as chat_router
from servicebot.core.config import settings

CONTEXT_KEYS = (
    "session_id",
    "step",
    "intent",
    "language",
    "booking_id",
    "service_category",
    "confidence",
    "base_url",
    "status_code",
    "reason",
    "error",
)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="ServiceBot Booking Assistant", version="1.0.0")

app.include_router(chat_router, tags=["chat"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
