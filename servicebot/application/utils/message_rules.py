from __future__ import annotations

RESTART_COMMANDS = ("restart", "reset", "start over")
HELP_COMMANDS = ("help",)
SKIP_ANSWERS = ("skip",)
NONE_ANSWERS = ("none",)
CONFIRMATION_ANSWERS = (
    "confirm",
    "confirm booking",
    "yes",
    "yes confirm",
    "haan",
    "ha",
    "ok",
    "okay",
    "हाँ",
)


def normalize_command(text: str) -> str:
    return (text or "").strip().lower()


def is_restart_command(text: str) -> bool:
    return normalize_command(text) in RESTART_COMMANDS


def is_help_command(text: str) -> bool:
    return normalize_command(text) in HELP_COMMANDS


def is_skip(text: str) -> bool:
    return normalize_command(text) in SKIP_ANSWERS


def is_none_answer(text: str) -> bool:
    return normalize_command(text) in NONE_ANSWERS


def is_confirmation(text: str) -> bool:
    """Exact confirmation words only; free text at the summary is not a confirmation."""
    return normalize_command(text) in CONFIRMATION_ANSWERS


def match_option(text: str, options: list[str]) -> str | None:
    """Return the option equal to text ignoring case and surrounding space."""
    normalized = normalize_command(text)
    for option in options:
        if option.strip().lower() == normalized:
            return option
    return None
