#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps a stable session id (CHAT_SESSION_ID or SESSION_ID from .env)
- Sends your typed messages through the same HandleChatMessageUseCase as the API
- Prints the bot replies, quick replies and the current step / intent / language
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

load_dotenv()

from servicebot.core.config import settings  # noqa: E402
from servicebot.domain.entities.conversation_state import ConversationState  # noqa: E402
from servicebot.domain.entities.message import ChatMessage, MessageRole  # noqa: E402
from servicebot.wiring.dependencies import get_handle_chat_message_use_case  # noqa: E402


def _print_header(session_id: str) -> None:
    print("\nServiceBot Local Chat")
    print("-" * 60)
    print(f"session_id: {session_id}")
    print("Type your message and press Enter.")
    print("Commands: /new (new session), /state, /history, /quit, /help")
    print("-" * 60)


def _print_message(message: ChatMessage) -> None:
    if message.role is MessageRole.USER:
        return
    print(f"({message.role.value}) {message.content}")
    if message.quick_replies:
        print("   [" + "] [".join(message.quick_replies) + "]")


def _print_state(state: ConversationState) -> None:
    intent = state.active_intent.value if state.active_intent else "-"
    language = state.detected_language.value if state.detected_language else "-"
    print(f"   step={state.step.value} intent={intent} language={language}")


def main() -> None:
    session_id = os.getenv("CHAT_SESSION_ID", settings.SESSION_ID)
    use_case = get_handle_chat_message_use_case()
    _print_header(session_id)

    state = use_case.get_state(session_id)
    for message in state.messages:
        _print_message(message)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /new     -> start a new session id")
            print("  /state   -> show step, intent and language")
            print("  /history -> show last 10 messages")
            print("  /quit    -> exit")
            continue
        if cmd == "/new":
            session_id = f"local_session_{int(time.time())}"
            print(f"New session_id: {session_id}")
            for message in use_case.get_state(session_id).messages:
                _print_message(message)
            continue
        if cmd == "/state":
            _print_state(use_case.get_state(session_id))
            continue
        if cmd == "/history":
            print("\n--- History (last 10) ---")
            for message in use_case.get_state(session_id).messages[-10:]:
                print(f"{message.role.value}: {message.content}")
            continue

        result = use_case.handle(user_text, session_id=session_id)
        for message in result.new_messages:
            _print_message(message)
        _print_state(result.state)


if __name__ == "__main__":
    main()
