from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from servicebot.api.schemas import (
    CategoriesResponseSchema,
    ChatMessageRequestSchema,
    ChatMessageSchema,
    ChatTurnResponseSchema,
    ConversationStateSchema,
)
from servicebot.application.use_cases.handle_chat_message import HandleChatMessageUseCase
from servicebot.wiring.dependencies import get_handle_chat_message_use_case

router = APIRouter(prefix="/chat")
logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"


@router.get("/state", response_model=ConversationStateSchema)
def get_state(
    session_id: str | None = Query(None, pattern=SESSION_ID_PATTERN),
    uc: HandleChatMessageUseCase = Depends(get_handle_chat_message_use_case),
):
    try:
        state = uc.get_state(session_id)
    except Exception as e:
        logger.exception("Failed to load conversation", extra={"session_id": session_id, "error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to load conversation")
    return ConversationStateSchema.from_entity(state)


@router.post("/messages", response_model=ChatTurnResponseSchema)
def post_message(
    req: ChatMessageRequestSchema,
    session_id: str | None = Query(None, pattern=SESSION_ID_PATTERN),
    uc: HandleChatMessageUseCase = Depends(get_handle_chat_message_use_case),
):
    try:
        result = uc.handle(req.text, session_id=session_id)
    except Exception as e:
        logger.exception("Error processing chat message", extra={"session_id": session_id, "error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to process message")

    return ChatTurnResponseSchema(
        state=ConversationStateSchema.from_entity(result.state),
        new_messages=[ChatMessageSchema.from_entity(m) for m in result.new_messages],
    )


@router.post("/restart", response_model=ConversationStateSchema)
def restart(
    session_id: str | None = Query(None, pattern=SESSION_ID_PATTERN),
    uc: HandleChatMessageUseCase = Depends(get_handle_chat_message_use_case),
):
    try:
        state = uc.restart(session_id)
    except Exception as e:
        logger.exception("Failed to restart conversation", extra={"session_id": session_id, "error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to restart conversation")
    return ConversationStateSchema.from_entity(state)


@router.get("/categories", response_model=CategoriesResponseSchema)
def categories(uc: HandleChatMessageUseCase = Depends(get_handle_chat_message_use_case)):
    return CategoriesResponseSchema(categories=uc.get_categories())
