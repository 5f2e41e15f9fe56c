from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from warranty_tracker.api.deps import get_chat_relay
from warranty_tracker.schemas.chat import ChatRequest, ChatResponse
from warranty_tracker.services.chat_relay import ChatRelay, ChatRelayError, extract_reply

router = APIRouter(tags=["chat"])

CHAT_FAILURE_MESSAGE = "Failed to process your request. Please try again."


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    relay: ChatRelay = Depends(get_chat_relay),
) -> ChatResponse | JSONResponse:
    try:
        data = await relay.forward(payload.message, payload.files, payload.history)
    except ChatRelayError as exc:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": CHAT_FAILURE_MESSAGE, "error": str(exc)},
        )
    return ChatResponse(success=True, message=extract_reply(data), data=data)
