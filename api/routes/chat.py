from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from typing import Annotated
import logging

from models.requests import ChatRequest
from api.dependencies import get_chat_service
from core.chat import Chat

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent", tags=["agent"])


@router.post("/chat/stream")
async def chat_stream_endpoint(
    chat_request: ChatRequest,
    chat_service: Annotated[Chat, Depends(get_chat_service)],
):
    """
    Stream the agent's reply as Server-Sent Events.

    Each event is `data: <delta json>`; the stream ends with `data: [DONE]`,
    or `data: [ERROR]` if the upstream model failed. When the client
    disconnects, the request task is cancelled and the upstream read stops.
    """
    if not chat_service._is_valid_message(chat_request.input):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Input is required",
        )

    logger.info(f"Chat stream requested, previous response ID: {chat_request.previous_response_id}")

    return StreamingResponse(
        chat_service.chat_stream(chat_request.input, chat_request.previous_response_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-transform",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
