"""
Public chat endpoints

- POST /api/chat          relay a message to the AI assistant
- GET  /api/chat/history  stored exchanges, filtered by user and/or conversation
- GET  /api/chat/status   liveness of the chat service
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from src.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HistoryItem,
    HistoryResponse,
    StatusResponse,
)
from src.config.constants import HISTORY_ERROR_MESSAGE
from src.models.domain import utc_now
from src.services.chat_service import ChatService


router = APIRouter(prefix="/api/chat", tags=["chat"])


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


@router.post(
    "",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def send_message(
    request: Request,
    payload: Optional[ChatRequest] = Body(default=None),
    service: ChatService = Depends(get_chat_service),
):
    """
    Send a message to the AI assistant

    **Request:**
    ```json
    {
      "message": "How is my credit score calculated?",
      "userId": "user-456",
      "conversationId": "conv_1a2b3c"
    }
    ```

    **Response (200):**
    ```json
    {"success": true, "response": "...", "conversationId": "conv_1a2b3c",
     "messageId": "9f1c...", "timestamp": "2025-01-01T12:00:00+00:00"}
    ```

    Validation failures return 400 with a `field` tag. Upstream failures
    return 500 with a polite `error` and an `errorType`.
    """
    payload = payload or ChatRequest()
    client_ip = request.client.host if request.client else None

    outcome = await service.send_message(
        message=payload.message,
        user_id=payload.user_id,
        conversation_id=payload.conversation_id,
        client_context=payload.context,
        client_ip=client_ip,
    )

    if not outcome.success:
        result = outcome.result
        body = ErrorResponse(
            error=result.error,
            error_type=result.error_type.value if result.error_type else None,
            details=result.details if service.config.is_development else None,
            timestamp=outcome.timestamp.isoformat(),
        )
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, exclude_none=True))

    exchange = outcome.exchange
    return ChatResponse(
        response=exchange.ai_response,
        conversation_id=exchange.conversation_id,
        message_id=exchange.id,
        timestamp=exchange.timestamp.isoformat(),
    )


@router.get(
    "/history",
    response_model=HistoryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_chat_history(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    conversation_id: Optional[str] = Query(default=None, alias="conversationId"),
    limit: Optional[int] = Query(default=None, ge=1),
    service: ChatService = Depends(get_chat_service),
):
    """
    Get chat history for a user and/or conversation

    Returns the most recent `limit` matches (default 50) oldest first,
    plus `total`, the number of matches before limiting.
    """
    try:
        exchanges, total = await service.get_history(
            user_id=user_id,
            conversation_id=conversation_id,
            limit=limit,
        )
    except Exception as e:
        logger.exception("Get chat history error")
        body = ErrorResponse(
            error=HISTORY_ERROR_MESSAGE,
            details=str(e) if service.config.is_development else None,
            timestamp=utc_now().isoformat(),
        )
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, exclude_none=True))

    history = [HistoryItem(**exchange.to_history_item()) for exchange in exchanges]
    logger.debug(f"Found {len(history)} of {total} chat exchanges")
    return HistoryResponse(history=history, count=len(history), total=total)


@router.get("/status", response_model=StatusResponse, response_model_exclude_none=True)
async def chat_status(
    check: bool = Query(default=False, description="Also send a probe message upstream"),
    service: ChatService = Depends(get_chat_service),
):
    """
    Check AI service status

    With `check=true` the relay sends a probe message and `connected`
    reports whether an answer came back.
    """
    connected = await service.relay.check_connection() if check else None
    return StatusResponse(
        status="online",
        service=service.config.service_name,
        timestamp=utc_now().isoformat(),
        connected=connected,
    )
