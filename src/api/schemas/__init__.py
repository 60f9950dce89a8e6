"""
API schemas for request/response models
"""

from src.api.schemas.conversation import HistoryItem, HistoryResponse
from src.api.schemas.chat import ChatRequest, ChatResponse, ErrorResponse, StatusResponse, HealthResponse

__all__ = [
    "HistoryItem",
    "HistoryResponse",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "StatusResponse",
    "HealthResponse",
]
