"""
Conversation and history models for the public chat API
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class HistoryItem(BaseModel):
    """One stored exchange as returned by GET /api/chat/history"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_message: str = Field(..., alias="userMessage")
    ai_response: str = Field(..., alias="aiResponse")
    timestamp: str
    conversation_id: str = Field(..., alias="conversationId")


class HistoryResponse(BaseModel):
    """
    Chat history response

    Attributes:
        history: Most recent matching exchanges, oldest first
        count: Number of items in `history`
        total: Number of matches before applying the limit
    """
    success: bool = True
    history: List[HistoryItem]
    count: int
    total: int
