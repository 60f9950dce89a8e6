"""
Chat models for the public API contract

Field names on the wire are camelCase to match the HEVA web frontend.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Chat message request

    Fields are untyped here; src/services/validation.py checks them and
    tags each failure with its field.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "message": "How is my credit score calculated?",
                    "userId": "user-456",
                    "conversationId": "conv_1a2b3c",
                    "context": {"page": "score", "userScore": 720, "userTier": "Good"},
                }
            ]
        },
    )

    message: Any = Field(default=None, description="The user's question (1-4000 characters after trimming)")
    user_id: Any = Field(default=None, alias="userId", description="Optional user identifier")
    conversation_id: Any = Field(default=None, alias="conversationId", description="Optional conversation grouping key")
    context: Any = Field(default=None, description="Optional {page, userScore, userTier} object")


class ChatResponse(BaseModel):
    """Successful chat reply"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    response: str
    conversation_id: str = Field(..., alias="conversationId")
    message_id: str = Field(..., alias="messageId")
    timestamp: str


class ErrorResponse(BaseModel):
    """
    Error body shared by all endpoints

    `details` is only populated in development.
    """
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error: str
    error_type: Optional[str] = Field(default=None, alias="errorType")
    details: Optional[str] = None
    timestamp: Optional[str] = None


class StatusResponse(BaseModel):
    """Chat service status"""
    status: str = Field(..., description="Always 'online' when the service answers")
    service: str = Field(..., description="Service name")
    timestamp: str
    connected: Optional[bool] = Field(default=None, description="Upstream probe result, only when requested")


class HealthResponse(BaseModel):
    """
    Health check response

    Attributes:
        status: Service health status
        timestamp: Current server time
        uptime: Seconds since startup
        environment: Deployment environment
    """
    status: str = Field(..., description="Health status")
    timestamp: str
    uptime: float = Field(..., description="Seconds since startup")
    environment: str
