"""
Domain models for the HEVA chat relay.

ChatExchange is the immutable in-process value; ChatExchangeRecord is its
SQLAlchemy ORM row for the database-backed history store.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy import DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.config.constants import ANONYMOUS_USER_ID, UNKNOWN_PAGE


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_exchange_id() -> str:
    return uuid.uuid4().hex


def new_conversation_id() -> str:
    return f"conv_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class ClientContext:
    """Page and score context the UI sends along with a message"""
    page: str = UNKNOWN_PAGE
    user_score: Optional[float] = None
    user_tier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "userScore": self.user_score,
            "userTier": self.user_tier,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ClientContext"]:
        if not data:
            return None
        return cls(
            page=data.get("page") or UNKNOWN_PAGE,
            user_score=data.get("userScore"),
            user_tier=data.get("userTier"),
        )


@dataclass(frozen=True)
class ChatExchange:
    """One user-message/AI-response pair. Never modified after creation."""
    user_message: str
    ai_response: str
    conversation_id: str
    user_id: str = ANONYMOUS_USER_ID
    id: str = field(default_factory=new_exchange_id)
    timestamp: datetime = field(default_factory=utc_now)
    client_context: Optional[ClientContext] = None
    client_ip: Optional[str] = None

    def to_history_item(self) -> Dict[str, Any]:
        """Public shape returned by GET /api/chat/history"""
        return {
            "id": self.id,
            "userMessage": self.user_message,
            "aiResponse": self.ai_response,
            "timestamp": self.timestamp.isoformat(),
            "conversationId": self.conversation_id,
        }


class ChatExchangeRecord(Base):
    """Persisted chat exchange. Rows are inserted, never updated or deleted."""
    __tablename__ = "chat_exchanges"
    __table_args__ = (
        Index("ix_chat_exchanges_user_recency", "user_id", "timestamp"),
        Index("ix_chat_exchanges_conversation", "conversation_id"),
    )

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, default=ANONYMOUS_USER_ID)
    conversation_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_message: Mapped[str] = mapped_column(Text, nullable=False)
    ai_response: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    client_context: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    client_ip: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    @classmethod
    def from_exchange(cls, exchange: ChatExchange) -> "ChatExchangeRecord":
        return cls(
            id=exchange.id,
            user_id=exchange.user_id,
            conversation_id=exchange.conversation_id,
            user_message=exchange.user_message,
            ai_response=exchange.ai_response,
            timestamp=exchange.timestamp,
            client_context=exchange.client_context.to_dict() if exchange.client_context else None,
            client_ip=exchange.client_ip,
        )

    def to_exchange(self) -> ChatExchange:
        timestamp = self.timestamp
        # SQLite drops tzinfo on read
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return ChatExchange(
            id=self.id,
            user_id=self.user_id,
            conversation_id=self.conversation_id,
            user_message=self.user_message,
            ai_response=self.ai_response,
            timestamp=timestamp,
            client_context=ClientContext.from_dict(self.client_context),
            client_ip=self.client_ip,
        )
