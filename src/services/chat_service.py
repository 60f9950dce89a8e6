"""
Chat service - validates a message, relays it with the conversation window,
and records the completed exchange.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple

from loguru import logger

from src.config.constants import ANONYMOUS_USER_ID, LOGGED_MESSAGE_MAX_CHARS
from src.config.settings import Settings, settings as default_settings
from src.llm.client import ChatRelay, RelayResult
from src.memory.history_store import HistoryStore
from src.models.domain import ChatExchange, ClientContext, new_conversation_id, utc_now
from src.services.validation import (
    validate_client_context,
    validate_message,
    validate_optional_string,
)
from src.utils.logger import log_chat_interaction


@dataclass
class ChatOutcome:
    """Result of one POST /api/chat cycle"""
    result: RelayResult
    conversation_id: str
    exchange: Optional[ChatExchange] = None
    timestamp: datetime = field(default_factory=utc_now)

    @property
    def success(self) -> bool:
        return self.result.success


class ChatService:
    """Ties the relay and the history store together"""

    def __init__(self, store: HistoryStore, relay: ChatRelay, config: Optional[Settings] = None):
        self.store = store
        self.relay = relay
        self.config = config or default_settings

    async def send_message(
        self,
        message: Any,
        user_id: Any = None,
        conversation_id: Any = None,
        client_context: Any = None,
        client_ip: Optional[str] = None,
    ) -> ChatOutcome:
        """
        Handle one chat message.

        Args:
            message: Raw message value from the request
            user_id: Optional user identifier (defaults to "anonymous")
            conversation_id: Optional grouping key (generated when absent)
            client_context: Optional {page, userScore, userTier} object
            client_ip: Caller address, kept for the interaction log

        Returns:
            ChatOutcome with the relay result; the exchange is set only on success

        Raises:
            ValidationError: invalid input, nothing is relayed or stored
        """
        text = validate_message(message, max_length=self.config.max_message_length)
        user_id = validate_optional_string(user_id, "userId") or ANONYMOUS_USER_ID
        conversation_id = validate_optional_string(conversation_id, "conversationId")
        context: Optional[ClientContext] = validate_client_context(client_context)

        logger.info(f"Received message from {client_ip or 'unknown'}: \"{text[:50]}...\"")

        history: List[ChatExchange] = []
        if conversation_id and self.config.context_window_size > 0:
            history = await self.store.recent(conversation_id, self.config.context_window_size)
            logger.debug(f"Conversation {conversation_id}: {len(history)} prior exchanges in context")

        conversation_id = conversation_id or new_conversation_id()

        result = await self.relay.respond(text, history, context)
        if not result.success:
            return ChatOutcome(result=result, conversation_id=conversation_id)

        exchange = ChatExchange(
            user_id=user_id,
            conversation_id=conversation_id,
            user_message=text,
            ai_response=result.response or "",
            client_context=context,
            client_ip=client_ip,
        )
        await self.store.append(exchange)
        self._log_interaction(exchange)

        return ChatOutcome(
            result=result,
            conversation_id=conversation_id,
            exchange=exchange,
            timestamp=exchange.timestamp,
        )

    async def get_history(
        self,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[ChatExchange], int]:
        """Most recent matching exchanges (oldest first) and the total match count"""
        limit = limit or self.config.history_default_limit
        logger.debug(f"Fetching chat history (user={user_id}, conversation={conversation_id}, limit={limit})")
        return await self.store.list_exchanges(
            user_id=user_id or None,
            conversation_id=conversation_id or None,
            limit=limit,
        )

    @staticmethod
    def _log_interaction(exchange: ChatExchange) -> None:
        log_chat_interaction({
            "timestamp": exchange.timestamp.isoformat(),
            "userId": exchange.user_id,
            "conversationId": exchange.conversation_id,
            "userMessage": exchange.user_message[:LOGGED_MESSAGE_MAX_CHARS],
            "responseLength": len(exchange.ai_response),
            "clientIP": exchange.client_ip,
        })
