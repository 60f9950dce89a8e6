"""
AI relay factory

Creates the relay selected by LLM_PROVIDER:
- gemini: templated prompt forwarded to the Gemini generateContent endpoint
- canned: offline keyword-based replies, no external call
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx
from loguru import logger

from src.config.constants import CONNECTION_TEST_MESSAGE
from src.config.settings import Settings, settings as default_settings
from src.llm.gemini_client import GeminiClient, mask_key
from src.llm.prompts import build_chat_prompt
from src.models.domain import ChatExchange, ClientContext
from src.services import canned_responses
from src.utils.errors import UpstreamError, UpstreamErrorKind


@dataclass
class RelayResult:
    """
    Outcome of one relay call. Upstream failures are values, not exceptions.

    Attributes:
        success: Whether an answer was produced
        response: Answer text (success only)
        error: Polite user-facing message (failure only)
        details: Underlying technical message (failure only)
        error_type: Semantic failure category (failure only)
    """
    success: bool
    response: Optional[str] = None
    error: Optional[str] = None
    details: Optional[str] = None
    error_type: Optional[UpstreamErrorKind] = None

    @classmethod
    def ok(cls, response: str) -> "RelayResult":
        return cls(success=True, response=response)

    @classmethod
    def from_error(cls, error: UpstreamError) -> "RelayResult":
        return cls(
            success=False,
            error=error.user_message,
            details=error.message,
            error_type=error.kind,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "response": self.response}
        return {
            "success": False,
            "error": self.error,
            "details": self.details,
            "errorType": self.error_type.value if self.error_type else None,
        }


class ChatRelay(Protocol):
    """What the chat service needs from a relay"""

    name: str

    async def respond(
        self,
        message: str,
        history: Sequence[ChatExchange] = (),
        client_context: Optional[ClientContext] = None,
    ) -> RelayResult:
        ...

    async def check_connection(self) -> bool:
        ...


class AIRelay:
    """Forwards a templated prompt to the LLM and classifies failures"""

    def __init__(self, client: GeminiClient, max_history_turns: int = 3):
        self._client = client
        self.max_history_turns = max_history_turns

    @property
    def name(self) -> str:
        return self._client.name

    async def respond(
        self,
        message: str,
        history: Sequence[ChatExchange] = (),
        client_context: Optional[ClientContext] = None,
    ) -> RelayResult:
        prompt = build_chat_prompt(message, history, max_turns=self.max_history_turns)
        try:
            text = await self._client.generate_content(prompt)
        except UpstreamError as e:
            logger.warning(f"Relay failed ({e.kind.value}): {e.message}")
            return RelayResult.from_error(e)
        return RelayResult.ok(text)

    async def check_connection(self) -> bool:
        """Send a probe message and report whether an answer came back"""
        logger.info("Testing Gemini API connection...")
        result = await self.respond(CONNECTION_TEST_MESSAGE)
        if result.success:
            logger.info(f"Gemini API connection test successful: {result.response}")
        else:
            logger.error(f"Gemini API connection test failed: {result.details}")
        return result.success


class CannedRelay:
    """Offline relay answering from canned_responses"""

    name = "canned"

    async def respond(
        self,
        message: str,
        history: Sequence[ChatExchange] = (),
        client_context: Optional[ClientContext] = None,
    ) -> RelayResult:
        return RelayResult.ok(canned_responses.generate_response(message, client_context))

    async def check_connection(self) -> bool:
        return True


def create_relay(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ChatRelay:
    """
    Factory function to create the relay based on provider configuration.

    Args:
        config: Settings to read (defaults to the global settings)
        transport: Optional httpx transport for the Gemini client

    Returns:
        AIRelay or CannedRelay
    """
    config = config or default_settings
    provider = config.llm_provider.lower()

    if provider == "gemini":
        if config.gemini_api_key:
            logger.info(f"LLM Provider: Gemini | API key loaded: {mask_key(config.gemini_api_key)}")
        else:
            logger.warning("LLM Provider: Gemini but GEMINI_API_KEY not set - chat requests will fail!")
        client = GeminiClient(config, transport=transport)
        return AIRelay(client, max_history_turns=config.context_window_size)

    elif provider == "canned":
        logger.info("LLM Provider: canned responses (offline)")
        return CannedRelay()

    else:
        raise ValueError(f"Unsupported LLM provider: {provider}. Supported: 'gemini', 'canned'")
