"""
LLM layer - Relay, Gemini client, prompts and response utilities
"""

from src.llm.client import AIRelay, CannedRelay, ChatRelay, RelayResult, create_relay
from src.llm.gemini_client import GeminiClient
from src.llm.prompts import build_chat_prompt
from src.llm.response_utils import extract_text_from_response

__all__ = [
    "AIRelay",
    "CannedRelay",
    "ChatRelay",
    "RelayResult",
    "create_relay",
    "GeminiClient",
    "build_chat_prompt",
    "extract_text_from_response",
]
