"""
Shared fixtures for the chat relay tests.

Gemini is never called for real: relays are built over httpx.MockTransport.
"""

import os

# Keep test runs from writing data/logs/*
os.environ.setdefault("LOG_TO_FILE", "false")

from typing import Callable, List

import httpx
import pytest

from src.config.settings import Settings
from src.llm.client import AIRelay
from src.llm.gemini_client import GeminiClient
from src.memory.exchange_memory import InMemoryHistoryStore

TEST_API_URL = "https://gemini.test/v1beta/models/gemini-1.5-flash:generateContent"
TEST_API_KEY = "test-gemini-key-0123456789"


def gemini_payload(text: str) -> dict:
    """Minimal successful generateContent body"""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served"""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        async def record(request: httpx.Request):
            self.requests.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        super().__init__(record)


@pytest.fixture
def mock_transport():
    """Factory: RecordingTransport around an arbitrary handler"""
    return RecordingTransport


@pytest.fixture
def reply_with():
    """Factory: transport answering every call with a successful Gemini reply"""

    def _reply(text: str) -> RecordingTransport:
        return RecordingTransport(lambda request: httpx.Response(200, json=gemini_payload(text)))

    return _reply


@pytest.fixture
def respond_status():
    """Factory: transport answering every call with the given status and body"""

    def _respond(status_code: int, body: str = "") -> RecordingTransport:
        return RecordingTransport(lambda request: httpx.Response(status_code, text=body))

    return _respond


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="development",
        llm_provider="gemini",
        gemini_api_key=TEST_API_KEY,
        gemini_api_url=TEST_API_URL,
        gemini_timeout_seconds=5.0,
        history_backend="memory",
        log_to_file=False,
    )


@pytest.fixture
def production_settings(settings) -> Settings:
    return settings.model_copy(update={"environment": "production"})


@pytest.fixture
def store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore(capacity=1000)


@pytest.fixture
def make_relay(settings):
    """Build an AIRelay whose Gemini calls go to the given transport"""

    def _make(transport: httpx.AsyncBaseTransport, config: Settings = None) -> AIRelay:
        config = config or settings
        return AIRelay(GeminiClient(config, transport=transport), max_history_turns=config.context_window_size)

    return _make
