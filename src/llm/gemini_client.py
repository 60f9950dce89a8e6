"""
Gemini generateContent client.

- URL: {GEMINI_API_URL}?key=<api_key>
- One POST per call, no retry. An overall deadline (default 30s) bounds the
  whole request, on top of httpx's per-phase timeouts.
- Failures are raised as UpstreamError subclasses (see src/llm/error_parser.py).
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from src.config.constants import SAFETY_SETTINGS
from src.config.settings import Settings, settings as default_settings
from src.llm.error_parser import classify_status, classify_transport_error
from src.llm.response_utils import extract_block_reason, extract_text_from_response
from src.utils.errors import UnknownUpstreamError, UpstreamAuthFailed


def mask_key(api_key: str) -> str:
    if len(api_key) > 12:
        return api_key[:8] + "..." + api_key[-4:]
    return "***"


class GeminiClient:
    """Async client for a single Gemini model endpoint"""

    name = "gemini"

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Settings to read (defaults to the global settings)
            transport: Custom httpx transport (tests pass httpx.MockTransport)
        """
        self._settings = config or default_settings
        self._transport = transport

    @property
    def timeout(self) -> float:
        return self._settings.gemini_timeout_seconds

    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        cfg = self._settings
        return {
            "contents": [
                {
                    "parts": [
                        {"text": prompt}
                    ]
                }
            ],
            "generationConfig": {
                "temperature": cfg.gemini_temperature,
                "topK": cfg.gemini_top_k,
                "topP": cfg.gemini_top_p,
                "maxOutputTokens": cfg.gemini_max_output_tokens,
            },
            "safetySettings": [dict(s) for s in SAFETY_SETTINGS],
        }

    async def generate_content(self, prompt: str) -> str:
        """
        Send one prompt and return the trimmed answer text.

        Raises:
            UpstreamError: classified failure (auth, rate limit, 5xx, timeout, DNS, other)
        """
        api_key = self._settings.gemini_api_key
        if not api_key:
            raise UpstreamAuthFailed("GEMINI_API_KEY is not configured")

        body = self.build_request_body(prompt)
        logger.debug(f"Calling Gemini API (key={mask_key(api_key)}, prompt_chars={len(prompt)})")

        try:
            response = await asyncio.wait_for(self._post(body, api_key), timeout=self.timeout)
        except (httpx.RequestError, asyncio.TimeoutError) as e:
            raise classify_transport_error(e) from e

        if response.status_code >= 400:
            logger.warning(f"Gemini API returned HTTP {response.status_code}")
            raise classify_status(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise UnknownUpstreamError("Invalid JSON from Gemini AI") from e

        text = extract_text_from_response(data)
        if not text:
            block_reason = extract_block_reason(data)
            if block_reason:
                raise UnknownUpstreamError(f"Prompt blocked by Gemini AI: {block_reason}")
            raise UnknownUpstreamError("Invalid response from Gemini AI")

        logger.debug(f"Gemini API response received ({len(text)} chars)")
        return text

    async def _post(self, body: Dict[str, Any], api_key: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), transport=self._transport) as client:
            return await client.post(
                self._settings.gemini_api_url,
                params={"key": api_key},
                json=body,
                headers={"Content-Type": "application/json"},
            )
