"""
LLM response utilities for Gemini generateContent payloads.

A successful payload looks like:
    {"candidates": [{"content": {"parts": [{"text": "..."}]}}], ...}
"""

from typing import Any, Optional
from loguru import logger


def extract_text_from_response(data: Any) -> str:
    """
    Extract the first candidate's first text part (trimmed).

    Args:
        data: Decoded JSON body of a generateContent response

    Returns:
        Trimmed answer text, or "" when the payload has no usable text

    Example:
        extract_text_from_response(
            {"candidates": [{"content": {"parts": [{"text": "  Hi!  "}]}}]}
        ) -> "Hi!"
    """
    if not isinstance(data, dict):
        return ""

    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        _log_invalid(data)
        return ""

    content = candidates[0].get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not parts or not isinstance(parts[0], dict):
        _log_invalid(data)
        return ""

    text = parts[0].get("text")
    if not isinstance(text, str):
        _log_invalid(data)
        return ""

    return text.strip()


def extract_block_reason(data: Any) -> Optional[str]:
    """
    Return the prompt block reason if Gemini refused the prompt.

    Safety-blocked prompts come back as 200 with no candidates and a
    promptFeedback.blockReason field.
    """
    if not isinstance(data, dict):
        return None
    feedback = data.get("promptFeedback") or {}
    if isinstance(feedback, dict):
        return feedback.get("blockReason")
    return None


def _log_invalid(data: Any) -> None:
    preview = str(data)
    if len(preview) > 200:
        preview = preview[:200]
    logger.warning(f"Invalid response structure from Gemini: {preview}")
