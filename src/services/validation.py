"""
Request validation for the chat endpoint.

Failures raise ValidationError tagged with the offending field; the API
layer turns them into HTTP 400 responses.
"""

from typing import Any, Dict, Optional

from src.models.domain import ClientContext
from src.utils.errors import ValidationError


def message_length(text: str) -> int:
    """Length in UTF-16 code units, so characters outside the BMP (emoji) count as 2."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def validate_message(message: Any, max_length: int = 4000) -> str:
    """
    Validate and normalise the chat message.

    Args:
        message: Raw "message" value from the request body
        max_length: Maximum length after trimming, in UTF-16 code units

    Returns:
        The trimmed message

    Raises:
        ValidationError: missing, non-string, empty or too long
    """
    if message is None:
        raise ValidationError("message", "Message is required")

    if not isinstance(message, str):
        raise ValidationError("message", "Message must be a string")

    trimmed = message.strip()
    if not trimmed:
        raise ValidationError("message", "Message cannot be empty")

    length = message_length(trimmed)
    if length > max_length:
        raise ValidationError(
            "message",
            f"Message is too long (maximum {max_length} characters)",
            maxLength=max_length,
            currentLength=length,
        )

    return trimmed


def validate_optional_string(value: Any, field: str) -> Optional[str]:
    """Empty or missing values become None; anything else must be a string."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(field, f"{field} must be a string")
    return value


def validate_client_context(value: Any) -> Optional[ClientContext]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError("context", "context must be an object")

    data: Dict[str, Any] = value
    page = validate_optional_string(data.get("page"), "context.page")
    user_tier = validate_optional_string(data.get("userTier"), "context.userTier")

    user_score = data.get("userScore")
    if user_score is not None and (isinstance(user_score, bool) or not isinstance(user_score, (int, float))):
        raise ValidationError("context.userScore", "context.userScore must be a number")

    return ClientContext.from_dict({"page": page, "userScore": user_score, "userTier": user_tier})
