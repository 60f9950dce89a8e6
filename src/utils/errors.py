"""
Custom error classes for the chat relay

Two families:
- ValidationError: bad client input, surfaced as HTTP 400 with a field tag
- UpstreamError: the external LLM call failed; each subclass carries a
  semantic UpstreamErrorKind so callers never match on raw HTTP codes
"""

from enum import Enum
from typing import Any, Dict, Optional


class UpstreamErrorKind(str, Enum):
    """Semantic categories for failures of the external LLM call."""
    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    UNKNOWN = "unknown"


# One polite message per kind. tests/test_errors.py checks coverage.
UPSTREAM_USER_MESSAGES: Dict[UpstreamErrorKind, str] = {
    UpstreamErrorKind.RATE_LIMITED: "The AI assistant is busy right now. Please try again in a moment.",
    UpstreamErrorKind.AUTH_FAILED: "The AI assistant is not available due to a configuration error. Please contact support.",
    UpstreamErrorKind.UNAVAILABLE: "The AI assistant is temporarily unavailable. Please try again later.",
    UpstreamErrorKind.TIMEOUT: "The AI assistant took too long to respond. Please try again.",
    UpstreamErrorKind.UNREACHABLE: "Connection to the AI assistant failed. Please try again later.",
    UpstreamErrorKind.UNKNOWN: "I apologize, but I couldn't get a response from the AI service. Please try again in a moment.",
}


def user_message_for(kind: UpstreamErrorKind) -> str:
    """Map an upstream error kind to its user-facing message"""
    return UPSTREAM_USER_MESSAGES[kind]


class ChatServiceError(Exception):
    """Base exception for chat relay errors"""
    pass


class ValidationError(ChatServiceError):
    """
    Client input failed validation

    Attributes:
        field: Name of the offending request field
        message: Human-readable reason
        extra: Additional response fields (e.g. maxLength, currentLength)
    """

    status_code = 400

    def __init__(self, field: str, message: str, **extra: Any):
        self.field = field
        self.message = message
        self.extra = extra
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "field": self.field,
        }
        body.update(self.extra)
        return body


class UpstreamError(ChatServiceError):
    """The external LLM call failed"""

    kind: UpstreamErrorKind = UpstreamErrorKind.UNKNOWN

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return user_message_for(self.kind)


class UpstreamRateLimited(UpstreamError):
    """Upstream answered HTTP 429"""
    kind = UpstreamErrorKind.RATE_LIMITED


class UpstreamAuthFailed(UpstreamError):
    """Upstream rejected the API key, or no key is configured"""
    kind = UpstreamErrorKind.AUTH_FAILED


class UpstreamUnavailable(UpstreamError):
    """Upstream answered with a 5xx status"""
    kind = UpstreamErrorKind.UNAVAILABLE


class UpstreamTimeout(UpstreamError):
    """Upstream did not answer before the deadline"""
    kind = UpstreamErrorKind.TIMEOUT


class UpstreamUnreachable(UpstreamError):
    """Upstream host could not be resolved"""
    kind = UpstreamErrorKind.UNREACHABLE


class UnknownUpstreamError(UpstreamError):
    """Any other upstream failure, including malformed responses"""
    kind = UpstreamErrorKind.UNKNOWN
