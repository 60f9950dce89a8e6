"""
Upstream error parser - converts raw HTTP/transport failures to semantic error types.

This module is the ONLY place where we match on HTTP status codes and
network exception details of the LLM call. Everything else works with
UpstreamError subclasses and their UpstreamErrorKind.
"""

import asyncio
import socket
from typing import Optional

import httpx
from loguru import logger

from src.utils.errors import (
    UnknownUpstreamError,
    UpstreamAuthFailed,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamUnavailable,
    UpstreamUnreachable,
)

# getaddrinfo messages across platforms
_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "name resolution",
)


def classify_status(status_code: int, body: Optional[str] = None) -> UpstreamError:
    """
    Classify a non-2xx HTTP response from the LLM endpoint.

    Args:
        status_code: HTTP status returned by the endpoint
        body: Response text, kept for diagnostics

    Returns:
        The matching UpstreamError (not raised)
    """
    detail = f"HTTP {status_code}"
    if body:
        detail = f"{detail}: {body[:500]}"

    if status_code == 429:
        return UpstreamRateLimited(f"Rate limit exceeded ({detail})", status_code=status_code)
    if status_code in (401, 403):
        return UpstreamAuthFailed(f"Invalid API key configuration ({detail})", status_code=status_code)
    if status_code >= 500:
        return UpstreamUnavailable(f"Gemini AI service is temporarily unavailable ({detail})", status_code=status_code)

    logger.debug(f"Unrecognized upstream status, classifying as UNKNOWN: {detail[:100]}")
    return UnknownUpstreamError(f"Failed to get response from AI service ({detail})", status_code=status_code)


def classify_transport_error(error: BaseException) -> UpstreamError:
    """
    Classify an exception raised while sending the request.

    Args:
        error: httpx transport error or asyncio timeout

    Returns:
        The matching UpstreamError (not raised)
    """
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
        return UpstreamTimeout(f"Request timeout: {str(error) or type(error).__name__}")

    if isinstance(error, httpx.ConnectError) and _is_dns_failure(error):
        return UpstreamUnreachable(f"Unable to connect to Gemini AI service: {error}")

    logger.debug(f"Unrecognized transport error, classifying as UNKNOWN: {type(error).__name__}: {error}")
    return UnknownUpstreamError(f"Failed to get response from AI service: {type(error).__name__}: {error}")


def _is_dns_failure(error: BaseException) -> bool:
    """Walk the exception chain looking for a getaddrinfo failure."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        message = str(current).lower()
        if any(marker in message for marker in _DNS_FAILURE_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False
