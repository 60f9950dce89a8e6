"""
HTTP middleware for the chat relay

- Request size guard: bodies declared larger than MAX_REQUEST_BYTES get 413
  before anything reads them
- Security headers on every response
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from src.models.domain import utc_now

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
}


def _declared_length(request: Request) -> Optional[int]:
    value = request.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def register_http_middleware(app: FastAPI, max_request_bytes: int) -> None:
    """Attach the size guard and security headers to the app"""

    @app.middleware("http")
    async def limit_request_size(request: Request, call_next):
        length = _declared_length(request)
        if length is not None and length > max_request_bytes:
            logger.warning(f"Rejected {request.method} {request.url.path}: body of {length} bytes")
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": "Request body too large",
                    "maxBytes": max_request_bytes,
                    "timestamp": utc_now().isoformat(),
                },
            )
        return await call_next(request)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
