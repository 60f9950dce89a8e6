"""
Main FastAPI application for the HEVA chat relay

This module creates and configures the FastAPI application with:
- CORS middleware for the HEVA web frontend
- Gzip compression, request size limit and security headers
- Chat routes (/api/chat)
- Health check and root endpoints
- JSON error handlers (400 validation, 404, 500)
- Auto-generated API documentation
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware import register_http_middleware
from src.api.schemas import HealthResponse
from src.api.routes import chat
from src.config.constants import GENERIC_ERROR_MESSAGE
from src.config.settings import Settings, settings as default_settings
from src.llm.client import ChatRelay, create_relay
from src.memory.history_store import HistoryStore, create_history_store
from src.models.domain import utc_now
from src.services.chat_service import ChatService
from src.utils.errors import ValidationError


def _error_body(error: str, **extra) -> dict:
    body = {"success": False, "error": error}
    body.update({k: v for k, v in extra.items() if v is not None})
    body["timestamp"] = utc_now().isoformat()
    return body


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    """Translate every failure into the {success: false, error, ...} envelope"""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(f"Validation failed on {request.url.path}: {exc.field} - {exc.message}")
        body = exc.to_response()
        body["timestamp"] = utc_now().isoformat()
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        if first.get("type") == "json_invalid":
            field = "body"
        else:
            loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
            field = ".".join(loc) or "body"
        message = first.get("msg", "Invalid request")
        logger.info(f"Request validation failed on {request.url.path}: {field} - {message}")
        return JSONResponse(status_code=400, content=_error_body(message, field=field))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Not Found - {request.url.path}"
        else:
            message = str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=_error_body(message))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        # Traceback is logged by the server once the error propagates
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
        details = str(exc) if config.is_development else None
        return JSONResponse(status_code=500, content=_error_body(GENERIC_ERROR_MESSAGE, details=details))


def create_app(
    config: Optional[Settings] = None,
    store: Optional[HistoryStore] = None,
    relay: Optional[ChatRelay] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Settings (defaults to the global settings)
        store: History store (defaults to the configured backend)
        relay: AI relay (defaults to the configured provider)

    Returns:
        Configured FastAPI app
    """
    config = config or default_settings
    store = store if store is not None else create_history_store(config)
    relay = relay if relay is not None else create_relay(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan events

        - Startup: open the history store
        - Shutdown: close the history store
        """
        logger.info(f"🚀 {config.service_name} starting ({config.environment})")
        logger.info(f"🤖 Relay provider: {relay.name}")
        await store.init()
        app.state.started_at = time.monotonic()

        yield

        logger.info("🛑 Chat relay shutting down...")
        try:
            await store.close()
            logger.info("✅ History store closed")
        except Exception as e:
            logger.warning(f"Error closing history store: {e}")

    app = FastAPI(
        title="HEVA Chat Relay API",
        description="""
    Chat API for the HEVA credit-scoring assistant.

    ## Features

    * **AI relay** to Google Gemini with a fixed credit-advisor persona
    * **Short conversation memory**: the last exchanges of a conversation condition the prompt
    * **Chat history** retrieval by user and conversation
    * **Classified errors**: rate limit, auth, outage, timeout and DNS failures get distinct messages

    ## Example

    ```bash
    curl -X POST http://localhost:8000/api/chat \\
         -H "Content-Type: application/json" \\
         -d '{"message": "How is my credit score calculated?"}'
    ```
    """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.config = config
    app.state.started_at = time.monotonic()
    app.state.chat_service = ChatService(store=store, relay=relay, config=config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=config.gzip_minimum_size)
    register_http_middleware(app, max_request_bytes=config.max_request_bytes)

    register_exception_handlers(app, config)
    app.include_router(chat.router)

    @app.get("/", tags=["root"])
    async def root():
        """
        Root endpoint - API information
        """
        return {
            "message": f"Welcome to the {config.service_name} API!",
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "chat": "/api/chat",
                "history": "/api/chat/history",
                "status": "/api/chat/status",
            },
        }

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """
        Health check endpoint

        Returns server status, uptime in seconds and environment.
        """
        return HealthResponse(
            status="OK",
            timestamp=utc_now().isoformat(),
            uptime=round(time.monotonic() - app.state.started_at, 3),
            environment=config.environment,
        )

    return app


app = create_app()
