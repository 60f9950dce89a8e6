"""
Configuration management for the chat relay.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from loguru import logger

# This file is at src/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=False)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.debug(f".env file not found at: {_env_file}")
    load_dotenv(override=False)


def resolve_project_path(path: str) -> Path:
    """Resolve a possibly relative path against the project root."""
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = _project_root / resolved
    return resolved


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Service
    environment: str = Field(default="development")  # "development" | "production"
    service_name: str = Field(default="HEVA Chat Assistant")
    allowed_origins: str = Field(default="http://localhost:3000")  # comma-separated
    max_request_bytes: int = Field(default=10 * 1024 * 1024, ge=1)  # 413 above this Content-Length
    gzip_minimum_size: int = Field(default=1000, ge=0)

    # LLM Provider Selection
    llm_provider: str = Field(default="gemini")  # Options: "gemini" | "canned"

    # Gemini Configuration
    gemini_api_key: str = Field(default="")
    gemini_api_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
    )
    gemini_timeout_seconds: float = Field(default=30.0, gt=0)
    gemini_temperature: float = Field(default=0.7)
    gemini_top_k: int = Field(default=40)
    gemini_top_p: float = Field(default=0.95)
    gemini_max_output_tokens: int = Field(default=1024)

    # Chat Configuration
    max_message_length: int = Field(default=4000, ge=1)
    context_window_size: int = Field(default=3, ge=0)  # Prior exchanges included in the prompt

    # History Storage
    history_backend: str = Field(default="memory")  # Options: "memory" | "database"
    history_capacity: int = Field(default=1000, ge=1)  # In-memory ring buffer size
    history_default_limit: int = Field(default=50, ge=1)
    history_db_path: str = Field(default="data/chat_history.db")
    database_url: Optional[str] = Field(default=None)  # Overrides history_db_path when set

    # Logging
    log_dir: str = Field(default="data/logs")
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=True)

    class Config:
        env_file = str(_project_root / ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def database_url_resolved(self) -> str:
        """SQLAlchemy async URL for the history database"""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{resolve_project_path(self.history_db_path)}"

    @property
    def log_dir_resolved(self) -> Path:
        return resolve_project_path(self.log_dir)


# Create global settings instance
settings = Settings()
