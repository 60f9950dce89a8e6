"""
Logging utility with loguru.
Provides structured logging with file rotation and a daily chat interaction log.
"""

import json
import sys
from typing import Any, Dict

from loguru import logger

from src.config.settings import settings

CHAT_CHANNEL = "chat"

# Bound logger for chat interaction records (routed to the chat_<date>.log sink)
chat_logger = logger.bind(channel=CHAT_CHANNEL)


def _is_chat_record(record) -> bool:
    return record["extra"].get("channel") == CHAT_CHANNEL


def setup_logger():
    """
    Configure loguru logger with console, application file and chat interaction outputs.
    """
    # Remove default handler
    logger.remove()

    # Console handler with colors
    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=settings.log_level,
        filter=lambda record: not _is_chat_record(record),
    )

    if not settings.log_to_file:
        return logger

    log_dir = settings.log_dir_resolved
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "app.log",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG",
        filter=lambda record: not _is_chat_record(record),
    )

    # One JSON line per chat interaction, new file every day
    logger.add(
        log_dir / "chat_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="30 days",
        format="{message}",
        level="INFO",
        filter=_is_chat_record,
    )

    logger.debug("Logger initialized")
    return logger


def log_chat_interaction(entry: Dict[str, Any]) -> None:
    """Write one chat interaction record to the chat log"""
    chat_logger.info(json.dumps(entry, ensure_ascii=False, default=str))


# Initialize logger on import
setup_logger()
