"""
History store contract and factory.

Both backends (bounded in-memory ring buffer and SQL database) satisfy the
same async interface, so the chat service never knows which one it talks to.
"""

from typing import List, Optional, Protocol, Tuple
from loguru import logger

from src.config.settings import Settings, settings as default_settings
from src.models.domain import ChatExchange


class HistoryStore(Protocol):
    """Append-only storage for chat exchanges"""

    async def init(self) -> None:
        ...

    async def append(self, exchange: ChatExchange) -> None:
        ...

    async def list_exchanges(
        self,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        limit: int = 50,
    ) -> Tuple[List[ChatExchange], int]:
        """
        Return the most recent `limit` matching exchanges (oldest first)
        together with the total number of matches.
        """
        ...

    async def recent(self, conversation_id: str, n: int) -> List[ChatExchange]:
        """Last `n` exchanges of a conversation, oldest first"""
        ...

    async def count(self) -> int:
        ...

    async def close(self) -> None:
        ...


def create_history_store(config: Optional[Settings] = None) -> HistoryStore:
    """
    Factory function to create the history store selected by configuration.

    Args:
        config: Settings to read (defaults to the global settings)

    Returns:
        InMemoryHistoryStore or SqlHistoryStore
    """
    config = config or default_settings
    backend = config.history_backend.lower()

    if backend == "memory":
        from src.memory.exchange_memory import InMemoryHistoryStore

        logger.info(f"History backend: in-memory (capacity={config.history_capacity})")
        return InMemoryHistoryStore(capacity=config.history_capacity)

    elif backend == "database":
        from src.memory.conversation_store import SqlHistoryStore

        logger.info("History backend: database")
        return SqlHistoryStore(database_url=config.database_url_resolved)

    else:
        raise ValueError(f"Unsupported history backend: {backend}. Supported: 'memory', 'database'")
