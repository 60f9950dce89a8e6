"""
In-memory chat history

Keeps the last N exchanges in a ring buffer. Oldest entries are evicted
first once the capacity is reached. Nothing survives a restart.
"""

import asyncio
from collections import deque
from typing import Deque, List, Optional, Tuple
from loguru import logger

from src.models.domain import ChatExchange


class InMemoryHistoryStore:
    """
    Bounded, process-local history store.

    All reads and writes go through one asyncio.Lock so an append and its
    eviction are never observed half-done by a concurrent reader.
    """

    def __init__(self, capacity: int = 1000):
        """
        Initialize the ring buffer.

        Args:
            capacity: Maximum number of exchanges to keep (default: 1000)
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._exchanges: Deque[ChatExchange] = deque(maxlen=capacity)
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        return None

    async def append(self, exchange: ChatExchange) -> None:
        async with self._lock:
            if len(self._exchanges) == self.capacity:
                evicted = self._exchanges[0]
                logger.debug(f"History at capacity ({self.capacity}), evicting exchange {evicted.id}")
            self._exchanges.append(exchange)

    async def list_exchanges(
        self,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        limit: int = 50,
    ) -> Tuple[List[ChatExchange], int]:
        async with self._lock:
            matches = [
                ex for ex in self._exchanges
                if (user_id is None or ex.user_id == user_id)
                and (conversation_id is None or ex.conversation_id == conversation_id)
            ]
        if limit <= 0:
            return [], len(matches)
        return matches[-limit:], len(matches)

    async def recent(self, conversation_id: str, n: int) -> List[ChatExchange]:
        if n <= 0:
            return []
        async with self._lock:
            matches = [ex for ex in self._exchanges if ex.conversation_id == conversation_id]
        return matches[-n:]

    async def count(self) -> int:
        async with self._lock:
            return len(self._exchanges)

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._exchanges)
