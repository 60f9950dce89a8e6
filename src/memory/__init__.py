"""
Memory layer - Chat history stores
"""

from src.memory.history_store import HistoryStore, create_history_store
from src.memory.exchange_memory import InMemoryHistoryStore
from src.memory.conversation_store import SqlHistoryStore

__all__ = [
    "HistoryStore",
    "create_history_store",
    "InMemoryHistoryStore",
    "SqlHistoryStore",
]
