"""
Domain models - chat exchanges and their ORM mapping
"""

from src.models.domain import Base, ChatExchange, ChatExchangeRecord, ClientContext

__all__ = [
    "Base",
    "ChatExchange",
    "ChatExchangeRecord",
    "ClientContext",
]
