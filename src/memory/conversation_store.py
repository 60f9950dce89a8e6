"""
Database-backed chat history.

Provides:
- Async SQLAlchemy engine (SQLite via aiosqlite by default, WAL mode)
- Insert-only persistence of chat exchanges, no cap
- Indexed lookups by user + recency and by conversation
"""

from pathlib import Path
from typing import List, Optional, Tuple
from loguru import logger
from sqlalchemy import event, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from src.models.domain import Base, ChatExchange, ChatExchangeRecord


class SqlHistoryStore:
    """Persistent history store over an async SQLAlchemy engine"""

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize the store (no connection is opened until init()).

        Args:
            database_url: SQLAlchemy async URL, e.g. sqlite+aiosqlite:///data/chat_history.db
            echo: Log emitted SQL
        """
        self.database_url = database_url
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    async def init(self) -> None:
        """Create the engine and the table/indexes - call this from lifespan startup"""
        if self._engine is not None:
            return

        url = make_url(self.database_url)
        is_sqlite = url.get_backend_name() == "sqlite"
        if is_sqlite and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(self.database_url, echo=self._echo)

        if is_sqlite:
            @event.listens_for(engine.sync_engine, "connect")
            def set_sqlite_pragmas(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                    cursor.execute("PRAGMA busy_timeout=5000")
                finally:
                    cursor.close()

        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.error(f"Failed to initialize history database: {e}")
            await engine.dispose()
            raise

        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        logger.info(f"Initialized history database: {url.render_as_string(hide_password=True)}")

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            raise RuntimeError("SqlHistoryStore not initialized. Call init() first.")
        return self._session_factory

    async def append(self, exchange: ChatExchange) -> None:
        async with self.session_factory() as session:
            session.add(ChatExchangeRecord.from_exchange(exchange))
            await session.commit()

    async def list_exchanges(
        self,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        limit: int = 50,
    ) -> Tuple[List[ChatExchange], int]:
        filters = []
        if user_id is not None:
            filters.append(ChatExchangeRecord.user_id == user_id)
        if conversation_id is not None:
            filters.append(ChatExchangeRecord.conversation_id == conversation_id)

        async with self.session_factory() as session:
            total = await session.scalar(
                select(func.count()).select_from(ChatExchangeRecord).where(*filters)
            )
            if limit <= 0:
                return [], total or 0
            rows = await session.scalars(
                select(ChatExchangeRecord)
                .where(*filters)
                .order_by(ChatExchangeRecord.timestamp.desc(), ChatExchangeRecord.pk.desc())
                .limit(limit)
            )
            # Newest-first from the query, oldest-first to the caller
            exchanges = [row.to_exchange() for row in rows][::-1]
        return exchanges, total or 0

    async def recent(self, conversation_id: str, n: int) -> List[ChatExchange]:
        if n <= 0:
            return []
        exchanges, _ = await self.list_exchanges(conversation_id=conversation_id, limit=n)
        return exchanges

    async def count(self) -> int:
        async with self.session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(ChatExchangeRecord))
        return total or 0

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections"""
        if self._engine is not None:
            try:
                await self._engine.dispose()
                logger.debug("Closed history database engine")
            except Exception as e:
                logger.warning(f"Error closing history database: {e}")
            finally:
                self._engine = None
                self._session_factory = None
