"""PostgreSQL pool for the per-user document store"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool
from skincare_tracker.config import DATABASE_URL, DB_POOL_MAX_SIZE, DB_POOL_MIN_SIZE
from skincare_tracker.exceptions import StorageConnectionError

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the async connection pool

    Connections handed out by connection() return rows as dicts, so a
    document body comes back as row["body"].
    """

    def __init__(
        self,
        connection_string: str = DATABASE_URL,
        min_size: int = DB_POOL_MIN_SIZE,
        max_size: int = DB_POOL_MAX_SIZE
    ):
        self.connection_string = connection_string
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[AsyncConnectionPool] = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def init_pool(self) -> None:
        """Open the pool (no-op when already open)"""
        if self._pool:
            return
        logger.info(f"Opening document store pool ({self.min_size}-{self.max_size} connections)")
        pool = AsyncConnectionPool(
            self.connection_string,
            min_size=self.min_size,
            max_size=self.max_size,
            open=False
        )
        await pool.open()
        self._pool = pool

    async def close_pool(self) -> None:
        if self._pool:
            logger.info("Closing document store pool")
            await self._pool.close()
            self._pool = None

    async def ping(self) -> bool:
        """True when the database answers a trivial query"""
        try:
            async with self.connection() as conn:
                await conn.execute("SELECT 1")
            return True
        except (psycopg.Error, StorageConnectionError) as e:
            logger.warning(f"Document store ping failed: {e}")
            return False

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """
        Borrow a connection from the pool

        Raises:
            StorageConnectionError: init_pool() has not been called
        """
        if not self._pool:
            raise StorageConnectionError(
                "Document store pool not initialized",
                operation="db_connection"
            )

        async with self._pool.connection() as conn:
            conn.row_factory = dict_row
            yield conn
