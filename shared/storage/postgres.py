"""
PostgreSQL async client wrapper for schedule data.

Provides a read-oriented interface for PostgreSQL operations
with connection pooling and error logging.
"""

from __future__ import annotations

import inspect
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Union
from dataclasses import dataclass
import structlog

import asyncpg


logger = structlog.get_logger()


@dataclass
class PostgresConfig:
    """PostgreSQL configuration."""
    dsn: str
    min_size: int = 2
    max_size: int = 10
    timeout: int = 30


class PostgresClient:
    """
    Async PostgreSQL client with connection pooling.

    Every call borrows one pooled connection for exactly one statement
    and hands rows back as plain dictionaries, so nothing returned by
    this client refers back to the connection it came from.
    """

    def __init__(self, config: Union[PostgresConfig, str, None] = None, **kwargs: Any):
        if isinstance(config, PostgresConfig):
            self.config = config
        else:
            dsn = config
            if not dsn:
                host = kwargs.get("host", "localhost")
                port = kwargs.get("port", 5432)
                database = kwargs.get("database") or kwargs.get("db") or "schedule"
                user = kwargs.get("user") or kwargs.get("username") or "postgres"
                password = kwargs.get("password", "")
                dsn = f"postgresql://{user}:{password}@{host}:{port}/{database}"

            self.config = PostgresConfig(
                dsn=dsn,
                min_size=kwargs.get("min_size", 2),
                max_size=kwargs.get("max_size", 10),
                timeout=kwargs.get("timeout", 30),
            )

        self.logger = structlog.get_logger("postgres-client")
        self._pool: Optional[asyncpg.Pool] = None
        self.is_connected: bool = False

    async def connect(self) -> None:
        """Connect to PostgreSQL."""
        if self._pool:
            self.is_connected = True
            return

        self._pool = await asyncpg.create_pool(
            self.config.dsn,
            min_size=self.config.min_size,
            max_size=self.config.max_size,
            command_timeout=self.config.timeout
        )

        self.is_connected = True
        self.logger.info("Connected to PostgreSQL")

    async def disconnect(self) -> None:
        """Disconnect from PostgreSQL."""
        if self._pool:
            close_method = getattr(self._pool, "close", None)
            if callable(close_method):
                result = close_method()
                if inspect.isawaitable(result):
                    await result
            self._pool = None

        self.is_connected = False
        self.logger.info("Disconnected from PostgreSQL")

    async def close(self) -> None:
        """Alias for disconnect."""
        await self.disconnect()

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Any]:
        """Borrow a pooled connection for a single statement."""
        if not self._pool:
            await self.connect()

        conn = await self._pool.acquire()
        try:
            yield conn
        finally:
            release = getattr(self._pool, "release", None)
            if callable(release):
                await release(conn)

    async def execute(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        """Execute a SELECT query and return list of rows."""
        async with self._connection() as conn:
            try:
                rows = await conn.fetch(query, *args)
            except Exception as e:
                self.logger.error("PostgreSQL query error", error=str(e), query=query)
                raise
            return [dict(row) for row in rows]

    async def query(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        """Alias for execute."""
        return await self.execute(query, *args)

    async def execute_one(self, query: str, *args: Any) -> Optional[Dict[str, Any]]:
        """Execute a SELECT query returning a single row."""
        async with self._connection() as conn:
            try:
                row = await conn.fetchrow(query, *args)
            except Exception as e:
                self.logger.error("PostgreSQL query error", error=str(e), query=query)
                raise
            return dict(row) if row else None

    async def execute_scalar(self, query: str, *args: Any) -> Any:
        """Execute a SELECT query returning a scalar value."""
        async with self._connection() as conn:
            try:
                return await conn.fetchval(query, *args)
            except Exception as e:
                self.logger.error("PostgreSQL query error", error=str(e), query=query)
                raise

    async def execute_script(self, script: str) -> None:
        """Run a multi-statement SQL script (DDL, seed data)."""
        async with self._connection() as conn:
            try:
                await conn.execute(script)
            except Exception as e:
                self.logger.error("PostgreSQL script error", error=str(e))
                raise

    async def health_check(self) -> bool:
        """Check PostgreSQL health."""
        try:
            result = await self.execute_scalar("SELECT 1")
            return result == 1
        except Exception as e:
            self.logger.error("PostgreSQL health check failed", error=str(e))
            return False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
