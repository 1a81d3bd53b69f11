"""
PostgreSQL Client Wrapper

Centralized asyncpg pool wrapper. Provides environment based configuration
and a consistent database access pattern for repositories.

Usage:
    from core.postgres_client import PostgresClientWrapper

    # One wrapper per repository
    db = PostgresClientWrapper(service_name="collaboration_service")

    # Execute queries
    rows = await db.query("SELECT * FROM collaboration.collaborations WHERE brand_id = $1", [brand_id])

    # Multi-statement unit of work
    async with db.transaction() as conn:
        await conn.execute(...)
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

from core.config import InfraConfig

logger = logging.getLogger(__name__)


class PostgresClientWrapper:
    """
    PostgreSQL client wrapper around an asyncpg connection pool.

    Provides:
    - Environment variable configuration via InfraConfig
    - Lazy pool creation
    - Dict rows for query helpers
    - Transaction scope for atomic multi-statement writes
    """

    def __init__(
        self,
        service_name: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        config: Optional[InfraConfig] = None,
    ):
        """
        Initialize PostgreSQL client wrapper.

        Args:
            service_name: Name of the service using this client
            host: PostgreSQL host (defaults to POSTGRES_HOST)
            port: PostgreSQL port (defaults to POSTGRES_PORT)
            database: Database name (defaults to POSTGRES_DB)
            username: Database username
            password: Database password
            config: Infrastructure config, defaults to environment
        """
        config = config or InfraConfig.from_env()

        self.service_name = service_name
        self.host = host or config.postgres_host
        self.port = port or config.postgres_port
        self.database = database or config.postgres_db
        self.username = username or config.postgres_user
        self.password = password if password is not None else config.postgres_password
        self.min_size = config.postgres_min_pool
        self.max_size = config.postgres_max_pool

        self._pool: Optional[asyncpg.Pool] = None

        logger.info(f"PostgreSQL client initialized for {service_name}: {self.host}:{self.port}/{self.database}")

    async def connect(self) -> asyncpg.Pool:
        """Create the connection pool if needed"""
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                host=self.host,
                port=self.port,
                user=self.username,
                password=self.password,
                database=self.database,
                min_size=self.min_size,
                max_size=self.max_size,
            )
            logger.info(f"PostgreSQL pool ready for {self.service_name}")
        return self._pool

    @property
    def pool(self) -> Optional[asyncpg.Pool]:
        """Get underlying asyncpg pool"""
        return self._pool

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def health_check(self) -> Dict[str, Any]:
        """Check database health"""
        try:
            pool = await self.connect()
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return {"healthy": True}
        except Exception as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return {"healthy": False, "error": str(e)}

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            rows = await conn.fetch(sql, *(params or []))
        return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single row"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(sql, *(params or []))
        return dict(row) if row else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute SQL statement and return the status tag (e.g. 'UPDATE 1')"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            return await conn.execute(sql, *(params or []))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection and run the block inside one transaction"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def close(self):
        """Close the pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.service_name}")
