"""
Database connection management using asyncpg for neo-membership.
"""
from typing import Optional, Any, List
from contextlib import asynccontextmanager
import asyncpg
from asyncpg import Pool, Record
import logging

from ....config.settings import MembershipSettings, get_settings
from ....core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the asyncpg connection pool used by the membership repository."""

    def __init__(self, database_url: Optional[str] = None, **pool_config):
        """Initialize DatabaseManager.

        Args:
            database_url: Database URL (defaults to MEMBERSHIP_DATABASE_URL)
            **pool_config: Additional pool configuration options
        """
        self.pool: Optional[Pool] = None
        self.dsn = database_url or ""
        if "+asyncpg" in self.dsn:
            self.dsn = self.dsn.replace("+asyncpg", "")

        self.pool_config = {
            "min_size": 2,
            "max_size": 10,
            "command_timeout": 30,
            **pool_config
        }

    @classmethod
    def from_settings(cls, settings: Optional[MembershipSettings] = None) -> "DatabaseManager":
        """Build a manager from membership settings."""
        settings = settings or get_settings()
        if not settings.database_dsn:
            raise ConfigurationError("MEMBERSHIP_DATABASE_URL is not configured")
        return cls(
            settings.database_dsn,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if self.pool is None:
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")
            self.pool = await asyncpg.create_pool(
                self.dsn,
                server_settings={"application_name": "neo-membership"},
                **self.pool_config
            )
            logger.info("Database pool created successfully")
        return self.pool

    async def close_pool(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.create_pool()

        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args, timeout: float = None) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: float = None) -> List[Record]:
        """Fetch multiple rows."""
        async with self.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: float = None) -> Any:
        """Fetch a single value."""
        async with self.acquire() as connection:
            return await connection.fetchval(query, *args, column=column, timeout=timeout)

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self.acquire() as connection:
                result = await connection.fetchval("SELECT 1")
                return result == 1
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return False
