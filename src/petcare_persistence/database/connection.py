"""
Database connection utilities for the petcare-persistence package.

This module provides async SQLAlchemy engine configuration for the relational
backend. SQLite (via aiosqlite) is the default medium; PostgreSQL (via
asyncpg) is supported for shared deployments.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, StaticPool

from ..utils.config import DatabaseURLValidator

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """Configuration class for database connections."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
        enforce_foreign_keys: bool = True,
    ):
        """
        Initialize database configuration.

        Args:
            database_url: SQLite or PostgreSQL connection URL
            pool_size: Number of connections to maintain in the pool
            max_overflow: Maximum number of connections that can overflow the pool
            pool_timeout: Timeout for getting connection from pool
            pool_recycle: Time in seconds to recycle connections
            echo: Whether to echo SQL statements
            enforce_foreign_keys: Whether SQLite connections turn on
                ``PRAGMA foreign_keys`` (PostgreSQL always enforces them)

        Raises:
            ConfigurationException: If the URL is invalid or unsupported
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.echo = echo
        self.enforce_foreign_keys = enforce_foreign_keys

        self.url_info = DatabaseURLValidator.validate_url(database_url)

    @property
    def is_sqlite(self) -> bool:
        """Whether the URL points at SQLite."""
        return self.url_info["database_type"] == "sqlite"

    @property
    def is_in_memory(self) -> bool:
        """Whether the URL is an in-memory SQLite database."""
        return self.is_sqlite and self.url_info["database"] in ("", ":memory:")

    def get_async_url(self) -> str:
        """Convert the database URL to its async driver form if needed."""
        replacements = {
            "postgresql://": "postgresql+asyncpg://",
            "sqlite://": "sqlite+aiosqlite://",
        }
        for prefix, async_prefix in replacements.items():
            if self.database_url.startswith(prefix):
                return self.database_url.replace(prefix, async_prefix, 1)
        return self.database_url


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Connect hook turning on SQLite foreign key (and cascade) enforcement."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(
    database_url: str,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 3600,
    pool_pre_ping: bool = True,
    echo: bool = False,
    enforce_foreign_keys: bool = True,
    use_null_pool: bool = False,
    connect_args: Optional[dict] = None,
) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine with proper configuration.

    SQLite files use ``NullPool`` (a connection per operation), in-memory
    SQLite uses ``StaticPool`` so every session sees the same database, and
    PostgreSQL uses a queue pool.

    Args:
        database_url: SQLite or PostgreSQL connection URL
        pool_size: Number of connections to maintain in the pool
        max_overflow: Maximum number of connections that can overflow the pool
        pool_timeout: Timeout for getting connection from pool
        pool_recycle: Time in seconds to recycle connections
        pool_pre_ping: Whether to validate connections before use
        echo: Whether to echo SQL statements
        enforce_foreign_keys: Whether SQLite enforces foreign keys
        use_null_pool: Whether to use NullPool (useful for testing)
        connect_args: Additional connection arguments

    Returns:
        Configured async SQLAlchemy engine

    Raises:
        ConfigurationException: If database URL is invalid
    """
    config = DatabaseConfig(
        database_url=database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        echo=echo,
        enforce_foreign_keys=enforce_foreign_keys,
    )

    async_url = config.get_async_url()

    engine_kwargs: Dict[str, Any] = {"echo": config.echo}

    if connect_args:
        engine_kwargs["connect_args"] = connect_args

    if config.is_in_memory:
        engine_kwargs["poolclass"] = StaticPool
    elif use_null_pool or config.is_sqlite:
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs.update(
            {
                "poolclass": AsyncAdaptedQueuePool,
                "pool_size": config.pool_size,
                "max_overflow": config.max_overflow,
                "pool_timeout": config.pool_timeout,
                "pool_recycle": config.pool_recycle,
                "pool_pre_ping": pool_pre_ping,
            }
        )

    engine = create_async_engine(async_url, **engine_kwargs)

    if config.is_sqlite and config.enforce_foreign_keys:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(
        f"Created async database engine for {make_url(async_url).get_backend_name()}"
    )
    return engine


async def close_engine(engine: AsyncEngine) -> None:
    """
    Properly close the database engine and all connections.

    Args:
        engine: SQLAlchemy async engine to close
    """
    try:
        await engine.dispose()
        logger.info("Database engine closed successfully")
    except Exception as e:
        logger.error(f"Error closing database engine: {e}")
