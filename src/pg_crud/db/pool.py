"""Database connection pool management.

This module provides utilities for creating and closing the asyncpg
connection pool shared by all requests.
"""

import asyncio
import logging

import asyncpg
from asyncpg import Pool

from pg_crud.config.settings import DatabaseConfig

logger = logging.getLogger(__name__)


async def create_pool(config: DatabaseConfig) -> Pool:
    """Create the connection pool.

    Callers queue on ``acquire`` when all ``max_pool_size`` connections are in
    use; there is no queue-size limit.

    Args:
        config: Database configuration containing connection parameters
            and pool settings.

    Returns:
        Pool: An asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.

    Example:
        >>> config = DatabaseConfig(host="localhost", name="zoo")
        >>> pool = await create_pool(config)
        >>> async with pool.acquire() as conn:
        ...     result = await conn.fetch("SELECT 1")
    """
    pool = await asyncpg.create_pool(
        host=config.host,
        port=config.port,
        database=config.name,
        user=config.user,
        password=config.password.get_secret_value(),
        min_size=config.min_pool_size,
        max_size=config.max_pool_size,
        timeout=config.pool_timeout,
        command_timeout=config.command_timeout,
    )

    if pool is None:
        raise RuntimeError(f"Failed to create connection pool for {config.name}")

    logger.info("Connection pool created for %s", config.safe_dsn)
    return pool


async def close_pool(pool: Pool, timeout: float = 10.0) -> None:
    """Close the pool gracefully, terminating it if that takes too long.

    Args:
        pool: Pool to close.
        timeout: Maximum time in seconds to wait for graceful shutdown
            before forcing termination.
    """
    try:
        await asyncio.wait_for(pool.close(), timeout=timeout)
        logger.info("Connection pool closed gracefully")
    except TimeoutError:
        logger.warning("Graceful pool close timed out, forcing termination")
        pool.terminate()
    except Exception as e:
        logger.error(f"Error closing connection pool: {e!s}")
        pool.terminate()
