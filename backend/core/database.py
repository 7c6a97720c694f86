"""
Async PostgreSQL connection pool module.

This module provides an async PostgreSQL connection pool using asyncpg. All
database traffic of the Meeting Analytics backend flows through the pool created
here, providing a single point of configuration and management.

Key Components:
- Global connection pool singleton (_pool)
- init_db(): Initialize the connection pool at application startup
- get_db_pool(): Get the pool instance (initializes if needed)
- close_db(): Gracefully close the pool at application shutdown
- ensure_schema(): Create the clients table and its indexes if missing

Connection Pool Configuration (from Settings):
- min_size: db_pool_min_size (default 2)
- max_size: db_pool_max_size (default 10)
- command_timeout: db_command_timeout (default 60 seconds)

Usage:
    # At application startup (in FastAPI lifespan)
    await init_db()
    await ensure_schema()

    # In services
    pool = await get_db_pool()
    async with pool.acquire() as conn:
        total = await conn.fetchval("SELECT COUNT(*) FROM clients")

    # At application shutdown
    await close_db()
"""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from backend.core.config import get_settings
from backend.sql.client_queries import CREATE_CLIENTS_TABLE, CREATE_CLIENTS_INDEXES


logger = logging.getLogger(__name__)


# =============================================================================
# Global Pool Singleton
# =============================================================================

# None until init_db() is called
_pool: Optional[Pool] = None


# =============================================================================
# Pool Lifecycle Functions
# =============================================================================

async def init_db() -> Pool:
    """
    Initialize the database connection pool.

    Idempotent: if the pool already exists it is returned unchanged.

    Returns:
        Pool: The asyncpg connection pool instance.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    return _pool


async def get_db_pool() -> Pool:
    """
    Get the database connection pool, initializing if needed.

    Prefer calling init_db() explicitly at application startup; the first
    lazy initialization adds latency to that request.

    Returns:
        Pool: The asyncpg connection pool instance.
    """
    global _pool

    if _pool is None:
        await init_db()

    assert _pool is not None, "Pool should be initialized after init_db()"

    return _pool


async def close_db() -> None:
    """
    Close the database connection pool gracefully.

    Safe to call when the pool was never created. After closing, the next
    get_db_pool() call creates a fresh pool.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None


# =============================================================================
# Schema Bootstrap
# =============================================================================

async def ensure_schema(pool: Optional[Pool] = None) -> None:
    """
    Create the clients table and its indexes when they do not exist yet.

    Runs inside a single transaction so a partially created schema is never
    left behind.

    Args:
        pool: Pool to use; defaults to the global pool.
    """
    pool = pool or await get_db_pool()

    async with pool.acquire() as conn:
        async with conn.transaction():
            await conn.execute(CREATE_CLIENTS_TABLE)
            for statement in CREATE_CLIENTS_INDEXES:
                await conn.execute(statement)

    logger.info("Database schema verified (clients table and indexes)")
