"""
FastAPI dependency injection module for infrastructure components.

This module provides reusable FastAPI dependencies for the connection pool and
configuration access. Service factories built on top of these live in
backend/api/dependencies.py so that the core package never imports services.

Key Dependencies Provided:
- get_pool_dependency: Returns the shared asyncpg pool
- get_pool_provider: Returns a lazy pool provider (resolved when awaited)
- get_settings_dependency: Returns the cached Settings singleton
- PoolDep: Type alias for injecting the pool into endpoints or factories
- PoolProviderDep: Type alias for injecting the lazy provider
- SettingsDep: Type alias for injecting Settings into endpoints or factories

Usage:
    @router.get("/health/db")
    async def db_health(pool: PoolDep) -> dict:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return {"database": "ok"}

Testing:
    app.dependency_overrides[get_pool_dependency] = lambda: mock_pool
    app.dependency_overrides[get_pool_provider] = lambda: AsyncMock(return_value=mock_pool)
"""

from typing import Annotated, Awaitable, Callable

from asyncpg import Pool
from fastapi import Depends

from backend.core.config import Settings, get_settings
from backend.core.database import get_db_pool


# =============================================================================
# Pool Dependency
# =============================================================================

async def get_pool_dependency() -> Pool:
    """
    Return the shared connection pool.

    Services acquire one connection per query branch from the pool, which is
    what lets independent reads inside one request run concurrently.
    """
    return await get_db_pool()


PoolProvider = Callable[[], Awaitable[Pool]]


def get_pool_provider() -> PoolProvider:
    """
    Return a coroutine function that yields the shared pool.

    For consumers that must not fail while being built: the pool is only
    resolved when the provider is awaited, so connection errors surface
    inside the consumer's own error handling rather than during dependency
    resolution.
    """
    return get_db_pool


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can replace it through
    app.dependency_overrides.
    """
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

PoolDep = Annotated[Pool, Depends(get_pool_dependency)]

PoolProviderDep = Annotated[PoolProvider, Depends(get_pool_provider)]

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
