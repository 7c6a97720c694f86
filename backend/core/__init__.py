"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg
- FastAPI dependency injection utilities
- Domain error types
- Component loggers

This module re-exports key components from submodules for convenient importing:

    from backend.core import get_settings, get_db_pool, PoolDep

Instead of:

    from backend.core.config import get_settings
    from backend.core.database import get_db_pool
    from backend.core.dependencies import PoolDep
"""

from backend.core.config import Settings, get_settings
from backend.core.database import init_db, close_db, get_db_pool, ensure_schema
from backend.core.dependencies import (
    get_pool_dependency,
    get_pool_provider,
    get_settings_dependency,
    PoolDep,
    PoolProvider,
    PoolProviderDep,
    SettingsDep,
)
from backend.core.errors import (
    ClientNotFoundError,
    CsvIngestionError,
    InvalidDimensionError,
    InvalidWeekStartError,
    LLMNotConfiguredError,
)
from backend.core.logging import ComponentLogger, configure_logging, get_component_logger


__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    'ensure_schema',
    # FastAPI dependency injection (from dependencies.py)
    'get_pool_dependency',
    'get_pool_provider',
    'get_settings_dependency',
    'PoolDep',
    'PoolProvider',
    'PoolProviderDep',
    'SettingsDep',
    # Errors (from errors.py)
    'ClientNotFoundError',
    'CsvIngestionError',
    'InvalidDimensionError',
    'InvalidWeekStartError',
    'LLMNotConfiguredError',
    # Logging (from logging.py)
    'ComponentLogger',
    'configure_logging',
    'get_component_logger',
]
