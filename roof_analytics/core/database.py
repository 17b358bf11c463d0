"""
asyncpg pool lifecycle for the analytics store.

One pool per process. main.py opens it in the lifespan handler and wraps it in
a PostgresAnalyticsStore; services only ever see the store. If startup could
not reach the database, core.dependencies.get_store opens the pool on the
first request instead.

Functions:
- init_db(): Open the pool (no-op when already open)
- get_db_pool(): Return the open pool, opening it on demand
- close_db(): Close the pool on shutdown

Sizing and timeouts come from Settings (db_pool_min_size, db_pool_max_size,
db_command_timeout).
"""

import logging
from typing import Any, Dict, Optional

import asyncpg
from asyncpg import Pool

from roof_analytics.core.config import Settings, get_settings


logger = logging.getLogger(__name__)

# Set by init_db(), cleared by close_db()
_pool: Optional[Pool] = None


def pool_options(settings: Settings) -> Dict[str, Any]:
    """Keyword arguments for asyncpg.create_pool derived from settings."""
    return {
        'dsn': settings.database_url,
        'min_size': settings.db_pool_min_size,
        'max_size': settings.db_pool_max_size,
        'command_timeout': settings.db_command_timeout,
    }


async def init_db() -> Pool:
    """
    Open the process-wide pool if it is not open yet.

    Returns:
        The open asyncpg Pool.

    Raises:
        asyncpg.PostgresError / OSError: If the database cannot be reached.
            main.py logs these and keeps serving; the next request retries.
    """
    global _pool

    if _pool is not None:
        return _pool

    settings = get_settings()
    _pool = await asyncpg.create_pool(**pool_options(settings))
    logger.info(
        f"Opened analytics pool ({settings.db_pool_min_size}-{settings.db_pool_max_size} connections)"
    )
    return _pool


async def get_db_pool() -> Pool:
    """Return the pool, opening it first when startup did not."""
    return _pool if _pool is not None else await init_db()


async def close_db() -> None:
    """Close the pool if one is open. A later get_db_pool() opens a new one."""
    global _pool

    if _pool is None:
        return
    await _pool.close()
    _pool = None
    logger.info("Closed analytics pool")
