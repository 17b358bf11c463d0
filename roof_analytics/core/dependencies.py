"""
FastAPI dependency injection module for the roofing analytics backend.

This module provides reusable FastAPI dependencies for the analytics store,
configuration access and caller identity, so route handlers never reach for
process-wide state directly and tests can swap any of them through
`app.dependency_overrides`.

Key Dependencies Provided:
- get_store: The AnalyticsStore held on app.state (created lazily)
- get_settings_dependency: Returns the cached Settings singleton
- get_current_user: Caller identity from the X-User-Id / X-User-Role headers
- StoreDep, SettingsDep, CurrentUserDep: Annotated aliases for handlers

Authentication is performed upstream; by the time a request reaches this
service the gateway has resolved the user and forwarded their id and role as
headers.

Usage Examples:
    @router.get("/dashboard")
    async def dashboard(store: StoreDep, user: CurrentUserDep) -> DashboardMetrics:
        return await get_dashboard_metrics(store, user['id'], user['role'])

    # In tests
    app.dependency_overrides[get_store] = lambda: in_memory_store
"""

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, Header, Request

from roof_analytics.core.config import Settings, get_settings
from roof_analytics.core.database import get_db_pool
from roof_analytics.core.store import AnalyticsStore, PostgresAnalyticsStore
from roof_analytics.models.enums import UserRole

logger = logging.getLogger(__name__)


# =============================================================================
# Store Dependency
# =============================================================================

async def get_store(request: Request) -> AnalyticsStore:
    """
    Return the application's AnalyticsStore.

    The lifespan handler in main.py normally places a PostgresAnalyticsStore
    on app.state at startup. If startup could not reach the database, the
    store is built on first use from the (lazily created) pool instead.

    Raises:
        asyncpg.PostgresError / OSError: If the pool cannot be created.
    """
    store = getattr(request.app.state, 'store', None)
    if store is None:
        pool = await get_db_pool()
        store = PostgresAnalyticsStore(pool)
        request.app.state.store = store
        logger.info("Analytics store created on first request")
    return store


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so it can be overridden in tests:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Caller Identity
# =============================================================================

async def get_current_user(
    x_user_id: Annotated[Optional[int], Header()] = None,
    x_user_role: Annotated[Optional[str], Header()] = None,
) -> Dict[str, Any]:
    """
    Resolve the caller from gateway-forwarded headers.

    Returns:
        {'id': int | None, 'role': UserRole}. A missing or unrecognized role
        is treated as UserRole.USER, which never sees financial series.
    """
    try:
        role = UserRole((x_user_role or UserRole.USER.value).lower())
    except ValueError:
        logger.warning(f"Unrecognized role header {x_user_role!r}; treating caller as user")
        role = UserRole.USER
    return {'id': x_user_id, 'role': role}


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(store: StoreDep)
StoreDep = Annotated[AnalyticsStore, Depends(get_store)]

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(user: CurrentUserDep)
CurrentUserDep = Annotated[Dict[str, Any], Depends(get_current_user)]
