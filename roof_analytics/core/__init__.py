"""
Core infrastructure package for the roofing analytics backend.

Settings, the asyncpg pool, the AnalyticsStore boundary, shared error kinds
and the FastAPI dependencies the routers declare. Everything is re-exported:

    from roof_analytics.core import get_settings, PostgresAnalyticsStore, StoreError

Usage Examples:
    # Database pool lifecycle (in FastAPI lifespan)
    from roof_analytics.core import init_db, close_db, PostgresAnalyticsStore

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pool = await init_db()
        app.state.store = PostgresAnalyticsStore(pool)
        yield
        await close_db()
"""

# =============================================================================
# Re-exports from roof_analytics.core.config
# =============================================================================
from roof_analytics.core.config import Settings, get_settings

# =============================================================================
# Re-exports from roof_analytics.core.database
# =============================================================================
from roof_analytics.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from roof_analytics.core.exceptions
# =============================================================================
from roof_analytics.core.exceptions import (
    AnalyticsError,
    ValidationError,
    NotFoundError,
    StoreError,
)

# =============================================================================
# Re-exports from roof_analytics.core.store
# =============================================================================
from roof_analytics.core.store import AnalyticsStore, PostgresAnalyticsStore

# =============================================================================
# Re-exports from roof_analytics.core.dependencies
# =============================================================================
from roof_analytics.core.dependencies import (
    get_store,
    get_settings_dependency,
    get_current_user,
    StoreDep,
    SettingsDep,
    CurrentUserDep,
)


__all__ = [
    # Configuration
    'Settings',
    'get_settings',
    # Database
    'init_db',
    'close_db',
    'get_db_pool',
    # Errors
    'AnalyticsError',
    'ValidationError',
    'NotFoundError',
    'StoreError',
    # Store
    'AnalyticsStore',
    'PostgresAnalyticsStore',
    # Dependencies
    'get_store',
    'get_settings_dependency',
    'get_current_user',
    'StoreDep',
    'SettingsDep',
    'CurrentUserDep',
]
