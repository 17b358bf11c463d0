"""
Saved reports and dashboard configurations.

Both are plain per-user records: every read is filtered by the caller's
user_id and every write stamps it, so one user never sees another's rows.
A dashboard configuration saved with is_default=True replaces the user's
previous default; the store performs the reset and the insert together.
"""

import logging
from typing import Any, Dict, List, Optional

from roof_analytics.core.exceptions import ValidationError
from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.schemas import DashboardConfiguration, SavedReport

logger = logging.getLogger(__name__)


def _require_user(user_id: Optional[int]) -> int:
    if user_id is None:
        raise ValidationError("user_id is required", field='user_id')
    return user_id


def _require_text(value: Optional[str], field: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field} is required", field=field, value=value)
    return value


async def list_saved_reports(store: AnalyticsStore, user_id: Optional[int]) -> List[SavedReport]:
    """The caller's saved reports, newest first."""
    rows = await store.list_saved_reports(_require_user(user_id))
    return [SavedReport.model_validate(row) for row in rows]


async def save_report(
    store: AnalyticsStore,
    user_id: Optional[int],
    report_name: Optional[str],
    report_type: Optional[str],
    parameters: Optional[Dict[str, Any]] = None,
    schedule: Optional[str] = None,
) -> SavedReport:
    """
    Store a report definition for the caller.

    Raises:
        ValidationError: If user_id is unknown or report_name / report_type is blank.
        StoreError: If the insert fails.
    """
    owner = _require_user(user_id)
    row = await store.insert_saved_report({
        'user_id': owner,
        'report_name': _require_text(report_name, 'report_name'),
        'report_type': _require_text(report_type, 'report_type'),
        'parameters': parameters or {},
        'schedule': schedule,
    })
    logger.info(f"Saved {report_type} report {report_name!r} for user {owner}")
    return SavedReport.model_validate(row)


async def list_dashboard_configurations(
    store: AnalyticsStore,
    user_id: Optional[int],
) -> List[DashboardConfiguration]:
    """The caller's dashboard configurations, default first, then newest first."""
    rows = await store.list_dashboard_configs(_require_user(user_id))
    return [DashboardConfiguration.model_validate(row) for row in rows]


async def save_dashboard_configuration(
    store: AnalyticsStore,
    user_id: Optional[int],
    dashboard_name: Optional[str],
    configuration: Optional[Dict[str, Any]],
    is_default: bool = False,
) -> DashboardConfiguration:
    """
    Store a dashboard configuration for the caller.

    Raises:
        ValidationError: If user_id is unknown, dashboard_name is blank or
            configuration is empty.
        StoreError: If the reset or the insert fails.
    """
    owner = _require_user(user_id)
    name = _require_text(dashboard_name, 'dashboard_name')
    if not configuration:
        raise ValidationError("configuration is required", field='configuration')

    row = await store.insert_dashboard_config({
        'user_id': owner,
        'dashboard_name': name,
        'configuration': configuration,
        'is_default': bool(is_default),
    })
    if is_default:
        logger.info(f"Dashboard {name!r} is now the default for user {owner}")
    return DashboardConfiguration.model_validate(row)
