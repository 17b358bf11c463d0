"""
Reporting reads for the roofing analytics backend.

Read-only views over the analytics store, shaped for the dashboard and the
analytics list pages.

Key Functions:
- get_dashboard_metrics: Headline KPIs, weather impact by type, recent metrics
  and (admin/manager only) the last 12 months of revenue
- get_lead_analytics / get_project_analytics / get_customer_analytics /
  get_weather_impact_analytics: Top-N rows joined with their source entity
- get_predictive_insights: Non-expired predictions, newest first
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.enums import FINANCIAL_ROLES, UserRole
from roof_analytics.models.schemas import (
    BusinessMetric,
    CustomerAnalyticsReportRow,
    DashboardMetrics,
    LeadAnalyticsReportRow,
    MonthlyRevenue,
    PredictiveInsight,
    ProjectAnalyticsReportRow,
    WeatherImpactByType,
    WeatherImpactReportRow,
)

logger = logging.getLogger(__name__)

DEFAULT_REPORT_LIMIT = 100
WEATHER_IMPACT_TYPES_LIMIT = 5
RECENT_METRICS_LIMIT = 10
REVENUE_MONTHS = 12


def _can_view_financials(role: Optional[Union[UserRole, str]]) -> bool:
    try:
        return role is not None and UserRole(role) in FINANCIAL_ROLES
    except ValueError:
        return False


# =============================================================================
# Dashboard
# =============================================================================


async def get_dashboard_metrics(
    store: AnalyticsStore,
    user_id: Optional[int] = None,
    role: Optional[Union[UserRole, str]] = None,
) -> DashboardMetrics:
    """
    Build the dashboard summary for a caller.

    Args:
        store: Analytics store.
        user_id: Caller id, used for logging only.
        role: Caller role; 'admin' and 'manager' also receive revenueByMonth.

    Returns:
        DashboardMetrics. Averages over empty tables are reported as 0.
        revenueByMonth is listed newest month first.

    Raises:
        StoreError: If any read fails. No partial dashboard is returned.
    """
    conversion_rate = await store.lead_conversion_rate()
    profit_margin = await store.average_profit_margin()
    customer_ltv = await store.average_customer_lifetime_value()
    weather_rows = await store.weather_impact_by_type(WEATHER_IMPACT_TYPES_LIMIT)
    metric_rows = await store.recent_business_metrics(RECENT_METRICS_LIMIT)

    revenue_by_month = None
    if _can_view_financials(role):
        revenue_rows = await store.revenue_by_month(REVENUE_MONTHS)
        revenue_by_month = [MonthlyRevenue.model_validate(row) for row in revenue_rows]

    logger.info(
        f"Dashboard metrics built for user={user_id} role={role} "
        f"(financials={'yes' if revenue_by_month is not None else 'no'})"
    )

    return DashboardMetrics(
        leadConversionRate=float(conversion_rate or 0),
        avgProfitMargin=float(profit_margin or 0),
        avgCustomerLTV=float(customer_ltv or 0),
        weatherImpact=[WeatherImpactByType.model_validate(row) for row in weather_rows],
        recentMetrics=[BusinessMetric.model_validate(row) for row in metric_rows],
        revenueByMonth=revenue_by_month,
    )


# =============================================================================
# Analytics Lists
# =============================================================================


async def get_lead_analytics(
    store: AnalyticsStore, limit: int = DEFAULT_REPORT_LIMIT
) -> List[LeadAnalyticsReportRow]:
    """Top leads by lead_score, highest first."""
    rows = await store.top_lead_analytics(limit)
    return [LeadAnalyticsReportRow.model_validate(row) for row in rows]


async def get_project_analytics(
    store: AnalyticsStore, limit: int = DEFAULT_REPORT_LIMIT
) -> List[ProjectAnalyticsReportRow]:
    """Most recently analysed projects first."""
    rows = await store.top_project_analytics(limit)
    return [ProjectAnalyticsReportRow.model_validate(row) for row in rows]


async def get_customer_analytics(
    store: AnalyticsStore, limit: int = DEFAULT_REPORT_LIMIT
) -> List[CustomerAnalyticsReportRow]:
    """Customers by lifetime_value, highest first."""
    rows = await store.top_customer_analytics(limit)
    return [CustomerAnalyticsReportRow.model_validate(row) for row in rows]


async def get_weather_impact_analytics(
    store: AnalyticsStore, limit: int = DEFAULT_REPORT_LIMIT
) -> List[WeatherImpactReportRow]:
    rows = await store.top_weather_impact_analytics(limit)
    return [WeatherImpactReportRow.model_validate(row) for row in rows]


async def get_predictive_insights(
    store: AnalyticsStore,
    limit: int = DEFAULT_REPORT_LIMIT,
    now: Optional[datetime] = None,
) -> List[PredictiveInsight]:
    """Predictions whose expiration_date is still in the future, newest first."""
    rows = await store.active_predictions(now or datetime.utcnow(), limit)
    return [PredictiveInsight.model_validate(row) for row in rows]
