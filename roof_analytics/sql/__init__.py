"""
SQL Query Module.

Provides parameterized PostgreSQL for:
- Entity reads and analytics reconciliation (analytics_queries)
- Time aggregator source rows and aggregate inserts (aggregate_queries)
- Dashboard and list reports (reporting_queries)
- Per-user saved reports and dashboard configurations (report_queries)
- DDL for the analytics-owned tables (schema_ddl)

Follows the Repository Pattern: only roof_analytics.core.store executes
these statements.
"""

from roof_analytics.sql.analytics_queries import (
    ENTITY_TABLES,
    ANALYTICS_KEY_COLUMNS,
    ANALYTICS_COLUMNS,
    PREDICTION_COLUMNS,
    PREDICTION_UPDATE_COLUMNS,
    CUSTOMER_PROJECTS_QUERY,
    PREDICTION_LOOKUP_QUERY,
    PREDICTION_INSERT_QUERY,
    PREDICTION_UPDATE_QUERY,
    EVENT_INSERT_QUERY,
    get_entity_list_query,
    get_entity_by_id_query,
    get_analytics_lookup_query,
    get_analytics_insert_query,
    get_analytics_update_query,
)

from roof_analytics.sql.aggregate_queries import (
    AGGREGATE_INSERT_QUERY,
    get_metric_rows_query,
)

from roof_analytics.sql.reporting_queries import (
    LEAD_CONVERSION_RATE_QUERY,
    AVERAGE_PROFIT_MARGIN_QUERY,
    AVERAGE_CUSTOMER_LTV_QUERY,
    WEATHER_IMPACT_BY_TYPE_QUERY,
    RECENT_BUSINESS_METRICS_QUERY,
    REVENUE_BY_MONTH_QUERY,
    TOP_LEAD_ANALYTICS_QUERY,
    TOP_PROJECT_ANALYTICS_QUERY,
    TOP_CUSTOMER_ANALYTICS_QUERY,
    TOP_WEATHER_IMPACT_QUERY,
    ACTIVE_PREDICTIONS_QUERY,
)

from roof_analytics.sql.report_queries import (
    SAVED_REPORT_COLUMNS,
    DASHBOARD_CONFIG_COLUMNS,
    SAVED_REPORTS_QUERY,
    SAVED_REPORT_INSERT_QUERY,
    DASHBOARD_CONFIGS_QUERY,
    DASHBOARD_DEFAULT_RESET_QUERY,
    DASHBOARD_CONFIG_INSERT_QUERY,
)

from roof_analytics.sql.schema_ddl import ANALYTICS_SCHEMA_DDL


__all__ = [
    # Analytics queries
    'ENTITY_TABLES',
    'ANALYTICS_KEY_COLUMNS',
    'ANALYTICS_COLUMNS',
    'PREDICTION_COLUMNS',
    'PREDICTION_UPDATE_COLUMNS',
    'CUSTOMER_PROJECTS_QUERY',
    'PREDICTION_LOOKUP_QUERY',
    'PREDICTION_INSERT_QUERY',
    'PREDICTION_UPDATE_QUERY',
    'EVENT_INSERT_QUERY',
    'get_entity_list_query',
    'get_entity_by_id_query',
    'get_analytics_lookup_query',
    'get_analytics_insert_query',
    'get_analytics_update_query',
    # Aggregate queries
    'AGGREGATE_INSERT_QUERY',
    'get_metric_rows_query',
    # Reporting queries
    'LEAD_CONVERSION_RATE_QUERY',
    'AVERAGE_PROFIT_MARGIN_QUERY',
    'AVERAGE_CUSTOMER_LTV_QUERY',
    'WEATHER_IMPACT_BY_TYPE_QUERY',
    'RECENT_BUSINESS_METRICS_QUERY',
    'REVENUE_BY_MONTH_QUERY',
    'TOP_LEAD_ANALYTICS_QUERY',
    'TOP_PROJECT_ANALYTICS_QUERY',
    'TOP_CUSTOMER_ANALYTICS_QUERY',
    'TOP_WEATHER_IMPACT_QUERY',
    'ACTIVE_PREDICTIONS_QUERY',
    # Saved reports and dashboard configurations
    'SAVED_REPORT_COLUMNS',
    'DASHBOARD_CONFIG_COLUMNS',
    'SAVED_REPORTS_QUERY',
    'SAVED_REPORT_INSERT_QUERY',
    'DASHBOARD_CONFIGS_QUERY',
    'DASHBOARD_DEFAULT_RESET_QUERY',
    'DASHBOARD_CONFIG_INSERT_QUERY',
    # DDL
    'ANALYTICS_SCHEMA_DDL',
]
