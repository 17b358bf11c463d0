"""
Package initialization file for analytics models.

Re-exports the enumerations from enums.py and the Pydantic models from
schemas.py so other modules can import from roof_analytics.models directly.

Usage:
    from roof_analytics.models import (
        AggregationLevel,
        Lead,
        LeadAnalytics,
        PredictiveModelResult,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from roof_analytics.models.enums import (
    EntityType,
    AnalyticsKind,
    AggregationLevel,
    MetricName,
    ModelName,
    PredictionType,
    UserRole,
    PREDICTABLE_ENTITY_TYPES,
    FINANCIAL_ROLES,
)


# =============================================================================
# Schemas
# =============================================================================

from roof_analytics.models.schemas import (
    # Source entities
    Lead,
    Project,
    Customer,
    WeatherEvent,
    BusinessMetric,
    # Derived records
    LeadAnalytics,
    ProjectAnalytics,
    CustomerAnalytics,
    WeatherImpactAnalytics,
    PredictiveModelResult,
    TimeBasedAggregate,
    AnalyticsEvent,
    SavedReport,
    DashboardConfiguration,
    # Report rows
    LeadAnalyticsReportRow,
    ProjectAnalyticsReportRow,
    CustomerAnalyticsReportRow,
    WeatherImpactReportRow,
    PredictiveInsight,
    WeatherImpactByType,
    MonthlyRevenue,
    # Payloads
    DashboardMetrics,
    BatchSummary,
    PredictionRequest,
    AggregateRequest,
    EventCreate,
    SavedReportCreate,
    DashboardConfigurationCreate,
)


__all__ = [
    # Enums
    'EntityType',
    'AnalyticsKind',
    'AggregationLevel',
    'MetricName',
    'ModelName',
    'PredictionType',
    'UserRole',
    'PREDICTABLE_ENTITY_TYPES',
    'FINANCIAL_ROLES',
    # Source entities
    'Lead',
    'Project',
    'Customer',
    'WeatherEvent',
    'BusinessMetric',
    # Derived records
    'LeadAnalytics',
    'ProjectAnalytics',
    'CustomerAnalytics',
    'WeatherImpactAnalytics',
    'PredictiveModelResult',
    'TimeBasedAggregate',
    'AnalyticsEvent',
    'SavedReport',
    'DashboardConfiguration',
    # Report rows
    'LeadAnalyticsReportRow',
    'ProjectAnalyticsReportRow',
    'CustomerAnalyticsReportRow',
    'WeatherImpactReportRow',
    'PredictiveInsight',
    'WeatherImpactByType',
    'MonthlyRevenue',
    # Payloads
    'DashboardMetrics',
    'BatchSummary',
    'PredictionRequest',
    'AggregateRequest',
    'EventCreate',
    'SavedReportCreate',
    'DashboardConfigurationCreate',
]
