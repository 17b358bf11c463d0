"""
Enumeration definitions for the roofing analytics backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models and so values can be compared directly with
the plain strings stored in the database.
"""

from enum import Enum


class EntityType(str, Enum):
    """
    Business entity kinds read from the entity store.

    LEAD, CUSTOMER and PROJECT are the entity types a prediction may target.
    WEATHER_EVENT is only ever reconciled, never predicted on.
    """
    LEAD = "lead"
    CUSTOMER = "customer"
    PROJECT = "project"
    WEATHER_EVENT = "weather_event"


# Entity types accepted by the prediction dispatcher
PREDICTABLE_ENTITY_TYPES = (EntityType.LEAD, EntityType.CUSTOMER, EntityType.PROJECT)


class AnalyticsKind(str, Enum):
    """
    Derived analytics tables, one row per source entity.

    The value is the table name; see roof_analytics.sql.analytics_queries for
    the foreign-key column each table is keyed by.
    """
    LEAD = "lead_analytics"
    PROJECT = "project_analytics"
    CUSTOMER = "customer_analytics"
    WEATHER_IMPACT = "weather_impact_analytics"


class AggregationLevel(str, Enum):
    """
    Period granularity for time-based aggregates.

    - daily: calendar day
    - weekly: ISO week (Monday through Sunday)
    - monthly: calendar month
    - quarterly: calendar quarter
    - yearly: calendar year
    """
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class MetricName(str, Enum):
    """
    Metrics the time aggregator knows how to bucket.

    - revenue / profit: SUM of business_metrics.metric_value for that name
    - leads / projects: COUNT of entity creation timestamps
    - lead_conversion_rate: converted / total * 100 over lead_analytics rows
      with a conversion_date
    - project_profit_margin: AVG(project_analytics.profit_margin) * 100
    """
    REVENUE = "revenue"
    PROFIT = "profit"
    LEADS = "leads"
    PROJECTS = "projects"
    LEAD_CONVERSION_RATE = "lead_conversion_rate"
    PROJECT_PROFIT_MARGIN = "project_profit_margin"


class ModelName(str, Enum):
    """Named predictive models with a dedicated scoring strategy."""
    LEAD_CONVERSION = "lead_conversion_model"
    CUSTOMER_CHURN = "customer_churn_model"
    PROJECT_COST = "project_cost_model"


class PredictionType(str, Enum):
    """Prediction types paired with a named model."""
    CONVERSION_PROBABILITY = "conversion_probability"
    CHURN_PROBABILITY = "churn_probability"
    COST_OVERRUN_PROBABILITY = "cost_overrun_probability"


class UserRole(str, Enum):
    """
    Caller roles as issued by the external auth service.

    ADMIN and MANAGER additionally see the revenue series on the dashboard.
    """
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


# Roles allowed to see financial series on the dashboard
FINANCIAL_ROLES = (UserRole.ADMIN, UserRole.MANAGER)
