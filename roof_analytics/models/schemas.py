"""
Pydantic models for the roofing analytics backend.

This module provides type-safe data validation and serialization for:
- Source entities read from the business tables (leads, projects, customers,
  weather events, business metrics)
- Derived analytics records owned by the analytics core
- Predictions, time-based aggregates and tracked events
- Per-user saved reports and dashboard configurations
- Report rows and response payloads consumed by the reporting layer

Entity and record models ignore unknown columns so full database rows
(`dict(record)`) can be validated directly.

All models use Pydantic v2 syntax.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Source Entities (read-only to the analytics core)
# =============================================================================


class EntityRow(BaseModel):
    """Base for rows read from the business tables."""
    model_config = ConfigDict(extra='ignore', from_attributes=True)

    id: int = Field(..., description="Primary key in the source table")


class Lead(EntityRow):
    """A sales lead as captured by the CRM."""
    name: Optional[str] = None
    source: Optional[str] = Field(default=None, description="Acquisition channel, e.g. 'Referral'")
    service_interest: Optional[str] = Field(default=None, description="Free-text service requested")
    status: Optional[str] = None
    score: Optional[float] = Field(default=None, description="Business-entered score in [0, 100]")
    zip: Optional[str] = None
    created_at: Optional[datetime] = None


class Project(EntityRow):
    """A contracted roofing project."""
    customer_id: Optional[int] = None
    property_id: Optional[int] = None
    project_type: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    contract_amount: Optional[float] = Field(default=None, description="Contract value, expected > 0")
    created_at: Optional[datetime] = None


class Customer(EntityRow):
    """A customer. Projects reference customers via projects.customer_id."""
    name: Optional[str] = None
    zip: Optional[str] = None
    created_at: Optional[datetime] = None


class WeatherEvent(EntityRow):
    """A recorded weather event that may drive roofing demand."""
    event_type: Optional[str] = None
    severity: Optional[float] = Field(default=None, description="Severity, modeled on a 0-10 scale")
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    event_date: Optional[datetime] = None


class BusinessMetric(BaseModel):
    """A row of the generic business_metrics ledger."""
    model_config = ConfigDict(extra='ignore')

    metric_name: str
    metric_value: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# =============================================================================
# Derived Analytics Records (owned by the analytics core)
# =============================================================================


class AnalyticsRecord(BaseModel):
    """Base for derived analytics rows. id is None until the row is stored."""
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = Field(default=None, description="Primary key of the analytics row")
    created_at: Optional[datetime] = None


class LeadAnalytics(AnalyticsRecord):
    """
    Derived metrics for one lead (unique per lead_id).

    conversion_probability = lead_score / 100 * 0.8 unless a prediction
    overrides it. The conversion tracking fields (days_to_conversion,
    converted_to_customer, conversion_date) are set outside the core and are
    never reset by reconciliation.
    """
    lead_id: int
    acquisition_source: str
    acquisition_cost: float
    lead_score: float = Field(..., ge=0, le=100)
    conversion_probability: float = Field(..., ge=0, le=0.8)
    days_to_conversion: Optional[int] = None
    converted_to_customer: bool = False
    conversion_date: Optional[datetime] = None


class ProjectAnalytics(AnalyticsRecord):
    """Derived cost, duration and margin metrics for one project (unique per project_id)."""
    project_id: int
    estimated_cost: float
    actual_cost: float
    cost_variance_percent: float
    estimated_duration: int = Field(..., description="Days")
    actual_duration: int = Field(..., description="Days")
    duration_variance_percent: float
    profit_margin: float
    weather_impact_score: float = 0.0
    customer_satisfaction_score: float


class CustomerAnalytics(AnalyticsRecord):
    """
    Derived value and retention metrics for one customer (unique per customer_id).

    lifetime_value = average_project_value * project_count * 1.3
    """
    customer_id: int
    lifetime_value: float
    acquisition_cost: float
    retention_score: float = Field(..., ge=0, le=100)
    churn_probability: float = Field(..., ge=0, le=0.9)
    referral_count: int = 0
    project_count: int = 0
    average_project_value: float
    last_interaction_date: Optional[datetime] = None


class WeatherImpactAnalytics(AnalyticsRecord):
    """Estimated business impact of one weather event (unique per weather_event_id)."""
    weather_event_id: int
    leads_generated: int
    projects_created: int
    revenue_impact: float
    affected_zip_codes: List[str] = Field(default_factory=list)
    impact_start_date: datetime
    impact_end_date: datetime

    @field_validator('affected_zip_codes', mode='before')
    @classmethod
    def split_zip_codes(cls, value: Any) -> Any:
        return _split_zip_codes(value)


def _split_zip_codes(value: Any) -> Any:
    # Stored as a comma-joined TEXT column
    if value is None:
        return []
    if isinstance(value, str):
        return [zip_code for zip_code in value.split(',') if zip_code]
    return value


def _decode_json_mapping(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


class PredictiveModelResult(BaseModel):
    """
    Current prediction for one (model_name, entity_type, entity_id, prediction_type).

    Re-running a prediction updates the existing row; this table holds current
    values only, not a history.
    """
    model_config = ConfigDict(extra='ignore', protected_namespaces=())

    id: Optional[int] = None
    model_name: str
    entity_type: str
    entity_id: int
    prediction_type: str
    prediction_value: float
    confidence_score: float = Field(..., ge=0, le=1)
    features_used: Dict[str, float] = Field(default_factory=dict)
    prediction_date: datetime
    expiration_date: datetime

    @field_validator('features_used', mode='before')
    @classmethod
    def decode_features(cls, value: Any) -> Any:
        return _decode_json_mapping(value)


class TimeBasedAggregate(BaseModel):
    """One bucket of a metric at a given aggregation level. Not unique-constrained."""
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = None
    metric_name: str
    aggregation_level: str
    period_start: datetime
    period_end: datetime
    value: Optional[float] = None
    dimension: Optional[str] = None
    dimension_value: Optional[str] = None
    created_at: Optional[datetime] = None


class AnalyticsEvent(BaseModel):
    """A tracked analytics event (page view, action, integration callback...)."""
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = None
    event_type: str
    event_source: str
    user_id: Optional[int] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = None

    @field_validator('data', mode='before')
    @classmethod
    def decode_data(cls, value: Any) -> Any:
        return _decode_json_mapping(value)


class SavedReport(BaseModel):
    """A report definition saved by one user. Generation happens elsewhere."""
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = None
    user_id: int
    report_name: str
    report_type: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    schedule: Optional[str] = None
    last_generated: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator('parameters', mode='before')
    @classmethod
    def decode_parameters(cls, value: Any) -> Any:
        return _decode_json_mapping(value)


class DashboardConfiguration(BaseModel):
    """A named dashboard layout. Each user has at most one default."""
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = None
    user_id: int
    dashboard_name: str
    configuration: Dict[str, Any] = Field(default_factory=dict)
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('configuration', mode='before')
    @classmethod
    def decode_configuration(cls, value: Any) -> Any:
        return _decode_json_mapping(value)


# =============================================================================
# Report Rows
# =============================================================================


class ReportRow(BaseModel):
    model_config = ConfigDict(extra='ignore')


class LeadAnalyticsReportRow(ReportRow):
    """lead_analytics joined with leads, ranked by lead_score DESC."""
    lead_id: int
    name: Optional[str] = None
    source: Optional[str] = None
    acquisition_source: Optional[str] = None
    lead_score: Optional[float] = None
    conversion_probability: Optional[float] = None
    days_to_conversion: Optional[int] = None
    converted_to_customer: bool = False
    conversion_date: Optional[datetime] = None


class ProjectAnalyticsReportRow(ReportRow):
    """project_analytics joined with projects, ranked by created_at DESC."""
    project_id: int
    project_type: Optional[str] = None
    status: Optional[str] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    cost_variance_percent: Optional[float] = None
    estimated_duration: Optional[int] = None
    actual_duration: Optional[int] = None
    duration_variance_percent: Optional[float] = None
    profit_margin: Optional[float] = None
    customer_satisfaction_score: Optional[float] = None
    created_at: Optional[datetime] = None


class CustomerAnalyticsReportRow(ReportRow):
    """customer_analytics joined with customers, ranked by lifetime_value DESC."""
    customer_id: int
    name: Optional[str] = None
    lifetime_value: Optional[float] = None
    acquisition_cost: Optional[float] = None
    retention_score: Optional[float] = None
    churn_probability: Optional[float] = None
    referral_count: Optional[int] = None
    project_count: Optional[int] = None
    average_project_value: Optional[float] = None


class WeatherImpactReportRow(ReportRow):
    """weather_impact_analytics joined with weather_events, ranked by impact_start_date DESC."""
    id: int
    event_type: Optional[str] = None
    severity: Optional[float] = None
    city: Optional[str] = None
    state: Optional[str] = None
    leads_generated: Optional[int] = None
    projects_created: Optional[int] = None
    revenue_impact: Optional[float] = None
    affected_zip_codes: List[str] = Field(default_factory=list)
    impact_start_date: Optional[datetime] = None
    impact_end_date: Optional[datetime] = None

    @field_validator('affected_zip_codes', mode='before')
    @classmethod
    def split_zip_codes(cls, value: Any) -> Any:
        return _split_zip_codes(value)


class PredictiveInsight(ReportRow):
    """A non-expired prediction as shown in the insights feed."""
    model_config = ConfigDict(extra='ignore', protected_namespaces=())

    model_name: str
    entity_type: str
    entity_id: int
    prediction_type: str
    prediction_value: Optional[float] = None
    confidence_score: Optional[float] = None
    prediction_date: Optional[datetime] = None


class WeatherImpactByType(ReportRow):
    event_type: Optional[str] = None
    total_leads: int = 0
    total_revenue: float = 0.0


class MonthlyRevenue(ReportRow):
    month: str = Field(..., description="YYYY-MM")
    revenue: float = 0.0


# =============================================================================
# Response Payloads
# =============================================================================


class DashboardMetrics(BaseModel):
    """
    Dashboard summary.

    revenueByMonth is only populated for admin and manager roles; it is None
    for everyone else.
    """
    leadConversionRate: float = Field(default=0.0, description="Percent of analysed leads converted")
    avgProfitMargin: float = Field(default=0.0, description="Mean project profit margin (fraction)")
    avgCustomerLTV: float = Field(default=0.0, description="Mean customer lifetime value")
    weatherImpact: List[WeatherImpactByType] = Field(default_factory=list)
    recentMetrics: List[BusinessMetric] = Field(default_factory=list)
    revenueByMonth: Optional[List[MonthlyRevenue]] = None


class BatchSummary(BaseModel):
    """Counts returned by a completed batch run."""
    leadsProcessed: int = Field(default=0, ge=0)
    projectsProcessed: int = Field(default=0, ge=0)
    customersProcessed: int = Field(default=0, ge=0)
    weatherEventsProcessed: int = Field(default=0, ge=0)
    predictionsGenerated: int = Field(default=0, ge=0)
    aggregatesGenerated: int = Field(default=0, ge=0, description="Metrics aggregated")
    aggregateRowsWritten: int = Field(default=0, ge=0, description="Bucket rows inserted")


# =============================================================================
# Request Payloads
# =============================================================================


class PredictionRequest(BaseModel):
    """Body of POST /analytics/predictions. Values are validated by the dispatcher."""
    model_config = ConfigDict(protected_namespaces=())

    model_name: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    entity_id: int
    prediction_type: str = Field(..., min_length=1)


class AggregateRequest(BaseModel):
    """Body of POST /analytics/aggregates."""
    metric_name: str
    aggregation_level: str


class EventCreate(BaseModel):
    """Body of POST /analytics/events."""
    event_type: str
    event_source: str
    data: Dict[str, Any] = Field(default_factory=dict)


class SavedReportCreate(BaseModel):
    """Body of POST /analytics/reports. Name and type are checked by the service."""
    report_name: Optional[str] = None
    report_type: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    schedule: Optional[str] = None


class DashboardConfigurationCreate(BaseModel):
    """Body of POST /analytics/dashboard-config."""
    dashboard_name: Optional[str] = None
    configuration: Optional[Dict[str, Any]] = None
    is_default: bool = False
