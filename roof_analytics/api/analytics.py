"""
Analytics API router for the roofing analytics backend.

Thin HTTP wrappers over the analytics services. All business rules live in
roof_analytics.services and roof_analytics.jobs; handlers only resolve
dependencies, call one service and map errors to HTTP status codes.

Endpoints:
- GET  /analytics/dashboard       Dashboard summary (financial series for admin/manager)
- GET  /analytics/leads           Top lead analytics by lead_score
- GET  /analytics/projects        Most recent project analytics
- GET  /analytics/customers       Top customer analytics by lifetime_value
- GET  /analytics/weather-impact  Most recent weather impact analytics
- GET  /analytics/predictive      Non-expired predictions, newest first
- POST /analytics/process         Run the full analytics batch
- POST /analytics/predictions     Generate (or refresh) one prediction
- POST /analytics/aggregates      Regenerate one metric at one level (append-only)
- POST /analytics/events          Track an analytics event
- GET  /analytics/reports         The caller's saved reports
- POST /analytics/reports         Save a report definition
- GET  /analytics/dashboard-config  The caller's dashboard configurations
- POST /analytics/dashboard-config  Save a dashboard configuration

Error Mapping:
- ValidationError -> 400
- NotFoundError   -> 404
- StoreError      -> 500 (generic detail; the driver error is logged)
- POST /analytics/process maps every error to 500: a batch that aborts on
  a bad source row is a server-side failure, not a bad request
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from roof_analytics.core.dependencies import CurrentUserDep, SettingsDep, StoreDep
from roof_analytics.core.exceptions import (
    AnalyticsError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from roof_analytics.jobs.batch import run_batch
from roof_analytics.models.schemas import (
    AggregateRequest,
    AnalyticsEvent,
    BatchSummary,
    CustomerAnalyticsReportRow,
    DashboardConfiguration,
    DashboardConfigurationCreate,
    DashboardMetrics,
    EventCreate,
    LeadAnalyticsReportRow,
    PredictionRequest,
    PredictiveInsight,
    PredictiveModelResult,
    ProjectAnalyticsReportRow,
    SavedReport,
    SavedReportCreate,
    TimeBasedAggregate,
    WeatherImpactReportRow,
)
from roof_analytics.services.aggregation import generate_time_based_aggregates
from roof_analytics.services.events import track_event
from roof_analytics.services.predictions import generate_prediction
from roof_analytics.services.reporting import (
    get_customer_analytics,
    get_dashboard_metrics,
    get_lead_analytics,
    get_predictive_insights,
    get_project_analytics,
    get_weather_impact_analytics,
)
from roof_analytics.services.reports import (
    list_dashboard_configurations,
    list_saved_reports,
    save_dashboard_configuration,
    save_report,
)
from roof_analytics.services.scoring import make_rng

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(error: AnalyticsError) -> HTTPException:
    if isinstance(error, ValidationError):
        logger.warning(f"Rejected request: {error}")
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, NotFoundError):
        logger.warning(f"Not found: {error}")
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, StoreError):
        logger.error(f"Store failure: {error}", exc_info=error)
    else:
        logger.error(f"Unhandled analytics error: {error}", exc_info=error)
    return HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Reporting Endpoints
# =============================================================================


@router.get("/dashboard", response_model=DashboardMetrics)
async def dashboard(store: StoreDep, user: CurrentUserDep) -> DashboardMetrics:
    """
    Dashboard summary for the calling user.

    revenueByMonth is only included for admin and manager roles (taken from
    the X-User-Role header); other roles receive null.
    """
    try:
        return await get_dashboard_metrics(store, user['id'], user['role'])
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.get("/leads", response_model=List[LeadAnalyticsReportRow])
async def lead_analytics(store: StoreDep, settings: SettingsDep) -> List[LeadAnalyticsReportRow]:
    try:
        return await get_lead_analytics(store, settings.report_row_limit)
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.get("/projects", response_model=List[ProjectAnalyticsReportRow])
async def project_analytics(store: StoreDep, settings: SettingsDep) -> List[ProjectAnalyticsReportRow]:
    try:
        return await get_project_analytics(store, settings.report_row_limit)
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.get("/customers", response_model=List[CustomerAnalyticsReportRow])
async def customer_analytics(store: StoreDep, settings: SettingsDep) -> List[CustomerAnalyticsReportRow]:
    try:
        return await get_customer_analytics(store, settings.report_row_limit)
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.get("/weather-impact", response_model=List[WeatherImpactReportRow])
async def weather_impact_analytics(store: StoreDep, settings: SettingsDep) -> List[WeatherImpactReportRow]:
    try:
        return await get_weather_impact_analytics(store, settings.report_row_limit)
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.get("/predictive", response_model=List[PredictiveInsight])
async def predictive_insights(store: StoreDep, settings: SettingsDep) -> List[PredictiveInsight]:
    try:
        return await get_predictive_insights(store, settings.report_row_limit)
    except AnalyticsError as e:
        raise _http_error(e) from e


# =============================================================================
# Processing Endpoints
# =============================================================================


@router.post("/process", response_model=BatchSummary)
async def process_all(store: StoreDep, settings: SettingsDep) -> BatchSummary:
    """
    Run the full analytics batch and return its summary.

    The batch is not atomic across phases: on failure, work committed by
    earlier phases remains and the response is a 500 with no counts, whatever
    the error kind.
    """
    try:
        return await run_batch(store, settings=settings)
    except AnalyticsError as e:
        logger.error(f"Analytics batch aborted: {e}", exc_info=e)
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.post("/predictions", response_model=PredictiveModelResult)
async def create_prediction(
    request: PredictionRequest,
    store: StoreDep,
    settings: SettingsDep,
) -> PredictiveModelResult:
    """Generate or refresh the prediction for (model, entity type, entity id, prediction type)."""
    try:
        return await generate_prediction(
            store,
            request.model_name,
            request.entity_type,
            request.entity_id,
            request.prediction_type,
            rng=make_rng(settings.random_seed),
            expiration_days=settings.prediction_expiration_days,
        )
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.post("/aggregates", response_model=List[TimeBasedAggregate])
async def create_aggregates(request: AggregateRequest, store: StoreDep) -> List[TimeBasedAggregate]:
    """Regenerate one metric at one level. Repeated calls append new rows."""
    try:
        return await generate_time_based_aggregates(
            store, request.metric_name, request.aggregation_level
        )
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.post("/events", response_model=AnalyticsEvent, status_code=201)
async def create_event(
    request: EventCreate,
    store: StoreDep,
    user: CurrentUserDep,
) -> AnalyticsEvent:
    try:
        return await track_event(
            store,
            request.event_type,
            request.event_source,
            user_id=user['id'],
            data=request.data,
        )
    except AnalyticsError as e:
        raise _http_error(e) from e


# =============================================================================
# Saved Reports and Dashboard Configurations
# =============================================================================


@router.get("/reports", response_model=List[SavedReport])
async def saved_reports(store: StoreDep, user: CurrentUserDep) -> List[SavedReport]:
    try:
        return await list_saved_reports(store, user['id'])
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.post("/reports", response_model=SavedReport, status_code=201)
async def create_saved_report(
    request: SavedReportCreate,
    store: StoreDep,
    user: CurrentUserDep,
) -> SavedReport:
    """Save a report definition owned by the caller. Name and type are required."""
    try:
        return await save_report(
            store,
            user['id'],
            request.report_name,
            request.report_type,
            parameters=request.parameters,
            schedule=request.schedule,
        )
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.get("/dashboard-config", response_model=List[DashboardConfiguration])
async def dashboard_configurations(store: StoreDep, user: CurrentUserDep) -> List[DashboardConfiguration]:
    try:
        return await list_dashboard_configurations(store, user['id'])
    except AnalyticsError as e:
        raise _http_error(e) from e


@router.post("/dashboard-config", response_model=DashboardConfiguration, status_code=201)
async def create_dashboard_configuration(
    request: DashboardConfigurationCreate,
    store: StoreDep,
    user: CurrentUserDep,
) -> DashboardConfiguration:
    """Save a dashboard configuration; is_default replaces the caller's previous default."""
    try:
        return await save_dashboard_configuration(
            store,
            user['id'],
            request.dashboard_name,
            request.configuration,
            is_default=request.is_default,
        )
    except AnalyticsError as e:
        raise _http_error(e) from e
