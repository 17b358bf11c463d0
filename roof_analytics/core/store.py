"""
Analytics store for the roofing analytics backend.

The store is the only component that talks to the relational database. It is
passed explicitly into every reconciler, the prediction dispatcher, the time
aggregator, the reporting layer and the batch job, so each of them can be
exercised against an in-memory double in tests.

Key Classes:
- AnalyticsStore: Abstract interface (entity reads, check-then-insert-or-update
  primitives, aggregate appends, reporting reads, event appends and the
  per-user saved reports and dashboard configurations)
- PostgresAnalyticsStore: asyncpg implementation over a connection pool

Row Contract:
    Every method returns plain dict rows (or scalars). Storage encodings are
    hidden from callers:
    - features_used, data, parameters and configuration JSON columns are
      decoded to mappings
    - affected_zip_codes (comma-joined TEXT) is surfaced as a list of strings

Error Contract:
    Any asyncpg, socket or timeout failure is re-raised as StoreError, chained to the
    original exception. Nothing is retried.

Usage:
    pool = await get_db_pool()
    store = PostgresAnalyticsStore(pool)
    await store.ensure_schema()
    leads = await store.list_leads()
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import asyncpg

from roof_analytics.core.exceptions import StoreError
from roof_analytics.models.enums import AnalyticsKind, EntityType, MetricName
from roof_analytics.sql import (
    ACTIVE_PREDICTIONS_QUERY,
    AGGREGATE_INSERT_QUERY,
    ANALYTICS_SCHEMA_DDL,
    AVERAGE_CUSTOMER_LTV_QUERY,
    AVERAGE_PROFIT_MARGIN_QUERY,
    CUSTOMER_PROJECTS_QUERY,
    DASHBOARD_CONFIG_COLUMNS,
    DASHBOARD_CONFIG_INSERT_QUERY,
    DASHBOARD_CONFIGS_QUERY,
    DASHBOARD_DEFAULT_RESET_QUERY,
    EVENT_INSERT_QUERY,
    LEAD_CONVERSION_RATE_QUERY,
    PREDICTION_COLUMNS,
    PREDICTION_INSERT_QUERY,
    PREDICTION_LOOKUP_QUERY,
    PREDICTION_UPDATE_COLUMNS,
    PREDICTION_UPDATE_QUERY,
    RECENT_BUSINESS_METRICS_QUERY,
    REVENUE_BY_MONTH_QUERY,
    SAVED_REPORT_COLUMNS,
    SAVED_REPORT_INSERT_QUERY,
    SAVED_REPORTS_QUERY,
    TOP_CUSTOMER_ANALYTICS_QUERY,
    TOP_LEAD_ANALYTICS_QUERY,
    TOP_PROJECT_ANALYTICS_QUERY,
    TOP_WEATHER_IMPACT_QUERY,
    WEATHER_IMPACT_BY_TYPE_QUERY,
    get_analytics_insert_query,
    get_analytics_lookup_query,
    get_analytics_update_query,
    get_entity_by_id_query,
    get_entity_list_query,
    get_metric_rows_query,
)

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_JSON_COLUMNS = ('features_used', 'data', 'parameters', 'configuration')
_ZIP_COLUMN = 'affected_zip_codes'

# Failures surfaced as StoreError. asyncio.TimeoutError is not an OSError before 3.11
_STORE_FAILURES = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


# =============================================================================
# Abstract Interface
# =============================================================================


class AnalyticsStore(ABC):
    """Read/write interface used by every analytics component."""

    # --- Entity reads (ordered by id ascending) ---

    @abstractmethod
    async def list_leads(self) -> List[Row]:
        """All leads, ordered by id."""

    @abstractmethod
    async def list_projects(self) -> List[Row]:
        """All projects, ordered by id."""

    @abstractmethod
    async def list_customers(self) -> List[Row]:
        """All customers, ordered by id."""

    @abstractmethod
    async def list_weather_events(self) -> List[Row]:
        """All weather events, ordered by id."""

    @abstractmethod
    async def get_entity(self, entity_type: EntityType, entity_id: int) -> Optional[Row]:
        """One source entity by id, or None."""

    @abstractmethod
    async def list_projects_for_customer(self, customer_id: int) -> List[Row]:
        """Projects whose customer_id matches, ordered by id."""

    # --- Analytics reconciliation primitives ---

    @abstractmethod
    async def find_analytics(self, kind: AnalyticsKind, entity_id: int) -> Optional[Row]:
        """The analytics row keyed by the source entity id, or None."""

    @abstractmethod
    async def insert_analytics(self, kind: AnalyticsKind, entity_id: int, values: Mapping[str, Any]) -> Row:
        """Insert an analytics row for entity_id and return the stored row."""

    @abstractmethod
    async def update_analytics(self, kind: AnalyticsKind, entity_id: int, values: Mapping[str, Any]) -> Row:
        """Overwrite the given columns of an existing analytics row and return it."""

    # --- Prediction primitives ---

    @abstractmethod
    async def find_prediction(
        self,
        model_name: str,
        entity_type: str,
        entity_id: int,
        prediction_type: str,
    ) -> Optional[Row]:
        """The prediction for the 4-tuple key, or None."""

    @abstractmethod
    async def insert_prediction(self, values: Mapping[str, Any]) -> Row:
        """Insert a prediction row and return it."""

    @abstractmethod
    async def update_prediction(self, prediction_id: int, values: Mapping[str, Any]) -> Row:
        """Refresh value/confidence/features/dates of an existing prediction."""

    # --- Aggregation ---

    @abstractmethod
    async def fetch_metric_rows(self, metric: MetricName) -> List[Row]:
        """Raw rows {timestamp, period_start, period_end, value} for a metric."""

    @abstractmethod
    async def insert_aggregate(self, values: Mapping[str, Any]) -> Row:
        """Append one time_based_aggregates row."""

    # --- Reporting reads ---

    @abstractmethod
    async def lead_conversion_rate(self) -> Optional[float]:
        """Percent of lead_analytics rows marked converted, None when empty."""

    @abstractmethod
    async def average_profit_margin(self) -> Optional[float]:
        ...

    @abstractmethod
    async def average_customer_lifetime_value(self) -> Optional[float]:
        ...

    @abstractmethod
    async def weather_impact_by_type(self, limit: int) -> List[Row]:
        """{event_type, total_leads, total_revenue} ordered by total_revenue DESC."""

    @abstractmethod
    async def recent_business_metrics(self, limit: int) -> List[Row]:
        ...

    @abstractmethod
    async def revenue_by_month(self, limit: int) -> List[Row]:
        """{month: 'YYYY-MM', revenue} newest month first."""

    @abstractmethod
    async def top_lead_analytics(self, limit: int) -> List[Row]:
        ...

    @abstractmethod
    async def top_project_analytics(self, limit: int) -> List[Row]:
        ...

    @abstractmethod
    async def top_customer_analytics(self, limit: int) -> List[Row]:
        ...

    @abstractmethod
    async def top_weather_impact_analytics(self, limit: int) -> List[Row]:
        ...

    @abstractmethod
    async def active_predictions(self, now: datetime, limit: int) -> List[Row]:
        """Predictions with expiration_date > now, newest prediction_date first."""

    # --- Events ---

    @abstractmethod
    async def insert_event(self, values: Mapping[str, Any]) -> Row:
        """Append one analytics_events row."""

    # --- Saved reports and dashboard configurations (per user) ---

    @abstractmethod
    async def list_saved_reports(self, user_id: int) -> List[Row]:
        """The user's saved reports, newest first."""

    @abstractmethod
    async def insert_saved_report(self, values: Mapping[str, Any]) -> Row:
        ...

    @abstractmethod
    async def list_dashboard_configs(self, user_id: int) -> List[Row]:
        """The user's dashboard configurations, default first, then newest first."""

    @abstractmethod
    async def insert_dashboard_config(self, values: Mapping[str, Any]) -> Row:
        """
        Insert a dashboard configuration. When values['is_default'] is true the
        user's previous default is cleared in the same transaction.
        """


# =============================================================================
# Row Encoding Helpers
# =============================================================================


def _encode_value(column: str, value: Any) -> Any:
    if column in _JSON_COLUMNS and value is not None:
        return json.dumps(value)
    if column == _ZIP_COLUMN and value is not None and not isinstance(value, str):
        return ','.join(value)
    return value


def _decode_row(record: Any) -> Row:
    row = dict(record)
    for column in _JSON_COLUMNS:
        if isinstance(row.get(column), (str, bytes)):
            row[column] = json.loads(row[column])
    if isinstance(row.get(_ZIP_COLUMN), str):
        row[_ZIP_COLUMN] = [zip_code for zip_code in row[_ZIP_COLUMN].split(',') if zip_code]
    return row


# =============================================================================
# PostgreSQL Implementation
# =============================================================================


class PostgresAnalyticsStore(AnalyticsStore):
    """
    AnalyticsStore backed by an asyncpg connection pool.

    Each call acquires its own connection; no transaction spans more than one
    statement except ensure_schema(). Reconciliation is therefore
    read-then-write without isolation: callers run at most one batch at a time.

    Args:
        pool: An initialized asyncpg.Pool (see roof_analytics.core.database).
    """

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # -------------------------------------------------------------------------
    # Low-level helpers
    # -------------------------------------------------------------------------

    async def _fetch(self, operation: str, query: str, *args: Any) -> List[Row]:
        try:
            async with self._pool.acquire() as conn:
                records = await conn.fetch(query, *args)
        except _STORE_FAILURES as e:
            logger.error(f"{operation} failed: {e}")
            raise StoreError(operation, str(e)) from e
        return [_decode_row(record) for record in records]

    async def _fetchrow(self, operation: str, query: str, *args: Any) -> Optional[Row]:
        try:
            async with self._pool.acquire() as conn:
                record = await conn.fetchrow(query, *args)
        except _STORE_FAILURES as e:
            logger.error(f"{operation} failed: {e}")
            raise StoreError(operation, str(e)) from e
        return _decode_row(record) if record is not None else None

    async def _fetchval(self, operation: str, query: str, *args: Any) -> Any:
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetchval(query, *args)
        except _STORE_FAILURES as e:
            logger.error(f"{operation} failed: {e}")
            raise StoreError(operation, str(e)) from e

    async def _write(self, operation: str, query: str, *args: Any) -> Row:
        row = await self._fetchrow(operation, query, *args)
        if row is None:
            raise StoreError(operation, "statement returned no row")
        return row

    async def ensure_schema(self) -> None:
        """Create the analytics-owned tables and indexes if they do not exist."""
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    for statement in ANALYTICS_SCHEMA_DDL:
                        await conn.execute(statement)
        except _STORE_FAILURES as e:
            logger.error(f"ensure_schema failed: {e}")
            raise StoreError('ensure_schema', str(e)) from e
        logger.info(f"Analytics schema ensured ({len(ANALYTICS_SCHEMA_DDL)} statements)")

    # -------------------------------------------------------------------------
    # Entity reads
    # -------------------------------------------------------------------------

    async def list_leads(self) -> List[Row]:
        return await self._fetch('list_leads', get_entity_list_query(EntityType.LEAD))

    async def list_projects(self) -> List[Row]:
        return await self._fetch('list_projects', get_entity_list_query(EntityType.PROJECT))

    async def list_customers(self) -> List[Row]:
        return await self._fetch('list_customers', get_entity_list_query(EntityType.CUSTOMER))

    async def list_weather_events(self) -> List[Row]:
        return await self._fetch('list_weather_events', get_entity_list_query(EntityType.WEATHER_EVENT))

    async def get_entity(self, entity_type: EntityType, entity_id: int) -> Optional[Row]:
        return await self._fetchrow(
            f'get_{entity_type.value}', get_entity_by_id_query(entity_type), entity_id
        )

    async def list_projects_for_customer(self, customer_id: int) -> List[Row]:
        return await self._fetch('list_projects_for_customer', CUSTOMER_PROJECTS_QUERY, customer_id)

    # -------------------------------------------------------------------------
    # Analytics reconciliation
    # -------------------------------------------------------------------------

    async def find_analytics(self, kind: AnalyticsKind, entity_id: int) -> Optional[Row]:
        return await self._fetchrow(
            f'find_{kind.value}', get_analytics_lookup_query(kind), entity_id
        )

    async def insert_analytics(self, kind: AnalyticsKind, entity_id: int, values: Mapping[str, Any]) -> Row:
        columns = list(values)
        query = get_analytics_insert_query(kind, columns)
        args = [_encode_value(column, values[column]) for column in columns]
        return await self._write(f'insert_{kind.value}', query, entity_id, *args)

    async def update_analytics(self, kind: AnalyticsKind, entity_id: int, values: Mapping[str, Any]) -> Row:
        columns = list(values)
        query = get_analytics_update_query(kind, columns)
        args = [_encode_value(column, values[column]) for column in columns]
        return await self._write(f'update_{kind.value}', query, entity_id, *args)

    # -------------------------------------------------------------------------
    # Predictions
    # -------------------------------------------------------------------------

    async def find_prediction(
        self,
        model_name: str,
        entity_type: str,
        entity_id: int,
        prediction_type: str,
    ) -> Optional[Row]:
        return await self._fetchrow(
            'find_prediction', PREDICTION_LOOKUP_QUERY,
            model_name, entity_type, entity_id, prediction_type,
        )

    async def insert_prediction(self, values: Mapping[str, Any]) -> Row:
        args = [_encode_value(column, values.get(column)) for column in PREDICTION_COLUMNS]
        return await self._write('insert_prediction', PREDICTION_INSERT_QUERY, *args)

    async def update_prediction(self, prediction_id: int, values: Mapping[str, Any]) -> Row:
        args = [_encode_value(column, values.get(column)) for column in PREDICTION_UPDATE_COLUMNS]
        return await self._write('update_prediction', PREDICTION_UPDATE_QUERY, prediction_id, *args)

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    async def fetch_metric_rows(self, metric: MetricName) -> List[Row]:
        query, args = get_metric_rows_query(metric)
        return await self._fetch(f'fetch_metric_rows[{metric.value}]', query, *args)

    async def insert_aggregate(self, values: Mapping[str, Any]) -> Row:
        return await self._write(
            'insert_aggregate',
            AGGREGATE_INSERT_QUERY,
            values['metric_name'],
            values['aggregation_level'],
            values['period_start'],
            values['period_end'],
            values.get('value'),
            values.get('dimension'),
            values.get('dimension_value'),
        )

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    async def lead_conversion_rate(self) -> Optional[float]:
        return await self._fetchval('lead_conversion_rate', LEAD_CONVERSION_RATE_QUERY)

    async def average_profit_margin(self) -> Optional[float]:
        return await self._fetchval('average_profit_margin', AVERAGE_PROFIT_MARGIN_QUERY)

    async def average_customer_lifetime_value(self) -> Optional[float]:
        return await self._fetchval('average_customer_lifetime_value', AVERAGE_CUSTOMER_LTV_QUERY)

    async def weather_impact_by_type(self, limit: int) -> List[Row]:
        return await self._fetch('weather_impact_by_type', WEATHER_IMPACT_BY_TYPE_QUERY, limit)

    async def recent_business_metrics(self, limit: int) -> List[Row]:
        return await self._fetch('recent_business_metrics', RECENT_BUSINESS_METRICS_QUERY, limit)

    async def revenue_by_month(self, limit: int) -> List[Row]:
        return await self._fetch('revenue_by_month', REVENUE_BY_MONTH_QUERY, limit)

    async def top_lead_analytics(self, limit: int) -> List[Row]:
        return await self._fetch('top_lead_analytics', TOP_LEAD_ANALYTICS_QUERY, limit)

    async def top_project_analytics(self, limit: int) -> List[Row]:
        return await self._fetch('top_project_analytics', TOP_PROJECT_ANALYTICS_QUERY, limit)

    async def top_customer_analytics(self, limit: int) -> List[Row]:
        return await self._fetch('top_customer_analytics', TOP_CUSTOMER_ANALYTICS_QUERY, limit)

    async def top_weather_impact_analytics(self, limit: int) -> List[Row]:
        return await self._fetch('top_weather_impact_analytics', TOP_WEATHER_IMPACT_QUERY, limit)

    async def active_predictions(self, now: datetime, limit: int) -> List[Row]:
        return await self._fetch('active_predictions', ACTIVE_PREDICTIONS_QUERY, now, limit)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def insert_event(self, values: Mapping[str, Any]) -> Row:
        return await self._write(
            'insert_event',
            EVENT_INSERT_QUERY,
            values['event_type'],
            values['event_source'],
            values.get('user_id'),
            _encode_value('data', values.get('data') or {}),
        )

    # -------------------------------------------------------------------------
    # Saved reports and dashboard configurations
    # -------------------------------------------------------------------------

    async def list_saved_reports(self, user_id: int) -> List[Row]:
        return await self._fetch('list_saved_reports', SAVED_REPORTS_QUERY, user_id)

    async def insert_saved_report(self, values: Mapping[str, Any]) -> Row:
        args = [_encode_value(column, values.get(column)) for column in SAVED_REPORT_COLUMNS]
        return await self._write('insert_saved_report', SAVED_REPORT_INSERT_QUERY, *args)

    async def list_dashboard_configs(self, user_id: int) -> List[Row]:
        return await self._fetch('list_dashboard_configs', DASHBOARD_CONFIGS_QUERY, user_id)

    async def insert_dashboard_config(self, values: Mapping[str, Any]) -> Row:
        args = [_encode_value(column, values.get(column)) for column in DASHBOARD_CONFIG_COLUMNS]
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    if values.get('is_default'):
                        await conn.execute(DASHBOARD_DEFAULT_RESET_QUERY, values['user_id'])
                    record = await conn.fetchrow(DASHBOARD_CONFIG_INSERT_QUERY, *args)
        except _STORE_FAILURES as e:
            logger.error(f"insert_dashboard_config failed: {e}")
            raise StoreError('insert_dashboard_config', str(e)) from e
        if record is None:
            raise StoreError('insert_dashboard_config', "statement returned no row")
        return _decode_row(record)
