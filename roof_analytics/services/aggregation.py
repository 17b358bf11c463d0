"""
Time aggregator for the roofing analytics backend.

Buckets a metric's raw rows by calendar period and appends one
time_based_aggregates row per bucket.

Key Functions:
- generate_time_based_aggregates: Validate, bucket and persist one metric/level
- bucket_metric_rows: Pure pandas bucketing used by the above
- parse_metric_name / parse_aggregation_level: Input validation

Aggregation Levels (pandas Period frequencies):
    daily      calendar day      'D'
    weekly     ISO week (Mon-Sun) 'W-SUN'
    monthly    calendar month    'M'
    quarterly  calendar quarter  'Q'
    yearly     calendar year     'Y'

Metric Rules:
    revenue, profit            SUM of business_metrics.metric_value
    leads, projects            COUNT of creation timestamps
    lead_conversion_rate       converted / total * 100 (rows with conversion_date)
    project_profit_margin      AVG(profit_margin) * 100

Each bucket reports period_start = min(period_start) and
period_end = max(period_end) over its rows. Rows without a grouping timestamp
are dropped.

Regeneration Is Append-Only:
    Every call inserts a fresh row per bucket without looking for existing
    rows, so running the same metric/level twice doubles the stored buckets.
    Readers that need the latest figure pick the newest created_at.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from roof_analytics.core.exceptions import ValidationError
from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.enums import AggregationLevel, MetricName
from roof_analytics.models.schemas import TimeBasedAggregate

logger = logging.getLogger(__name__)


PERIOD_FREQUENCIES: Dict[AggregationLevel, str] = {
    AggregationLevel.DAILY: 'D',
    AggregationLevel.WEEKLY: 'W-SUN',
    AggregationLevel.MONTHLY: 'M',
    AggregationLevel.QUARTERLY: 'Q',
    AggregationLevel.YEARLY: 'Y',
}

# (pandas reducer, scale applied to the reduced value)
METRIC_REDUCERS: Dict[MetricName, tuple] = {
    MetricName.REVENUE: ('sum', 1.0),
    MetricName.PROFIT: ('sum', 1.0),
    MetricName.LEADS: ('count', 1.0),
    MetricName.PROJECTS: ('count', 1.0),
    MetricName.LEAD_CONVERSION_RATE: ('mean', 100.0),
    MetricName.PROJECT_PROFIT_MARGIN: ('mean', 100.0),
}

ROW_COLUMNS = ['timestamp', 'period_start', 'period_end', 'value']


# =============================================================================
# Validation
# =============================================================================


def parse_metric_name(metric_name: str) -> MetricName:
    """Return the MetricName for a string, or raise ValidationError."""
    try:
        return MetricName(metric_name)
    except ValueError:
        raise ValidationError(
            f"Unknown metric name: {metric_name}", field='metric_name', value=metric_name
        ) from None


def parse_aggregation_level(aggregation_level: str) -> AggregationLevel:
    """Return the AggregationLevel for a string, or raise ValidationError."""
    try:
        return AggregationLevel(aggregation_level)
    except ValueError:
        raise ValidationError(
            f"Unsupported aggregation level: {aggregation_level}",
            field='aggregation_level',
            value=aggregation_level,
        ) from None


# =============================================================================
# Bucketing
# =============================================================================


def bucket_metric_rows(
    rows: Sequence[Mapping[str, Any]],
    metric: MetricName,
    level: AggregationLevel,
) -> List[Dict[str, Any]]:
    """
    Group raw metric rows into calendar buckets.

    Args:
        rows: Mappings with timestamp, period_start, period_end and value.
        metric: Metric whose reducer is applied to value.
        level: Bucket granularity.

    Returns:
        One dict per non-empty bucket, oldest first, with period_start,
        period_end (datetime) and value (float, or None when every value in
        the bucket was null for an averaged metric).

    Example:
        >>> bucket_metric_rows(
        ...     [{'timestamp': datetime(2024, 1, 5), 'period_start': datetime(2024, 1, 5),
        ...       'period_end': datetime(2024, 1, 5), 'value': 1}],
        ...     MetricName.LEADS, AggregationLevel.MONTHLY,
        ... )
        [{'period_start': datetime(2024, 1, 5), 'period_end': datetime(2024, 1, 5), 'value': 1.0}]
    """
    df = pd.DataFrame([{column: row.get(column) for column in ROW_COLUMNS} for row in rows], columns=ROW_COLUMNS)
    df = df.dropna(subset=['timestamp'])
    if df.empty:
        return []

    df['timestamp'] = pd.to_datetime(df['timestamp'])
    df['period_start'] = pd.to_datetime(df['period_start']).fillna(df['timestamp'])
    df['period_end'] = pd.to_datetime(df['period_end']).fillna(df['timestamp'])
    df['value'] = pd.to_numeric(df['value'], errors='coerce')
    df['bucket'] = df['timestamp'].dt.to_period(PERIOD_FREQUENCIES[level])

    reducer, scale = METRIC_REDUCERS[metric]
    value_spec = ('timestamp', 'count') if reducer == 'count' else ('value', reducer)
    grouped = df.groupby('bucket', sort=True).agg(
        period_start=('period_start', 'min'),
        period_end=('period_end', 'max'),
        value=value_spec,
    )

    buckets = []
    for bucket in grouped.itertuples(index=False):
        value = None if pd.isna(bucket.value) else float(bucket.value) * scale
        buckets.append({
            'period_start': bucket.period_start.to_pydatetime(),
            'period_end': bucket.period_end.to_pydatetime(),
            'value': value,
        })
    return buckets


# =============================================================================
# Generation
# =============================================================================


async def generate_time_based_aggregates(
    store: AnalyticsStore,
    metric_name: str,
    aggregation_level: str,
) -> List[TimeBasedAggregate]:
    """
    Regenerate one metric at one aggregation level.

    Both inputs are validated before anything is read or written. Each bucket
    is appended as a new row; nothing is updated or deduplicated.

    Args:
        store: Analytics store.
        metric_name: One of revenue, profit, leads, projects,
            lead_conversion_rate, project_profit_margin.
        aggregation_level: daily, weekly, monthly, quarterly or yearly.

    Returns:
        The inserted TimeBasedAggregate rows, oldest bucket first.

    Raises:
        ValidationError: If the metric or level is not recognized.
        StoreError: If reading rows or inserting a bucket fails.
    """
    level = parse_aggregation_level(aggregation_level)
    metric = parse_metric_name(metric_name)

    rows = await store.fetch_metric_rows(metric)
    buckets = bucket_metric_rows(rows, metric, level)

    inserted: List[TimeBasedAggregate] = []
    for bucket in buckets:
        row = await store.insert_aggregate({
            'metric_name': metric.value,
            'aggregation_level': level.value,
            'period_start': bucket['period_start'],
            'period_end': bucket['period_end'],
            'value': bucket['value'],
            'dimension': None,
            'dimension_value': None,
        })
        inserted.append(TimeBasedAggregate.model_validate(row))

    logger.info(
        f"Aggregated {metric.value} at {level.value} level: "
        f"{len(rows)} source rows -> {len(inserted)} buckets"
    )
    return inserted
