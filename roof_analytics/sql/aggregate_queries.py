"""
Aggregate Queries Module.

Source queries for the time aggregator. Each metric maps to one query that
returns raw, ungrouped rows with a uniform shape:

    timestamp     timestamp the row is bucketed by
    period_start  timestamp contributing to the bucket's period_start (MIN)
    period_end    timestamp contributing to the bucket's period_end (MAX)
    value         per-row value folded by the metric's aggregate rule

Bucketing happens in Python (roof_analytics.services.aggregation) so the
period truncation rules are identical across database engines and testable
without a database.
"""

from typing import Any, Dict, Tuple

from roof_analytics.models.enums import MetricName


# =============================================================================
# BUSINESS METRICS LEDGER (revenue, profit)
# =============================================================================

# Grouped by end_date; a ledger entry without start_date spans only its end_date
BUSINESS_METRIC_ROWS_QUERY = """
    SELECT
        end_date AS timestamp,
        COALESCE(start_date, end_date) AS period_start,
        end_date AS period_end,
        metric_value AS value
    FROM business_metrics
    WHERE metric_name = $1
    ORDER BY end_date ASC
"""


# =============================================================================
# ENTITY CREATION COUNTS (leads, projects)
# =============================================================================

LEAD_CREATION_ROWS_QUERY = """
    SELECT
        created_at AS timestamp,
        created_at AS period_start,
        created_at AS period_end,
        1 AS value
    FROM leads
    ORDER BY created_at ASC
"""

PROJECT_CREATION_ROWS_QUERY = """
    SELECT
        created_at AS timestamp,
        created_at AS period_start,
        created_at AS period_end,
        1 AS value
    FROM projects
    ORDER BY created_at ASC
"""


# =============================================================================
# DERIVED ANALYTICS (lead_conversion_rate, project_profit_margin)
# =============================================================================

# value is a 0/1 conversion indicator; its bucket mean * 100 is the conversion rate
LEAD_CONVERSION_ROWS_QUERY = """
    SELECT
        conversion_date AS timestamp,
        conversion_date AS period_start,
        conversion_date AS period_end,
        CASE WHEN converted_to_customer THEN 1 ELSE 0 END AS value
    FROM lead_analytics
    WHERE conversion_date IS NOT NULL
    ORDER BY conversion_date ASC
"""

PROJECT_MARGIN_ROWS_QUERY = """
    SELECT
        created_at AS timestamp,
        created_at AS period_start,
        created_at AS period_end,
        profit_margin AS value
    FROM project_analytics
    ORDER BY created_at ASC
"""


def get_metric_rows_query(metric: MetricName) -> Tuple[str, Tuple[Any, ...]]:
    """
    Return the (query, args) pair producing raw rows for a metric.

    Args:
        metric: The metric to aggregate.

    Returns:
        Tuple of the SQL text and its positional arguments.
    """
    queries: Dict[MetricName, Tuple[str, Tuple[Any, ...]]] = {
        MetricName.REVENUE: (BUSINESS_METRIC_ROWS_QUERY, (MetricName.REVENUE.value,)),
        MetricName.PROFIT: (BUSINESS_METRIC_ROWS_QUERY, (MetricName.PROFIT.value,)),
        MetricName.LEADS: (LEAD_CREATION_ROWS_QUERY, ()),
        MetricName.PROJECTS: (PROJECT_CREATION_ROWS_QUERY, ()),
        MetricName.LEAD_CONVERSION_RATE: (LEAD_CONVERSION_ROWS_QUERY, ()),
        MetricName.PROJECT_PROFIT_MARGIN: (PROJECT_MARGIN_ROWS_QUERY, ()),
    }
    return queries[metric]


# =============================================================================
# AGGREGATE PERSISTENCE
# =============================================================================

# Plain INSERT: regenerating a metric/level appends new rows next to old ones
AGGREGATE_INSERT_QUERY = """
    INSERT INTO time_based_aggregates (
        metric_name, aggregation_level, period_start, period_end,
        value, dimension, dimension_value
    ) VALUES ($1, $2, $3, $4, $5, $6, $7)
    RETURNING *
"""
