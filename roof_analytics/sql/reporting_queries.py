"""
Reporting Queries Module.

Read-only queries backing the dashboard and the analytics list reports.
List queries take their row limit as the last positional parameter.
"""


# =============================================================================
# DASHBOARD
# =============================================================================

LEAD_CONVERSION_RATE_QUERY = """
    SELECT
        COUNT(*) FILTER (WHERE converted_to_customer) * 100.0 / NULLIF(COUNT(*), 0)
            AS conversion_rate
    FROM lead_analytics
"""

AVERAGE_PROFIT_MARGIN_QUERY = """
    SELECT AVG(profit_margin) AS avg_profit_margin
    FROM project_analytics
"""

AVERAGE_CUSTOMER_LTV_QUERY = """
    SELECT AVG(lifetime_value) AS avg_ltv
    FROM customer_analytics
"""

WEATHER_IMPACT_BY_TYPE_QUERY = """
    SELECT
        we.event_type,
        COALESCE(SUM(wia.leads_generated), 0) AS total_leads,
        COALESCE(SUM(wia.revenue_impact), 0) AS total_revenue
    FROM weather_impact_analytics wia
    JOIN weather_events we ON wia.weather_event_id = we.id
    GROUP BY we.event_type
    ORDER BY total_revenue DESC
    LIMIT $1
"""

RECENT_BUSINESS_METRICS_QUERY = """
    SELECT metric_name, metric_value, start_date, end_date
    FROM business_metrics
    ORDER BY end_date DESC NULLS LAST
    LIMIT $1
"""

REVENUE_BY_MONTH_QUERY = """
    SELECT
        to_char(end_date, 'YYYY-MM') AS month,
        SUM(metric_value) AS revenue
    FROM business_metrics
    WHERE metric_name = 'revenue'
      AND end_date IS NOT NULL
    GROUP BY month
    ORDER BY month DESC
    LIMIT $1
"""


# =============================================================================
# ANALYTICS LIST REPORTS
# =============================================================================

TOP_LEAD_ANALYTICS_QUERY = """
    SELECT
        la.lead_id,
        l.name,
        l.source,
        la.acquisition_source,
        la.lead_score,
        la.conversion_probability,
        la.days_to_conversion,
        la.converted_to_customer,
        la.conversion_date
    FROM lead_analytics la
    JOIN leads l ON la.lead_id = l.id
    ORDER BY la.lead_score DESC
    LIMIT $1
"""

TOP_PROJECT_ANALYTICS_QUERY = """
    SELECT
        pa.project_id,
        p.project_type,
        p.status,
        pa.estimated_cost,
        pa.actual_cost,
        pa.cost_variance_percent,
        pa.estimated_duration,
        pa.actual_duration,
        pa.duration_variance_percent,
        pa.profit_margin,
        pa.customer_satisfaction_score,
        pa.created_at
    FROM project_analytics pa
    JOIN projects p ON pa.project_id = p.id
    ORDER BY pa.created_at DESC
    LIMIT $1
"""

TOP_CUSTOMER_ANALYTICS_QUERY = """
    SELECT
        ca.customer_id,
        c.name,
        ca.lifetime_value,
        ca.acquisition_cost,
        ca.retention_score,
        ca.churn_probability,
        ca.referral_count,
        ca.project_count,
        ca.average_project_value
    FROM customer_analytics ca
    JOIN customers c ON ca.customer_id = c.id
    ORDER BY ca.lifetime_value DESC
    LIMIT $1
"""

TOP_WEATHER_IMPACT_QUERY = """
    SELECT
        wia.id,
        we.event_type,
        we.severity,
        we.city,
        we.state,
        wia.leads_generated,
        wia.projects_created,
        wia.revenue_impact,
        wia.affected_zip_codes,
        wia.impact_start_date,
        wia.impact_end_date
    FROM weather_impact_analytics wia
    JOIN weather_events we ON wia.weather_event_id = we.id
    ORDER BY wia.impact_start_date DESC
    LIMIT $1
"""

# $1 = now, $2 = limit
ACTIVE_PREDICTIONS_QUERY = """
    SELECT
        model_name,
        entity_type,
        entity_id,
        prediction_type,
        prediction_value,
        confidence_score,
        prediction_date
    FROM predictive_model_results
    WHERE expiration_date > $1
    ORDER BY prediction_date DESC
    LIMIT $2
"""
