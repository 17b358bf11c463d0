"""
DDL for the tables owned by the analytics core.

Applied idempotently at startup by PostgresAnalyticsStore.ensure_schema().
The business tables (leads, projects, customers, properties, weather_events)
belong to the CRUD application and are not created here.

Each analytics table is unique on its source key and predictions are unique
on (model_name, entity_type, entity_id, prediction_type).
time_based_aggregates has no unique key: regeneration appends rows.
saved_reports and dashboard_configurations are keyed by user_id only.
"""

from typing import List


ANALYTICS_SCHEMA_DDL: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS analytics_events (
        id SERIAL PRIMARY KEY,
        event_type TEXT NOT NULL,
        event_source TEXT NOT NULL,
        user_id INTEGER,
        data JSONB,
        timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_analytics_events_type ON analytics_events (event_type)",
    "CREATE INDEX IF NOT EXISTS idx_analytics_events_timestamp ON analytics_events (timestamp)",
    """
    CREATE TABLE IF NOT EXISTS business_metrics (
        id SERIAL PRIMARY KEY,
        metric_name TEXT NOT NULL,
        metric_value DOUBLE PRECISION,
        dimension TEXT,
        dimension_value TEXT,
        start_date TIMESTAMP,
        end_date TIMESTAMP,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_business_metrics_name ON business_metrics (metric_name)",
    """
    CREATE TABLE IF NOT EXISTS lead_analytics (
        id SERIAL PRIMARY KEY,
        lead_id INTEGER NOT NULL REFERENCES leads (id),
        acquisition_source TEXT,
        acquisition_cost DOUBLE PRECISION,
        lead_score DOUBLE PRECISION,
        conversion_probability DOUBLE PRECISION,
        days_to_conversion INTEGER,
        converted_to_customer BOOLEAN DEFAULT FALSE,
        conversion_date TIMESTAMP,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_lead_analytics_lead_id ON lead_analytics (lead_id)",
    "CREATE INDEX IF NOT EXISTS idx_lead_analytics_score ON lead_analytics (lead_score)",
    """
    CREATE TABLE IF NOT EXISTS project_analytics (
        id SERIAL PRIMARY KEY,
        project_id INTEGER NOT NULL REFERENCES projects (id),
        estimated_cost DOUBLE PRECISION,
        actual_cost DOUBLE PRECISION,
        cost_variance_percent DOUBLE PRECISION,
        estimated_duration INTEGER,
        actual_duration INTEGER,
        duration_variance_percent DOUBLE PRECISION,
        profit_margin DOUBLE PRECISION,
        weather_impact_score DOUBLE PRECISION,
        customer_satisfaction_score DOUBLE PRECISION,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_project_analytics_project_id ON project_analytics (project_id)",
    """
    CREATE TABLE IF NOT EXISTS customer_analytics (
        id SERIAL PRIMARY KEY,
        customer_id INTEGER NOT NULL REFERENCES customers (id),
        lifetime_value DOUBLE PRECISION,
        acquisition_cost DOUBLE PRECISION,
        retention_score DOUBLE PRECISION,
        churn_probability DOUBLE PRECISION,
        referral_count INTEGER DEFAULT 0,
        project_count INTEGER DEFAULT 0,
        average_project_value DOUBLE PRECISION,
        last_interaction_date TIMESTAMP,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_customer_analytics_customer_id ON customer_analytics (customer_id)",
    """
    CREATE TABLE IF NOT EXISTS weather_impact_analytics (
        id SERIAL PRIMARY KEY,
        weather_event_id INTEGER NOT NULL REFERENCES weather_events (id),
        leads_generated INTEGER DEFAULT 0,
        projects_created INTEGER DEFAULT 0,
        revenue_impact DOUBLE PRECISION,
        affected_zip_codes TEXT,
        impact_start_date TIMESTAMP,
        impact_end_date TIMESTAMP,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_weather_impact_event ON weather_impact_analytics (weather_event_id)",
    """
    CREATE TABLE IF NOT EXISTS predictive_model_results (
        id SERIAL PRIMARY KEY,
        model_name TEXT NOT NULL,
        entity_type TEXT NOT NULL,
        entity_id INTEGER NOT NULL,
        prediction_type TEXT NOT NULL,
        prediction_value DOUBLE PRECISION,
        confidence_score DOUBLE PRECISION,
        features_used JSONB,
        prediction_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        expiration_date TIMESTAMP
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_predictive_model_results_key
        ON predictive_model_results (model_name, entity_type, entity_id, prediction_type)
    """,
    "CREATE INDEX IF NOT EXISTS idx_predictive_model_results_date ON predictive_model_results (prediction_date)",
    """
    CREATE TABLE IF NOT EXISTS time_based_aggregates (
        id SERIAL PRIMARY KEY,
        metric_name TEXT NOT NULL,
        aggregation_level TEXT NOT NULL,
        period_start TIMESTAMP NOT NULL,
        period_end TIMESTAMP NOT NULL,
        value DOUBLE PRECISION,
        dimension TEXT,
        dimension_value TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_time_based_aggregates_metric
        ON time_based_aggregates (metric_name, aggregation_level)
    """,
    """
    CREATE TABLE IF NOT EXISTS dashboard_configurations (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        dashboard_name TEXT NOT NULL,
        configuration JSONB,
        is_default BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_dashboard_configurations_user ON dashboard_configurations (user_id)",
    """
    CREATE TABLE IF NOT EXISTS saved_reports (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        report_name TEXT NOT NULL,
        report_type TEXT NOT NULL,
        parameters JSONB,
        schedule TEXT,
        last_generated TIMESTAMP,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_saved_reports_user ON saved_reports (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_saved_reports_type ON saved_reports (report_type)",
]
