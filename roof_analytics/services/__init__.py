"""
Business logic services for the roofing analytics backend.

Modules:
- scoring: Pure scoring functions per entity kind (plus make_rng)
- reconciler: Check-then-insert-or-update of the derived analytics tables
- predictions: Strategy-table prediction dispatcher
- aggregation: Calendar bucketing into time_based_aggregates (append-only)
- reporting: Dashboard and analytics list reads
- events: Analytics event tracking
- reports: Per-user saved reports and dashboard configurations

Every service takes the AnalyticsStore as its first argument; none of them
holds a connection or global state of its own.
"""

from roof_analytics.services.scoring import (
    make_rng,
    score_lead,
    score_project,
    score_customer,
    score_weather_event,
    LeadScore,
    ProjectScore,
    CustomerScore,
    WeatherImpactScore,
)

from roof_analytics.services.reconciler import (
    reconcile_lead,
    reconcile_project,
    reconcile_customer,
    reconcile_weather_event,
    recompute,
)

from roof_analytics.services.predictions import (
    PREDICTION_STRATEGIES,
    PredictionOutcome,
    PredictionStrategy,
    generic_strategy,
    select_strategy,
    generate_prediction,
)

from roof_analytics.services.aggregation import (
    bucket_metric_rows,
    generate_time_based_aggregates,
)

from roof_analytics.services.reporting import (
    get_dashboard_metrics,
    get_lead_analytics,
    get_project_analytics,
    get_customer_analytics,
    get_weather_impact_analytics,
    get_predictive_insights,
)

from roof_analytics.services.events import track_event

from roof_analytics.services.reports import (
    list_saved_reports,
    save_report,
    list_dashboard_configurations,
    save_dashboard_configuration,
)


__all__ = [
    # Scoring
    'make_rng',
    'score_lead',
    'score_project',
    'score_customer',
    'score_weather_event',
    'LeadScore',
    'ProjectScore',
    'CustomerScore',
    'WeatherImpactScore',
    # Reconciler
    'reconcile_lead',
    'reconcile_project',
    'reconcile_customer',
    'reconcile_weather_event',
    'recompute',
    # Predictions
    'PREDICTION_STRATEGIES',
    'PredictionOutcome',
    'PredictionStrategy',
    'generic_strategy',
    'select_strategy',
    'generate_prediction',
    # Aggregation
    'bucket_metric_rows',
    'generate_time_based_aggregates',
    # Reporting
    'get_dashboard_metrics',
    'get_lead_analytics',
    'get_project_analytics',
    'get_customer_analytics',
    'get_weather_impact_analytics',
    'get_predictive_insights',
    # Events
    'track_event',
    # Saved reports and dashboard configurations
    'list_saved_reports',
    'save_report',
    'list_dashboard_configurations',
    'save_dashboard_configuration',
]
