"""
Analytics Batch Job for the roofing analytics backend.

Runs the full analytics refresh, strictly in sequence:

    1. Reconcile analytics for every lead
    2. Reconcile analytics for every project
    3. Reconcile analytics for every customer
    4. Reconcile analytics for every weather event
    5. Lead conversion predictions for the first LEAD_PREDICTION_LIMIT leads
    6. Churn predictions for the first CUSTOMER_PREDICTION_LIMIT customers
    7. Cost overrun predictions for the first PROJECT_PREDICTION_LIMIT projects
    8. Regenerate all six time-based aggregates at BATCH_AGGREGATION_LEVEL

"First N" means the first N rows in id order, the order every list query
returns.

Failure Semantics:
- The run aborts on the first failure in any phase; the error propagates and
  no summary is returned.
- Work committed by earlier phases is not rolled back (no transaction spans
  phases).
- Only one batch should run at a time: reconciliation is read-then-write.

Usage:
    from roof_analytics.jobs import run_batch

    summary = await run_batch(store)
    print(summary.leadsProcessed, summary.predictionsGenerated)
"""

import logging
from datetime import datetime
from typing import Optional

import numpy as np

from roof_analytics.core.config import Settings, get_settings
from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.enums import (
    AggregationLevel,
    EntityType,
    MetricName,
    ModelName,
    PredictionType,
)
from roof_analytics.models.schemas import BatchSummary
from roof_analytics.services.aggregation import generate_time_based_aggregates
from roof_analytics.services.predictions import generate_prediction
from roof_analytics.services.reconciler import recompute
from roof_analytics.services.scoring import make_rng

logger = logging.getLogger(__name__)


# Aggregates regenerated by every batch, in this order
BATCH_METRICS = (
    MetricName.REVENUE,
    MetricName.PROFIT,
    MetricName.LEADS,
    MetricName.PROJECTS,
    MetricName.LEAD_CONVERSION_RATE,
    MetricName.PROJECT_PROFIT_MARGIN,
)


async def run_batch(
    store: AnalyticsStore,
    rng: Optional[np.random.Generator] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> BatchSummary:
    """
    Run the full analytics refresh.

    Args:
        store: Analytics store.
        rng: Random source for placeholder values (seeded from
            settings.random_seed when omitted).
        settings: Batch sizes, aggregation level and prediction expiry.
        now: Reference time for recency, predictions and interaction dates.

    Returns:
        BatchSummary with per-kind counts, predictions written, metrics
        aggregated and aggregate rows inserted.

    Raises:
        ValidationError: If a source row cannot be scored.
        StoreError: If any read or write fails.
    """
    settings = settings or get_settings()
    rng = rng if rng is not None else make_rng(settings.random_seed)
    now = now or datetime.utcnow()
    summary = BatchSummary()
    phase = 'leads'

    logger.info("Analytics batch started")
    try:
        # Phases 1-4: reconcile analytics per entity kind
        leads = await store.list_leads()
        for lead in leads:
            await recompute(store, EntityType.LEAD, lead, rng, now)
            summary.leadsProcessed += 1
        logger.info(f"Reconciled {summary.leadsProcessed} leads")

        phase = 'projects'
        projects = await store.list_projects()
        for project in projects:
            await recompute(store, EntityType.PROJECT, project, rng, now)
            summary.projectsProcessed += 1
        logger.info(f"Reconciled {summary.projectsProcessed} projects")

        phase = 'customers'
        customers = await store.list_customers()
        for customer in customers:
            await recompute(store, EntityType.CUSTOMER, customer, rng, now)
            summary.customersProcessed += 1
        logger.info(f"Reconciled {summary.customersProcessed} customers")

        phase = 'weather_events'
        weather_events = await store.list_weather_events()
        for event in weather_events:
            await recompute(store, EntityType.WEATHER_EVENT, event, rng, now)
            summary.weatherEventsProcessed += 1
        logger.info(f"Reconciled {summary.weatherEventsProcessed} weather events")

        # Phases 5-7: predictions for the head of each list
        prediction_batches = (
            (leads[:settings.lead_prediction_limit], EntityType.LEAD,
             ModelName.LEAD_CONVERSION, PredictionType.CONVERSION_PROBABILITY),
            (customers[:settings.customer_prediction_limit], EntityType.CUSTOMER,
             ModelName.CUSTOMER_CHURN, PredictionType.CHURN_PROBABILITY),
            (projects[:settings.project_prediction_limit], EntityType.PROJECT,
             ModelName.PROJECT_COST, PredictionType.COST_OVERRUN_PROBABILITY),
        )
        for rows, entity_type, model_name, prediction_type in prediction_batches:
            phase = f'{model_name.value} predictions'
            for row in rows:
                await generate_prediction(
                    store,
                    model_name.value,
                    entity_type.value,
                    row['id'],
                    prediction_type.value,
                    rng=rng,
                    now=now,
                    expiration_days=settings.prediction_expiration_days,
                )
                summary.predictionsGenerated += 1
        logger.info(f"Generated {summary.predictionsGenerated} predictions")

        # Phase 8: time-based aggregates
        level = AggregationLevel(settings.batch_aggregation_level)
        for metric in BATCH_METRICS:
            phase = f'{metric.value} aggregation'
            buckets = await generate_time_based_aggregates(store, metric.value, level.value)
            summary.aggregatesGenerated += 1
            summary.aggregateRowsWritten += len(buckets)
    except Exception as e:
        logger.error(f"Analytics batch aborted during {phase} phase: {e}")
        raise

    logger.info(
        f"Analytics batch complete: {summary.leadsProcessed} leads, "
        f"{summary.projectsProcessed} projects, {summary.customersProcessed} customers, "
        f"{summary.weatherEventsProcessed} weather events, "
        f"{summary.predictionsGenerated} predictions, "
        f"{summary.aggregatesGenerated} metrics ({summary.aggregateRowsWritten} rows)"
    )
    return summary
