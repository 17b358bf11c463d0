"""
Prediction dispatcher for the roofing analytics backend.

Given (model_name, entity_type, entity_id, prediction_type), load the entity,
pick a strategy from PREDICTION_STRATEGIES by the exact
(model_name, prediction_type) pair and persist the resulting prediction.

Strategies:
    (lead_conversion_model, conversion_probability)
        analytics: lead_analytics.conversion_probability, confidence 0.8
        fallback:  U(0.1, 0.8), confidence 0.6
    (customer_churn_model, churn_probability)
        analytics: customer_analytics.churn_probability, confidence 0.85
        fallback:  U(0.1, 0.5), confidence 0.6
    (project_cost_model, cost_overrun_probability)
        analytics: 0.7 if cost_variance_percent > 0 else 0.3, confidence 0.8
        fallback:  U(0.2, 0.7), confidence 0.7
    anything else (generic)
        U(0, 1), confidence 0.5

The "analytics" branch is taken when the entity already has an analytics row
(see services.reconciler); otherwise the randomized fallback is used with a
reduced feature set.

Persistence is keyed by (model_name, entity_type, entity_id, prediction_type):
an existing row is updated in place, so predictive_model_results only ever
holds the current value for a key. expiration_date = prediction_date +
prediction_expiration_days (30 by default).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np

from roof_analytics.core.config import get_settings
from roof_analytics.core.exceptions import NotFoundError, ValidationError
from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.enums import (
    PREDICTABLE_ENTITY_TYPES,
    AnalyticsKind,
    EntityType,
    ModelName,
    PredictionType,
)
from roof_analytics.models.schemas import PredictiveModelResult
from roof_analytics.services.scoring import make_rng

logger = logging.getLogger(__name__)


# =============================================================================
# Strategy Data Classes
# =============================================================================


@dataclass
class PredictionOutcome:
    """A computed prediction before it is persisted."""
    value: float
    confidence: float
    features: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PredictionStrategy:
    """
    How to predict one (model_name, prediction_type) pair.

    Attributes:
        name: Label used in logs.
        analytics_kind: Analytics table consulted for the entity, or None when
            the strategy never reads analytics.
        from_analytics: Derives the prediction from the stored analytics row.
        fallback: Randomized estimate used when no analytics row exists.
    """
    name: str
    analytics_kind: Optional[AnalyticsKind]
    from_analytics: Optional[Callable[[Dict[str, Any]], PredictionOutcome]]
    fallback: Callable[[np.random.Generator], PredictionOutcome]


def _features(*names: str) -> Dict[str, float]:
    return {name: 1 for name in names}


# =============================================================================
# Strategy Functions
# =============================================================================


def _lead_conversion_from_analytics(row: Dict[str, Any]) -> PredictionOutcome:
    return PredictionOutcome(
        value=float(row['conversion_probability']),
        confidence=0.8,
        features=_features('lead_score', 'acquisition_source', 'service_interest'),
    )


def _lead_conversion_fallback(rng: np.random.Generator) -> PredictionOutcome:
    return PredictionOutcome(
        value=float(rng.uniform(0.1, 0.8)),
        confidence=0.6,
        features=_features('basic_lead_info'),
    )


def _customer_churn_from_analytics(row: Dict[str, Any]) -> PredictionOutcome:
    return PredictionOutcome(
        value=float(row['churn_probability']),
        confidence=0.85,
        features=_features('retention_score', 'project_count', 'lifetime_value', 'last_interaction_date'),
    )


def _customer_churn_fallback(rng: np.random.Generator) -> PredictionOutcome:
    return PredictionOutcome(
        value=float(rng.uniform(0.1, 0.5)),
        confidence=0.6,
        features=_features('basic_customer_info'),
    )


def _project_cost_from_analytics(row: Dict[str, Any]) -> PredictionOutcome:
    overrun = (row.get('cost_variance_percent') or 0) > 0
    return PredictionOutcome(
        value=0.7 if overrun else 0.3,
        confidence=0.8,
        features=_features('estimated_cost', 'project_type', 'historical_variance'),
    )


def _project_cost_fallback(rng: np.random.Generator) -> PredictionOutcome:
    return PredictionOutcome(
        value=float(rng.uniform(0.2, 0.7)),
        confidence=0.7,
        features=_features('basic_project_info'),
    )


def _generic_prediction(rng: np.random.Generator) -> PredictionOutcome:
    return PredictionOutcome(
        value=float(rng.uniform(0.0, 1.0)),
        confidence=0.5,
        features=_features('generic_features'),
    )


# =============================================================================
# Strategy Table
# =============================================================================

PREDICTION_STRATEGIES: Dict[Tuple[ModelName, PredictionType], PredictionStrategy] = {
    (ModelName.LEAD_CONVERSION, PredictionType.CONVERSION_PROBABILITY): PredictionStrategy(
        name='lead_conversion',
        analytics_kind=AnalyticsKind.LEAD,
        from_analytics=_lead_conversion_from_analytics,
        fallback=_lead_conversion_fallback,
    ),
    (ModelName.CUSTOMER_CHURN, PredictionType.CHURN_PROBABILITY): PredictionStrategy(
        name='customer_churn',
        analytics_kind=AnalyticsKind.CUSTOMER,
        from_analytics=_customer_churn_from_analytics,
        fallback=_customer_churn_fallback,
    ),
    (ModelName.PROJECT_COST, PredictionType.COST_OVERRUN_PROBABILITY): PredictionStrategy(
        name='project_cost_overrun',
        analytics_kind=AnalyticsKind.PROJECT,
        from_analytics=_project_cost_from_analytics,
        fallback=_project_cost_fallback,
    ),
}

generic_strategy = PredictionStrategy(
    name='generic',
    analytics_kind=None,
    from_analytics=None,
    fallback=_generic_prediction,
)


def select_strategy(model_name: str, prediction_type: str) -> PredictionStrategy:
    """Exact lookup on (model_name, prediction_type); unknown pairs get the generic strategy."""
    try:
        key = (ModelName(model_name), PredictionType(prediction_type))
    except ValueError:
        return generic_strategy
    return PREDICTION_STRATEGIES.get(key, generic_strategy)


# =============================================================================
# Dispatcher
# =============================================================================


async def generate_prediction(
    store: AnalyticsStore,
    model_name: str,
    entity_type: str,
    entity_id: int,
    prediction_type: str,
    rng: Optional[np.random.Generator] = None,
    now: Optional[datetime] = None,
    expiration_days: Optional[int] = None,
) -> PredictiveModelResult:
    """
    Compute and persist a prediction for one entity.

    Args:
        store: Analytics store.
        model_name: Model identifier, e.g. 'lead_conversion_model'.
        entity_type: 'lead', 'customer' or 'project'.
        entity_id: Source entity id.
        prediction_type: e.g. 'conversion_probability'.
        rng: Random source for fallback and generic strategies.
        now: prediction_date (defaults to current UTC time).
        expiration_days: Days until expiry (defaults to settings, 30).

    Returns:
        The stored PredictiveModelResult.

    Raises:
        ValidationError: If model_name/prediction_type are blank or
            entity_type is not predictable.
        NotFoundError: If the entity does not exist.
        StoreError: If any read or write fails.

    Example:
        result = await generate_prediction(
            store, 'lead_conversion_model', 'lead', 42, 'conversion_probability'
        )
    """
    if not model_name or not prediction_type:
        raise ValidationError("model_name and prediction_type are required")
    try:
        entity_kind = EntityType(entity_type)
    except ValueError:
        entity_kind = None
    if entity_kind not in PREDICTABLE_ENTITY_TYPES:
        raise ValidationError(
            f"Unsupported entity type for predictions: {entity_type}",
            field='entity_type',
            value=entity_type,
        )

    entity = await store.get_entity(entity_kind, entity_id)
    if entity is None:
        raise NotFoundError(entity_kind.value, entity_id)

    rng = rng if rng is not None else make_rng()
    now = now or datetime.utcnow()
    if expiration_days is None:
        expiration_days = get_settings().prediction_expiration_days

    strategy = select_strategy(model_name, prediction_type)
    analytics_row = None
    if strategy.analytics_kind is not None:
        analytics_row = await store.find_analytics(strategy.analytics_kind, entity_id)

    if analytics_row is not None and strategy.from_analytics is not None:
        outcome = strategy.from_analytics(analytics_row)
    else:
        outcome = strategy.fallback(rng)

    values = {
        'model_name': model_name,
        'entity_type': entity_kind.value,
        'entity_id': entity_id,
        'prediction_type': prediction_type,
        'prediction_value': outcome.value,
        'confidence_score': outcome.confidence,
        'features_used': outcome.features,
        'prediction_date': now,
        'expiration_date': now + timedelta(days=expiration_days),
    }

    existing = await store.find_prediction(model_name, entity_kind.value, entity_id, prediction_type)
    if existing is not None:
        row = await store.update_prediction(existing['id'], values)
    else:
        row = await store.insert_prediction(values)

    logger.debug(
        f"Prediction {model_name}/{prediction_type} for {entity_kind.value} {entity_id}: "
        f"{outcome.value:.3f} (strategy={strategy.name}, confidence={outcome.confidence})"
    )
    return PredictiveModelResult.model_validate(row)
