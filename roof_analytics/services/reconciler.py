"""
Analytics reconciler for the roofing analytics backend.

For one source entity, compute its analytics via the scoring functions, then
check whether an analytics row already exists for the entity's key:

- Found: overwrite the recomputed columns in place. The primary key and every
  column that is not recomputed are preserved (a lead's conversion tracking
  fields, a project's weather_impact_score).
- Not found: insert a new row, with defaults for fields that cannot be
  determined yet (days_to_conversion None, converted_to_customer False).

Key Functions:
- reconcile_lead / reconcile_project / reconcile_customer /
  reconcile_weather_event: One reconciler per entity kind
- recompute: Dispatch by entity kind

The check and the write are separate statements with no enclosing
transaction; two concurrent runs on the same entity can lose an update.
StoreError from the store propagates unchanged.
"""

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type, Union

import numpy as np
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from roof_analytics.core.exceptions import ValidationError
from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.enums import AnalyticsKind, EntityType
from roof_analytics.models.schemas import (
    Customer,
    CustomerAnalytics,
    Lead,
    LeadAnalytics,
    Project,
    ProjectAnalytics,
    WeatherEvent,
    WeatherImpactAnalytics,
)
from roof_analytics.services.scoring import (
    make_rng,
    score_customer,
    score_lead,
    score_project,
    score_weather_event,
)

logger = logging.getLogger(__name__)


async def _upsert(
    store: AnalyticsStore,
    kind: AnalyticsKind,
    entity_id: int,
    computed: Mapping[str, Any],
    insert_defaults: Mapping[str, Any],
) -> Dict[str, Any]:
    existing = await store.find_analytics(kind, entity_id)
    if existing is not None:
        logger.debug(f"Updating {kind.value} row {existing.get('id')} for entity {entity_id}")
        return await store.update_analytics(kind, entity_id, computed)

    logger.debug(f"Inserting {kind.value} row for entity {entity_id}")
    return await store.insert_analytics(kind, entity_id, {**computed, **insert_defaults})


# =============================================================================
# Per-Kind Reconcilers
# =============================================================================


async def reconcile_lead(store: AnalyticsStore, lead: Lead) -> LeadAnalytics:
    """
    Reconcile lead_analytics for one lead.

    Only acquisition_source, acquisition_cost, lead_score and
    conversion_probability are rewritten on update, so converted_to_customer,
    conversion_date and days_to_conversion survive repeated runs.

    Args:
        store: Analytics store.
        lead: Source lead.

    Returns:
        The stored LeadAnalytics record (with its id).

    Raises:
        StoreError: If the lookup or the write fails.
    """
    computed = asdict(score_lead(lead))
    row = await _upsert(
        store,
        AnalyticsKind.LEAD,
        lead.id,
        computed,
        {
            'days_to_conversion': None,
            'converted_to_customer': False,
            'conversion_date': None,
        },
    )
    return LeadAnalytics.model_validate(row)


async def reconcile_project(
    store: AnalyticsStore,
    project: Project,
    rng: np.random.Generator,
) -> ProjectAnalytics:
    """
    Reconcile project_analytics for one project.

    weather_impact_score starts at 0 on insert and is never touched on update.
    """
    computed = asdict(score_project(project, rng))
    row = await _upsert(
        store,
        AnalyticsKind.PROJECT,
        project.id,
        computed,
        {'weather_impact_score': 0.0},
    )
    return ProjectAnalytics.model_validate(row)


async def reconcile_customer(
    store: AnalyticsStore,
    customer: Customer,
    rng: np.random.Generator,
    now: Optional[datetime] = None,
) -> CustomerAnalytics:
    """Reconcile customer_analytics for one customer from its projects."""
    now = now or datetime.utcnow()
    project_rows = await store.list_projects_for_customer(customer.id)
    projects = [Project.model_validate(row) for row in project_rows]

    computed = asdict(score_customer(customer, projects, rng, now))
    row = await _upsert(store, AnalyticsKind.CUSTOMER, customer.id, computed, {})
    return CustomerAnalytics.model_validate(row)


async def reconcile_weather_event(
    store: AnalyticsStore,
    event: WeatherEvent,
) -> WeatherImpactAnalytics:
    """Reconcile weather_impact_analytics for one weather event."""
    computed = asdict(score_weather_event(event))
    row = await _upsert(store, AnalyticsKind.WEATHER_IMPACT, event.id, computed, {})
    return WeatherImpactAnalytics.model_validate(row)


# =============================================================================
# Dispatch
# =============================================================================

AnalyticsResult = Union[LeadAnalytics, ProjectAnalytics, CustomerAnalytics, WeatherImpactAnalytics]

ENTITY_MODELS: Dict[EntityType, Type[BaseModel]] = {
    EntityType.LEAD: Lead,
    EntityType.PROJECT: Project,
    EntityType.CUSTOMER: Customer,
    EntityType.WEATHER_EVENT: WeatherEvent,
}


async def recompute(
    store: AnalyticsStore,
    entity_kind: Union[EntityType, str],
    entity: Union[BaseModel, Mapping[str, Any]],
    rng: Optional[np.random.Generator] = None,
    now: Optional[datetime] = None,
) -> AnalyticsResult:
    """
    Recompute and reconcile analytics for one entity of any kind.

    Args:
        store: Analytics store.
        entity_kind: 'lead', 'project', 'customer' or 'weather_event'.
        entity: The source entity as a model or a raw row mapping.
        rng: Random source for placeholder values (fresh Generator if omitted).
        now: Reference time for recency and interaction dates.

    Returns:
        The stored analytics record.

    Raises:
        ValidationError: If entity_kind is not recognized or the entity row
            is malformed.
        StoreError: If the store fails.
    """
    try:
        kind = EntityType(entity_kind)
    except ValueError:
        raise ValidationError(
            f"Unknown entity kind: {entity_kind}", field='entity_kind', value=entity_kind
        ) from None

    if isinstance(entity, BaseModel):
        entity = entity.model_dump()
    try:
        parsed = ENTITY_MODELS[kind].model_validate(entity)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {kind.value} row: {e}", field=kind.value) from e

    rng = rng if rng is not None else make_rng()
    handlers: Dict[EntityType, Callable[[], Awaitable[AnalyticsResult]]] = {
        EntityType.LEAD: lambda: reconcile_lead(store, parsed),
        EntityType.PROJECT: lambda: reconcile_project(store, parsed, rng),
        EntityType.CUSTOMER: lambda: reconcile_customer(store, parsed, rng, now),
        EntityType.WEATHER_EVENT: lambda: reconcile_weather_event(store, parsed),
    }
    return await handlers[kind]()
