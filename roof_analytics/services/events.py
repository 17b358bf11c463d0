"""Analytics event tracking (page views, user actions, integration callbacks)."""

import logging
from typing import Any, Dict, Optional

from roof_analytics.core.exceptions import ValidationError
from roof_analytics.core.store import AnalyticsStore
from roof_analytics.models.schemas import AnalyticsEvent

logger = logging.getLogger(__name__)


async def track_event(
    store: AnalyticsStore,
    event_type: str,
    event_source: str,
    user_id: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None,
) -> AnalyticsEvent:
    """
    Append one row to analytics_events.

    Args:
        store: Analytics store.
        event_type: What happened, e.g. 'page_view'.
        event_source: Where it happened, e.g. 'dashboard'.
        user_id: Acting user, if known.
        data: Arbitrary JSON payload.

    Returns:
        The stored AnalyticsEvent.

    Raises:
        ValidationError: If event_type or event_source is blank.
        StoreError: If the insert fails.
    """
    if not event_type or not event_type.strip():
        raise ValidationError("event_type is required", field='event_type')
    if not event_source or not event_source.strip():
        raise ValidationError("event_source is required", field='event_source')

    row = await store.insert_event({
        'event_type': event_type,
        'event_source': event_source,
        'user_id': user_id,
        'data': data or {},
    })
    logger.debug(f"Tracked event {event_type} from {event_source} (user={user_id})")
    return AnalyticsEvent.model_validate(row)
