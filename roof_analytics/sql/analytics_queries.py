"""
Analytics Queries Module.

Parameterized PostgreSQL (asyncpg `$n` placeholders) for:
- Reading source entities (leads, projects, customers, weather_events)
- Check-then-insert-or-update reconciliation of the derived analytics tables
- Check-then-insert-or-update of predictive_model_results
- Appending analytics_events

Table and column names are never taken from user input: they come from the
lookup tables below, and column lists are validated against them before a
statement is built.
"""

from typing import Dict, Sequence, Tuple

from roof_analytics.models.enums import AnalyticsKind, EntityType


# =============================================================================
# TABLE / COLUMN REGISTRY
# =============================================================================

ENTITY_TABLES: Dict[EntityType, str] = {
    EntityType.LEAD: 'leads',
    EntityType.CUSTOMER: 'customers',
    EntityType.PROJECT: 'projects',
    EntityType.WEATHER_EVENT: 'weather_events',
}

# Foreign key each analytics table is keyed by (one row per key)
ANALYTICS_KEY_COLUMNS: Dict[AnalyticsKind, str] = {
    AnalyticsKind.LEAD: 'lead_id',
    AnalyticsKind.PROJECT: 'project_id',
    AnalyticsKind.CUSTOMER: 'customer_id',
    AnalyticsKind.WEATHER_IMPACT: 'weather_event_id',
}

# Writable columns per analytics table, excluding id and the key column
ANALYTICS_COLUMNS: Dict[AnalyticsKind, Tuple[str, ...]] = {
    AnalyticsKind.LEAD: (
        'acquisition_source', 'acquisition_cost', 'lead_score',
        'conversion_probability', 'days_to_conversion',
        'converted_to_customer', 'conversion_date',
    ),
    AnalyticsKind.PROJECT: (
        'estimated_cost', 'actual_cost', 'cost_variance_percent',
        'estimated_duration', 'actual_duration', 'duration_variance_percent',
        'profit_margin', 'weather_impact_score', 'customer_satisfaction_score',
    ),
    AnalyticsKind.CUSTOMER: (
        'lifetime_value', 'acquisition_cost', 'retention_score',
        'churn_probability', 'referral_count', 'project_count',
        'average_project_value', 'last_interaction_date',
    ),
    AnalyticsKind.WEATHER_IMPACT: (
        'leads_generated', 'projects_created', 'revenue_impact',
        'affected_zip_codes', 'impact_start_date', 'impact_end_date',
    ),
}

PREDICTION_COLUMNS: Tuple[str, ...] = (
    'model_name', 'entity_type', 'entity_id', 'prediction_type',
    'prediction_value', 'confidence_score', 'features_used',
    'prediction_date', 'expiration_date',
)

# Columns refreshed when an existing prediction is re-run
PREDICTION_UPDATE_COLUMNS: Tuple[str, ...] = (
    'prediction_value', 'confidence_score', 'features_used',
    'prediction_date', 'expiration_date',
)


def _check_columns(columns: Sequence[str], allowed: Sequence[str], table: str) -> None:
    unknown = [column for column in columns if column not in allowed]
    if unknown:
        raise ValueError(f"Unknown column(s) for {table}: {', '.join(unknown)}")


# =============================================================================
# ENTITY QUERIES
# =============================================================================

def get_entity_list_query(entity_type: EntityType) -> str:
    """
    Select every row of an entity table.

    Rows are ordered by id so "first N" selections made by the batch job are
    stable across runs and database engines.
    """
    return f"SELECT * FROM {ENTITY_TABLES[entity_type]} ORDER BY id ASC"


def get_entity_by_id_query(entity_type: EntityType) -> str:
    return f"SELECT * FROM {ENTITY_TABLES[entity_type]} WHERE id = $1"


CUSTOMER_PROJECTS_QUERY = """
    SELECT *
    FROM projects
    WHERE customer_id = $1
    ORDER BY id ASC
"""


# =============================================================================
# ANALYTICS RECONCILIATION QUERIES
# =============================================================================

def get_analytics_lookup_query(kind: AnalyticsKind) -> str:
    """Fetch the analytics row for one source entity, if any."""
    return f"SELECT * FROM {kind.value} WHERE {ANALYTICS_KEY_COLUMNS[kind]} = $1"


def get_analytics_insert_query(kind: AnalyticsKind, columns: Sequence[str]) -> str:
    """
    Build an INSERT for an analytics table.

    Parameters: $1 is the entity key, $2.. follow `columns` in order.
    The full stored row is returned so callers see the assigned id.
    """
    _check_columns(columns, ANALYTICS_COLUMNS[kind], kind.value)
    all_columns = [ANALYTICS_KEY_COLUMNS[kind], *columns]
    placeholders = ', '.join(f'${index}' for index in range(1, len(all_columns) + 1))
    return f"""
        INSERT INTO {kind.value} ({', '.join(all_columns)})
        VALUES ({placeholders})
        RETURNING *
    """


def get_analytics_update_query(kind: AnalyticsKind, columns: Sequence[str]) -> str:
    """
    Build an UPDATE for an analytics table keyed by its entity column.

    Parameters: $1 is the entity key, $2.. follow `columns` in order.
    Columns not listed keep their stored values.
    """
    _check_columns(columns, ANALYTICS_COLUMNS[kind], kind.value)
    assignments = ', '.join(
        f'{column} = ${index}' for index, column in enumerate(columns, start=2)
    )
    return f"""
        UPDATE {kind.value}
        SET {assignments}
        WHERE {ANALYTICS_KEY_COLUMNS[kind]} = $1
        RETURNING *
    """


# =============================================================================
# PREDICTION QUERIES
# =============================================================================

PREDICTION_LOOKUP_QUERY = """
    SELECT *
    FROM predictive_model_results
    WHERE model_name = $1
      AND entity_type = $2
      AND entity_id = $3
      AND prediction_type = $4
"""

PREDICTION_INSERT_QUERY = f"""
    INSERT INTO predictive_model_results ({', '.join(PREDICTION_COLUMNS)})
    VALUES ({', '.join(f'${index}' for index in range(1, len(PREDICTION_COLUMNS) + 1))})
    RETURNING *
"""

PREDICTION_UPDATE_QUERY = f"""
    UPDATE predictive_model_results
    SET {', '.join(f'{column} = ${index}' for index, column in enumerate(PREDICTION_UPDATE_COLUMNS, start=2))}
    WHERE id = $1
    RETURNING *
"""


# =============================================================================
# EVENT QUERIES
# =============================================================================

EVENT_INSERT_QUERY = """
    INSERT INTO analytics_events (event_type, event_source, user_id, data)
    VALUES ($1, $2, $3, $4)
    RETURNING *
"""
