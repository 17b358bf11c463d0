"""
Scoring functions for the roofing analytics backend.

Each function derives the analytics fields for one source entity from that
entity's own columns. They never touch the store.

Key Functions:
- score_lead: Lead score, conversion probability, acquisition source/cost
- score_project: Cost, duration and margin metrics (uses the random source)
- score_customer: Lifetime value, retention and churn (uses the random source)
- score_weather_event: Leads, projects and revenue attributed to an event
- make_rng: Build the numpy Generator used for placeholder values

Placeholder Values:
    actual_cost variance, customer_satisfaction_score, customer acquisition
    cost and referral_count stand in for data the business system does not
    capture yet. They are drawn from an injected random source exposing
    numpy's Generator API (uniform(low, high), integers(low, high)) so tests
    can pin them.

Lead Score (base 50, clamped to [0, 100]):
    source:            referral +20, website +15, google +10, facebook +5
    service interest:  "roof replacement" +15, else "repair" +10,
                       else "inspection" +5
    conversion_probability = lead_score / 100 * 0.8

Weather Impact:
    leads_generated  = floor(severity * multiplier[event_type])
    projects_created = floor(leads_generated * 0.4)
    revenue_impact   = projects_created * 8500
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

import numpy as np

from roof_analytics.core.exceptions import ValidationError
from roof_analytics.models.schemas import Customer, Lead, Project, WeatherEvent


# =============================================================================
# Constants
# =============================================================================

BASE_LEAD_SCORE = 50.0
MAX_CONVERSION_PROBABILITY = 0.8

LEAD_SOURCE_BONUS: Dict[str, float] = {
    'referral': 20,
    'website': 15,
    'google': 10,
    'facebook': 5,
}

# Checked in order; first substring match wins
SERVICE_INTEREST_BONUS: Sequence = (
    ('roof replacement', 15),
    ('repair', 10),
    ('inspection', 5),
)

ACQUISITION_COST_BY_SOURCE: Dict[str, float] = {
    'google': 75,
    'facebook': 50,
    'website': 25,
    'referral': 100,
}
DEFAULT_ACQUISITION_COST = 40.0
UNKNOWN_SOURCE = 'Unknown'

ESTIMATED_COST_RATIO = 0.6
ACTUAL_COST_VARIANCE = (0.85, 1.15)
SATISFACTION_RANGE = (3.0, 5.0)
DEFAULT_DURATION_DAYS = 14
REPLACEMENT_DURATION_DAYS = 21
REPAIR_DURATION_DAYS = 7

REPEAT_BUSINESS_FACTOR = 0.3
BASE_RETENTION_SCORE = 50.0
MAX_RETENTION = 0.9
# integers() upper bounds are exclusive
CUSTOMER_ACQUISITION_COST_RANGE = (100, 400)
REFERRAL_COUNT_RANGE = (0, 3)

WEATHER_LEAD_MULTIPLIER: Dict[str, float] = {
    'hail storm': 5,
    'tornado': 8,
    'hurricane': 10,
    'wind storm': 4,
    'heavy rain': 2,
}
DEFAULT_WEATHER_MULTIPLIER = 3.0
WEATHER_PROJECT_CONVERSION = 0.4
AVERAGE_PROJECT_VALUE = 8500.0
IMPACT_WINDOW_DAYS = 30


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Return the numpy Generator used for placeholder draws (unseeded by default)."""
    return np.random.default_rng(seed)


def _naive_utc(value: datetime) -> datetime:
    # TIMESTAMP columns are naive UTC; aware values are normalized to match
    if value.tzinfo is not None:
        return (value - value.utcoffset()).replace(tzinfo=None)
    return value


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class LeadScore:
    """Computed lead analytics fields."""
    acquisition_source: str
    acquisition_cost: float
    lead_score: float
    conversion_probability: float


@dataclass
class ProjectScore:
    """Computed project analytics fields."""
    estimated_cost: float
    actual_cost: float
    cost_variance_percent: float
    estimated_duration: int
    actual_duration: int
    duration_variance_percent: float
    profit_margin: float
    customer_satisfaction_score: float


@dataclass
class CustomerScore:
    """Computed customer analytics fields."""
    lifetime_value: float
    acquisition_cost: float
    retention_score: float
    churn_probability: float
    referral_count: int
    project_count: int
    average_project_value: float
    last_interaction_date: datetime


@dataclass
class WeatherImpactScore:
    """Computed weather impact analytics fields."""
    leads_generated: int
    projects_created: int
    revenue_impact: float
    impact_start_date: datetime
    impact_end_date: datetime
    affected_zip_codes: List[str] = field(default_factory=list)


# =============================================================================
# Lead Scoring
# =============================================================================


def calculate_lead_score(source: Optional[str], service_interest: Optional[str]) -> float:
    """
    Score a lead from its source and requested service.

    Args:
        source: Acquisition channel (case-insensitive exact match).
        service_interest: Free text (case-insensitive substring match).

    Returns:
        Score clamped to [0, 100].

    Example:
        >>> calculate_lead_score('Referral', 'Roof Replacement')
        85.0
    """
    score = BASE_LEAD_SCORE
    if source:
        score += LEAD_SOURCE_BONUS.get(source.lower(), 0)
    if service_interest:
        interest = service_interest.lower()
        for keyword, bonus in SERVICE_INTEREST_BONUS:
            if keyword in interest:
                score += bonus
                break
    return float(min(100.0, max(0.0, score)))


def acquisition_cost_for_source(source: str) -> float:
    """Fixed acquisition cost lookup; unknown channels cost 40."""
    return float(ACQUISITION_COST_BY_SOURCE.get(source.lower(), DEFAULT_ACQUISITION_COST))


def score_lead(lead: Lead) -> LeadScore:
    """
    Compute lead analytics fields.

    conversion_probability is always lead_score / 100 * 0.8, so it stays
    within [0, 0.8].
    """
    lead_score = calculate_lead_score(lead.source, lead.service_interest)
    acquisition_source = lead.source or UNKNOWN_SOURCE
    return LeadScore(
        acquisition_source=acquisition_source,
        acquisition_cost=acquisition_cost_for_source(acquisition_source),
        lead_score=lead_score,
        conversion_probability=lead_score / 100 * MAX_CONVERSION_PROBABILITY,
    )


# =============================================================================
# Project Scoring
# =============================================================================


def estimate_duration(project_type: Optional[str]) -> int:
    """14 days by default, 21 for replacements, 7 for repairs."""
    if project_type:
        kind = project_type.lower()
        if 'replacement' in kind:
            return REPLACEMENT_DURATION_DAYS
        if 'repair' in kind:
            return REPAIR_DURATION_DAYS
    return DEFAULT_DURATION_DAYS


def actual_duration_days(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    fallback: int,
) -> int:
    """Whole days between start and end (rounded up), or fallback when either is missing."""
    if start_date is None or end_date is None:
        return fallback
    elapsed = abs(_naive_utc(end_date) - _naive_utc(start_date))
    return int(math.ceil(elapsed.total_seconds() / 86400))


def score_project(project: Project, rng: np.random.Generator) -> ProjectScore:
    """
    Compute project analytics fields.

    Args:
        project: Source project; contract_amount must be positive.
        rng: Random source for actual cost variance and satisfaction.

    Returns:
        ProjectScore. weather_impact_score is not part of it: it is only
        set when the analytics row is first created.

    Raises:
        ValidationError: If contract_amount is missing or not positive.
    """
    contract_amount = project.contract_amount
    if contract_amount is None or contract_amount <= 0:
        raise ValidationError(
            f"Project {project.id} has no positive contract_amount",
            field='contract_amount',
            value=contract_amount,
        )

    estimated_cost = contract_amount * ESTIMATED_COST_RATIO
    actual_cost = estimated_cost * float(rng.uniform(*ACTUAL_COST_VARIANCE))
    estimated_duration = estimate_duration(project.project_type)
    actual_duration = actual_duration_days(project.start_date, project.end_date, estimated_duration)

    return ProjectScore(
        estimated_cost=estimated_cost,
        actual_cost=actual_cost,
        cost_variance_percent=(actual_cost - estimated_cost) / estimated_cost * 100,
        estimated_duration=estimated_duration,
        actual_duration=actual_duration,
        duration_variance_percent=(actual_duration - estimated_duration) / estimated_duration * 100,
        profit_margin=(contract_amount - actual_cost) / contract_amount,
        customer_satisfaction_score=float(rng.uniform(*SATISFACTION_RANGE)),
    )


# =============================================================================
# Customer Scoring
# =============================================================================


def last_project_date(projects: Sequence[Project]) -> Optional[datetime]:
    """Latest of each project's end_date (or start_date when it has no end)."""
    dates = [
        _naive_utc(project.end_date or project.start_date)
        for project in projects
        if project.end_date or project.start_date
    ]
    return max(dates) if dates else None


def calculate_retention_score(
    project_count: int,
    last_activity: Optional[datetime],
    now: datetime,
) -> float:
    """
    Retention score from repeat business and recency.

    Base 50; +30 for more than 3 projects, +15 for more than 1. Recency of the
    last project: under 90 days +20, under 180 days +10, over 365 days -10.
    Clamped to [0, 100].
    """
    score = BASE_RETENTION_SCORE
    if project_count > 3:
        score += 30
    elif project_count > 1:
        score += 15

    if last_activity is not None:
        days_since = math.floor((_naive_utc(now) - last_activity).total_seconds() / 86400)
        if days_since < 90:
            score += 20
        elif days_since < 180:
            score += 10
        elif days_since > 365:
            score -= 10

    return float(min(100.0, max(0.0, score)))


def score_customer(
    customer: Customer,
    projects: Sequence[Project],
    rng: np.random.Generator,
    now: datetime,
) -> CustomerScore:
    """
    Compute customer analytics fields from the customer's projects.

    A customer with no projects has project_count 0, average_project_value 0
    and lifetime_value 0.
    """
    project_count = len(projects)
    total_value = sum(project.contract_amount or 0 for project in projects)
    average_value = total_value / project_count if project_count > 0 else 0.0
    retention_score = calculate_retention_score(project_count, last_project_date(projects), now)

    return CustomerScore(
        lifetime_value=average_value * project_count * (1 + REPEAT_BUSINESS_FACTOR),
        acquisition_cost=float(rng.integers(*CUSTOMER_ACQUISITION_COST_RANGE)),
        retention_score=retention_score,
        churn_probability=max(0.0, 1 - retention_score / 100 * MAX_RETENTION),
        referral_count=int(rng.integers(*REFERRAL_COUNT_RANGE)),
        project_count=project_count,
        average_project_value=float(average_value),
        last_interaction_date=now,
    )


# =============================================================================
# Weather Impact Scoring
# =============================================================================


def score_weather_event(event: WeatherEvent) -> WeatherImpactScore:
    """
    Estimate the business impact of a weather event.

    A missing severity counts as 0. The multiplier lookup is a
    case-insensitive exact match on event_type.

    Raises:
        ValidationError: If event_date is missing.

    Example:
        Hail Storm, severity 4.2 -> 21 leads, 8 projects, 68000 revenue.
    """
    if event.event_date is None:
        raise ValidationError(
            f"Weather event {event.id} has no event_date",
            field='event_date',
        )

    multiplier = WEATHER_LEAD_MULTIPLIER.get(
        (event.event_type or '').lower(), DEFAULT_WEATHER_MULTIPLIER
    )
    leads_generated = int(math.floor((event.severity or 0) * multiplier))
    projects_created = int(math.floor(leads_generated * WEATHER_PROJECT_CONVERSION))

    return WeatherImpactScore(
        leads_generated=leads_generated,
        projects_created=projects_created,
        revenue_impact=projects_created * AVERAGE_PROJECT_VALUE,
        impact_start_date=event.event_date,
        impact_end_date=event.event_date + timedelta(days=IMPACT_WINDOW_DAYS),
        affected_zip_codes=[event.zip] if event.zip else [],
    )
