"""
Tests for the scoring functions.

Tests cover:
- Lead score bonuses, clamping and acquisition cost lookup
- Project cost/duration/margin metrics with a pinned random source
- Customer retention tiers, churn and lifetime value
- Weather impact multipliers and the impact window
"""

from datetime import datetime, timedelta

import pytest

from roof_analytics.core.exceptions import ValidationError
from roof_analytics.models.schemas import Customer, Lead, Project, WeatherEvent
from roof_analytics.services.scoring import (
    acquisition_cost_for_source,
    actual_duration_days,
    calculate_lead_score,
    calculate_retention_score,
    estimate_duration,
    last_project_date,
    make_rng,
    score_customer,
    score_lead,
    score_project,
    score_weather_event,
)


class TestLeadScoring:
    """Tests for calculate_lead_score and score_lead."""

    def test_referral_roof_replacement_scores_85(self):
        assert calculate_lead_score('Referral', 'Roof Replacement') == 85.0

    def test_missing_inputs_keep_base_score(self):
        assert calculate_lead_score(None, None) == 50.0

    @pytest.mark.parametrize('source,expected', [
        ('referral', 70.0),
        ('WEBSITE', 65.0),
        ('Google', 60.0),
        ('facebook', 55.0),
        ('Yard sign', 50.0),
    ])
    def test_source_bonus_is_case_insensitive(self, source, expected):
        assert calculate_lead_score(source, None) == expected

    def test_first_matching_service_interest_wins(self):
        """'roof replacement' is checked before 'repair' and only one bonus applies."""
        assert calculate_lead_score(None, 'roof replacement and gutter repair') == 65.0
        assert calculate_lead_score(None, 'Leak repair') == 60.0
        assert calculate_lead_score(None, 'Free inspection') == 55.0

    def test_score_never_exceeds_100(self):
        assert calculate_lead_score('Referral', 'Roof Replacement') <= 100.0

    def test_score_lead_derives_probability_from_score(self):
        lead = Lead(id=1, source='Referral', service_interest='Roof Replacement')

        result = score_lead(lead)

        assert result.lead_score == 85.0
        assert result.conversion_probability == pytest.approx(0.68)
        assert result.acquisition_source == 'Referral'
        assert result.acquisition_cost == 100.0

    def test_missing_source_is_unknown_with_default_cost(self):
        result = score_lead(Lead(id=3))

        assert result.acquisition_source == 'Unknown'
        assert result.acquisition_cost == 40.0
        assert result.conversion_probability == pytest.approx(0.4)

    @pytest.mark.parametrize('source,cost', [
        ('Google', 75.0),
        ('facebook', 50.0),
        ('Website', 25.0),
        ('referral', 100.0),
        ('Billboard', 40.0),
    ])
    def test_acquisition_cost_lookup(self, source, cost):
        assert acquisition_cost_for_source(source) == cost


class TestProjectScoring:
    """Tests for score_project and its duration helpers."""

    def test_roof_replacement_cost_and_duration(self, fixed_rng):
        project = Project(
            id=1,
            project_type='Roof Replacement',
            contract_amount=12500,
            start_date=datetime(2024, 3, 1),
            end_date=datetime(2024, 3, 20),
        )

        result = score_project(project, fixed_rng)

        assert result.estimated_cost == 7500.0
        assert result.estimated_duration == 21
        assert result.actual_duration == 19
        assert result.duration_variance_percent == pytest.approx((19 - 21) / 21 * 100)

    def test_pinned_random_source_gives_exact_cost_metrics(self, fixed_rng):
        """Midpoint of 0.85-1.15 leaves actual cost equal to the estimate."""
        project = Project(id=1, project_type='Repair', contract_amount=4000)

        result = score_project(project, fixed_rng)

        assert result.actual_cost == pytest.approx(2400.0)
        assert result.cost_variance_percent == pytest.approx(0.0)
        assert result.profit_margin == pytest.approx(0.4)
        assert result.customer_satisfaction_score == pytest.approx(4.0)
        assert fixed_rng.calls == [('uniform', 0.85, 1.15), ('uniform', 3.0, 5.0)]

    def test_real_generator_stays_within_variance_band(self):
        rng = make_rng(42)
        project = Project(id=1, project_type='Roof Replacement', contract_amount=12500)

        for _ in range(50):
            result = score_project(project, rng)
            assert 7500 * 0.85 <= result.actual_cost <= 7500 * 1.15
            assert 3.0 <= result.customer_satisfaction_score <= 5.0

    def test_same_seed_reproduces_values(self):
        project = Project(id=1, project_type='Roof Replacement', contract_amount=12500)

        first = score_project(project, make_rng(7))
        second = score_project(project, make_rng(7))

        assert first == second

    @pytest.mark.parametrize('contract_amount', [None, 0, -100])
    def test_non_positive_contract_amount_is_rejected(self, fixed_rng, contract_amount):
        project = Project(id=9, project_type='Repair', contract_amount=contract_amount)

        with pytest.raises(ValidationError) as exc_info:
            score_project(project, fixed_rng)

        assert exc_info.value.field == 'contract_amount'

    @pytest.mark.parametrize('project_type,days', [
        ('Roof Replacement', 21),
        ('Full REPLACEMENT', 21),
        ('Storm repair', 7),
        ('Inspection', 14),
        (None, 14),
    ])
    def test_estimate_duration(self, project_type, days):
        assert estimate_duration(project_type) == days

    def test_actual_duration_rounds_partial_days_up(self):
        assert actual_duration_days(datetime(2024, 3, 1), datetime(2024, 3, 20, 12), 21) == 20

    def test_actual_duration_uses_absolute_difference(self):
        assert actual_duration_days(datetime(2024, 3, 20), datetime(2024, 3, 1), 21) == 19

    def test_actual_duration_falls_back_without_both_dates(self):
        assert actual_duration_days(datetime(2024, 3, 1), None, 7) == 7
        assert actual_duration_days(None, datetime(2024, 3, 1), 14) == 14


class TestCustomerScoring:
    """Tests for retention, churn and lifetime value."""

    def test_customer_without_projects(self, fixed_rng, now):
        result = score_customer(Customer(id=3), [], fixed_rng, now)

        assert result.project_count == 0
        assert result.average_project_value == 0.0
        assert result.lifetime_value == 0.0
        assert result.retention_score == 50.0
        assert result.churn_probability == pytest.approx(0.55)
        assert result.last_interaction_date == now

    def test_two_recent_projects(self, fixed_rng, now):
        projects = [
            Project(id=1, contract_amount=12500, start_date=datetime(2024, 3, 1), end_date=datetime(2024, 3, 20)),
            Project(id=2, contract_amount=4000, start_date=datetime(2024, 5, 1)),
        ]

        result = score_customer(Customer(id=1), projects, fixed_rng, now)

        assert result.average_project_value == 8250.0
        assert result.lifetime_value == pytest.approx(8250.0 * 2 * 1.3)
        # 2 projects (+15), last activity 45 days ago (+20)
        assert result.retention_score == 85.0
        assert result.churn_probability == pytest.approx(1 - 0.85 * 0.9)

    def test_placeholders_come_from_random_source(self, fixed_rng, now):
        result = score_customer(Customer(id=1), [], fixed_rng, now)

        assert result.acquisition_cost == 100.0
        assert result.referral_count == 0
        assert fixed_rng.calls == [('integers', 100, 400), ('integers', 0, 3)]

    @pytest.mark.parametrize('project_count,days_ago,expected', [
        (4, None, 80.0),
        (2, 100, 75.0),
        (1, 400, 40.0),
        (5, 10, 100.0),
        (1, 200, 50.0),
        (1, 365, 50.0),
    ])
    def test_retention_tiers(self, now, project_count, days_ago, expected):
        last_activity = now - timedelta(days=days_ago) if days_ago is not None else None

        assert calculate_retention_score(project_count, last_activity, now) == expected

    def test_last_project_date_prefers_end_date(self):
        projects = [
            Project(id=1, start_date=datetime(2024, 1, 1), end_date=datetime(2024, 2, 1)),
            Project(id=2, start_date=datetime(2024, 1, 15)),
            Project(id=3),
        ]

        assert last_project_date(projects) == datetime(2024, 2, 1)

    def test_last_project_date_without_dates(self):
        assert last_project_date([Project(id=1)]) is None


class TestWeatherScoring:
    """Tests for score_weather_event."""

    def test_hail_storm_impact(self):
        event = WeatherEvent(
            id=1, event_type='Hail Storm', severity=4.2, zip='75001', event_date=datetime(2024, 4, 10)
        )

        result = score_weather_event(event)

        assert result.leads_generated == 21
        assert result.projects_created == 8
        assert result.revenue_impact == 68000.0
        assert result.affected_zip_codes == ['75001']

    def test_impact_window_is_thirty_days(self):
        event = WeatherEvent(id=1, event_type='Tornado', severity=3, event_date=datetime(2024, 5, 20))

        result = score_weather_event(event)

        assert result.impact_start_date == datetime(2024, 5, 20)
        assert result.impact_end_date == datetime(2024, 6, 19)
        assert result.affected_zip_codes == []

    @pytest.mark.parametrize('event_type,leads', [
        ('hurricane', 20),
        ('Wind Storm', 8),
        ('HEAVY RAIN', 4),
        ('Ice Storm', 6),
        (None, 6),
    ])
    def test_multiplier_by_event_type(self, event_type, leads):
        event = WeatherEvent(id=1, event_type=event_type, severity=2, event_date=datetime(2024, 1, 1))

        assert score_weather_event(event).leads_generated == leads

    def test_missing_severity_counts_as_zero(self):
        event = WeatherEvent(id=1, event_type='Hail Storm', event_date=datetime(2024, 1, 1))

        result = score_weather_event(event)

        assert result.leads_generated == 0
        assert result.revenue_impact == 0.0

    def test_missing_event_date_is_rejected(self):
        with pytest.raises(ValidationError):
            score_weather_event(WeatherEvent(id=5, event_type='Hail Storm', severity=3))
