"""
Tests for the analytics reconciler.

Tests cover:
- Insert on first run, update in place on later runs (one row per entity)
- Preservation of columns that are not recomputed
- Dispatch by entity kind and rejection of unknown kinds / malformed rows
- StoreError propagation
"""

from datetime import datetime

import pytest

from roof_analytics.core.exceptions import StoreError, ValidationError
from roof_analytics.models.enums import AnalyticsKind, EntityType
from roof_analytics.models.schemas import Customer, Lead, Project, WeatherEvent
from roof_analytics.services.reconciler import (
    reconcile_customer,
    reconcile_lead,
    reconcile_project,
    reconcile_weather_event,
    recompute,
)

pytestmark = pytest.mark.asyncio


class TestReconcileLead:
    """Tests for lead_analytics reconciliation."""

    async def test_first_run_inserts_with_conversion_defaults(self, memory_store, sample_leads):
        result = await reconcile_lead(memory_store, Lead.model_validate(sample_leads[0]))

        assert result.lead_id == 1
        assert result.lead_score == 85.0
        assert result.converted_to_customer is False
        assert result.conversion_date is None
        assert result.days_to_conversion is None
        assert 'insert_analytics' in memory_store.calls

    async def test_second_run_updates_same_row(self, memory_store, sample_leads):
        lead = Lead.model_validate(sample_leads[0])

        first = await reconcile_lead(memory_store, lead)
        second = await reconcile_lead(memory_store, lead)

        assert len(memory_store.analytics[AnalyticsKind.LEAD]) == 1
        assert second.id == first.id
        assert memory_store.calls.count('insert_analytics') == 1
        assert memory_store.calls.count('update_analytics') == 1

    async def test_update_preserves_conversion_tracking(self, memory_store, sample_leads):
        lead = Lead.model_validate(sample_leads[0])
        await reconcile_lead(memory_store, lead)
        stored = memory_store.analytics[AnalyticsKind.LEAD][1]
        stored.update({
            'converted_to_customer': True,
            'conversion_date': datetime(2024, 2, 1),
            'days_to_conversion': 27,
        })

        result = await reconcile_lead(memory_store, lead.model_copy(update={'source': 'Google'}))

        assert result.lead_score == 75.0
        assert result.acquisition_cost == 75.0
        assert result.converted_to_customer is True
        assert result.conversion_date == datetime(2024, 2, 1)
        assert result.days_to_conversion == 27


class TestReconcileProject:
    """Tests for project_analytics reconciliation."""

    async def test_insert_sets_weather_impact_score_to_zero(self, memory_store, sample_projects, fixed_rng):
        result = await reconcile_project(memory_store, Project.model_validate(sample_projects[0]), fixed_rng)

        assert result.project_id == 1
        assert result.estimated_cost == 7500.0
        assert result.weather_impact_score == 0.0

    async def test_update_keeps_weather_impact_score(self, memory_store, sample_projects, fixed_rng):
        project = Project.model_validate(sample_projects[0])
        await reconcile_project(memory_store, project, fixed_rng)
        memory_store.analytics[AnalyticsKind.PROJECT][1]['weather_impact_score'] = 2.5

        result = await reconcile_project(memory_store, project, fixed_rng)

        assert result.weather_impact_score == 2.5
        assert len(memory_store.analytics[AnalyticsKind.PROJECT]) == 1

    async def test_invalid_contract_amount_writes_nothing(self, memory_store, fixed_rng):
        project = Project(id=7, project_type='Repair', contract_amount=0)

        with pytest.raises(ValidationError):
            await reconcile_project(memory_store, project, fixed_rng)

        assert memory_store.analytics[AnalyticsKind.PROJECT] == {}


class TestReconcileCustomer:
    """Tests for customer_analytics reconciliation."""

    async def test_customer_metrics_come_from_their_projects(self, memory_store, fixed_rng, now):
        customer = (await memory_store.list_customers())[0]

        result = await reconcile_customer(memory_store, Customer.model_validate(customer), fixed_rng, now)

        assert result.project_count == 2
        assert result.lifetime_value == pytest.approx(21450.0)
        assert result.retention_score == 85.0

    async def test_customer_without_projects(self, memory_store, fixed_rng, now):
        customer = (await memory_store.list_customers())[2]

        result = await reconcile_customer(memory_store, Customer.model_validate(customer), fixed_rng, now)

        assert result.project_count == 0
        assert result.lifetime_value == 0.0
        assert result.average_project_value == 0.0


class TestReconcileWeatherEvent:
    """Tests for weather_impact_analytics reconciliation."""

    async def test_repeat_runs_keep_one_row(self, memory_store, sample_weather_events):
        event = WeatherEvent.model_validate(sample_weather_events[0])

        first = await reconcile_weather_event(memory_store, event)
        second = await reconcile_weather_event(memory_store, event)

        assert first.id == second.id
        assert len(memory_store.analytics[AnalyticsKind.WEATHER_IMPACT]) == 1
        assert second.revenue_impact == 68000.0
        assert second.affected_zip_codes == ['75001']


class TestRecompute:
    """Tests for dispatch by entity kind."""

    @pytest.mark.parametrize('entity_kind', ['lead', 'project', 'customer', 'weather_event'])
    async def test_dispatches_raw_rows(self, memory_store, fixed_rng, now, entity_kind):
        row = memory_store.entities[EntityType(entity_kind)][0]

        result = await recompute(memory_store, entity_kind, row, fixed_rng, now)

        assert result.id is not None

    async def test_accepts_models(self, memory_store, sample_leads):
        result = await recompute(memory_store, EntityType.LEAD, Lead.model_validate(sample_leads[1]))

        assert result.lead_id == 2
        assert result.lead_score == 70.0

    async def test_unknown_kind_is_rejected(self, memory_store, sample_leads):
        with pytest.raises(ValidationError) as exc_info:
            await recompute(memory_store, 'invoice', sample_leads[0])

        assert exc_info.value.field == 'entity_kind'
        assert memory_store.calls == []

    async def test_malformed_row_is_rejected(self, memory_store):
        with pytest.raises(ValidationError):
            await recompute(memory_store, 'lead', {'name': 'no id'})

        assert memory_store.calls == []

    async def test_store_error_propagates(self, memory_store, sample_leads):
        memory_store.failures.add('find_analytics')

        with pytest.raises(StoreError):
            await recompute(memory_store, 'lead', sample_leads[0])

        assert memory_store.analytics[AnalyticsKind.LEAD] == {}


