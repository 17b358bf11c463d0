'''
Roof Analytics Backend Test Suite

Test Modules:
-------------
- test_scoring.py: Lead, project, customer and weather impact scoring rules
- test_reconciler.py: Insert-or-update of analytics rows per entity
- test_predictions.py: Strategy table, fallbacks and prediction upserts
- test_aggregation.py: Calendar bucketing and append-only aggregate writes
- test_batch.py: Batch phase ordering, limits and failure semantics
- test_reporting.py: Dashboard KPIs, role gating and analytics lists
- test_reports.py: Per-user saved reports and dashboard configurations
- test_store.py: PostgreSQL statements, encodings and error translation
- test_api.py: HTTP endpoints and error-to-status mapping

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

No database is required: services run against the in-memory store in
conftest.py and PostgresAnalyticsStore is tested against a mock asyncpg pool.
'''

__all__ = []
