"""
Roof Analytics Backend Package.

Analytics core for a roofing business-management application: derives lead,
project, customer and weather impact analytics from the business tables,
produces placeholder predictions, buckets metrics into time-based aggregates
and serves dashboard reports over FastAPI.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database pool, store, errors and dependencies
    - models: Pydantic schemas and enums
    - services: Scoring, reconciliation, predictions, aggregation, reporting
    - jobs: The analytics batch
    - sql: Parameterized SQL queries and DDL
"""

__version__ = "1.0.0"
