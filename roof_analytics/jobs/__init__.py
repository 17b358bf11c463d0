"""
Background jobs for the roofing analytics backend.

- batch: The full analytics refresh (reconcile every entity kind, score the
  head of each list, regenerate monthly aggregates).

The batch is triggered through POST /analytics/process or by calling
run_batch() from a scheduler. Run at most one batch at a time.

Usage:
    from roof_analytics.jobs import run_batch

    summary = await run_batch(store)
"""

from roof_analytics.jobs.batch import BATCH_METRICS, run_batch


__all__ = [
    'BATCH_METRICS',
    'run_batch',
]
