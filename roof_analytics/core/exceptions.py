"""
Error kinds raised by the analytics core.

- ValidationError: unknown metric name / aggregation level / entity type,
  or a missing required field.
- NotFoundError: a referenced entity id is absent from the entity store.
- StoreError: the underlying read or write failed.

None of the services recover locally; errors propagate to the caller, and the
HTTP layer maps them to 400 / 404 / 500 responses.
"""

from typing import Any, Optional


class AnalyticsError(Exception):
    """Base class for all analytics core errors."""


class ValidationError(AnalyticsError):
    """Raised when an operation receives input it cannot act on."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class NotFoundError(AnalyticsError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with ID {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class StoreError(AnalyticsError):
    """Raised when a store read or write fails. The driver error is chained as __cause__."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


__all__ = [
    'AnalyticsError',
    'ValidationError',
    'NotFoundError',
    'StoreError',
]
