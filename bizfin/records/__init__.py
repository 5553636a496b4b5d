"""
Records Module

Entity definitions, payload validation, list query composition and dashboard
aggregation for the tracked business records.
"""

from .entities import ENTITIES, EntitySpec
from .query_builder import ListQuery, month_bounds
from .summary import DashboardStats, build_dashboard_stats
from .validation import ValidationError, ValidationResult, normalize_payload, validate_payload

__all__ = [
    "ENTITIES",
    "EntitySpec",
    "ListQuery",
    "month_bounds",
    "DashboardStats",
    "build_dashboard_stats",
    "ValidationError",
    "ValidationResult",
    "normalize_payload",
    "validate_payload",
]
