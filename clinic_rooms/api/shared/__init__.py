"""
Shared utilities for the Clinic Rooms API.
"""

from .validators import (
    ScheduleValidationError,
    validate_date_string,
    validate_filter_id,
    validate_month_string,
)

__all__ = [
    "ScheduleValidationError",
    "validate_date_string",
    "validate_filter_id",
    "validate_month_string",
]
