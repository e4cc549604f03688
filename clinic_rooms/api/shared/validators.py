"""
Schedule Validators

Validation utilities for the raw strings the front end sends
(dates, months, record ids used as filters).
"""

import re


class ScheduleValidationError(ValueError):
    """Raised when input coming from the caller is not valid."""


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate a calendar day (YYYY-MM-DD) sent by the day views.

    Only the format is checked here; impossible dates such as 2026-02-30
    are rejected later when the date is parsed.

    Raises:
        ScheduleValidationError: If the value is missing or malformed
    """
    if not date_str:
        raise ScheduleValidationError(f"{field_name} is required")

    date_str = str(date_str).strip()

    # Basic format check
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ScheduleValidationError(f"Invalid {field_name} format. Use YYYY-MM-DD")

    return date_str


def validate_month_string(month_str: str, field_name: str = "year_month") -> str:
    """
    Validate month string format (YYYY-MM).

    Raises:
        ScheduleValidationError: If month format is invalid
    """
    if not month_str:
        raise ScheduleValidationError(f"{field_name} is required")

    month_str = str(month_str).strip()

    if not re.match(r"^\d{4}-(0[1-9]|1[0-2])$", month_str):
        raise ScheduleValidationError(f"Invalid {field_name} format. Use YYYY-MM")

    return month_str


def validate_filter_id(value: str, field_name: str = "id") -> str:
    """
    Validate a record id used as a view filter.

    "all" (or an empty value) disables the filter.

    Returns:
        str: "all" or the validated id

    Raises:
        ScheduleValidationError: If id is invalid
    """
    if value is None:
        return "all"

    value = str(value).strip()

    if not value or value == "all":
        return "all"

    # Length check
    if len(value) > 140:
        raise ScheduleValidationError(f"{field_name} is too long")

    if re.search(r"[\s<>;]", value):
        raise ScheduleValidationError(f"Invalid {field_name}")

    return value
