"""
Clinic Rooms API

Structure:
    api/
    ├── __init__.py              # This file
    ├── schedule/                # Calendar views and payments report
    │   ├── __init__.py          # Re-exports from endpoints
    │   └── endpoints.py
    └── shared/                  # Shared utilities
        ├── __init__.py
        └── validators.py        # Input validators and ScheduleValidationError
"""

# Re-export domains for convenient access
from . import shared
from . import schedule

__all__ = [
    "schedule",
    "shared",
]
