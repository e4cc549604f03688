"""
Schedule API

Calendar views (day, month, slot grid) and the monthly payments report.

Usage:
    from clinic_rooms.api.schedule import get_day_schedule
    get_day_schedule(rooms, fixed_shifts, one_off_bookings, "2026-01-18")
"""

from .endpoints import (
    get_day_schedule,
    get_month_schedule,
    get_payments_report,
    get_room_slots,
)

__all__ = [
    "get_day_schedule",
    "get_month_schedule",
    "get_payments_report",
    "get_room_slots",
]
