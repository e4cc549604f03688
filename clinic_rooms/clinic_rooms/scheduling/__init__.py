"""
Scheduling Services Module

This module provides core business logic for room scheduling:
- Schedule overlay: fixed shifts cut by one-off bookings (overlay.py)
- Monthly payments report (payments.py)
- Opening-hours slot grid (slots.py)
- In-memory record store (roster.py)
"""
