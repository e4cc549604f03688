"""
Schedule API Endpoints

Functions used by the front end (calendar views and payments report).
They receive the raw records delivered by the persistence layer, validate
them at the boundary, apply the view filters and return JSON-ready dicts.
"""

import logging
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import ValidationError

from clinic_rooms.api.shared import (
	ScheduleValidationError,
	validate_date_string,
	validate_filter_id,
	validate_month_string,
)
from clinic_rooms.clinic_rooms.doctype.base import as_record
from clinic_rooms.clinic_rooms.doctype.fixed_shift.fixed_shift import FixedShift
from clinic_rooms.clinic_rooms.doctype.one_off_booking.one_off_booking import OneOffBooking
from clinic_rooms.clinic_rooms.doctype.room.room import Room
from clinic_rooms.clinic_rooms.doctype.therapist.therapist import Therapist
from clinic_rooms.clinic_rooms.scheduling.overlay import get_day_summary, get_effective_schedule
from clinic_rooms.clinic_rooms.scheduling.payments import (
	aggregate_payments,
	get_days_in_month,
	get_month_total,
	shift_month,
)
from clinic_rooms.clinic_rooms.scheduling.slots import generate_room_slots

logger = logging.getLogger(__name__)


def get_day_schedule(
	rooms: Iterable[Dict[str, Any]],
	fixed_shifts: Iterable[Dict[str, Any]],
	one_off_bookings: Iterable[Dict[str, Any]],
	date: str,
	room_id: str = "all",
	therapist_id: str = "all"
) -> List[Dict[str, Any]]:
	"""
	Obtiene la agenda efectiva de un día (vista diaria).

	Args:
		rooms: salas
		fixed_shifts: turnos fijos
		one_off_bookings: bookings y ausencias
		date: fecha (YYYY-MM-DD)
		room_id: "all" o id de la sala a mostrar
		therapist_id: "all" o id del terapeuta a mostrar

	Returns:
		list[dict]: eventos ordenados por hora de inicio

	Example Response:
		```json
		[
			{
				"id": "fixed-fs-1-0",
				"original_ref_id": "fs-1",
				"therapist_id": "th-1",
				"room_id": "room-1",
				"kind": "fixed",
				"sub_kind": null,
				"start": "2026-01-18T08:00:00",
				"end": "2026-01-18T09:00:00"
			}
		]
		```

	Raises:
		ScheduleValidationError: si algún parámetro o registro no es válido
	"""
	date = validate_date_string(date, "date")
	therapist_id = validate_filter_id(therapist_id, "therapist_id")
	rooms, fixed_shifts, one_off_bookings = _load_view(rooms, fixed_shifts, one_off_bookings, room_id)

	try:
		events = get_day_summary(rooms, fixed_shifts, one_off_bookings, date)
	except ValueError as e:
		logger.warning(f"Invalid day schedule request for {date}: {e}")
		raise ScheduleValidationError(str(e)) from e

	return [event.as_dict() for event in _filter_therapist(events, therapist_id)]


def get_month_schedule(
	rooms: Iterable[Dict[str, Any]],
	fixed_shifts: Iterable[Dict[str, Any]],
	one_off_bookings: Iterable[Dict[str, Any]],
	year_month: str,
	room_id: str = "all",
	therapist_id: str = "all"
) -> Dict[str, List[Dict[str, Any]]]:
	"""
	Obtiene la agenda efectiva de todo un mes (vista mensual).

	Returns:
		dict: {"2026-01-18": [event dicts], ...} solo con días que tienen eventos
	"""
	year_month = validate_month_string(year_month)
	therapist_id = validate_filter_id(therapist_id, "therapist_id")
	rooms, fixed_shifts, one_off_bookings = _load_view(rooms, fixed_shifts, one_off_bookings, room_id)

	year, month = (int(part) for part in year_month.split("-"))
	start_date = f"{year_month}-01"
	end_date = f"{year_month}-{get_days_in_month(year, month):02d}"

	schedule = get_effective_schedule(rooms, fixed_shifts, one_off_bookings, start_date, end_date)

	result = {}
	for day, events in schedule.items():
		visible = _filter_therapist(sorted(events, key=lambda event: event.start), therapist_id)
		if visible:
			result[day] = [event.as_dict() for event in visible]

	return result


def get_room_slots(
	rooms: Iterable[Dict[str, Any]],
	fixed_shifts: Iterable[Dict[str, Any]],
	one_off_bookings: Iterable[Dict[str, Any]],
	date: str,
	room_id: str = "all"
) -> List[Dict[str, Any]]:
	"""
	Obtiene la grilla de slots del día con su ocupación por sala.

	Returns:
		list[dict]: [
			{
				"room_id": "room-1",
				"start": "2026-01-18 08:00:00",
				"end": "2026-01-18 08:30:00",
				"is_available": False,
				"event_ids": ["fixed-fs-1-0"]
			},
			...
		]
	"""
	date = validate_date_string(date, "date")
	rooms, fixed_shifts, one_off_bookings = _load_view(rooms, fixed_shifts, one_off_bookings, room_id)

	try:
		slots = generate_room_slots(rooms, fixed_shifts, one_off_bookings, date)
	except ValueError as e:
		logger.warning(f"Invalid room slots request for {date}: {e}")
		raise ScheduleValidationError(str(e)) from e

	return [
		{
			"room_id": slot["room_id"],
			"start": slot["start"].strftime("%Y-%m-%d %H:%M:%S"),
			"end": slot["end"].strftime("%Y-%m-%d %H:%M:%S"),
			"is_available": slot["is_available"],
			"event_ids": slot["event_ids"]
		}
		for slot in slots
	]


def get_payments_report(
	rooms: Iterable[Dict[str, Any]],
	therapists: Iterable[Dict[str, Any]],
	fixed_shifts: Iterable[Dict[str, Any]],
	one_off_bookings: Iterable[Dict[str, Any]],
	year_month: str
) -> Dict[str, Any]:
	"""
	Reporte mensual de pagos por terapeuta.

	Returns:
		dict: {
			"year_month": "2026-01",
			"previous_month": "2025-12",
			"next_month": "2026-02",
			"rows": [billing row dicts],
			"total_cost": float
		}
	"""
	year_month = validate_month_string(year_month)
	therapists = _load(Therapist, therapists, "therapists")
	rooms = _load(Room, rooms, "rooms")
	fixed_shifts = _load(FixedShift, fixed_shifts, "fixed_shifts")
	one_off_bookings = _load(OneOffBooking, one_off_bookings, "one_off_bookings")

	rows = aggregate_payments(rooms, therapists, fixed_shifts, one_off_bookings, year_month)

	return {
		"year_month": year_month,
		"previous_month": shift_month(year_month, -1),
		"next_month": shift_month(year_month, 1),
		"rows": [row.as_dict() for row in rows],
		"total_cost": get_month_total(rows)
	}


def _load(model, records: Iterable[Any], field_name: str) -> List[Any]:
	"""Valida registros crudos y convierte errores de pydantic."""
	loaded = []
	for idx, record in enumerate(records or []):
		try:
			loaded.append(as_record(model, record))
		except ValidationError as e:
			logger.warning(f"Rejected {field_name}[{idx}]: {e.error_count()} error(s)")
			raise ScheduleValidationError(
				f"Invalid {field_name}[{idx}]: {_format_errors(e)}"
			) from e
	return loaded


def _load_view(
	rooms: Iterable[Any],
	fixed_shifts: Iterable[Any],
	one_off_bookings: Iterable[Any],
	room_id: str
) -> Tuple[List[Room], List[FixedShift], List[OneOffBooking]]:
	"""
	Valida los registros y aplica el filtro de sala ("all" muestra todas).
	"""
	room_id = validate_filter_id(room_id, "room_id")

	rooms = _load(Room, rooms, "rooms")
	fixed_shifts = _load(FixedShift, fixed_shifts, "fixed_shifts")
	one_off_bookings = _load(OneOffBooking, one_off_bookings, "one_off_bookings")

	if room_id != "all":
		rooms = [room for room in rooms if room.id == room_id]

	return rooms, fixed_shifts, one_off_bookings


def _filter_therapist(events: List[Any], therapist_id: str) -> List[Any]:
	"""
	Filtra eventos por terapeuta después del overlay, para que los turnos del
	terapeuta sigan recortados por los one-offs de otros terapeutas.
	"""
	if therapist_id == "all":
		return list(events)
	return [event for event in events if event.therapist_id == therapist_id]


def _format_errors(error: ValidationError) -> str:
	return "; ".join(
		f"{'.'.join(str(part) for part in item['loc']) or 'record'}: {item['msg']}"
		for item in error.errors()
	)
