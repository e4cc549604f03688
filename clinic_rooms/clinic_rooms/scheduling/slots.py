"""
Slot Generation Service

Genera la grilla horaria del día (horario de apertura de la clínica) y marca,
por sala, qué slots están ocupados según la agenda efectiva.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Union

from clinic_rooms import config
from clinic_rooms.clinic_rooms.doctype.base import as_record
from clinic_rooms.clinic_rooms.doctype.room.room import Room
from clinic_rooms.clinic_rooms.utils import to_date
from .overlay import merge_schedules


def generate_time_slots(
	opening_hour: Optional[int] = None,
	closing_hour: Optional[int] = None,
	slot_duration_minutes: Optional[int] = None
) -> List[Dict[str, Any]]:
	"""
	Genera la grilla de slots entre apertura y cierre.

	Returns:
		list[dict]: [
			{"time": "08:00", "minutes_from_start": 0},
			{"time": "08:30", "minutes_from_start": 30},
			...
		]

	Raises:
		ValueError: si el horario o la duración no son válidos
	"""
	opening_hour = config.OPENING_HOUR if opening_hour is None else opening_hour
	closing_hour = config.CLOSING_HOUR if closing_hour is None else closing_hour
	slot_duration_minutes = (
		config.SLOT_DURATION_MINUTES if slot_duration_minutes is None else slot_duration_minutes
	)

	_validate_grid(opening_hour, closing_hour, slot_duration_minutes)

	slots = []
	total_minutes = (closing_hour - opening_hour) * 60
	minutes = 0

	while minutes < total_minutes:
		hour, minute = divmod(opening_hour * 60 + minutes, 60)
		slots.append({
			"time": f"{hour:02d}:{minute:02d}",
			"minutes_from_start": minutes
		})
		minutes += slot_duration_minutes

	return slots


def generate_room_slots(
	rooms: Iterable[Union[Room, Dict[str, Any]]],
	fixed_shifts: Iterable[Any],
	one_off_bookings: Iterable[Any],
	target_date: Union[date, str],
	opening_hour: Optional[int] = None,
	closing_hour: Optional[int] = None,
	slot_duration_minutes: Optional[int] = None
) -> List[Dict[str, Any]]:
	"""
	Marca la ocupación de cada slot de la grilla, por sala.

	Returns:
		list[dict]: [
			{
				"room_id": "room-1",
				"start": datetime,
				"end": datetime,
				"is_available": False,
				"event_ids": ["fixed-fs-1-0"]
			},
			...
		]

	Algoritmo:
		1. Calcular la agenda efectiva del día
		2. Generar la grilla horaria
		3. Para cada sala y cada slot, buscar eventos de esa sala que se solapen
		   (start < slot_end AND end > slot_start)
	"""
	target_date = to_date(target_date)
	rooms = [as_record(Room, room) for room in rooms]
	opening_hour = config.OPENING_HOUR if opening_hour is None else opening_hour
	slot_duration_minutes = (
		config.SLOT_DURATION_MINUTES if slot_duration_minutes is None else slot_duration_minutes
	)

	# 1. Agenda efectiva
	events = merge_schedules(rooms, fixed_shifts, one_off_bookings, target_date)

	# 2. Grilla
	time_slots = generate_time_slots(opening_hour, closing_hour, slot_duration_minutes)
	day_start = datetime.combine(target_date, datetime.min.time()) + timedelta(hours=opening_hour)

	result = []

	# 3. Ocupación por sala
	for room in rooms:
		room_events = [event for event in events if event.room_id == room.id]

		for time_slot in time_slots:
			slot_start = day_start + timedelta(minutes=time_slot["minutes_from_start"])
			slot_end = slot_start + timedelta(minutes=slot_duration_minutes)

			event_ids = [
				event.id for event in room_events
				if event.start < slot_end and event.end > slot_start
			]

			result.append({
				"room_id": room.id,
				"start": slot_start,
				"end": slot_end,
				"is_available": not event_ids,
				"event_ids": event_ids
			})

	return result


def _validate_grid(opening_hour: int, closing_hour: int, slot_duration_minutes: int) -> None:
	if not 0 <= opening_hour < closing_hour <= 24:
		raise ValueError(
			f"Horario inválido: apertura {opening_hour} debe ser menor que cierre {closing_hour} (0-24)"
		)
	if slot_duration_minutes <= 0:
		raise ValueError(f"slot_duration_minutes debe ser mayor que 0: {slot_duration_minutes}")
