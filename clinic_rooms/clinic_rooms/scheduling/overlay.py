"""
Schedule Overlay Service

Calcula la ocupación real de las salas para una fecha, considerando:
- Fixed Shifts (plantilla semanal por sala)
- One Off Bookings (bookings y ausencias de una fecha concreta)

Los one-offs siempre ganan: recortan los turnos fijos de la misma sala y
se muestran completos.
"""

import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from clinic_rooms.clinic_rooms.doctype.base import as_record
from clinic_rooms.clinic_rooms.doctype.fixed_shift.fixed_shift import FixedShift
from clinic_rooms.clinic_rooms.doctype.one_off_booking.one_off_booking import (
	OneOffBooking,
	SubKind,
)
from clinic_rooms.clinic_rooms.doctype.room.room import Room
from clinic_rooms.clinic_rooms.utils import combine, day_of_week, hours_between, to_date

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
	FIXED = "fixed"
	ONE_OFF = "one-off"


class RenderableEvent(BaseModel):
	"""
	Intervalo ocupado listo para renderizar.

	original_ref_id apunta al Fixed Shift o One Off Booking de origen, para que
	las acciones de editar/borrar lleguen al registro verdadero.
	"""

	model_config = ConfigDict(frozen=True)

	id: str
	original_ref_id: str
	therapist_id: str
	room_id: str
	kind: EventKind
	sub_kind: Optional[SubKind] = None
	start: datetime
	end: datetime

	@property
	def duration_hours(self) -> float:
		return hours_between(self.start, self.end)

	def as_dict(self) -> Dict[str, Any]:
		return self.model_dump(mode="json")


def merge_schedules(
	rooms: Iterable[Union[Room, Dict[str, Any]]],
	fixed_shifts: Iterable[Union[FixedShift, Dict[str, Any]]],
	one_off_bookings: Iterable[Union[OneOffBooking, Dict[str, Any]]],
	target_date: Union[date, str]
) -> List[RenderableEvent]:
	"""
	Combina turnos fijos con overrides de una fecha.

	Args:
		rooms: salas a calcular
		fixed_shifts: turnos semanales (modelos o dicts crudos)
		one_off_bookings: bookings/ausencias (modelos o dicts crudos)
		target_date: fecha (date object o string YYYY-MM-DD)

	Returns:
		list[RenderableEvent]: por sala, primero los fragmentos fijos y luego
		los one-offs

	Raises:
		pydantic.ValidationError: si algún registro crudo no es válido

	Algoritmo (por sala):
		1. Turnos fijos de la sala cuyo day_of_week coincide (domingo = 0)
		2. One-offs de la sala cuya date coincide exactamente
		3. Cada turno fijo arranca como un segmento [start, end) y se le restan,
		   en orden, todos los one-offs
		4. Un evento "fixed" por segmento sobreviviente
		5. Un evento "one-off" por cada one-off, sin recortar
	"""
	target_date = to_date(target_date)
	rooms = [as_record(Room, room) for room in rooms]
	fixed_shifts = [as_record(FixedShift, shift) for shift in fixed_shifts]
	one_off_bookings = [as_record(OneOffBooking, booking) for booking in one_off_bookings]

	weekday = day_of_week(target_date)
	events: List[RenderableEvent] = []

	for room in rooms:
		# 1. Turnos fijos de esta sala para este día de la semana
		room_fixed = [
			shift for shift in fixed_shifts
			if shift.room_id == room.id and shift.day_of_week == weekday
		]

		# 2. One-offs de esta sala para esta fecha exacta
		room_one_off = [
			booking for booking in one_off_bookings
			if booking.room_id == room.id and booking.date == target_date
		]

		blocks = [
			_to_interval(target_date, booking.start_time, booking.end_time)
			for booking in room_one_off
		]

		# 3-4. Recortar cada turno fijo con todos los one-offs
		for shift in room_fixed:
			base = _to_interval(target_date, shift.start_time, shift.end_time)
			segments = _apply_overrides([base], blocks)

			for idx, segment in enumerate(segments):
				events.append(RenderableEvent(
					id=f"fixed-{shift.id}-{idx}",
					original_ref_id=shift.id,
					therapist_id=shift.therapist_id,
					room_id=room.id,
					kind=EventKind.FIXED,
					start=segment["start"],
					end=segment["end"]
				))

		# 5. Los one-offs siempre aparecen
		for booking, block in zip(room_one_off, blocks):
			events.append(RenderableEvent(
				id=f"oneoff-{booking.id}",
				original_ref_id=booking.id,
				therapist_id=booking.therapist_id,
				room_id=room.id,
				kind=EventKind.ONE_OFF,
				sub_kind=booking.sub_kind,
				start=block["start"],
				end=block["end"]
			))

	logger.debug(
		f"merge_schedules {target_date.isoformat()}: {len(events)} eventos "
		f"en {len(rooms)} salas"
	)

	return events


def get_effective_schedule(
	rooms: Iterable[Union[Room, Dict[str, Any]]],
	fixed_shifts: Iterable[Union[FixedShift, Dict[str, Any]]],
	one_off_bookings: Iterable[Union[OneOffBooking, Dict[str, Any]]],
	start_date: Union[date, str],
	end_date: Union[date, str]
) -> Dict[str, List[RenderableEvent]]:
	"""
	Obtiene la agenda efectiva para un rango de fechas (vista mensual).

	Args:
		start_date: fecha inicial (inclusive)
		end_date: fecha final (inclusive)

	Returns:
		dict: {
			"2026-01-18": [RenderableEvent, ...],
			...
		}
		Solo incluye fechas con al menos un evento.

	Raises:
		ValueError: si start_date > end_date
	"""
	start_date = to_date(start_date)
	end_date = to_date(end_date)

	if start_date > end_date:
		raise ValueError(
			f"start_date ({start_date.isoformat()}) debe ser menor o igual que "
			f"end_date ({end_date.isoformat()})"
		)

	# Validar una sola vez, no en cada día
	rooms = [as_record(Room, room) for room in rooms]
	fixed_shifts = [as_record(FixedShift, shift) for shift in fixed_shifts]
	one_off_bookings = [as_record(OneOffBooking, booking) for booking in one_off_bookings]

	result = {}
	current_date = start_date

	while current_date <= end_date:
		events = merge_schedules(rooms, fixed_shifts, one_off_bookings, current_date)
		if events:
			result[current_date.isoformat()] = events
		current_date += timedelta(days=1)

	return result


def get_day_summary(
	rooms: Iterable[Union[Room, Dict[str, Any]]],
	fixed_shifts: Iterable[Union[FixedShift, Dict[str, Any]]],
	one_off_bookings: Iterable[Union[OneOffBooking, Dict[str, Any]]],
	target_date: Union[date, str]
) -> List[RenderableEvent]:
	"""Eventos del día ordenados por hora de inicio (resumen diario)."""
	events = merge_schedules(rooms, fixed_shifts, one_off_bookings, target_date)
	return sorted(events, key=lambda event: event.start)


def _to_interval(target_date: date, start_time, end_time) -> Dict[str, datetime]:
	"""Ancla una franja horaria a la fecha objetivo."""
	return {
		"start": combine(target_date, start_time),
		"end": combine(target_date, end_time)
	}


def _apply_overrides(
	intervals: List[Dict[str, datetime]],
	blocks: List[Dict[str, datetime]]
) -> List[Dict[str, datetime]]:
	"""
	Resta, en orden, cada bloque de todos los intervalos.

	La salida de un bloque es la entrada del siguiente. No modifica las
	listas recibidas.
	"""
	for block in blocks:
		next_intervals = []
		for interval in intervals:
			next_intervals.extend(_interval_subtract(interval, block))
		intervals = next_intervals

	return [interval for interval in intervals if interval["start"] < interval["end"]]


def _interval_subtract(
	interval: Dict[str, datetime],
	block: Dict[str, datetime]
) -> List[Dict[str, datetime]]:
	"""
	Resta un bloqueo de un intervalo.

	Args:
		interval: {"start": datetime, "end": datetime} - intervalo original
		block: {"start": datetime, "end": datetime} - bloqueo a restar

	Returns:
		list: lista de intervalos resultantes (puede ser 0, 1 o 2 intervalos)
	"""
	# Block no se solapa con interval -> retornar interval original
	if block["end"] <= interval["start"] or block["start"] >= interval["end"]:
		return [interval]

	result = []

	# Parte anterior al bloque
	if interval["start"] < block["start"]:
		result.append({"start": interval["start"], "end": block["start"]})

	# Parte posterior al bloque
	if interval["end"] > block["end"]:
		result.append({"start": block["end"], "end": interval["end"]})

	# Si el bloque cubre todo el intervalo, no queda nada
	return result
