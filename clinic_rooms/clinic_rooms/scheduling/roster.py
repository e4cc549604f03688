"""
Roster

Almacén en memoria de los registros de la clínica, un dict id -> registro por
tipo. Los servicios de overlay y pagos solo reciben snapshots (tuplas) y
nunca modifican los registros.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Tuple, Union

from clinic_rooms.clinic_rooms.doctype.base import as_record
from clinic_rooms.clinic_rooms.doctype.fixed_shift.fixed_shift import FixedShift
from clinic_rooms.clinic_rooms.doctype.one_off_booking.one_off_booking import OneOffBooking
from clinic_rooms.clinic_rooms.doctype.room.room import Room
from clinic_rooms.clinic_rooms.doctype.therapist.therapist import Therapist
from .overlay import EventKind, RenderableEvent, merge_schedules
from .payments import BillingRow, MonthLike, aggregate_payments

logger = logging.getLogger(__name__)


class Roster:
	"""
	Registros de la clínica indexados por id.

	Las altas son upserts: agregar un id existente reemplaza el registro.
	Borrar un terapeuta borra también sus turnos y bookings.
	"""

	def __init__(
		self,
		rooms=(),
		therapists=(),
		fixed_shifts=(),
		one_off_bookings=()
	) -> None:
		self._rooms: Dict[str, Room] = {}
		self._therapists: Dict[str, Therapist] = {}
		self._fixed_shifts: Dict[str, FixedShift] = {}
		self._one_off_bookings: Dict[str, OneOffBooking] = {}

		for room in rooms:
			self.add_room(room)
		for therapist in therapists:
			self.add_therapist(therapist)
		for shift in fixed_shifts:
			self.add_fixed_shift(shift)
		for booking in one_off_bookings:
			self.add_one_off_booking(booking)

	# ------------------------------------------------------------------
	# Snapshots
	# ------------------------------------------------------------------
	@property
	def rooms(self) -> Tuple[Room, ...]:
		return tuple(self._rooms.values())

	@property
	def therapists(self) -> Tuple[Therapist, ...]:
		return tuple(self._therapists.values())

	@property
	def fixed_shifts(self) -> Tuple[FixedShift, ...]:
		return tuple(self._fixed_shifts.values())

	@property
	def one_off_bookings(self) -> Tuple[OneOffBooking, ...]:
		return tuple(self._one_off_bookings.values())

	# ------------------------------------------------------------------
	# Altas
	# ------------------------------------------------------------------
	def add_room(self, room: Union[Room, Dict[str, Any]]) -> Room:
		room = as_record(Room, room)
		self._rooms[room.id] = room
		return room

	def add_therapist(self, therapist: Union[Therapist, Dict[str, Any]]) -> Therapist:
		therapist = as_record(Therapist, therapist)
		self._therapists[therapist.id] = therapist
		return therapist

	def add_fixed_shift(self, shift: Union[FixedShift, Dict[str, Any]]) -> FixedShift:
		shift = as_record(FixedShift, shift)
		self._fixed_shifts[shift.id] = shift
		return shift

	def add_one_off_booking(self, booking: Union[OneOffBooking, Dict[str, Any]]) -> OneOffBooking:
		booking = as_record(OneOffBooking, booking)
		self._one_off_bookings[booking.id] = booking
		return booking

	# ------------------------------------------------------------------
	# Bajas
	# ------------------------------------------------------------------
	def delete_fixed_shift(self, shift_id: str) -> FixedShift:
		return self._fixed_shifts.pop(shift_id)

	def delete_one_off_booking(self, booking_id: str) -> OneOffBooking:
		return self._one_off_bookings.pop(booking_id)

	def delete_therapist(self, therapist_id: str) -> Therapist:
		"""Borra el terapeuta y, en cascada, sus turnos fijos y one-offs."""
		therapist = self._therapists.pop(therapist_id)

		self._fixed_shifts = {
			shift_id: shift for shift_id, shift in self._fixed_shifts.items()
			if shift.therapist_id != therapist_id
		}
		self._one_off_bookings = {
			booking_id: booking for booking_id, booking in self._one_off_bookings.items()
			if booking.therapist_id != therapist_id
		}

		logger.info(f"Terapeuta {therapist_id} borrado junto con sus turnos y bookings")
		return therapist

	def delete_event(self, original_ref_id: str, kind: Union[EventKind, str]) -> Union[FixedShift, OneOffBooking]:
		"""
		Borra el registro de origen de un evento renderizado.

		Borrar un fragmento de turno fijo borra el turno completo (todas las
		semanas), igual que en el calendario.
		"""
		kind = EventKind(kind)
		if kind == EventKind.FIXED:
			return self.delete_fixed_shift(original_ref_id)
		return self.delete_one_off_booking(original_ref_id)

	# ------------------------------------------------------------------
	# Servicios
	# ------------------------------------------------------------------
	def get_day_schedule(self, target_date: Union[date, str]) -> List[RenderableEvent]:
		return merge_schedules(self.rooms, self.fixed_shifts, self.one_off_bookings, target_date)

	def get_payments(self, year_month: MonthLike) -> List[BillingRow]:
		return aggregate_payments(
			self.rooms,
			self.therapists,
			self.fixed_shifts,
			self.one_off_bookings,
			year_month
		)
