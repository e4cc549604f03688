"""
Payments Service

Agrega un mes de agendas efectivas en filas de facturación por terapeuta,
según su modelo de pago (hourly / perShift / monthly).

El cálculo es siempre completo y sin estado: cambiar un turno o una tarifa
cambia también los reportes de meses pasados al volver a calcularlos.
"""

import calendar
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel

from clinic_rooms.clinic_rooms.doctype.base import as_record
from clinic_rooms.clinic_rooms.doctype.fixed_shift.fixed_shift import FixedShift
from clinic_rooms.clinic_rooms.doctype.one_off_booking.one_off_booking import (
	OneOffBooking,
	SubKind,
)
from clinic_rooms.clinic_rooms.doctype.room.room import Room
from clinic_rooms.clinic_rooms.doctype.therapist.therapist import PaymentType, Therapist
from clinic_rooms.clinic_rooms.scheduling.overlay import EventKind, merge_schedules
from clinic_rooms.clinic_rooms.utils import add_months, to_month

logger = logging.getLogger(__name__)

MonthLike = Union[str, date, Tuple[int, int]]


class BillingRow(BaseModel):
	"""Totales mensuales de un terapeuta."""

	therapist_id: str
	name: str
	color: Optional[str] = None
	payment_type: PaymentType
	fixed_hours: float = 0.0
	one_off_hours: float = 0.0
	absence_hours: float = 0.0
	fixed_shift_count: int = 0
	one_off_shift_count: int = 0
	total_cost: float = 0.0

	@property
	def total_hours(self) -> float:
		return self.fixed_hours + self.one_off_hours + self.absence_hours

	def as_dict(self) -> Dict[str, Any]:
		data = self.model_dump(mode="json")
		data["total_hours"] = self.total_hours
		return data


def aggregate_payments(
	rooms: Iterable[Union[Room, Dict[str, Any]]],
	therapists: Iterable[Union[Therapist, Dict[str, Any]]],
	fixed_shifts: Iterable[Union[FixedShift, Dict[str, Any]]],
	one_off_bookings: Iterable[Union[OneOffBooking, Dict[str, Any]]],
	year_month: MonthLike
) -> List[BillingRow]:
	"""
	Calcula el reporte de pagos de un mes.

	Args:
		rooms: salas
		therapists: terapeutas con su configuración de pago
		fixed_shifts: turnos semanales
		one_off_bookings: bookings y ausencias
		year_month: "YYYY-MM", date, o (year, month)

	Returns:
		list[BillingRow]: una fila por terapeuta (en el orden recibido),
		incluyendo los que no tuvieron actividad

	Algoritmo:
		1. Inicializar filas; monthly arranca con fixed_shift_rate como costo
		2. Para cada día del mes, calcular merge_schedules de todas las salas
		3. Para cada evento, sumar horas/turnos y cobrar según el tipo:
			- fixed: fixed_hours, fixed_shift_count, tarifa fixed_shift_rate
			- one-off absence: absence_hours, tarifa one_off_rate
			- one-off booking: one_off_hours, one_off_shift_count, tarifa one_off_rate
		4. Eventos de terapeutas desconocidos se ignoran
	"""
	year, month = to_month(year_month)

	rooms = [as_record(Room, room) for room in rooms]
	therapists = [as_record(Therapist, therapist) for therapist in therapists]
	fixed_shifts = [as_record(FixedShift, shift) for shift in fixed_shifts]
	one_off_bookings = [as_record(OneOffBooking, booking) for booking in one_off_bookings]

	# 1. Inicializar filas
	configs: Dict[str, Therapist] = {}
	rows: Dict[str, BillingRow] = {}

	for therapist in therapists:
		configs[therapist.id] = therapist
		rows[therapist.id] = BillingRow(
			therapist_id=therapist.id,
			name=therapist.name,
			color=therapist.color,
			payment_type=therapist.payment_type,
			total_cost=(
				therapist.fixed_shift_rate
				if therapist.payment_type == PaymentType.MONTHLY else 0.0
			)
		)

	skipped = 0

	# 2. Recorrer todos los días del mes
	for day in range(1, get_days_in_month(year, month) + 1):
		daily_events = merge_schedules(rooms, fixed_shifts, one_off_bookings, date(year, month, day))

		# 3. Acumular cada evento
		for event in daily_events:
			row = rows.get(event.therapist_id)
			config = configs.get(event.therapist_id)

			if row is None or config is None:
				skipped += 1
				logger.debug(
					f"Evento {event.id} ignorado: terapeuta desconocido {event.therapist_id}"
				)
				continue

			hours = event.duration_hours

			if event.kind == EventKind.FIXED:
				row.fixed_hours += hours
				row.fixed_shift_count += 1
				row.total_cost += _charge(config.payment_type, config.fixed_shift_rate, hours)
			elif event.sub_kind == SubKind.ABSENCE:
				# TODO: confirmar con la clínica si una ausencia debe cobrarse con one_off_rate
				row.absence_hours += hours
				row.total_cost += _charge(config.payment_type, config.one_off_rate, hours)
			else:
				row.one_off_hours += hours
				row.one_off_shift_count += 1
				row.total_cost += _charge(config.payment_type, config.one_off_rate, hours)

	result = list(rows.values())

	logger.info(
		f"aggregate_payments {year:04d}-{month:02d}: {len(result)} terapeutas, "
		f"total {get_month_total(result):.2f}, {skipped} eventos ignorados"
	)

	return result


def _charge(payment_type: PaymentType, rate: float, hours: float) -> float:
	"""
	Monto a cobrar por un evento.

	- hourly: horas * tarifa
	- perShift: una tarifa por evento
	- monthly: nada (la cuota ya se sumó al inicializar)
	"""
	if payment_type == PaymentType.HOURLY:
		return hours * rate
	elif payment_type == PaymentType.PER_SHIFT:
		return rate
	elif payment_type == PaymentType.MONTHLY:
		return 0.0
	else:
		raise ValueError(f"Unsupported payment type: {payment_type}")


def get_month_total(rows: Iterable[BillingRow]) -> float:
	"""Ingreso total del mes (suma de total_cost)."""
	return sum(row.total_cost for row in rows)


def get_days_in_month(year: int, month: int) -> int:
	return calendar.monthrange(year, month)[1]


def shift_month(year_month: MonthLike, offset: int) -> str:
	"""
	Navega entre meses del reporte.

	Args:
		year_month: mes actual
		offset: -1 para el anterior, 1 para el siguiente, etc.

	Returns:
		str: "YYYY-MM"
	"""
	year, month = add_months(*to_month(year_month), offset)
	return f"{year:04d}-{month:02d}"
