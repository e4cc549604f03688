"""
Date/Time Helpers

Conversiones compartidas por los doctypes y los servicios de scheduling.
Todas las fechas y horas son naive (hora local de la clínica).
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

from dateutil.relativedelta import relativedelta

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")
END_OF_DAY_PATTERN = re.compile(r"^24:00(:00)?$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# "24:00" como hora de fin; combine() lo ancla a la medianoche siguiente
END_OF_DAY = time.max


def to_time(time_value: Union[time, timedelta, str], allow_end_of_day: bool = False) -> time:
	"""
	Convierte diferentes formatos de tiempo a datetime.time.

	Args:
		time_value: puede ser time, timedelta (desde medianoche), o string "HH:MM"
		allow_end_of_day: acepta "24:00" (o timedelta de un día) como END_OF_DAY.
			Solo tiene sentido para horas de fin.

	Returns:
		datetime.time object (sin segundos)

	Raises:
		ValueError: si el formato no es válido
	"""
	if isinstance(time_value, datetime):
		return time_value.time().replace(second=0, microsecond=0)
	elif isinstance(time_value, time):
		if allow_end_of_day and time_value == END_OF_DAY:
			return END_OF_DAY
		return time_value.replace(second=0, microsecond=0)
	elif isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche (así lo devuelve Postgres)
		if allow_end_of_day and time_value == timedelta(days=1):
			return END_OF_DAY
		if time_value < timedelta(0) or time_value >= timedelta(days=1):
			raise ValueError(f"Time out of range: {time_value}")
		return (datetime.min + time_value).time().replace(second=0, microsecond=0)
	elif isinstance(time_value, str):
		value = time_value.strip()
		if allow_end_of_day and END_OF_DAY_PATTERN.match(value):
			return END_OF_DAY
		match = TIME_PATTERN.match(value)
		if not match:
			raise ValueError(f"Invalid time '{time_value}'. Use HH:MM")
		return time(int(match.group(1)), int(match.group(2)))
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def to_date(date_value: Union[date, datetime, str]) -> date:
	"""
	Convierte date, datetime o string YYYY-MM-DD a datetime.date.

	Solo se acepta la forma completa YYYY-MM-DD; "2026-01" o "20260118" se
	rechazan en lugar de caer en otro día.
	"""
	if isinstance(date_value, datetime):
		return date_value.date()
	elif isinstance(date_value, date):
		return date_value
	elif isinstance(date_value, str):
		value = date_value.strip()
		if not DATE_PATTERN.match(value):
			raise ValueError(f"Invalid date '{date_value}'. Use YYYY-MM-DD")
		try:
			return date.fromisoformat(value)
		except ValueError as e:
			raise ValueError(f"Invalid date '{date_value}'. Use YYYY-MM-DD") from e
	else:
		raise ValueError(f"Cannot convert {type(date_value)} to date")


def to_month(month_value: Union[str, date, Tuple[int, int]]) -> Tuple[int, int]:
	"""
	Normaliza un mes a (year, month).

	Acepta "YYYY-MM", un date/datetime (se ignora el día) o una tupla (year, month).
	"""
	if isinstance(month_value, (date, datetime)):
		return month_value.year, month_value.month
	elif isinstance(month_value, str):
		match = MONTH_PATTERN.match(month_value.strip())
		if not match:
			raise ValueError(f"Invalid month '{month_value}'. Use YYYY-MM")
		year, month = int(match.group(1)), int(match.group(2))
	elif isinstance(month_value, tuple) and len(month_value) == 2:
		year, month = int(month_value[0]), int(month_value[1])
	else:
		raise ValueError(f"Cannot convert {type(month_value)} to month")

	if not 1 <= month <= 12:
		raise ValueError(f"Invalid month number: {month}")
	return year, month


def add_months(year: int, month: int, offset: int) -> Tuple[int, int]:
	"""Suma (o resta) meses a un (year, month)."""
	shifted = date(year, month, 1) + relativedelta(months=offset)
	return shifted.year, shifted.month


def day_of_week(target_date: date) -> int:
	"""Día de la semana con domingo = 0 ... sábado = 6."""
	return target_date.isoweekday() % 7


def combine(target_date: date, time_value: time) -> datetime:
	"""Ancla una hora de reloj a la fecha dada (END_OF_DAY -> medianoche siguiente)."""
	if time_value == END_OF_DAY:
		return datetime.combine(target_date + timedelta(days=1), time.min)
	return datetime.combine(target_date, time_value)


def hours_between(start: datetime, end: datetime) -> float:
	"""Duración en horas (fraccionales) entre dos datetimes."""
	return (end - start).total_seconds() / 3600
