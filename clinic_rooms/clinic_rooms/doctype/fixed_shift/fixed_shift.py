# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Fixed Shift DocType

Turno semanal recurrente: un terapeuta ocupa una sala el mismo día de la
semana y en la misma franja horaria, todas las semanas.
"""

from datetime import time
from typing import Any

from pydantic import Field, field_validator, model_validator

from clinic_rooms.clinic_rooms.doctype.base import ClinicRecord, RecordId
from clinic_rooms.clinic_rooms.utils import to_time


class FixedShift(ClinicRecord):
	"""
	Fixed Shift with validations.

	Validations:
	- therapist_id, room_id requeridos
	- day_of_week entre 0 (domingo) y 6 (sábado)
	- start_time y end_time en formato HH:MM (end_time admite "24:00")
	- start_time < end_time
	"""

	id: RecordId
	therapist_id: RecordId
	room_id: RecordId
	day_of_week: int = Field(ge=0, le=6)
	start_time: time
	end_time: time

	@field_validator("start_time", mode="before")
	@classmethod
	def _parse_start_time(cls, value: Any) -> time:
		return to_time(value)

	@field_validator("end_time", mode="before")
	@classmethod
	def _parse_end_time(cls, value: Any) -> time:
		"""Acepta "24:00" como fin de día."""
		return to_time(value, allow_end_of_day=True)

	@model_validator(mode="after")
	def _validate_times(self) -> "FixedShift":
		"""Valida que start_time < end_time."""
		if self.start_time >= self.end_time:
			raise ValueError(
				f"Start Time ({self.start_time.strftime('%H:%M')}) debe ser menor que "
				f"End Time ({self.end_time.strftime('%H:%M')})"
			)
		return self
