# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
One Off Booking DocType

Override de la agenda para una fecha específica:
- booking: ocupación extra o distinta de la sala
- absence: el terapeuta está marcado ausente en esa franja

Ambos tipos recortan los turnos fijos de la misma sala de igual manera;
solo difieren en la facturación.
"""

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from clinic_rooms.clinic_rooms.doctype.base import ClinicRecord, RecordId
from clinic_rooms.clinic_rooms.utils import to_date, to_time


class SubKind(str, Enum):
	BOOKING = "booking"
	ABSENCE = "absence"


class OneOffBooking(ClinicRecord):
	"""
	One Off Booking with validations.

	Validations:
	- therapist_id, room_id, date requeridos
	- start_time < end_time
	- sub_kind vacío -> booking (el frontend lo guarda en la columna "type")
	"""

	id: RecordId
	therapist_id: RecordId
	room_id: RecordId
	date: dt.date
	start_time: dt.time
	end_time: dt.time
	sub_kind: SubKind = Field(
		default=SubKind.BOOKING,
		validation_alias=AliasChoices("sub_kind", "subKind", "type"),
	)

	@field_validator("date", mode="before")
	@classmethod
	def _parse_date(cls, value: Any) -> dt.date:
		return to_date(value)

	@field_validator("start_time", mode="before")
	@classmethod
	def _parse_start_time(cls, value: Any) -> dt.time:
		return to_time(value)

	@field_validator("end_time", mode="before")
	@classmethod
	def _parse_end_time(cls, value: Any) -> dt.time:
		"""Acepta "24:00" como fin de día."""
		return to_time(value, allow_end_of_day=True)

	@field_validator("sub_kind", mode="before")
	@classmethod
	def _default_sub_kind(cls, value: Any) -> Any:
		if value is None or value == "":
			return SubKind.BOOKING
		return value

	@model_validator(mode="after")
	def _validate_times(self) -> "OneOffBooking":
		"""Valida que start_time < end_time."""
		if self.start_time >= self.end_time:
			raise ValueError(
				f"Start Time ({self.start_time.strftime('%H:%M')}) debe ser menor que "
				f"End Time ({self.end_time.strftime('%H:%M')})"
			)
		return self

	@property
	def is_absence(self) -> bool:
		return self.sub_kind == SubKind.ABSENCE
