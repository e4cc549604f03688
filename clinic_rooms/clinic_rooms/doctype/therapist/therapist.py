# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Therapist DocType

Terapeuta con su modelo de pago:
- hourly: fixed_shift_rate / one_off_rate por hora
- perShift: fixed_shift_rate / one_off_rate por turno
- monthly: fixed_shift_rate es una cuota mensual fija (one_off_rate no se usa)
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from clinic_rooms.clinic_rooms.doctype.base import ClinicRecord, RecordId


class PaymentType(str, Enum):
	HOURLY = "hourly"
	PER_SHIFT = "perShift"
	MONTHLY = "monthly"


class Therapist(ClinicRecord):
	"""
	Therapist with payment configuration.

	Validations:
	- id y name requeridos
	- payment_type vacío -> hourly
	- rates vacíos -> 0, nunca negativos
	"""

	id: RecordId
	name: RecordId
	color: Optional[str] = None
	phone: Optional[str] = None
	email: Optional[str] = None
	payment_type: PaymentType = PaymentType.HOURLY
	fixed_shift_rate: float = Field(default=0.0, ge=0)
	one_off_rate: float = Field(default=0.0, ge=0)

	@field_validator("payment_type", mode="before")
	@classmethod
	def _default_payment_type(cls, value: Any) -> Any:
		"""Registros antiguos guardados sin payment_type se pagan por hora."""
		if value is None or value == "":
			return PaymentType.HOURLY
		return value

	@field_validator("fixed_shift_rate", "one_off_rate", mode="before")
	@classmethod
	def _default_rate(cls, value: Any) -> Any:
		if value is None or value == "":
			return 0
		return value
