# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Room DocType

Sala física de la clínica. Solo identidad; las salas se gestionan fuera
del core y nunca se crean ni destruyen aquí.
"""

from clinic_rooms.clinic_rooms.doctype.base import ClinicRecord, RecordId


class Room(ClinicRecord):
	"""Room: id + name."""

	id: RecordId
	name: RecordId
