"""
Base Record

Configuración común para los registros que entrega el colaborador de
persistencia (Supabase / cache local). Aceptan claves snake_case y las claves
camelCase del frontend original.
"""

from typing import Annotated, Any, Type, TypeVar

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

RecordId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

RecordT = TypeVar("RecordT", bound="ClinicRecord")


class ClinicRecord(BaseModel):
	"""Registro inmutable validado al construirse."""

	model_config = ConfigDict(
		frozen=True,
		populate_by_name=True,
		alias_generator=to_camel,
		extra="ignore",
	)


def as_record(model: Type[RecordT], record: Any) -> RecordT:
	"""
	Devuelve el registro como instancia de `model`.

	Los dicts crudos se validan; las instancias se devuelven tal cual.

	Raises:
		pydantic.ValidationError: si el dict no es válido
	"""
	if isinstance(record, model):
		return record
	if isinstance(record, BaseModel):
		record = record.model_dump()
	return model.model_validate(record)
