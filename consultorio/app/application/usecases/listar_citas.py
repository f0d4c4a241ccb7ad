from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from consultorio.app.domain.citas import Cita
from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.value_objects import parse_fecha
from consultorio.app.infrastructure.sqlite.repos_citas import CitasRepository


@dataclass(slots=True)
class FiltrosCitas:
    desde: Union[date, str, None] = None
    hasta: Union[date, str, None] = None
    medico_id: Optional[str] = None
    estado: Union[EstadoCita, str, None] = None
    texto: Optional[str] = None


def _parse_estado(value: Union[EstadoCita, str, None]) -> Optional[EstadoCita]:
    if value is None or isinstance(value, EstadoCita):
        return value
    clave = value.strip().lower()
    if not clave:
        return None
    try:
        return EstadoCita(clave)
    except ValueError as e:
        validos = ", ".join(estado.value for estado in EstadoCita)
        raise ValidationError(f"Estado desconocido '{value}'. Valores: {validos}.") from e


@dataclass(frozen=True)
class ListarCitasUseCase:
    repo: CitasRepository

    def execute(self, filtros: Optional[FiltrosCitas] = None) -> List[Cita]:
        f = filtros or FiltrosCitas()
        return self.repo.list_in_range(
            desde=parse_fecha(f.desde, "desde") if f.desde else None,
            hasta=parse_fecha(f.hasta, "hasta") if f.hasta else None,
            medico_id=(f.medico_id or "").strip() or None,
            estado=_parse_estado(f.estado),
            texto=(f.texto or "").strip() or None,
        )
