"""Entidades de dominio relacionadas con citas."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.value_objects import (
    _require_non_empty,
    _strip_or_none,
    _validate_phone_basic,
    format_hora,
    parse_fecha,
    parse_hora,
)

TIPO_CONSULTA_POR_DEFECTO = "Consulta General"


@dataclass(slots=True)
class Cita:
    """Cita de agenda (tabla SQL: citas). `fecha` es fecha civil sin zona horaria."""

    id: Optional[int] = None
    fecha: date = field(default_factory=date.today)
    hora: time = field(default_factory=lambda: time(0, 0))
    medico_id: str = ""
    paciente_id: Optional[int] = None
    paciente_nombre: str = ""
    paciente_telefono: Optional[str] = None
    tipo_consulta: str = TIPO_CONSULTA_POR_DEFECTO
    estado: EstadoCita = EstadoCita.PROGRAMADA
    notas: Optional[str] = None
    creada_en: Optional[datetime] = None

    def validar(self) -> None:
        self.fecha = parse_fecha(self.fecha)
        self.hora = parse_hora(self.hora, error_cls=ValidationError)
        self.medico_id = _require_non_empty(self.medico_id, "medico_id")
        self.paciente_nombre = _require_non_empty(self.paciente_nombre, "paciente_nombre")
        self.tipo_consulta = _require_non_empty(self.tipo_consulta, "tipo_consulta")
        self.paciente_telefono = _strip_or_none(self.paciente_telefono)
        _validate_phone_basic(self.paciente_telefono)
        self.notas = _strip_or_none(self.notas)
        if self.paciente_id is not None and self.paciente_id <= 0:
            raise ValidationError("paciente_id inválido.")
        if not isinstance(self.estado, EstadoCita):
            self.estado = EstadoCita(self.estado)

    @property
    def hora_texto(self) -> str:
        return format_hora(self.hora)

    def clave_orden(self) -> tuple[date, time]:
        return self.fecha, self.hora

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["fecha"] = self.fecha.isoformat()
        data["hora"] = self.hora_texto
        data["estado"] = self.estado.value
        if self.creada_en is not None:
            data["creada_en"] = self.creada_en.isoformat(sep=" ", timespec="seconds")
        return data


@dataclass(frozen=True, slots=True)
class CandidatoCita:
    """Tupla (fecha, hora, médico) propuesta para una reserva o reprogramación."""

    fecha: date
    hora: time
    medico_id: str
    excluir_id: Optional[int] = None

    @classmethod
    def crear(
        cls,
        fecha: date | str,
        hora: time | str,
        medico_id: str,
        *,
        excluir_id: Optional[int] = None,
    ) -> "CandidatoCita":
        return cls(
            fecha=parse_fecha(fecha),
            hora=parse_hora(hora, error_cls=ValidationError),
            medico_id=_require_non_empty(medico_id, "medico_id"),
            excluir_id=excluir_id,
        )


def mensaje_conflicto(fecha: date, hora: time, paciente_nombre: Optional[str]) -> str:
    return (
        f"Ya existe una cita programada para {fecha.isoformat()} a las "
        f"{format_hora(hora)} (Paciente: {paciente_nombre or 'desconocido'})"
    )
