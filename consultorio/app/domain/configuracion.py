"""Configuración de clínica/médico (tabla SQL: configuraciones)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from consultorio.app.domain.calendario import CalendarioLaboral
from consultorio.app.domain.enums import DIAS_LABORABLES_POR_DEFECTO, DiaSemana
from consultorio.app.domain.value_objects import (
    _require_non_empty,
    _strip_or_none,
    _validate_email_basic,
    _validate_phone_basic,
    parse_dias_semana,
)

HORA_INICIO_POR_DEFECTO = "08:00"
HORA_FIN_POR_DEFECTO = "18:00"
DESCANSO_INICIO_POR_DEFECTO = "12:00"
DESCANSO_FIN_POR_DEFECTO = "14:00"
DURACION_POR_DEFECTO = 30


def _orden_dias(dias) -> list[str]:
    orden = list(DiaSemana)
    return [d.value for d in sorted(parse_dias_semana(dias), key=orden.index)]


@dataclass(slots=True)
class ConfiguracionClinica:
    id: Optional[int] = None
    medico_id: str = ""

    nombre_clinica: Optional[str] = None
    direccion_clinica: Optional[str] = None
    telefono_clinica: Optional[str] = None
    email_clinica: Optional[str] = None
    descripcion_clinica: Optional[str] = None

    nombre_medico: Optional[str] = None
    especialidad_medico: Optional[str] = None
    licencia_medico: Optional[str] = None

    notificaciones: bool = True
    recordatorios_email: bool = True
    recordatorios_sms: bool = False

    # Campos de agenda tal y como se guardan (texto HH:MM)
    hora_inicio: Optional[str] = None
    hora_fin: Optional[str] = None
    descanso_inicio: Optional[str] = None
    descanso_fin: Optional[str] = None
    duracion_cita_minutos: Optional[int] = None
    dias_laborables: frozenset[DiaSemana] = field(default_factory=frozenset)

    activa: bool = True

    @classmethod
    def por_defecto(cls, medico_id: str) -> "ConfiguracionClinica":
        return cls(
            medico_id=medico_id,
            hora_inicio=HORA_INICIO_POR_DEFECTO,
            hora_fin=HORA_FIN_POR_DEFECTO,
            descanso_inicio=DESCANSO_INICIO_POR_DEFECTO,
            descanso_fin=DESCANSO_FIN_POR_DEFECTO,
            duracion_cita_minutos=DURACION_POR_DEFECTO,
            dias_laborables=DIAS_LABORABLES_POR_DEFECTO,
        )

    def validar(self) -> None:
        self.medico_id = _require_non_empty(self.medico_id, "medico_id")
        for campo in (
            "nombre_clinica",
            "direccion_clinica",
            "telefono_clinica",
            "email_clinica",
            "descripcion_clinica",
            "nombre_medico",
            "especialidad_medico",
            "licencia_medico",
            "hora_inicio",
            "hora_fin",
            "descanso_inicio",
            "descanso_fin",
        ):
            setattr(self, campo, _strip_or_none(getattr(self, campo)))
        _validate_email_basic(self.email_clinica)
        _validate_phone_basic(self.telefono_clinica)
        self.dias_laborables = parse_dias_semana(self.dias_laborables)
        # Fuerza el parseo/validación de los campos de agenda
        self.calendario()

    def calendario(self) -> Optional[CalendarioLaboral]:
        """
        Instantánea de agenda. None si falta un campo obligatorio
        (inicio, fin o duración); lanza ConfiguracionInvalidaError si está mal formada.
        """
        if not self.hora_inicio or not self.hora_fin or self.duracion_cita_minutos is None:
            return None
        return CalendarioLaboral.desde_valores(
            dias_laborables=self.dias_laborables,
            hora_inicio=self.hora_inicio,
            hora_fin=self.hora_fin,
            duracion_minutos=self.duracion_cita_minutos,
            descanso_inicio=self.descanso_inicio,
            descanso_fin=self.descanso_fin,
        )

    def dias_laborables_ordenados(self) -> list[str]:
        return _orden_dias(self.dias_laborables)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["dias_laborables"] = self.dias_laborables_ordenados()
        return data
