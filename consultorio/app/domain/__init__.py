from consultorio.app.domain.calendario import (
    CalendarioLaboral,
    buscar_conflicto,
    es_dia_laborable,
    obtener_horarios_disponibles,
)
from consultorio.app.domain.citas import CandidatoCita, Cita
from consultorio.app.domain.configuracion import ConfiguracionClinica
from consultorio.app.domain.historias import HistoriaClinica
from consultorio.app.domain.personas import Paciente
from consultorio.app.domain.enums import *  # noqa: F401,F403
from consultorio.app.domain.exceptions import *  # noqa: F401,F403

__all__ = [
    "CalendarioLaboral",
    "CandidatoCita",
    "Cita",
    "ConfiguracionClinica",
    "HistoriaClinica",
    "Paciente",
    "buscar_conflicto",
    "es_dia_laborable",
    "obtener_horarios_disponibles",
]
