# domain/enums.py
from __future__ import annotations

from enum import Enum


class EstadoCita(str, Enum):
    PROGRAMADA = "programada"
    CONFIRMADA = "confirmada"
    COMPLETADA = "completada"
    CANCELADA = "cancelada"


class DiaSemana(str, Enum):
    """Día de la semana. El valor es el identificador persistido."""

    LUNES = "monday"
    MARTES = "tuesday"
    MIERCOLES = "wednesday"
    JUEVES = "thursday"
    VIERNES = "friday"
    SABADO = "saturday"
    DOMINGO = "sunday"

    @classmethod
    def desde_fecha_weekday(cls, weekday: int) -> "DiaSemana":
        """Traduce date.weekday() (0 = lunes) al enum."""
        return _ORDEN_SEMANA[weekday]


_ORDEN_SEMANA = (
    DiaSemana.LUNES,
    DiaSemana.MARTES,
    DiaSemana.MIERCOLES,
    DiaSemana.JUEVES,
    DiaSemana.VIERNES,
    DiaSemana.SABADO,
    DiaSemana.DOMINGO,
)

DIAS_LABORABLES_POR_DEFECTO = frozenset(_ORDEN_SEMANA[:5])
