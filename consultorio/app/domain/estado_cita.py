"""
Máquina de estados de la cita.

Tabla única de transiciones; los casos de uso la consultan antes de
persistir cualquier cambio de estado o de fecha/hora.
"""

from __future__ import annotations

from typing import Mapping

from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.exceptions import TransicionEstadoError

ESTADO_INICIAL = EstadoCita.PROGRAMADA

TRANSICIONES: Mapping[EstadoCita, frozenset[EstadoCita]] = {
    EstadoCita.PROGRAMADA: frozenset(
        {EstadoCita.CONFIRMADA, EstadoCita.COMPLETADA, EstadoCita.CANCELADA}
    ),
    EstadoCita.CONFIRMADA: frozenset({EstadoCita.COMPLETADA, EstadoCita.CANCELADA}),
    EstadoCita.COMPLETADA: frozenset(),
    EstadoCita.CANCELADA: frozenset(),
}

_NO_REPROGRAMABLES = frozenset({EstadoCita.COMPLETADA})


def es_transicion_valida(actual: EstadoCita, destino: EstadoCita) -> bool:
    return destino in TRANSICIONES[actual]


def es_noop(actual: EstadoCita, destino: EstadoCita) -> bool:
    """Atender una cita ya completada no cambia nada."""
    return actual == destino == EstadoCita.COMPLETADA


def validar_transicion(actual: EstadoCita, destino: EstadoCita) -> None:
    if es_noop(actual, destino) or es_transicion_valida(actual, destino):
        return
    raise TransicionEstadoError(
        f"No se puede pasar una cita de '{actual.value}' a '{destino.value}'."
    )


def puede_reprogramar(estado: EstadoCita) -> bool:
    return estado not in _NO_REPROGRAMABLES


def validar_reprogramacion(estado: EstadoCita) -> None:
    if not puede_reprogramar(estado):
        raise TransicionEstadoError(f"Una cita '{estado.value}' no se puede reprogramar.")
