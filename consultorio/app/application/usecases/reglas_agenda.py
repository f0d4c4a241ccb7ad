# application/usecases/reglas_agenda.py
"""
Comprobaciones de agenda compartidas por crear y reprogramar cita.

El orden importa: primero día laborable, después rejilla y por último
conflicto con citas vivas del mismo médico.
"""

from __future__ import annotations

from typing import Optional

from consultorio.app.domain.calendario import (
    CalendarioLaboral,
    buscar_conflicto,
    es_dia_laborable,
    obtener_horarios_disponibles,
)
from consultorio.app.domain.citas import CandidatoCita, mensaje_conflicto
from consultorio.app.domain.exceptions import ConflictoAgendaError, ValidationError
from consultorio.app.domain.repositorios import RepositorioCitas
from consultorio.app.domain.value_objects import format_hora


def validar_hueco(
    calendario: Optional[CalendarioLaboral],
    candidato: CandidatoCita,
    citas_repo: RepositorioCitas,
) -> None:
    if calendario is None:
        raise ValidationError("La agenda no está configurada: faltan horario o duración de cita.")
    if not es_dia_laborable(calendario, candidato.fecha):
        raise ValidationError(f"{candidato.fecha.isoformat()} no es un día laborable.")

    hora = format_hora(candidato.hora)
    if hora not in obtener_horarios_disponibles(calendario, candidato.fecha):
        raise ValidationError(f"{hora} no es un horario de cita válido.")

    existentes = citas_repo.list_by_medico_fecha(candidato.medico_id, candidato.fecha)
    conflicto = buscar_conflicto(existentes, candidato)
    if conflicto is not None:
        raise ConflictoAgendaError(
            mensaje_conflicto(conflicto.fecha, conflicto.hora, conflicto.paciente_nombre),
            cita_existente=conflicto,
        )
