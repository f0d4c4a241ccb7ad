# application/usecases/reprogramar_cita.py
"""
Caso de uso: Reprogramar cita.

Solo cambia fecha y hora; el estado se conserva. Una cita completada no se
mueve. Se aplican las mismas comprobaciones de agenda que al crear,
excluyendo la propia cita de la búsqueda de conflictos.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Union

from consultorio.app.application.usecases.configuracion_clinica import ObtenerConfiguracionUseCase
from consultorio.app.application.usecases.reglas_agenda import validar_hueco
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.container import AppContainer
from consultorio.app.domain.citas import CandidatoCita, Cita
from consultorio.app.domain.estado_cita import validar_reprogramacion
from consultorio.app.domain.exceptions import NotFoundError, ValidationError

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class ReprogramarCitaRequest:
    cita_id: int
    fecha: Union[date, str]
    hora: Union[time, str]


class ReprogramarCitaUseCase:
    def __init__(self, container: AppContainer) -> None:
        self._c = container

    def execute(self, req: ReprogramarCitaRequest) -> Cita:
        self._c.user_context.require_write("citas.reprogramar")
        if req.cita_id <= 0:
            raise ValidationError("cita_id inválido.")

        cita = self._c.citas_repo.get_by_id(req.cita_id)
        if cita is None:
            raise NotFoundError(f"No existe la cita {req.cita_id}.")
        validar_reprogramacion(cita.estado)

        candidato = CandidatoCita.crear(req.fecha, req.hora, cita.medico_id, excluir_id=cita.id)
        if (candidato.fecha, candidato.hora) == cita.clave_orden():
            return cita

        calendario = ObtenerConfiguracionUseCase(
            self._c.configuracion_repo, self._c.user_context
        ).calendario(cita.medico_id)
        validar_hueco(calendario, candidato, self._c.citas_repo)

        anterior = f"{cita.fecha.isoformat()} {cita.hora_texto}"
        cita.fecha = candidato.fecha
        cita.hora = candidato.hora
        self._c.citas_repo.update(cita)
        LOGGER.info(
            "cita_reprogramada desde=%s hasta=%s %s",
            anterior,
            cita.fecha.isoformat(),
            cita.hora_texto,
            extra={"cita_id": cita.id, "medico_id": cita.medico_id},
        )
        return cita
