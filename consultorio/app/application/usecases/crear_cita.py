# application/usecases/crear_cita.py
"""
Caso de uso: Crear cita.

Reglas:
- Requiere permiso de escritura.
- La fecha debe ser día laborable y la hora un inicio de la rejilla.
- No puede existir otra cita no cancelada del mismo médico en esa fecha y hora.
  La comprobación previa da un mensaje claro; el índice único de la BD es
  la garantía final si dos reservas compiten por el mismo hueco.
- La cita nace en estado 'programada'.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Union

from consultorio.app.application.usecases.configuracion_clinica import ObtenerConfiguracionUseCase
from consultorio.app.application.usecases.reglas_agenda import validar_hueco
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.container import AppContainer
from consultorio.app.domain.citas import TIPO_CONSULTA_POR_DEFECTO, CandidatoCita, Cita
from consultorio.app.domain.estado_cita import ESTADO_INICIAL
from consultorio.app.domain.exceptions import NotFoundError, ValidationError

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class CrearCitaRequest:
    fecha: Union[date, str]
    hora: Union[time, str]
    paciente_nombre: str = ""
    paciente_telefono: Optional[str] = None
    paciente_id: Optional[int] = None
    tipo_consulta: str = TIPO_CONSULTA_POR_DEFECTO
    notas: Optional[str] = None
    medico_id: Optional[str] = None


@dataclass(slots=True)
class CrearCitaResult:
    cita_id: int
    cita: Cita


class CrearCitaUseCase:
    def __init__(self, container: AppContainer) -> None:
        self._c = container

    def execute(self, req: CrearCitaRequest) -> CrearCitaResult:
        self._c.user_context.require_write("citas.crear")
        candidato = self._normalize_inputs(req)
        self._load_dependencies(req)
        calendario = ObtenerConfiguracionUseCase(
            self._c.configuracion_repo, self._c.user_context
        ).calendario(candidato.medico_id)
        validar_hueco(calendario, candidato, self._c.citas_repo)
        return self._persist(req, candidato)

    # -----------------------------------------------------------------
    # Internos
    # -----------------------------------------------------------------

    def _normalize_inputs(self, req: CrearCitaRequest) -> CandidatoCita:
        return CandidatoCita.crear(
            req.fecha,
            req.hora,
            req.medico_id or self._c.user_context.medico_id,
        )

    def _load_dependencies(self, req: CrearCitaRequest) -> None:
        """Si se indica paciente registrado, completa nombre y teléfono desde su ficha."""
        if req.paciente_id is None:
            if not (req.paciente_nombre or "").strip():
                raise ValidationError("Indica el paciente (nombre o paciente_id).")
            return
        paciente = self._c.pacientes_repo.get_by_id(req.paciente_id)
        if paciente is None:
            raise NotFoundError(f"No existe el paciente {req.paciente_id}.")
        if not (req.paciente_nombre or "").strip():
            req.paciente_nombre = paciente.nombre
        if not req.paciente_telefono:
            req.paciente_telefono = paciente.telefono

    def _persist(self, req: CrearCitaRequest, candidato: CandidatoCita) -> CrearCitaResult:
        cita = Cita(
            fecha=candidato.fecha,
            hora=candidato.hora,
            medico_id=candidato.medico_id,
            paciente_id=req.paciente_id,
            paciente_nombre=req.paciente_nombre,
            paciente_telefono=req.paciente_telefono,
            tipo_consulta=req.tipo_consulta,
            estado=ESTADO_INICIAL,
            notas=req.notas,
        )
        cita.id = self._c.citas_repo.create(cita)
        LOGGER.info(
            "cita_creada fecha=%s hora=%s",
            cita.fecha.isoformat(),
            cita.hora_texto,
            extra={"cita_id": cita.id, "medico_id": cita.medico_id},
        )
        return CrearCitaResult(cita_id=cita.id, cita=cita)
