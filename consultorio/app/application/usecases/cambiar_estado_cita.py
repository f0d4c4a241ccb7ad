# application/usecases/cambiar_estado_cita.py
from __future__ import annotations

from dataclasses import dataclass

from consultorio.app.application.security import UserContext
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.domain.citas import Cita
from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.estado_cita import es_noop, validar_transicion
from consultorio.app.domain.exceptions import NotFoundError, ValidationError
from consultorio.app.domain.repositorios import RepositorioCitas

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CambiarEstadoCitaUseCase:
    """Cambios de estado permitidos por la tabla de transiciones de la cita."""

    repo: RepositorioCitas
    user_context: UserContext

    def execute(self, cita_id: int, destino: EstadoCita) -> Cita:
        self.user_context.require_write(f"citas.estado.{destino.value}")
        if cita_id <= 0:
            raise ValidationError("cita_id inválido.")

        cita = self.repo.get_by_id(cita_id)
        if cita is None:
            raise NotFoundError(f"No existe la cita {cita_id}.")

        validar_transicion(cita.estado, destino)
        if es_noop(cita.estado, destino):
            return cita

        anterior = cita.estado
        cita.estado = destino
        self.repo.update(cita)
        LOGGER.info(
            "cita_estado_cambiado %s->%s",
            anterior.value,
            destino.value,
            extra={"cita_id": cita.id},
        )
        return cita

    def confirmar(self, cita_id: int) -> Cita:
        return self.execute(cita_id, EstadoCita.CONFIRMADA)

    def atender(self, cita_id: int) -> Cita:
        """Marca la cita como completada. Repetirlo no tiene efecto."""
        return self.execute(cita_id, EstadoCita.COMPLETADA)

    def cancelar(self, cita_id: int) -> Cita:
        return self.execute(cita_id, EstadoCita.CANCELADA)
