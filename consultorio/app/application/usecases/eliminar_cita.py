from __future__ import annotations

from dataclasses import dataclass

from consultorio.app.application.security import UserContext
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.domain.exceptions import NotFoundError, ValidationError
from consultorio.app.domain.repositorios import RepositorioCitas

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class EliminarCitaUseCase:
    repo: RepositorioCitas
    user_context: UserContext

    def execute(self, cita_id: int) -> None:
        if cita_id <= 0:
            raise ValidationError("cita_id inválido.")
        self.user_context.require_write("citas.eliminar")
        if self.repo.get_by_id(cita_id) is None:
            raise NotFoundError(f"No existe la cita {cita_id}.")
        self.repo.delete(cita_id)
        LOGGER.info("cita_eliminada", extra={"cita_id": cita_id})
