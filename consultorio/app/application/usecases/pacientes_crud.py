from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from consultorio.app.application.security import UserContext
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.domain.exceptions import NotFoundError
from consultorio.app.domain.personas import Paciente
from consultorio.app.domain.repositorios import RepositorioPacientes

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CrearPacienteUseCase:
    repo: RepositorioPacientes
    user_context: UserContext

    def execute(self, paciente: Paciente) -> int:
        self.user_context.require_write("pacientes.crear")
        paciente.id = self.repo.create(paciente)
        LOGGER.info("paciente_creado paciente_id=%s", paciente.id)
        return paciente.id


@dataclass(frozen=True)
class EditarPacienteUseCase:
    repo: RepositorioPacientes
    user_context: UserContext

    def execute(self, paciente: Paciente) -> None:
        self.user_context.require_write("pacientes.editar")
        if not paciente.id or self.repo.get_by_id(paciente.id) is None:
            raise NotFoundError(f"No existe el paciente {paciente.id}.")
        self.repo.update(paciente)


@dataclass(frozen=True)
class EliminarPacienteUseCase:
    """Borrado físico; sus citas conservan nombre y teléfono sin enlace al paciente."""

    repo: RepositorioPacientes
    user_context: UserContext

    def execute(self, paciente_id: int) -> None:
        self.user_context.require_write("pacientes.eliminar")
        if self.repo.get_by_id(paciente_id) is None:
            raise NotFoundError(f"No existe el paciente {paciente_id}.")
        self.repo.delete(paciente_id)
        LOGGER.info("paciente_eliminado paciente_id=%s", paciente_id)


@dataclass(frozen=True)
class BuscarPacientesUseCase:
    repo: RepositorioPacientes

    def execute(self, texto: Optional[str] = None) -> List[Paciente]:
        return self.repo.search(texto)
