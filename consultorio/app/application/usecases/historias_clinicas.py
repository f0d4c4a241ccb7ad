# application/usecases/historias_clinicas.py
"""Altas, ediciones, bajas y consulta de entradas de historia clínica."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from consultorio.app.application.security import UserContext
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.domain.exceptions import NotFoundError
from consultorio.app.domain.historias import HistoriaClinica
from consultorio.app.domain.repositorios import RepositorioHistoriasClinicas, RepositorioPacientes

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CrearHistoriaClinicaUseCase:
    repo: RepositorioHistoriasClinicas
    pacientes_repo: RepositorioPacientes
    user_context: UserContext

    def execute(self, historia: HistoriaClinica) -> int:
        self.user_context.require_write("historias.crear")
        paciente = self.pacientes_repo.get_by_id(historia.paciente_id)
        if paciente is None:
            raise NotFoundError(f"No existe el paciente {historia.paciente_id}.")
        # El nombre se copia para que la entrada sea legible sin join.
        if not (historia.paciente_nombre or "").strip():
            historia.paciente_nombre = paciente.nombre
        if not (historia.medico_id or "").strip():
            historia.medico_id = self.user_context.medico_id

        historia.id = self.repo.create(historia)
        LOGGER.info(
            "historia_creada historia_id=%s paciente_id=%s",
            historia.id,
            historia.paciente_id,
        )
        return historia.id


@dataclass(frozen=True)
class EditarHistoriaClinicaUseCase:
    repo: RepositorioHistoriasClinicas
    pacientes_repo: RepositorioPacientes
    user_context: UserContext

    def execute(self, historia: HistoriaClinica) -> None:
        self.user_context.require_write("historias.editar")
        if not historia.id or self.repo.get_by_id(historia.id) is None:
            raise NotFoundError(f"No existe la historia clínica {historia.id}.")
        if self.pacientes_repo.get_by_id(historia.paciente_id) is None:
            raise NotFoundError(f"No existe el paciente {historia.paciente_id}.")
        self.repo.update(historia)


@dataclass(frozen=True)
class EliminarHistoriaClinicaUseCase:
    repo: RepositorioHistoriasClinicas
    user_context: UserContext

    def execute(self, historia_id: int) -> None:
        self.user_context.require_write("historias.eliminar")
        if self.repo.get_by_id(historia_id) is None:
            raise NotFoundError(f"No existe la historia clínica {historia_id}.")
        self.repo.delete(historia_id)


@dataclass(frozen=True)
class ListarHistoriasPacienteUseCase:
    repo: RepositorioHistoriasClinicas

    def execute(self, paciente_id: int) -> List[HistoriaClinica]:
        return self.repo.list_by_paciente(paciente_id)
