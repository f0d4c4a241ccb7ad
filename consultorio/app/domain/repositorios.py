from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from consultorio.app.domain.citas import Cita
from consultorio.app.domain.configuracion import ConfiguracionClinica
from consultorio.app.domain.historias import HistoriaClinica
from consultorio.app.domain.personas import Paciente
# Los casos de uso dependen de estos contratos, no de SQLite.


class RepositorioCitas(ABC):
    """
    Contrato para repositorios de citas.

    Implementaciones concretas (SQLite, memoria en tests) deben garantizar
    unicidad (medico_id, fecha, hora) entre citas no canceladas.
    """

    @abstractmethod
    def create(self, cita: Cita) -> int:
        """Inserta la cita y devuelve su ID; ConflictoAgendaError si el hueco ya está ocupado."""
        raise NotImplementedError

    @abstractmethod
    def update(self, cita: Cita) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, cita_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, cita_id: int) -> Optional[Cita]:
        raise NotImplementedError

    @abstractmethod
    def list_by_medico_fecha(self, medico_id: str, fecha: date) -> List[Cita]:
        """Citas de un médico en una fecha (incluye canceladas), ordenadas por hora."""
        raise NotImplementedError


class RepositorioConfiguraciones(ABC):
    """Contrato para la configuración de clínica por médico."""

    @abstractmethod
    def get_by_medico(self, medico_id: str) -> Optional[ConfiguracionClinica]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, configuracion: ConfiguracionClinica) -> int:
        """Actualiza si existe configuración del médico; si no, la crea. Devuelve el ID."""
        raise NotImplementedError


class RepositorioPacientes(ABC):
    @abstractmethod
    def create(self, paciente: Paciente) -> int:
        raise NotImplementedError

    @abstractmethod
    def update(self, paciente: Paciente) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, paciente_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, paciente_id: int) -> Optional[Paciente]:
        raise NotImplementedError

    @abstractmethod
    def search(self, texto: Optional[str] = None) -> List[Paciente]:
        raise NotImplementedError


class RepositorioHistoriasClinicas(ABC):
    @abstractmethod
    def create(self, historia: HistoriaClinica) -> int:
        raise NotImplementedError

    @abstractmethod
    def update(self, historia: HistoriaClinica) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, historia_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, historia_id: int) -> Optional[HistoriaClinica]:
        raise NotImplementedError

    @abstractmethod
    def list_by_paciente(self, paciente_id: int) -> List[HistoriaClinica]:
        raise NotImplementedError
