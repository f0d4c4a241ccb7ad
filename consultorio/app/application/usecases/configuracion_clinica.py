# application/usecases/configuracion_clinica.py
"""
Casos de uso de configuración de clínica.

- Obtener: devuelve la configuración del médico; en el primer acceso crea
  y guarda la configuración por defecto (solo si el usuario puede escribir).
- Guardar: valida (incluida la instantánea de agenda) y hace upsert.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from consultorio.app.application.security import UserContext
from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.domain.calendario import CalendarioLaboral
from consultorio.app.domain.configuracion import ConfiguracionClinica
from consultorio.app.domain.repositorios import RepositorioConfiguraciones

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ObtenerConfiguracionUseCase:
    repo: RepositorioConfiguraciones
    user_context: UserContext

    def execute(self, medico_id: Optional[str] = None) -> ConfiguracionClinica:
        medico = medico_id or self.user_context.medico_id
        configuracion = self.repo.get_by_medico(medico)
        if configuracion is not None:
            return configuracion

        configuracion = ConfiguracionClinica.por_defecto(medico)
        if self.user_context.can_write:
            self.repo.upsert(configuracion)
            LOGGER.info("configuracion_por_defecto_creada", extra={"medico_id": medico})
        return configuracion

    def calendario(self, medico_id: Optional[str] = None) -> Optional[CalendarioLaboral]:
        """Instantánea de agenda del médico, o None si la configuración está incompleta."""
        return self.execute(medico_id).calendario()


@dataclass(frozen=True)
class GuardarConfiguracionUseCase:
    repo: RepositorioConfiguraciones
    user_context: UserContext

    def execute(self, configuracion: ConfiguracionClinica) -> ConfiguracionClinica:
        self.user_context.require_write("configuracion.guardar")
        if not configuracion.medico_id:
            configuracion.medico_id = self.user_context.medico_id
        self.repo.upsert(configuracion)
        return configuracion
