from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Optional

from consultorio.app.application.security import UserContext, user_context_from_env
from consultorio.app.infrastructure.sqlite.repos_citas import CitasRepository
from consultorio.app.infrastructure.sqlite.repos_configuracion import ConfiguracionRepository
from consultorio.app.infrastructure.sqlite.repos_historias import HistoriasClinicasRepository
from consultorio.app.infrastructure.sqlite.repos_pacientes import PacientesRepository


@dataclass(slots=True)
class AppContainer:
    connection: sqlite3.Connection

    citas_repo: CitasRepository
    configuracion_repo: ConfiguracionRepository
    pacientes_repo: PacientesRepository
    historias_repo: HistoriasClinicasRepository

    user_context: UserContext

    def close(self) -> None:
        self.connection.close()


def build_container(
    connection: sqlite3.Connection,
    user_context: Optional[UserContext] = None,
) -> AppContainer:
    connection.row_factory = sqlite3.Row
    return AppContainer(
        connection=connection,
        citas_repo=CitasRepository(connection),
        configuracion_repo=ConfiguracionRepository(connection),
        pacientes_repo=PacientesRepository(connection),
        historias_repo=HistoriasClinicasRepository(connection),
        user_context=user_context or user_context_from_env(),
    )
