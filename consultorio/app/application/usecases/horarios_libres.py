# application/usecases/horarios_libres.py
"""
Caso de uso: horarios libres de un médico en una fecha.

Combina la rejilla teórica del calendario laboral con las citas ya
reservadas (las canceladas no ocupan hueco).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from consultorio.app.application.usecases.configuracion_clinica import ObtenerConfiguracionUseCase
from consultorio.app.container import AppContainer
from consultorio.app.domain.calendario import es_dia_laborable, obtener_horarios_disponibles
from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.value_objects import parse_fecha


@dataclass(slots=True)
class HorariosLibresResult:
    fecha: date
    es_laborable: bool
    libres: List[str] = field(default_factory=list)
    ocupados: List[str] = field(default_factory=list)


class ObtenerHorariosLibresUseCase:
    def __init__(self, container: AppContainer) -> None:
        self._c = container

    def execute(self, fecha: Union[date, str], medico_id: Optional[str] = None) -> HorariosLibresResult:
        dia = parse_fecha(fecha)
        medico = medico_id or self._c.user_context.medico_id
        calendario = ObtenerConfiguracionUseCase(
            self._c.configuracion_repo, self._c.user_context
        ).calendario(medico)

        if not es_dia_laborable(calendario, dia):
            return HorariosLibresResult(fecha=dia, es_laborable=False)

        ocupados = {
            c.hora_texto
            for c in self._c.citas_repo.list_by_medico_fecha(medico, dia)
            if c.estado != EstadoCita.CANCELADA
        }
        rejilla = obtener_horarios_disponibles(calendario, dia)
        return HorariosLibresResult(
            fecha=dia,
            es_laborable=True,
            libres=[h for h in rejilla if h not in ocupados],
            ocupados=sorted(ocupados),
        )
