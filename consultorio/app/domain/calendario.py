"""
Calendario laboral y rejilla de horarios de cita.

Funciones puras: la configuración llega siempre como parámetro (instantánea
de solo lectura) y ninguna función consulta estado global ni la base de datos.

Reglas:
- Sin configuración no hay agenda: no es día laborable y no hay horarios.
- Los horarios se generan cada `duracion_minutos` desde `hora_inicio` y el
  fin de cada horario no puede superar `hora_fin`.
- Un horario que solapa el descanso se descarta entero (intervalos
  semiabiertos: tocar el borde del descanso no es solape).
- Conflicto = mismo médico, misma fecha y misma hora exacta, ignorando
  citas canceladas (todas las citas caen en la misma rejilla).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Optional, Union

from consultorio.app.domain.citas import CandidatoCita, Cita
from consultorio.app.domain.enums import DiaSemana, EstadoCita
from consultorio.app.domain.exceptions import ConfiguracionInvalidaError, ValidationError
from consultorio.app.domain.value_objects import (
    format_hora,
    parse_dias_semana,
    parse_fecha,
    parse_hora,
    parse_hora_opcional,
)

_MINUTOS_DIA = 24 * 60


@dataclass(frozen=True, slots=True)
class CalendarioLaboral:
    """Instantánea inmutable de los campos de agenda de una configuración."""

    dias_laborables: frozenset[DiaSemana]
    hora_inicio: time
    hora_fin: time
    duracion_minutos: int
    descanso_inicio: Optional[time] = None
    descanso_fin: Optional[time] = None

    @classmethod
    def desde_valores(
        cls,
        *,
        dias_laborables: Iterable[Union[DiaSemana, str]],
        hora_inicio: Union[time, str],
        hora_fin: Union[time, str],
        duracion_minutos: int,
        descanso_inicio: Union[time, str, None] = None,
        descanso_fin: Union[time, str, None] = None,
    ) -> "CalendarioLaboral":
        calendario = cls(
            dias_laborables=parse_dias_semana(dias_laborables),
            hora_inicio=parse_hora(hora_inicio, "hora_inicio"),
            hora_fin=parse_hora(hora_fin, "hora_fin"),
            duracion_minutos=_parse_duracion(duracion_minutos),
            descanso_inicio=parse_hora_opcional(descanso_inicio, "descanso_inicio"),
            descanso_fin=parse_hora_opcional(descanso_fin, "descanso_fin"),
        )
        calendario.validar()
        return calendario

    @property
    def tiene_descanso(self) -> bool:
        return self.descanso_inicio is not None and self.descanso_fin is not None

    def validar(self) -> None:
        if self.duracion_minutos <= 0:
            raise ConfiguracionInvalidaError("La duración de cita debe ser mayor que 0 minutos.")

        inicio = minutos_desde_medianoche(self.hora_inicio)
        fin = minutos_desde_medianoche(self.hora_fin)
        if fin <= inicio:
            raise ConfiguracionInvalidaError(
                f"Horario laboral vacío: fin {format_hora(self.hora_fin)} "
                f"no es posterior a inicio {format_hora(self.hora_inicio)}."
            )

        if (self.descanso_inicio is None) != (self.descanso_fin is None):
            raise ConfiguracionInvalidaError("Descanso incompleto: indica inicio y fin o ninguno.")
        if not self.tiene_descanso:
            return

        d_inicio = minutos_desde_medianoche(self.descanso_inicio)
        d_fin = minutos_desde_medianoche(self.descanso_fin)
        if d_fin <= d_inicio:
            raise ConfiguracionInvalidaError("El fin del descanso debe ser posterior a su inicio.")
        if d_inicio < inicio or d_fin > fin:
            raise ConfiguracionInvalidaError("El descanso debe quedar dentro del horario laboral.")


# ---------------------------------------------------------------------
# Operaciones
# ---------------------------------------------------------------------


def es_dia_laborable(calendario: Optional[CalendarioLaboral], fecha: Union[date, str]) -> bool:
    """Indica si la fecha cae en uno de los días laborables configurados."""
    if calendario is None:
        return False
    dia = DiaSemana.desde_fecha_weekday(parse_fecha(fecha).weekday())
    return dia in calendario.dias_laborables


def obtener_horarios_disponibles(
    calendario: Optional[CalendarioLaboral],
    fecha: Union[date, str, None] = None,
) -> list[str]:
    """
    Rejilla teórica de horarios (HH:MM, ascendente) para un día.

    No tiene en cuenta citas ya reservadas. La fecha no altera la rejilla;
    se acepta para permitir horarios distintos por día de la semana.
    """
    if calendario is None:
        return []
    if fecha is not None:
        parse_fecha(fecha)
    calendario.validar()
    return [formatear_hora(t) for t in _iterar_inicios(calendario)]


def contar_slots(calendario: Optional[CalendarioLaboral]) -> int:
    return len(obtener_horarios_disponibles(calendario))


def es_horario_valido(calendario: Optional[CalendarioLaboral], hora: Union[time, str]) -> bool:
    """Indica si la hora coincide con un inicio de la rejilla."""
    if calendario is None:
        return False
    return format_hora(parse_hora(hora, error_cls=ValidationError)) in obtener_horarios_disponibles(calendario)


def buscar_conflicto(citas_existentes: Iterable[Cita], candidato: CandidatoCita) -> Optional[Cita]:
    """Primera cita no cancelada con la misma fecha, hora y médico que el candidato."""
    for cita in citas_existentes:
        if cita.estado == EstadoCita.CANCELADA:
            continue
        if candidato.excluir_id is not None and cita.id == candidato.excluir_id:
            continue
        if cita.fecha == candidato.fecha and cita.hora == candidato.hora and cita.medico_id == candidato.medico_id:
            return cita
    return None


# ---------------------------------------------------------------------
# Aritmética de minutos
# ---------------------------------------------------------------------


def minutos_desde_medianoche(value: time) -> int:
    return value.hour * 60 + value.minute


def formatear_hora(minutos: int) -> str:
    if not 0 <= minutos < _MINUTOS_DIA:
        raise ValueError(f"Minutos fuera del día: {minutos}")
    return format_hora(time(minutos // 60, minutos % 60))


def _iterar_inicios(calendario: CalendarioLaboral):
    inicio = minutos_desde_medianoche(calendario.hora_inicio)
    fin = minutos_desde_medianoche(calendario.hora_fin)
    duracion = calendario.duracion_minutos
    if calendario.tiene_descanso:
        d_inicio = minutos_desde_medianoche(calendario.descanso_inicio)
        d_fin = minutos_desde_medianoche(calendario.descanso_fin)
    else:
        d_inicio = d_fin = None

    for t in range(inicio, fin, duracion):
        if t + duracion > fin:
            break
        # Solape semiabierto [t, t+duracion) vs [d_inicio, d_fin)
        if d_inicio is not None and t < d_fin and t + duracion > d_inicio:
            continue
        yield t


def _parse_duracion(value: Union[int, str]) -> int:
    if isinstance(value, bool):
        raise ConfiguracionInvalidaError(f"Duración de cita inválida: {value!r}.")
    try:
        duracion = int(value)
    except (TypeError, ValueError) as e:
        raise ConfiguracionInvalidaError(f"Duración de cita inválida: {value!r}.") from e
    if isinstance(value, float) and value != duracion:
        raise ConfiguracionInvalidaError(f"Duración de cita debe ser un entero: {value!r}.")
    return duracion
