"""Utilidades internas de dominio: normalización y parseo de campos."""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Iterable, Optional, Union

from consultorio.app.domain.enums import DiaSemana
from consultorio.app.domain.exceptions import ConfiguracionInvalidaError, ValidationError

_HORA_RE = re.compile(r"^(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2}))?$")
_FECHA_RE = re.compile(r"^(?P<y>\d{4})-(?P<m>\d{2})-(?P<d>\d{2})$")

_ALIAS_DIAS = {
    "lunes": DiaSemana.LUNES,
    "martes": DiaSemana.MARTES,
    "miercoles": DiaSemana.MIERCOLES,
    "miércoles": DiaSemana.MIERCOLES,
    "jueves": DiaSemana.JUEVES,
    "viernes": DiaSemana.VIERNES,
    "sabado": DiaSemana.SABADO,
    "sábado": DiaSemana.SABADO,
    "domingo": DiaSemana.DOMINGO,
}


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    """Normaliza strings opcionales: devuelve None si queda vacío tras strip()."""
    if value is None:
        return None
    v = value.strip()
    return v if v else None


def _require_non_empty(value: Optional[str], field_name: str) -> str:
    """Exige string no vacío; lanza ValidationError si no cumple."""
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"Campo obligatorio: {field_name}.")
    return v


def _validate_email_basic(email: Optional[str]) -> None:
    """Validación básica de email (no pretende ser RFC completa)."""
    if email is None:
        return
    e = email.strip()
    if not e:
        return
    if "@" not in e or "." not in e.split("@")[-1]:
        raise ValidationError("Email no parece válido.")


def _validate_phone_basic(phone: Optional[str]) -> None:
    """Teléfono: dígitos con separadores habituales y prefijo + opcional."""
    if phone is None:
        return
    t = re.sub(r"[\s\-().]", "", phone.strip())
    if not t:
        return
    if t.startswith("+"):
        t = t[1:]
    if not t.isdigit():
        raise ValidationError("Teléfono debe ser numérico si se indica.")


def _ensure_positive_id(value: Optional[int], field_name: str) -> None:
    if value is None or value <= 0:
        raise ValidationError(f"{field_name} inválido.")


def _clean_list(values: Optional[Iterable[str]]) -> list[str]:
    """Limpia listas de texto libre (alergias, medicamentos...) sin duplicados."""
    if not values:
        return []
    vistos: list[str] = []
    for raw in values:
        item = (raw or "").strip()
        if item and item not in vistos:
            vistos.append(item)
    return vistos


# ---------------------------------------------------------------------
# Fechas y horas
# ---------------------------------------------------------------------


def parse_fecha(value: Union[date, str], field_name: str = "fecha") -> date:
    """
    Convierte a date sin pasar por ninguna zona horaria.

    Las cadenas ISO se descomponen en año/mes/día y se construye la fecha
    a partir de los componentes; una fecha-hora completa se rechaza.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    m = _FECHA_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"{field_name}: formato inválido. Usa AAAA-MM-DD.")
    try:
        return date(int(m.group("y")), int(m.group("m")), int(m.group("d")))
    except ValueError as e:
        raise ValidationError(f"{field_name}: fecha inexistente ({value}).") from e


def parse_hora(
    value: Union[time, str],
    field_name: str = "hora",
    *,
    error_cls: type[ValidationError] = ConfiguracionInvalidaError,
) -> time:
    """Parsea HH:MM (24h). Segundos opcionales, deben ser 0."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    m = _HORA_RE.match((value or "").strip())
    if not m:
        raise error_cls(f"{field_name}: hora inválida '{value}'. Usa HH:MM.")
    h, mi, s = int(m.group("h")), int(m.group("m")), int(m.group("s") or 0)
    if h > 23 or mi > 59 or s != 0:
        raise error_cls(f"{field_name}: hora fuera de rango '{value}'.")
    return time(h, mi)


def parse_hora_opcional(value: Union[time, str, None], field_name: str) -> Optional[time]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_hora(value, field_name)


def format_hora(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def parse_dia_semana(value: Union[DiaSemana, str]) -> DiaSemana:
    if isinstance(value, DiaSemana):
        return value
    key = (value or "").strip().lower()
    if key in _ALIAS_DIAS:
        return _ALIAS_DIAS[key]
    try:
        return DiaSemana(key)
    except ValueError as e:
        raise ConfiguracionInvalidaError(f"Día laborable desconocido: '{value}'.") from e


def parse_dias_semana(values: Optional[Iterable[Union[DiaSemana, str]]]) -> frozenset[DiaSemana]:
    if not values:
        return frozenset()
    return frozenset(parse_dia_semana(v) for v in values)
