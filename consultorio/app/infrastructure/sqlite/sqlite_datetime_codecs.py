from __future__ import annotations

import sqlite3
from datetime import date, datetime, time

from consultorio.app.domain.value_objects import format_hora, parse_fecha, parse_hora

_CODECS_REGISTERED = False


def register_sqlite_datetime_codecs() -> None:
    """
    Registra adapters explícitos (los de sqlite3 por defecto están deprecados).

    Las fechas viajan como 'YYYY-MM-DD' y las horas como 'HH:MM' para que la
    comparación textual en SQL coincida con la de la rejilla de horarios.
    """
    global _CODECS_REGISTERED
    if _CODECS_REGISTERED:
        return
    sqlite3.register_adapter(datetime, adapt_datetime)
    sqlite3.register_adapter(date, adapt_date)
    sqlite3.register_adapter(time, adapt_time)
    _CODECS_REGISTERED = True


def adapt_datetime(value: datetime) -> str:
    return value.isoformat(sep=" ", timespec="seconds")


def adapt_date(value: date) -> str:
    return value.isoformat()


def adapt_time(value: time) -> str:
    return format_hora(value)


def deserialize_datetime(value: datetime | str | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def deserialize_date(value: date | str | None) -> date | None:
    if value is None:
        return None
    return parse_fecha(value)


def deserialize_time(value: time | str) -> time:
    return parse_hora(value)


def now_text() -> str:
    return adapt_datetime(datetime.now().replace(microsecond=0))
