from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

_REDACTED = "***"

_EMAIL_RE = re.compile(r"(?P<user>[A-Za-z0-9._%+-]+)@(?P<domain>[A-Za-z0-9.-]+\.[A-Za-z]{2,})")
_PHONE_RE = re.compile(r"(?<!\w)(?!\d{4}-\d{2}-\d{2}(?!\d))\+?\d[\d\s().-]{7,}\d")
_MIN_DIGITOS_TELEFONO = 9
# "(Paciente: Ana López)" en los mensajes de conflicto de agenda
_PACIENTE_RE = re.compile(r"(?i)(paciente:\s*)[^)\n]+")

_SENSITIVE_KEY_PARTS = (
    "telefono",
    "teléfono",
    "phone",
    "email",
    "correo",
    "nombre",
    "paciente_nombre",
    "contacto",
    "direccion",
    "diagnostico",
    "sintomas",
)


def redact_text(value: str) -> str:
    redacted = _EMAIL_RE.sub(_REDACTED, value)
    redacted = _PHONE_RE.sub(_redact_phone, redacted)
    redacted = _PACIENTE_RE.sub(lambda m: m.group(1) + _REDACTED, redacted)
    return redacted


def redact_value(value: Any, *, key: str | None = None) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        if key and _is_sensitive_key(key):
            return _REDACTED
        return redact_text(value)
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_value(item, key=key) for item in value]
    return value


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(part in lowered for part in _SENSITIVE_KEY_PARTS)


def _redact_phone(match: re.Match[str]) -> str:
    # Fechas y horas también encajan en el patrón; un teléfono tiene al menos 9 dígitos.
    texto = match.group(0)
    if sum(ch.isdigit() for ch in texto) < _MIN_DIGITOS_TELEFONO:
        return texto
    return _REDACTED
