"""Entidades de dominio relacionadas con personas."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.value_objects import (
    _clean_list,
    _require_non_empty,
    _strip_or_none,
    _validate_email_basic,
    _validate_phone_basic,
)


@dataclass(slots=True)
class Paciente:
    """Paciente (tabla SQL: pacientes)."""

    id: Optional[int] = None
    nombre: str = ""
    telefono: Optional[str] = None
    email: Optional[str] = None
    fecha_nacimiento: Optional[date] = None
    genero: Optional[str] = None
    direccion: Optional[str] = None
    contacto_emergencia: Optional[str] = None
    telefono_emergencia: Optional[str] = None
    seguro: Optional[str] = None
    alergias: List[str] = field(default_factory=list)
    condiciones_medicas: List[str] = field(default_factory=list)
    medicamentos: List[str] = field(default_factory=list)
    creado_en: Optional[datetime] = None

    def validar(self, *, hoy: Optional[date] = None) -> None:
        self.nombre = _require_non_empty(self.nombre, "nombre")

        for campo in (
            "telefono",
            "email",
            "genero",
            "direccion",
            "contacto_emergencia",
            "telefono_emergencia",
            "seguro",
        ):
            setattr(self, campo, _strip_or_none(getattr(self, campo)))

        _validate_phone_basic(self.telefono)
        _validate_phone_basic(self.telefono_emergencia)
        _validate_email_basic(self.email)

        if self.fecha_nacimiento is not None and self.fecha_nacimiento > (hoy or date.today()):
            raise ValidationError("La fecha de nacimiento no puede ser futura.")

        self.alergias = _clean_list(self.alergias)
        self.condiciones_medicas = _clean_list(self.condiciones_medicas)
        self.medicamentos = _clean_list(self.medicamentos)

    def edad(self, hoy: Optional[date] = None) -> Optional[int]:
        if self.fecha_nacimiento is None:
            return None
        ref = hoy or date.today()
        fn = self.fecha_nacimiento
        return ref.year - fn.year - ((ref.month, ref.day) < (fn.month, fn.day))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.fecha_nacimiento is not None:
            data["fecha_nacimiento"] = self.fecha_nacimiento.isoformat()
        if self.creado_en is not None:
            data["creado_en"] = self.creado_en.isoformat(sep=" ", timespec="seconds")
        return data
