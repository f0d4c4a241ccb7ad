"""Entradas de historia clínica (tabla SQL: historias_clinicas)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.value_objects import (
    _ensure_positive_id,
    _require_non_empty,
    _strip_or_none,
    parse_fecha,
)


@dataclass(slots=True)
class HistoriaClinica:
    id: Optional[int] = None
    paciente_id: int = 0
    paciente_nombre: str = ""
    medico_id: str = ""
    fecha: date = field(default_factory=date.today)
    tipo_consulta: str = ""
    sintomas: Optional[str] = None
    diagnostico: Optional[str] = None
    tratamiento: Optional[str] = None
    medicamentos: Optional[str] = None
    notas: Optional[str] = None
    fecha_seguimiento: Optional[date] = None
    creada_en: Optional[datetime] = None

    def validar(self) -> None:
        _ensure_positive_id(self.paciente_id, "paciente_id")
        self.paciente_nombre = _require_non_empty(self.paciente_nombre, "paciente_nombre")
        self.medico_id = _require_non_empty(self.medico_id, "medico_id")
        self.tipo_consulta = _require_non_empty(self.tipo_consulta, "tipo_consulta")
        self.fecha = parse_fecha(self.fecha)

        self.sintomas = _strip_or_none(self.sintomas)
        self.diagnostico = _strip_or_none(self.diagnostico)
        self.tratamiento = _strip_or_none(self.tratamiento)
        self.medicamentos = _strip_or_none(self.medicamentos)
        self.notas = _strip_or_none(self.notas)

        if self.fecha_seguimiento is not None:
            self.fecha_seguimiento = parse_fecha(self.fecha_seguimiento, "fecha_seguimiento")
            if self.fecha_seguimiento < self.fecha:
                raise ValidationError("La fecha de seguimiento no puede ser anterior a la consulta.")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["fecha"] = self.fecha.isoformat()
        if self.fecha_seguimiento is not None:
            data["fecha_seguimiento"] = self.fecha_seguimiento.isoformat()
        if self.creada_en is not None:
            data["creada_en"] = self.creada_en.isoformat(sep=" ", timespec="seconds")
        return data
