# infrastructure/sqlite/repos_configuracion.py
"""
Repositorio SQLite para la configuración de clínica (una fila por médico).

Responsabilidades:
- Lectura por médico y upsert atómico (INSERT ... ON CONFLICT DO UPDATE)
- Serializar días laborables como JSON y horas como texto HH:MM

No contiene:
- Valores por defecto (los aplica el caso de uso en el primer acceso)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Optional

from consultorio.app.domain.configuracion import ConfiguracionClinica
from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.repositorios import RepositorioConfiguraciones
from consultorio.app.domain.value_objects import parse_dias_semana
from consultorio.app.infrastructure.sqlite.sqlite_datetime_codecs import now_text


logger = logging.getLogger(__name__)

_COLUMNAS = (
    "nombre_clinica",
    "direccion_clinica",
    "telefono_clinica",
    "email_clinica",
    "descripcion_clinica",
    "nombre_medico",
    "especialidad_medico",
    "licencia_medico",
    "notificaciones",
    "recordatorios_email",
    "recordatorios_sms",
    "hora_inicio",
    "hora_fin",
    "descanso_inicio",
    "descanso_fin",
    "duracion_cita_minutos",
    "dias_laborables",
    "activa",
)


class ConfiguracionRepository(RepositorioConfiguraciones):
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._con = connection

    def get_by_medico(self, medico_id: str) -> Optional[ConfiguracionClinica]:
        if not medico_id:
            raise ValidationError("medico_id obligatorio.")
        row = self._con.execute(
            "SELECT * FROM configuraciones WHERE medico_id = ?",
            (medico_id,),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def upsert(self, configuracion: ConfiguracionClinica) -> int:
        configuracion.validar()
        valores = self._valores(configuracion)
        ahora = now_text()

        # Upsert atómico sobre UNIQUE(medico_id).
        columnas = ", ".join(("medico_id", *_COLUMNAS, "creada_en", "actualizada_en"))
        marcadores = ", ".join("?" for _ in range(len(_COLUMNAS) + 3))
        asignaciones = ",\n                ".join(f"{c} = excluded.{c}" for c in (*_COLUMNAS, "actualizada_en"))
        self._con.execute(
            f"""
            INSERT INTO configuraciones ({columnas})
            VALUES ({marcadores})
            ON CONFLICT(medico_id)
            DO UPDATE SET
                {asignaciones}
            """,
            (configuracion.medico_id, *valores, ahora, ahora),
        )
        row = self._con.execute(
            "SELECT id FROM configuraciones WHERE medico_id = ?",
            (configuracion.medico_id,),
        ).fetchone()
        self._con.commit()

        configuracion.id = int(row["id"])
        logger.info("configuracion_guardada medico_id=%s", configuracion.medico_id)
        return configuracion.id

    # --------------------------------------------------------------
    # Interno
    # --------------------------------------------------------------

    def _valores(self, c: ConfiguracionClinica) -> tuple:
        return (
            c.nombre_clinica,
            c.direccion_clinica,
            c.telefono_clinica,
            c.email_clinica,
            c.descripcion_clinica,
            c.nombre_medico,
            c.especialidad_medico,
            c.licencia_medico,
            int(c.notificaciones),
            int(c.recordatorios_email),
            int(c.recordatorios_sms),
            c.hora_inicio,
            c.hora_fin,
            c.descanso_inicio,
            c.descanso_fin,
            c.duracion_cita_minutos,
            json.dumps(c.dias_laborables_ordenados()),
            int(c.activa),
        )

    def _row_to_model(self, row: sqlite3.Row) -> ConfiguracionClinica:
        return ConfiguracionClinica(
            id=row["id"],
            medico_id=row["medico_id"],
            nombre_clinica=row["nombre_clinica"],
            direccion_clinica=row["direccion_clinica"],
            telefono_clinica=row["telefono_clinica"],
            email_clinica=row["email_clinica"],
            descripcion_clinica=row["descripcion_clinica"],
            nombre_medico=row["nombre_medico"],
            especialidad_medico=row["especialidad_medico"],
            licencia_medico=row["licencia_medico"],
            notificaciones=bool(row["notificaciones"]),
            recordatorios_email=bool(row["recordatorios_email"]),
            recordatorios_sms=bool(row["recordatorios_sms"]),
            hora_inicio=row["hora_inicio"],
            hora_fin=row["hora_fin"],
            descanso_inicio=row["descanso_inicio"],
            descanso_fin=row["descanso_fin"],
            duracion_cita_minutos=row["duracion_cita_minutos"],
            dias_laborables=parse_dias_semana(json.loads(row["dias_laborables"] or "[]")),
            activa=bool(row["activa"]),
        )
