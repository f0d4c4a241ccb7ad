# infrastructure/sqlite/repos_pacientes.py
"""
Repositorio SQLite para Pacientes.

Las listas (alergias, condiciones, medicamentos) se guardan como JSON.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import List, Optional

from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.personas import Paciente
from consultorio.app.domain.repositorios import RepositorioPacientes
from consultorio.app.infrastructure.sqlite.sqlite_datetime_codecs import (
    adapt_date,
    deserialize_date,
    deserialize_datetime,
    now_text,
)


logger = logging.getLogger(__name__)


class PacientesRepository(RepositorioPacientes):
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._con = connection

    def create(self, paciente: Paciente) -> int:
        paciente.validar()
        cur = self._con.execute(
            """
            INSERT INTO pacientes (
                nombre, telefono, email, fecha_nacimiento, genero, direccion,
                contacto_emergencia, telefono_emergencia, seguro,
                alergias, condiciones_medicas, medicamentos, creado_en
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (*self._valores(paciente), now_text()),
        )
        self._con.commit()
        return int(cur.lastrowid)

    def update(self, paciente: Paciente) -> None:
        if not paciente.id:
            raise ValidationError("No se puede actualizar un paciente sin id.")
        paciente.validar()
        self._con.execute(
            """
            UPDATE pacientes SET
                nombre = ?, telefono = ?, email = ?, fecha_nacimiento = ?,
                genero = ?, direccion = ?, contacto_emergencia = ?,
                telefono_emergencia = ?, seguro = ?,
                alergias = ?, condiciones_medicas = ?, medicamentos = ?
            WHERE id = ?
            """,
            (*self._valores(paciente), paciente.id),
        )
        self._con.commit()

    def delete(self, paciente_id: int) -> None:
        self._con.execute("DELETE FROM pacientes WHERE id = ?", (paciente_id,))
        self._con.commit()

    def get_by_id(self, paciente_id: int) -> Optional[Paciente]:
        row = self._con.execute("SELECT * FROM pacientes WHERE id = ?", (paciente_id,)).fetchone()
        return self._row_to_model(row) if row else None

    def search(self, texto: Optional[str] = None) -> List[Paciente]:
        """Pacientes más recientes primero; filtra por nombre, teléfono o email."""
        sql = "SELECT * FROM pacientes"
        params: list[str] = []
        if texto and texto.strip():
            patron = f"%{texto.strip().lower()}%"
            sql += " WHERE lower(nombre) LIKE ? OR lower(coalesce(email, '')) LIKE ? OR coalesce(telefono, '') LIKE ?"
            params.extend([patron, patron, patron])
        sql += " ORDER BY creado_en DESC, id DESC"
        try:
            rows = self._con.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error SQL en PacientesRepository.search: %s", exc)
            return []
        return [self._row_to_model(r) for r in rows]

    # --------------------------------------------------------------
    # Interno
    # --------------------------------------------------------------

    def _valores(self, p: Paciente) -> tuple:
        return (
            p.nombre,
            p.telefono,
            p.email,
            adapt_date(p.fecha_nacimiento) if p.fecha_nacimiento else None,
            p.genero,
            p.direccion,
            p.contacto_emergencia,
            p.telefono_emergencia,
            p.seguro,
            json.dumps(p.alergias, ensure_ascii=False),
            json.dumps(p.condiciones_medicas, ensure_ascii=False),
            json.dumps(p.medicamentos, ensure_ascii=False),
        )

    def _row_to_model(self, row: sqlite3.Row) -> Paciente:
        return Paciente(
            id=row["id"],
            nombre=row["nombre"],
            telefono=row["telefono"],
            email=row["email"],
            fecha_nacimiento=deserialize_date(row["fecha_nacimiento"]),
            genero=row["genero"],
            direccion=row["direccion"],
            contacto_emergencia=row["contacto_emergencia"],
            telefono_emergencia=row["telefono_emergencia"],
            seguro=row["seguro"],
            alergias=json.loads(row["alergias"] or "[]"),
            condiciones_medicas=json.loads(row["condiciones_medicas"] or "[]"),
            medicamentos=json.loads(row["medicamentos"] or "[]"),
            creado_en=deserialize_datetime(row["creado_en"]),
        )
