# infrastructure/sqlite/repos_historias.py
"""Repositorio SQLite para entradas de historia clínica."""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from consultorio.app.domain.exceptions import ValidationError
from consultorio.app.domain.historias import HistoriaClinica
from consultorio.app.domain.repositorios import RepositorioHistoriasClinicas
from consultorio.app.infrastructure.sqlite.sqlite_datetime_codecs import (
    adapt_date,
    deserialize_date,
    deserialize_datetime,
    now_text,
)


logger = logging.getLogger(__name__)


class HistoriasClinicasRepository(RepositorioHistoriasClinicas):
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._con = connection

    def create(self, historia: HistoriaClinica) -> int:
        historia.validar()
        cur = self._con.execute(
            """
            INSERT INTO historias_clinicas (
                paciente_id, paciente_nombre, medico_id, fecha, tipo_consulta,
                sintomas, diagnostico, tratamiento, medicamentos, notas,
                fecha_seguimiento, creada_en
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (*self._valores(historia), now_text()),
        )
        self._con.commit()
        return int(cur.lastrowid)

    def update(self, historia: HistoriaClinica) -> None:
        if not historia.id:
            raise ValidationError("No se puede actualizar una historia clínica sin id.")
        historia.validar()
        self._con.execute(
            """
            UPDATE historias_clinicas SET
                paciente_id = ?, paciente_nombre = ?, medico_id = ?, fecha = ?,
                tipo_consulta = ?, sintomas = ?, diagnostico = ?, tratamiento = ?,
                medicamentos = ?, notas = ?, fecha_seguimiento = ?
            WHERE id = ?
            """,
            (*self._valores(historia), historia.id),
        )
        self._con.commit()

    def delete(self, historia_id: int) -> None:
        self._con.execute("DELETE FROM historias_clinicas WHERE id = ?", (historia_id,))
        self._con.commit()

    def get_by_id(self, historia_id: int) -> Optional[HistoriaClinica]:
        row = self._con.execute(
            "SELECT * FROM historias_clinicas WHERE id = ?", (historia_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def list_by_paciente(self, paciente_id: int) -> List[HistoriaClinica]:
        """Historias de un paciente, la más reciente primero."""
        if paciente_id <= 0:
            raise ValidationError("paciente_id inválido.")
        try:
            rows = self._con.execute(
                """
                SELECT * FROM historias_clinicas
                WHERE paciente_id = ?
                ORDER BY fecha DESC, id DESC
                """,
                (paciente_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error SQL en HistoriasClinicasRepository.list_by_paciente: %s", exc)
            return []
        return [self._row_to_model(r) for r in rows]

    def _valores(self, h: HistoriaClinica) -> tuple:
        return (
            h.paciente_id,
            h.paciente_nombre,
            h.medico_id,
            adapt_date(h.fecha),
            h.tipo_consulta,
            h.sintomas,
            h.diagnostico,
            h.tratamiento,
            h.medicamentos,
            h.notas,
            adapt_date(h.fecha_seguimiento) if h.fecha_seguimiento else None,
        )

    def _row_to_model(self, row: sqlite3.Row) -> HistoriaClinica:
        return HistoriaClinica(
            id=row["id"],
            paciente_id=row["paciente_id"],
            paciente_nombre=row["paciente_nombre"],
            medico_id=row["medico_id"],
            fecha=deserialize_date(row["fecha"]),
            tipo_consulta=row["tipo_consulta"],
            sintomas=row["sintomas"],
            diagnostico=row["diagnostico"],
            tratamiento=row["tratamiento"],
            medicamentos=row["medicamentos"],
            notas=row["notas"],
            fecha_seguimiento=deserialize_date(row["fecha_seguimiento"]),
            creada_en=deserialize_datetime(row["creada_en"]),
        )
