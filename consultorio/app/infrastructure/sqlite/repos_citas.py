# infrastructure/sqlite/repos_citas.py
"""
Repositorio SQLite para Citas.

Responsabilidades:
- CRUD de citas (el borrado es físico)
- Consultas por médico/fecha y por rango con filtros simples
- Traducir la violación del índice único (medico_id, fecha, hora) a ConflictoAgendaError
- Conversión fila <-> modelo de dominio

No contiene:
- Cálculo de horarios ni días laborables
- Reglas de transición de estado
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from typing import List, Optional

from consultorio.app.domain.citas import Cita, mensaje_conflicto
from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.exceptions import ConflictoAgendaError, ValidationError
from consultorio.app.domain.repositorios import RepositorioCitas
from consultorio.app.infrastructure.sqlite.sqlite_datetime_codecs import (
    adapt_date,
    adapt_time,
    deserialize_date,
    deserialize_datetime,
    deserialize_time,
    now_text,
)


logger = logging.getLogger(__name__)

_INDICE_UNICO = "ux_citas_medico_fecha_hora"


def _es_violacion_unicidad(exc: sqlite3.IntegrityError) -> bool:
    mensaje = str(exc)
    return _INDICE_UNICO in mensaje or "UNIQUE constraint failed: citas" in mensaje


def _escapar_like(texto: str) -> str:
    return texto.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CitasRepository(RepositorioCitas):
    """
    Repositorio de acceso a datos para citas.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._con = connection

    # --------------------------------------------------------------
    # CRUD
    # --------------------------------------------------------------

    def create(self, cita: Cita) -> int:
        """
        Inserta una cita y devuelve su id.
        """
        cita.validar()
        try:
            cur = self._con.execute(
                """
                INSERT INTO citas (
                    fecha, hora, medico_id,
                    paciente_id, paciente_nombre, paciente_telefono,
                    tipo_consulta, estado, notas, creada_en
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    adapt_date(cita.fecha),
                    adapt_time(cita.hora),
                    cita.medico_id,
                    cita.paciente_id,
                    cita.paciente_nombre,
                    cita.paciente_telefono,
                    cita.tipo_consulta,
                    cita.estado.value,
                    cita.notas,
                    now_text(),
                ),
            )
        except sqlite3.IntegrityError as exc:
            self._con.rollback()
            if not _es_violacion_unicidad(exc):
                raise
            raise self._conflicto(cita) from exc
        self._con.commit()
        return int(cur.lastrowid)

    def update(self, cita: Cita) -> None:
        """
        Actualiza una cita existente.
        """
        if not cita.id:
            raise ValidationError("No se puede actualizar una cita sin id.")

        cita.validar()
        try:
            self._con.execute(
                """
                UPDATE citas SET
                    fecha = ?,
                    hora = ?,
                    medico_id = ?,
                    paciente_id = ?,
                    paciente_nombre = ?,
                    paciente_telefono = ?,
                    tipo_consulta = ?,
                    estado = ?,
                    notas = ?
                WHERE id = ?
                """,
                (
                    adapt_date(cita.fecha),
                    adapt_time(cita.hora),
                    cita.medico_id,
                    cita.paciente_id,
                    cita.paciente_nombre,
                    cita.paciente_telefono,
                    cita.tipo_consulta,
                    cita.estado.value,
                    cita.notas,
                    cita.id,
                ),
            )
        except sqlite3.IntegrityError as exc:
            self._con.rollback()
            if not _es_violacion_unicidad(exc):
                raise
            raise self._conflicto(cita) from exc
        self._con.commit()

    def delete(self, cita_id: int) -> None:
        """
        Borrado físico de la cita.
        """
        self._con.execute("DELETE FROM citas WHERE id = ?", (cita_id,))
        self._con.commit()

    def get_by_id(self, cita_id: int) -> Optional[Cita]:
        row = self._con.execute(
            "SELECT * FROM citas WHERE id = ?",
            (cita_id,),
        ).fetchone()

        return self._row_to_model(row) if row else None

    # --------------------------------------------------------------
    # Consultas
    # --------------------------------------------------------------

    def list_by_medico_fecha(self, medico_id: str, fecha: date) -> List[Cita]:
        if not medico_id:
            raise ValidationError("medico_id obligatorio.")

        try:
            rows = self._con.execute(
                """
                SELECT *
                FROM citas
                WHERE medico_id = ?
                  AND fecha = ?
                ORDER BY hora, id
                """,
                (medico_id, adapt_date(fecha)),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error SQL en CitasRepository.list_by_medico_fecha: %s", exc)
            return []
        return [self._row_to_model(r) for r in rows]

    def list_in_range(
        self,
        *,
        desde: Optional[date] = None,
        hasta: Optional[date] = None,
        medico_id: Optional[str] = None,
        estado: Optional[EstadoCita] = None,
        texto: Optional[str] = None,
    ) -> List[Cita]:
        """Lista citas ordenadas por (fecha, hora) con filtros opcionales."""
        if desde and hasta and hasta < desde:
            raise ValidationError("Rango inválido: 'hasta' debe ser >= 'desde'.")

        clauses: list[str] = []
        params: list[str] = []
        if desde:
            clauses.append("fecha >= ?")
            params.append(adapt_date(desde))
        if hasta:
            clauses.append("fecha <= ?")
            params.append(adapt_date(hasta))
        if medico_id:
            clauses.append("medico_id = ?")
            params.append(medico_id)
        if estado:
            clauses.append("estado = ?")
            params.append(estado.value)
        if texto:
            clauses.append("lower(paciente_nombre) LIKE ? ESCAPE '\\'")
            params.append(f"%{_escapar_like(texto.strip().lower())}%")

        sql = "SELECT * FROM citas"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY fecha, hora, id"
        try:
            rows = self._con.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error SQL en CitasRepository.list_in_range: %s", exc)
            return []
        return [self._row_to_model(r) for r in rows]

    # --------------------------------------------------------------
    # Interno
    # --------------------------------------------------------------

    def _conflicto(self, cita: Cita) -> ConflictoAgendaError:
        existente = next(
            (
                c
                for c in self.list_by_medico_fecha(cita.medico_id, cita.fecha)
                if c.hora == cita.hora and c.estado != EstadoCita.CANCELADA and c.id != cita.id
            ),
            None,
        )
        logger.warning(
            "cita_conflicto_storage medico_id=%s fecha=%s hora=%s",
            cita.medico_id,
            cita.fecha.isoformat(),
            cita.hora_texto,
        )
        return ConflictoAgendaError(
            mensaje_conflicto(cita.fecha, cita.hora, existente.paciente_nombre if existente else None),
            cita_existente=existente,
        )

    def _row_to_model(self, row: sqlite3.Row) -> Cita:
        return Cita(
            id=row["id"],
            fecha=deserialize_date(row["fecha"]),
            hora=deserialize_time(row["hora"]),
            medico_id=row["medico_id"],
            paciente_id=row["paciente_id"],
            paciente_nombre=row["paciente_nombre"],
            paciente_telefono=row["paciente_telefono"],
            tipo_consulta=row["tipo_consulta"],
            estado=EstadoCita(row["estado"]),
            notas=row["notas"],
            creada_en=deserialize_datetime(row["creada_en"]),
        )
