from __future__ import annotations

import difflib
import pprint
import sqlite3
from pathlib import Path
from typing import Any, Dict

import pytest

from consultorio.app.application.security import Role, UserContext
from consultorio.app.container import build_container
from consultorio.app.domain.calendario import CalendarioLaboral
from consultorio.app.domain.citas import Cita
from consultorio.app.domain.configuracion import ConfiguracionClinica
from consultorio.app.domain.enums import DIAS_LABORABLES_POR_DEFECTO
from consultorio.app.infrastructure.sqlite.sqlite_datetime_codecs import (
    register_sqlite_datetime_codecs,
)

MEDICO_ID = "D1"


def _apply_pragmas(con: sqlite3.Connection) -> None:
    con.execute("PRAGMA foreign_keys = ON;")
    con.execute("PRAGMA journal_mode = WAL;")
    con.execute("PRAGMA synchronous = NORMAL;")
    con.execute("PRAGMA busy_timeout = 5000;")


def _apply_schema(con: sqlite3.Connection) -> None:
    repo_root = Path(__file__).resolve().parents[1]
    schema_path = repo_root / "consultorio" / "app" / "infrastructure" / "sqlite" / "schema.sql"
    con.executescript(schema_path.read_text(encoding="utf-8"))
    con.commit()


@pytest.fixture()
def db_connection(tmp_path: Path) -> sqlite3.Connection:
    register_sqlite_datetime_codecs()
    con = sqlite3.connect((tmp_path / "consultorio_test.sqlite").as_posix())
    con.row_factory = sqlite3.Row
    _apply_pragmas(con)
    _apply_schema(con)
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def container(db_connection: sqlite3.Connection):
    return build_container(db_connection, UserContext(role=Role.ADMIN, medico_id=MEDICO_ID))


@pytest.fixture()
def readonly_container(db_connection: sqlite3.Connection):
    return build_container(db_connection, UserContext(role=Role.READONLY, medico_id=MEDICO_ID))


@pytest.fixture()
def calendario_base() -> CalendarioLaboral:
    """Lunes a viernes, 08:00-12:00, citas de 30 minutos, sin descanso."""
    return CalendarioLaboral.desde_valores(
        dias_laborables=DIAS_LABORABLES_POR_DEFECTO,
        hora_inicio="08:00",
        hora_fin="12:00",
        duracion_minutos=30,
    )


@pytest.fixture()
def configuracion_guardada(container) -> ConfiguracionClinica:
    """Configuración por defecto persistida para el médico de los tests."""
    configuracion = ConfiguracionClinica.por_defecto(MEDICO_ID)
    container.configuracion_repo.upsert(configuracion)
    return configuracion


@pytest.fixture()
def make_cita():
    def _make(**overrides: Any) -> Cita:
        data: Dict[str, Any] = {
            "fecha": "2024-01-15",
            "hora": "09:00",
            "medico_id": MEDICO_ID,
            "paciente_nombre": "Laura Gomez",
            "paciente_telefono": "600123456",
        }
        data.update(overrides)
        cita = Cita(**data)
        cita.validar()
        return cita

    return _make


@pytest.fixture()
def assert_expected_actual():
    def _assert(expected: Any, actual: Any, *, message: str) -> None:
        expected_str = pprint.pformat(expected, width=120)
        actual_str = pprint.pformat(actual, width=120)
        diff = "\n".join(
            difflib.unified_diff(
                expected_str.splitlines(),
                actual_str.splitlines(),
                fromfile="expected",
                tofile="actual",
                lineterm="",
            )
        )
        assert expected == actual, (
            f"{message}\nExpected:\n{expected_str}\nActual:\n{actual_str}\nDiff:\n{diff}"
        )

    return _assert
