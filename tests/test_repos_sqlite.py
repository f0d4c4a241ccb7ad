from __future__ import annotations

import sqlite3
import warnings
from datetime import date, time
from pathlib import Path

import pytest

from consultorio.app.bootstrap import bootstrap_database, resolve_db_path, resolve_db_timeout
from consultorio.app.domain.enums import EstadoCita
from consultorio.app.domain.exceptions import ConflictoAgendaError
from consultorio.app.domain.historias import HistoriaClinica
from consultorio.app.domain.personas import Paciente


def test_cita_roundtrip_fecha_y_hora(container, make_cita) -> None:
    cita_id = container.citas_repo.create(make_cita(hora="08:30", notas="Primera visita"))

    guardada = container.citas_repo.get_by_id(cita_id)

    assert guardada is not None
    assert guardada.fecha == date(2024, 1, 15)
    assert guardada.hora == time(8, 30)
    assert guardada.estado is EstadoCita.PROGRAMADA
    assert guardada.creada_en is not None
    row = container.connection.execute("SELECT fecha, hora FROM citas WHERE id = ?", (cita_id,)).fetchone()
    assert (row["fecha"], row["hora"]) == ("2024-01-15", "08:30")


def test_indice_unico_rechaza_doble_reserva_sin_chequeo_previo(container, make_cita) -> None:
    container.citas_repo.create(make_cita(paciente_nombre="Laura Gomez"))

    with pytest.raises(ConflictoAgendaError) as excinfo:
        container.citas_repo.create(make_cita(paciente_nombre="Mario Perez"))

    assert "Laura Gomez" in str(excinfo.value)
    assert excinfo.value.cita_existente is not None
    assert excinfo.value.cita_existente.paciente_nombre == "Laura Gomez"
    count = container.connection.execute("SELECT COUNT(*) FROM citas").fetchone()[0]
    assert count == 1


def test_indice_unico_ignora_canceladas_y_otros_medicos(container, make_cita) -> None:
    container.citas_repo.create(make_cita(estado=EstadoCita.CANCELADA))
    container.citas_repo.create(make_cita())
    container.citas_repo.create(make_cita(medico_id="D2"))

    assert len(container.citas_repo.list_by_medico_fecha("D1", date(2024, 1, 15))) == 2


def test_update_a_hueco_ocupado_lanza_conflicto(container, make_cita) -> None:
    container.citas_repo.create(make_cita(hora="09:00"))
    otra_id = container.citas_repo.create(make_cita(hora="09:30"))
    otra = container.citas_repo.get_by_id(otra_id)
    otra.hora = time(9, 0)

    with pytest.raises(ConflictoAgendaError):
        container.citas_repo.update(otra)
    assert container.citas_repo.get_by_id(otra_id).hora == time(9, 30)


def test_list_in_range_filtra_y_ordena(container, make_cita, assert_expected_actual) -> None:
    repo = container.citas_repo
    repo.create(make_cita(fecha="2024-01-16", hora="08:00", paciente_nombre="Carla"))
    repo.create(make_cita(fecha="2024-01-15", hora="10:00", paciente_nombre="Bruno"))
    repo.create(make_cita(fecha="2024-01-15", hora="08:30", paciente_nombre="Ana"))
    repo.create(make_cita(fecha="2024-01-20", hora="08:00", paciente_nombre="Dora"))
    repo.create(make_cita(fecha="2024-01-15", hora="11:00", medico_id="D2", paciente_nombre="Eva"))

    citas = repo.list_in_range(desde=date(2024, 1, 15), hasta=date(2024, 1, 16), medico_id="D1")
    assert_expected_actual(
        ["Ana", "Bruno", "Carla"],
        [c.paciente_nombre for c in citas],
        message="orden por fecha y hora",
    )
    assert [c.paciente_nombre for c in repo.list_in_range(texto="DOR")] == ["Dora"]


def test_list_in_range_texto_literal_sin_comodines(container, make_cita) -> None:
    repo = container.citas_repo
    repo.create(make_cita(hora="08:00", paciente_nombre="Ana"))
    repo.create(make_cita(hora="08:30", paciente_nombre="Luis_100%"))

    assert [c.paciente_nombre for c in repo.list_in_range(texto="%")] == ["Luis_100%"]
    assert [c.paciente_nombre for c in repo.list_in_range(texto="s_1")] == ["Luis_100%"]
    assert repo.list_in_range(texto="a_") == []


def test_pacientes_crud_y_listas_json(container) -> None:
    repo = container.pacientes_repo
    paciente_id = repo.create(
        Paciente(
            nombre="Laura Gomez",
            telefono="600123456",
            fecha_nacimiento=date(1990, 5, 12),
            alergias=["Penicilina"],
            medicamentos=["Ibuprofeno", "Omeprazol"],
        )
    )
    guardado = repo.get_by_id(paciente_id)
    assert guardado.fecha_nacimiento == date(1990, 5, 12)
    assert guardado.alergias == ["Penicilina"]
    assert guardado.medicamentos == ["Ibuprofeno", "Omeprazol"]

    guardado.condiciones_medicas = ["Asma"]
    repo.update(guardado)
    assert repo.get_by_id(paciente_id).condiciones_medicas == ["Asma"]

    repo.create(Paciente(nombre="Mario Perez"))
    assert [p.nombre for p in repo.search("laura")] == ["Laura Gomez"]
    assert [p.nombre for p in repo.search()] == ["Mario Perez", "Laura Gomez"]

    repo.delete(paciente_id)
    assert repo.get_by_id(paciente_id) is None


def test_borrar_paciente_desvincula_citas_y_borra_historias(container, make_cita) -> None:
    paciente_id = container.pacientes_repo.create(Paciente(nombre="Laura Gomez"))
    cita_id = container.citas_repo.create(make_cita(paciente_id=paciente_id))
    container.historias_repo.create(
        HistoriaClinica(
            paciente_id=paciente_id,
            paciente_nombre="Laura Gomez",
            medico_id="D1",
            fecha=date(2024, 1, 15),
            tipo_consulta="Control",
        )
    )

    container.pacientes_repo.delete(paciente_id)

    cita = container.citas_repo.get_by_id(cita_id)
    assert cita.paciente_id is None
    assert cita.paciente_nombre == "Laura Gomez"
    assert container.historias_repo.list_by_paciente(paciente_id) == []


def test_historias_por_paciente_mas_reciente_primero(container) -> None:
    paciente_id = container.pacientes_repo.create(Paciente(nombre="Ana"))
    for dia in (10, 20, 15):
        container.historias_repo.create(
            HistoriaClinica(
                paciente_id=paciente_id,
                paciente_nombre="Ana",
                medico_id="D1",
                fecha=date(2024, 1, dia),
                tipo_consulta="Control",
                diagnostico=f"dia {dia}",
            )
        )

    historias = container.historias_repo.list_by_paciente(paciente_id)

    assert [h.fecha.day for h in historias] == [20, 15, 10]


def test_escritura_sin_deprecation_warning_de_sqlite(container, make_cita) -> None:
    with warnings.catch_warnings(record=True) as captured:
        warnings.simplefilter("always", DeprecationWarning)
        container.citas_repo.create(make_cita())
    assert [w for w in captured if "adapter is deprecated" in str(w.message)] == []


# ---------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------


def test_resolve_db_path_arg_sobre_env(monkeypatch) -> None:
    monkeypatch.setenv("CONSULTORIO_DB_PATH", "/tmp/from-env.db")
    assert resolve_db_path("./data/from-arg.db", emit_log=False) == Path("./data/from-arg.db").resolve()
    assert resolve_db_path(None, emit_log=False) == Path("/tmp/from-env.db").resolve()


def test_resolve_db_path_por_defecto(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("CONSULTORIO_DB_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    assert resolve_db_path(None, emit_log=False) == (tmp_path / "data" / "consultorio.db").resolve()


@pytest.mark.parametrize(("raw", "esperado"), [(None, 5.0), ("2.5", 2.5), ("x", 5.0), ("-1", 5.0)])
def test_resolve_db_timeout(monkeypatch, raw, esperado) -> None:
    if raw is None:
        monkeypatch.delenv("CONSULTORIO_DB_TIMEOUT", raising=False)
    else:
        monkeypatch.setenv("CONSULTORIO_DB_TIMEOUT", raw)
    assert resolve_db_timeout() == esperado


def test_bootstrap_database_aplica_schema_y_pragmas(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CONSULTORIO_DB_TIMEOUT", "3")
    con = bootstrap_database(sqlite_path=str(tmp_path / "db" / "consultorio.db"))
    try:
        tablas = {r["name"] for r in con.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert {"configuraciones", "pacientes", "citas", "historias_clinicas"} <= tablas
        assert con.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        assert con.execute("PRAGMA busy_timeout").fetchone()[0] == 3000
        indices = {r["name"] for r in con.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
        assert "ux_citas_medico_fecha_hora" in indices
    finally:
        con.close()


def test_bootstrap_database_es_idempotente(tmp_path: Path) -> None:
    ruta = str(tmp_path / "consultorio.db")
    bootstrap_database(sqlite_path=ruta).close()
    con = bootstrap_database(sqlite_path=ruta)
    try:
        assert isinstance(con, sqlite3.Connection)
    finally:
        con.close()
