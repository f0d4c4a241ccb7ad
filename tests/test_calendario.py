from __future__ import annotations

import time as time_mod
from datetime import date, time, timedelta

import pytest

from consultorio.app.domain.calendario import (
    CalendarioLaboral,
    buscar_conflicto,
    contar_slots,
    es_dia_laborable,
    es_horario_valido,
    formatear_hora,
    minutos_desde_medianoche,
    obtener_horarios_disponibles,
)
from consultorio.app.domain.citas import CandidatoCita
from consultorio.app.domain.enums import DiaSemana, EstadoCita
from consultorio.app.domain.exceptions import ConfiguracionInvalidaError, ValidationError


def _calendario(**overrides) -> CalendarioLaboral:
    valores = {
        "dias_laborables": ["lunes", "martes", "miércoles", "jueves", "viernes"],
        "hora_inicio": "08:00",
        "hora_fin": "12:00",
        "duracion_minutos": 30,
    }
    valores.update(overrides)
    return CalendarioLaboral.desde_valores(**valores)


def _minutos(hhmm: str) -> int:
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


# ---------------------------------------------------------------------
# Rejilla de horarios
# ---------------------------------------------------------------------


def test_rejilla_sin_descanso(calendario_base, assert_expected_actual) -> None:
    assert_expected_actual(
        ["08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00", "11:30"],
        obtener_horarios_disponibles(calendario_base, date(2024, 1, 15)),
        message="rejilla 08:00-12:00 cada 30 min",
    )


def test_rejilla_con_descanso_respeta_bordes(assert_expected_actual) -> None:
    calendario = _calendario(descanso_inicio="09:00", descanso_fin="10:00")

    horarios = obtener_horarios_disponibles(calendario, "2024-01-15")

    assert_expected_actual(
        ["08:00", "08:30", "10:00", "10:30", "11:00", "11:30"],
        horarios,
        message="09:00 y 09:30 caen en el descanso",
    )
    assert "08:30" in horarios  # termina justo al empezar el descanso
    assert "10:00" in horarios  # empieza justo al acabar el descanso


def test_slot_que_solapa_parcialmente_el_descanso_se_descarta_entero() -> None:
    calendario = _calendario(duracion_minutos=45, descanso_inicio="09:00", descanso_fin="09:30")

    horarios = obtener_horarios_disponibles(calendario)

    # 08:45-09:30 pisa el descanso y no se recorta a 08:45-09:00
    assert horarios == ["08:00", "09:30", "10:15", "11:00"]


@pytest.mark.parametrize(
    ("inicio", "fin", "duracion"),
    [("08:00", "12:00", 30), ("08:00", "18:00", 45), ("07:15", "13:40", 20), ("09:00", "09:59", 60)],
)
def test_sin_descanso_cuenta_floor_y_paso_constante(inicio: str, fin: str, duracion: int) -> None:
    calendario = _calendario(hora_inicio=inicio, hora_fin=fin, duracion_minutos=duracion)

    horarios = obtener_horarios_disponibles(calendario)

    assert len(horarios) == (_minutos(fin) - _minutos(inicio)) // duracion
    assert contar_slots(calendario) == len(horarios)
    pasos = {_minutos(b) - _minutos(a) for a, b in zip(horarios, horarios[1:])}
    assert pasos <= {duracion}
    assert all(_minutos(h) + duracion <= _minutos(fin) for h in horarios)


def test_ningun_slot_intersecta_el_descanso() -> None:
    calendario = _calendario(hora_fin="18:00", duracion_minutos=25, descanso_inicio="12:10", descanso_fin="14:05")
    d_ini, d_fin = _minutos("12:10"), _minutos("14:05")

    for h in obtener_horarios_disponibles(calendario):
        t = _minutos(h)
        assert not (t < d_fin and t + 25 > d_ini), h


def test_rejilla_es_reiniciable_e_independiente_de_la_fecha(calendario_base) -> None:
    lunes = obtener_horarios_disponibles(calendario_base, date(2024, 1, 15))
    sabado = obtener_horarios_disponibles(calendario_base, date(2024, 1, 20))
    assert lunes == sabado == obtener_horarios_disponibles(calendario_base)


def test_sin_configuracion_no_hay_agenda() -> None:
    assert obtener_horarios_disponibles(None, date(2024, 1, 15)) == []
    assert contar_slots(None) == 0
    dia = date(2024, 1, 1)
    for _ in range(14):
        assert es_dia_laborable(None, dia) is False
        dia += timedelta(days=1)


def test_duracion_mayor_que_jornada_no_da_horarios() -> None:
    assert obtener_horarios_disponibles(_calendario(hora_fin="08:20", duracion_minutos=30)) == []


def test_es_horario_valido(calendario_base) -> None:
    assert es_horario_valido(calendario_base, "08:30")
    assert es_horario_valido(calendario_base, time(11, 30))
    assert not es_horario_valido(calendario_base, "08:15")
    assert not es_horario_valido(calendario_base, "12:00")
    assert not es_horario_valido(None, "08:00")


def test_aritmetica_de_minutos() -> None:
    assert minutos_desde_medianoche(time(13, 45)) == 825
    assert formatear_hora(825) == "13:45"
    assert formatear_hora(0) == "00:00"
    with pytest.raises(ValueError):
        formatear_hora(24 * 60)


# ---------------------------------------------------------------------
# Validación de configuración
# ---------------------------------------------------------------------


@pytest.mark.parametrize(
    "overrides",
    [
        {"hora_inicio": "12:00", "hora_fin": "08:00"},
        {"hora_inicio": "08:00", "hora_fin": "08:00"},
        {"duracion_minutos": 0},
        {"duracion_minutos": -15},
        {"duracion_minutos": "media hora"},
        {"duracion_minutos": True},
        {"hora_inicio": "8h"},
        {"hora_fin": "25:00"},
        {"descanso_inicio": "10:00"},
        {"descanso_inicio": "10:00", "descanso_fin": "09:00"},
        {"descanso_inicio": "07:00", "descanso_fin": "09:00"},
        {"descanso_inicio": "11:30", "descanso_fin": "12:30"},
        {"dias_laborables": ["lunes", "festivo"]},
    ],
)
def test_configuracion_invalida_lanza_error_descriptivo(overrides) -> None:
    with pytest.raises(ConfiguracionInvalidaError):
        _calendario(**overrides)


def test_configuracion_invalida_es_error_de_validacion() -> None:
    assert issubclass(ConfiguracionInvalidaError, ValidationError)


def test_instantanea_inmutable(calendario_base) -> None:
    with pytest.raises(AttributeError):
        calendario_base.duracion_minutos = 15  # type: ignore[misc]


# ---------------------------------------------------------------------
# Días laborables
# ---------------------------------------------------------------------


def test_dia_laborable_lunes_si_sabado_no(calendario_base) -> None:
    assert es_dia_laborable(calendario_base, date(2024, 1, 15)) is True
    assert es_dia_laborable(calendario_base, "2024-01-20") is False


def test_dias_vacios_nunca_son_laborables() -> None:
    calendario = _calendario(dias_laborables=[])
    dia = date(2024, 3, 1)
    for _ in range(7):
        assert es_dia_laborable(calendario, dia) is False
        dia += timedelta(days=1)


def test_solo_los_dias_configurados() -> None:
    calendario = _calendario(dias_laborables=[DiaSemana.SABADO, "sunday"])
    semana = [date(2024, 1, 15) + timedelta(days=i) for i in range(7)]
    assert [es_dia_laborable(calendario, d) for d in semana] == [False] * 5 + [True, True]


def test_fecha_con_hora_se_rechaza(calendario_base) -> None:
    with pytest.raises(ValidationError):
        es_dia_laborable(calendario_base, "2024-01-15T00:00:00Z")


def test_dia_laborable_no_depende_de_la_zona_horaria(calendario_base, monkeypatch) -> None:
    if not hasattr(time_mod, "tzset"):
        pytest.skip("tzset no disponible en esta plataforma")
    esperado = [es_dia_laborable(calendario_base, f"2024-01-{d:02d}") for d in range(14, 22)]
    for tz in ("UTC", "America/Los_Angeles", "Pacific/Kiritimati", "Asia/Kolkata"):
        monkeypatch.setenv("TZ", tz)
        time_mod.tzset()
        actual = [es_dia_laborable(calendario_base, date(2024, 1, d)) for d in range(14, 22)]
        assert actual == esperado, tz
    monkeypatch.undo()
    time_mod.tzset()


# ---------------------------------------------------------------------
# Conflictos
# ---------------------------------------------------------------------


def test_conflicto_mismo_medico_fecha_hora(make_cita) -> None:
    existente = make_cita(id=1, estado=EstadoCita.CONFIRMADA)

    assert buscar_conflicto([existente], CandidatoCita.crear("2024-01-15", "09:00", "D1")) is existente
    assert buscar_conflicto([existente], CandidatoCita.crear("2024-01-15", "09:00", "D2")) is None


@pytest.mark.parametrize(
    ("fecha", "hora", "medico"),
    [("2024-01-16", "09:00", "D1"), ("2024-01-15", "09:30", "D1"), ("2024-01-15", "09:00", "D9")],
)
def test_sin_conflicto_si_difiere_algun_campo(make_cita, fecha, hora, medico) -> None:
    existente = make_cita(id=1)
    assert buscar_conflicto([existente], CandidatoCita.crear(fecha, hora, medico)) is None


def test_cancelada_no_genera_conflicto(make_cita) -> None:
    cancelada = make_cita(id=1, estado=EstadoCita.CANCELADA)
    viva = make_cita(id=2, paciente_nombre="Mario Perez")
    candidato = CandidatoCita.crear(date(2024, 1, 15), time(9, 0), "D1")

    assert buscar_conflicto([cancelada], candidato) is None
    assert buscar_conflicto([cancelada, viva], candidato) is viva


def test_conflicto_excluye_la_propia_cita(make_cita) -> None:
    existente = make_cita(id=7)
    candidato = CandidatoCita.crear("2024-01-15", "09:00", "D1", excluir_id=7)
    assert buscar_conflicto([existente], candidato) is None
