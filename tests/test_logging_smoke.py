from __future__ import annotations

import json
from pathlib import Path

from consultorio.app.bootstrap_logging import (
    configure_logging,
    fatal_exception_handler,
    get_logger,
    log_soft_exception,
    set_run_context,
)
from consultorio.app.domain.exceptions import ConflictoAgendaError


def test_configure_logging_crea_log_operativo(tmp_path: Path) -> None:
    configure_logging("test-app", tmp_path, json=False)
    set_run_context("run-test")
    logger = get_logger("tests.logging")

    logger.info("cita_creada fecha=%s hora=%s", "2024-01-15", "09:00")

    content = (tmp_path / "app.log").read_text(encoding="utf-8")
    assert "cita_creada fecha=2024-01-15 hora=09:00" in content
    assert "run_id=run-test" in content


def test_log_soft_exception_va_a_crash_log(tmp_path: Path) -> None:
    configure_logging("test-app", tmp_path, json=True)
    set_run_context("run-soft")
    logger = get_logger("tests.logging")

    try:
        raise ConflictoAgendaError(
            "Ya existe una cita programada para 2024-01-15 a las 09:00 (Paciente: Laura Gomez)"
        )
    except ConflictoAgendaError as exc:
        log_soft_exception(logger, exc, {"command": "crear-cita"})

    lines = (tmp_path / "crash.log").read_text(encoding="utf-8").splitlines()
    payload = json.loads(lines[-1])
    assert payload["message"] == "soft_exception"
    assert payload["context"] == {"command": "crear-cita"}
    assert "ConflictoAgendaError" in payload["traceback"]
    assert "Laura Gomez" not in payload["traceback"]
    assert "soft_exception" not in (tmp_path / "app.log").read_text(encoding="utf-8")


def test_fatal_handler_escribe_crash_log(tmp_path: Path) -> None:
    configure_logging("test-app", tmp_path, json=False)
    set_run_context("run-fatal")
    handler = fatal_exception_handler(get_logger("tests.logging"))

    try:
        raise RuntimeError("fatal")
    except RuntimeError as exc:
        handler(type(exc), exc, exc.__traceback__)

    content = (tmp_path / "crash.log").read_text(encoding="utf-8")
    assert "unhandled_exception" in content
    assert "RuntimeError: fatal" in content


def test_logging_redacta_datos_del_paciente(tmp_path: Path) -> None:
    configure_logging("test-app", tmp_path, json=False)
    logger = get_logger("tests.logging")

    logger.info("Conflicto (Paciente: Juan Pérez) tel +34 600 123 456 email juan.perez@example.com")

    content = (tmp_path / "app.log").read_text(encoding="utf-8")
    assert "Juan Pérez" not in content
    assert "600 123 456" not in content
    assert "juan.perez@example.com" not in content
