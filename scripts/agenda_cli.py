from __future__ import annotations

import argparse
import json
import sqlite3
import sys
import uuid
from os import getenv
from typing import Any, Sequence

from consultorio.app.application.security import user_context_from_env
from consultorio.app.application.usecases.cambiar_estado_cita import CambiarEstadoCitaUseCase
from consultorio.app.application.usecases.configuracion_clinica import (
    GuardarConfiguracionUseCase,
    ObtenerConfiguracionUseCase,
)
from consultorio.app.application.usecases.crear_cita import CrearCitaRequest, CrearCitaUseCase
from consultorio.app.application.usecases.eliminar_cita import EliminarCitaUseCase
from consultorio.app.application.usecases.horarios_libres import ObtenerHorariosLibresUseCase
from consultorio.app.application.usecases.listar_citas import FiltrosCitas, ListarCitasUseCase
from consultorio.app.application.usecases.reprogramar_cita import (
    ReprogramarCitaRequest,
    ReprogramarCitaUseCase,
)
from consultorio.app.bootstrap import bootstrap_database, log_dir
from consultorio.app.bootstrap_logging import (
    configure_logging,
    get_logger,
    install_global_exception_hook,
    log_soft_exception,
    set_run_context,
)
from consultorio.app.container import AppContainer, build_container
from consultorio.app.domain.citas import TIPO_CONSULTA_POR_DEFECTO
from consultorio.app.domain.exceptions import DomainError

_LOGGER = get_logger(__name__)
EXIT_OK = 0
EXIT_ERROR_DOMINIO = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Agenda del consultorio: horarios, citas y configuración")
    parser.add_argument("--db", dest="db_path", type=str, default=None, help="Ruta SQLite (o CONSULTORIO_DB_PATH)")
    parser.add_argument("--medico", dest="medico_id", type=str, default=None, help="Médico que actúa")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_horarios_parser(subparsers)
    _add_crear_cita_parser(subparsers)
    _add_reprogramar_parser(subparsers)
    _add_estado_parsers(subparsers)
    _add_eliminar_parser(subparsers)
    _add_citas_parser(subparsers)
    _add_config_parsers(subparsers)
    return parser


def _add_horarios_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("horarios", help="Horarios libres de una fecha")
    parser.add_argument("--fecha", required=True, help="AAAA-MM-DD")


def _add_crear_cita_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("crear-cita", help="Reserva una cita")
    parser.add_argument("--fecha", required=True)
    parser.add_argument("--hora", required=True, help="HH:MM")
    parser.add_argument("--paciente", dest="paciente_nombre", default="")
    parser.add_argument("--paciente-id", dest="paciente_id", type=int, default=None)
    parser.add_argument("--telefono", default=None)
    parser.add_argument("--tipo", dest="tipo_consulta", default=TIPO_CONSULTA_POR_DEFECTO)
    parser.add_argument("--notas", default=None)


def _add_reprogramar_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("reprogramar", help="Mueve una cita a otra fecha/hora")
    parser.add_argument("--id", dest="cita_id", type=int, required=True)
    parser.add_argument("--fecha", required=True)
    parser.add_argument("--hora", required=True)


def _add_estado_parsers(subparsers: argparse._SubParsersAction) -> None:
    for nombre, ayuda in (
        ("confirmar", "Marca la cita como confirmada"),
        ("atender", "Marca la cita como completada"),
        ("cancelar", "Cancela la cita y libera el hueco"),
    ):
        parser = subparsers.add_parser(nombre, help=ayuda)
        parser.add_argument("--id", dest="cita_id", type=int, required=True)


def _add_eliminar_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("eliminar", help="Borra una cita")
    parser.add_argument("--id", dest="cita_id", type=int, required=True)


def _add_citas_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("citas", help="Lista citas ordenadas por fecha y hora")
    parser.add_argument("--desde", default=None)
    parser.add_argument("--hasta", default=None)
    parser.add_argument("--estado", default=None)
    parser.add_argument("--texto", default=None)
    parser.add_argument("--todos", action="store_true", help="Citas de todos los médicos")


def _add_config_parsers(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser("config", help="Muestra la configuración (la crea por defecto si no existe)")
    parser = subparsers.add_parser("config-guardar", help="Actualiza campos de configuración")
    parser.add_argument("--hora-inicio", default=None)
    parser.add_argument("--hora-fin", default=None)
    parser.add_argument("--descanso-inicio", default=None)
    parser.add_argument("--descanso-fin", default=None)
    parser.add_argument("--sin-descanso", action="store_true")
    parser.add_argument("--duracion", type=int, default=None)
    parser.add_argument("--dias", default=None, help="Lista separada por comas (lunes,martes,...)")
    parser.add_argument("--nombre-clinica", default=None)
    parser.add_argument("--nombre-medico", default=None)
    parser.add_argument("--especialidad", default=None)


# ---------------------------------------------------------------------
# Entrada
# ---------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging(
        "consultorio-agenda-cli",
        log_dir(),
        level=getenv("CONSULTORIO_LOG_LEVEL", "INFO"),
        json=getenv("CONSULTORIO_LOG_JSON", "1") not in {"0", "false", "no"},
    )
    set_run_context(uuid.uuid4().hex[:8])
    install_global_exception_hook(_LOGGER)
    parser = build_parser()
    args = parser.parse_args(argv)

    container = _build_container(args)
    try:
        return _dispatch(container, args)
    except DomainError as exc:
        log_soft_exception(_LOGGER, exc, {"command": args.command})
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR_DOMINIO
    finally:
        container.close()


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Punto de entrada invocable desde otros módulos sin subprocess."""
    return main(argv)


def _build_container(args: argparse.Namespace) -> AppContainer:
    user_context = user_context_from_env()
    if args.medico_id:
        user_context.medico_id = args.medico_id.strip()
    connection: sqlite3.Connection = bootstrap_database(sqlite_path=args.db_path)
    return build_container(connection, user_context)


def _dispatch(c: AppContainer, args: argparse.Namespace) -> int:
    handlers = {
        "horarios": _handle_horarios,
        "crear-cita": _handle_crear_cita,
        "reprogramar": _handle_reprogramar,
        "confirmar": _handle_estado,
        "atender": _handle_estado,
        "cancelar": _handle_estado,
        "eliminar": _handle_eliminar,
        "citas": _handle_citas,
        "config": _handle_config,
        "config-guardar": _handle_config_guardar,
    }
    return handlers[args.command](c, args)


def _emit(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


# ---------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------


def _handle_horarios(c: AppContainer, args: argparse.Namespace) -> int:
    result = ObtenerHorariosLibresUseCase(c).execute(args.fecha)
    _emit(
        {
            "fecha": result.fecha.isoformat(),
            "es_laborable": result.es_laborable,
            "libres": result.libres,
            "ocupados": result.ocupados,
        }
    )
    return EXIT_OK


def _handle_crear_cita(c: AppContainer, args: argparse.Namespace) -> int:
    result = CrearCitaUseCase(c).execute(
        CrearCitaRequest(
            fecha=args.fecha,
            hora=args.hora,
            paciente_nombre=args.paciente_nombre,
            paciente_telefono=args.telefono,
            paciente_id=args.paciente_id,
            tipo_consulta=args.tipo_consulta,
            notas=args.notas,
        )
    )
    _emit(result.cita.to_dict())
    return EXIT_OK


def _handle_reprogramar(c: AppContainer, args: argparse.Namespace) -> int:
    cita = ReprogramarCitaUseCase(c).execute(
        ReprogramarCitaRequest(cita_id=args.cita_id, fecha=args.fecha, hora=args.hora)
    )
    _emit(cita.to_dict())
    return EXIT_OK


def _handle_estado(c: AppContainer, args: argparse.Namespace) -> int:
    uc = CambiarEstadoCitaUseCase(c.citas_repo, c.user_context)
    accion = getattr(uc, args.command)
    _emit(accion(args.cita_id).to_dict())
    return EXIT_OK


def _handle_eliminar(c: AppContainer, args: argparse.Namespace) -> int:
    EliminarCitaUseCase(c.citas_repo, c.user_context).execute(args.cita_id)
    _emit({"eliminada": args.cita_id})
    return EXIT_OK


def _handle_citas(c: AppContainer, args: argparse.Namespace) -> int:
    citas = ListarCitasUseCase(c.citas_repo).execute(
        FiltrosCitas(
            desde=args.desde,
            hasta=args.hasta,
            medico_id=None if args.todos else c.user_context.medico_id,
            estado=args.estado,
            texto=args.texto,
        )
    )
    _emit([cita.to_dict() for cita in citas])
    return EXIT_OK


def _handle_config(c: AppContainer, args: argparse.Namespace) -> int:
    _emit(ObtenerConfiguracionUseCase(c.configuracion_repo, c.user_context).execute().to_dict())
    return EXIT_OK


def _handle_config_guardar(c: AppContainer, args: argparse.Namespace) -> int:
    configuracion = ObtenerConfiguracionUseCase(c.configuracion_repo, c.user_context).execute()
    cambios = {
        "hora_inicio": args.hora_inicio,
        "hora_fin": args.hora_fin,
        "descanso_inicio": args.descanso_inicio,
        "descanso_fin": args.descanso_fin,
        "duracion_cita_minutos": args.duracion,
        "nombre_clinica": args.nombre_clinica,
        "nombre_medico": args.nombre_medico,
        "especialidad_medico": args.especialidad,
    }
    for campo, valor in cambios.items():
        if valor is not None:
            setattr(configuracion, campo, valor)
    if args.sin_descanso:
        configuracion.descanso_inicio = None
        configuracion.descanso_fin = None
    if args.dias is not None:
        configuracion.dias_laborables = frozenset(d for d in args.dias.split(",") if d.strip())

    guardada = GuardarConfiguracionUseCase(c.configuracion_repo, c.user_context).execute(configuracion)
    _emit(guardada.to_dict())
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
