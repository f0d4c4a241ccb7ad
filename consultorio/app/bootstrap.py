# bootstrap.py
"""
Bootstrap de la aplicación consultorio.

Responsabilidades:
- Resolver rutas (base de datos, schema, logs)
- Abrir SQLite con timeout y PRAGMAs
- Aplicar schema.sql

Infraestructura pura: no contiene lógica de dominio ni de aplicación.
"""

from __future__ import annotations

import sqlite3
from os import getenv
from pathlib import Path

from consultorio.app.bootstrap_logging import get_logger
from consultorio.app.infrastructure.sqlite.sqlite_datetime_codecs import (
    register_sqlite_datetime_codecs,
)


LOGGER = get_logger(__name__)

DEFAULT_DB_TIMEOUT_S = 5.0


def _is_special_sqlite_path(raw_path: str) -> bool:
    return raw_path == ":memory:" or raw_path.startswith("file:")


def _as_path(raw_path: str) -> Path:
    return Path(raw_path) if _is_special_sqlite_path(raw_path) else Path(raw_path).expanduser().resolve()


# ---------------------------------------------------------------------
# Rutas
# ---------------------------------------------------------------------


def project_root() -> Path:
    return Path(__file__).resolve().parent


def data_dir() -> Path:
    return Path("./data")


def log_dir() -> Path:
    configured = getenv("CONSULTORIO_LOG_DIR")
    return Path(configured).expanduser() if configured else data_dir() / "logs"


def resolve_db_path(sqlite_path_arg: str | None = None, *, emit_log: bool = True) -> Path:
    """Resuelve la ruta SQLite: argumento > CONSULTORIO_DB_PATH > ./data/consultorio.db."""
    configured = getenv("CONSULTORIO_DB_PATH")
    if sqlite_path_arg:
        resolved, source = _as_path(sqlite_path_arg), "arg"
    elif configured:
        resolved, source = _as_path(configured), "env"
    else:
        resolved, source = (data_dir() / "consultorio.db").expanduser().resolve(), "default"
    if emit_log:
        LOGGER.info("db_path_resolved path=%s source=%s", resolved, source)
    return resolved


def resolve_db_timeout() -> float:
    """Timeout de conexión en segundos (CONSULTORIO_DB_TIMEOUT)."""
    raw = getenv("CONSULTORIO_DB_TIMEOUT")
    if not raw:
        return DEFAULT_DB_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning("db_timeout_invalido valor=%s usando=%s", raw, DEFAULT_DB_TIMEOUT_S)
        return DEFAULT_DB_TIMEOUT_S
    return value if value > 0 else DEFAULT_DB_TIMEOUT_S


def schema_path() -> Path:
    return project_root() / "infrastructure" / "sqlite" / "schema.sql"


# ---------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------


def _apply_pragmas(con: sqlite3.Connection, timeout_s: float) -> None:
    con.execute("PRAGMA foreign_keys = ON;")
    con.execute("PRAGMA journal_mode = WAL;")
    con.execute("PRAGMA synchronous = NORMAL;")
    con.execute("PRAGMA temp_store = MEMORY;")
    con.execute(f"PRAGMA busy_timeout = {int(timeout_s * 1000)};")


def apply_schema(con: sqlite3.Connection) -> None:
    """Aplica schema.sql (idempotente)."""
    path = schema_path()
    if not path.exists():
        raise FileNotFoundError(f"No se encuentra schema.sql en {path}")
    con.executescript(path.read_text(encoding="utf-8"))
    con.commit()


def bootstrap_database(apply_schema_sql: bool = True, sqlite_path: str | None = None) -> sqlite3.Connection:
    """
    Inicializa la base de datos:
    - crea el directorio de la BD si no existe
    - abre la conexión con timeout
    - aplica PRAGMAs y, opcionalmente, schema.sql
    """
    target_path = resolve_db_path(sqlite_path)
    if not _is_special_sqlite_path(str(target_path)):
        target_path.parent.mkdir(parents=True, exist_ok=True)
    timeout_s = resolve_db_timeout()

    register_sqlite_datetime_codecs()
    con = sqlite3.connect(target_path.as_posix(), timeout=timeout_s)
    LOGGER.info("db_opened path=%s timeout_s=%s", target_path, timeout_s)
    con.row_factory = sqlite3.Row
    _apply_pragmas(con, timeout_s)

    if apply_schema_sql:
        apply_schema(con)
    return con
