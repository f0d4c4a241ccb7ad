from __future__ import annotations

import contextvars
import json
import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from types import TracebackType
from typing import Any, Callable

from consultorio.app.common.log_redaction import redact_text, redact_value

_RUN_ID: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
_USER: contextvars.ContextVar[str | None] = contextvars.ContextVar("user", default=None)
_SOFT_KEY = "is_soft_crash"
_FATAL_KEY = "is_fatal_crash"
_EXTRA_KEYS = ("context", "app_name", "medico_id", "cita_id", "operacion")


class _ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID.get()
        record.user = _USER.get() or "-"
        return True


class _CrashFilter(logging.Filter):
    """Deja pasar errores manejados (soft) y fatales; el resto va a app.log."""

    def filter(self, record: logging.LogRecord) -> bool:
        return _es_crash(record)


class _ExcludeCrashFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return not _es_crash(record)


def _es_crash(record: logging.LogRecord) -> bool:
    return bool(
        getattr(record, _SOFT_KEY, False)
        or getattr(record, _FATAL_KEY, False)
        or record.levelno >= logging.CRITICAL
    )


class _StructuredFormatter(logging.Formatter):
    def __init__(self, *, json_mode: bool) -> None:
        super().__init__()
        self._json_mode = json_mode

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_text(record.getMessage()),
            "run_id": getattr(record, "run_id", "-"),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
            "user": getattr(record, "user", "-"),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = redact_value(getattr(record, key), key=key)
        if record.exc_info:
            payload["traceback"] = redact_text(self.formatException(record.exc_info))
        if self._json_mode:
            return json.dumps(payload, ensure_ascii=False, default=str)
        return " ".join(f"{key}={value}" for key, value in payload.items())


class ContextLoggerAdapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        merged = {"run_id": _RUN_ID.get(), "user": _USER.get() or "-", **extra}
        kwargs["extra"] = redact_value(merged)
        return redact_value(msg), kwargs


def _file_handler(path: Path, formatter: logging.Formatter, *filters: logging.Filter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    handler.setFormatter(formatter)
    for f in filters:
        handler.addFilter(f)
    return handler


def configure_logging(app_name: str, log_dir: Path, level: str = "INFO", json: bool = True) -> None:
    """
    Configura el logger raíz:
    - consola (stderr) y app.log con los eventos operativos
    - crash.log con excepciones manejadas (soft) y fatales
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = _StructuredFormatter(json_mode=json)
    context_filter = _ContextFilter()

    console = logging.StreamHandler(stream=sys.__stderr__)
    console.setFormatter(formatter)
    console.addFilter(context_filter)
    console.addFilter(_ExcludeCrashFilter())

    root_logger.addHandler(console)
    root_logger.addHandler(_file_handler(log_dir / "app.log", formatter, context_filter, _ExcludeCrashFilter()))
    root_logger.addHandler(_file_handler(log_dir / "crash.log", formatter, context_filter, _CrashFilter()))
    logging.captureWarnings(True)
    get_logger(__name__).info("logging_configured", extra={"app_name": app_name})


def get_logger(name: str) -> logging.LoggerAdapter:
    return ContextLoggerAdapter(logging.getLogger(name), {})


def set_run_context(run_id: str, user: str | None = None) -> None:
    _RUN_ID.set(run_id)
    _USER.set(user)


def get_run_id() -> str:
    return _RUN_ID.get()


def log_soft_exception(logger: logging.LoggerAdapter, exc: Exception, context: dict[str, Any]) -> None:
    """Registra un error manejado en crash.log sin interrumpir el flujo."""
    logger.error(
        "soft_exception",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={_SOFT_KEY: True, "context": context},
    )


# ---------------------------------------------------------------------
# Excepciones no manejadas
# ---------------------------------------------------------------------


def fatal_exception_handler(
    logger: logging.LoggerAdapter,
) -> Callable[[type[BaseException], BaseException, TracebackType | None], None]:
    def _handler(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: TracebackType | None) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical(
            "unhandled_exception",
            exc_info=(exc_type, exc_value, exc_traceback),
            extra={_FATAL_KEY: True},
        )

    return _handler


def install_global_exception_hook(logger: logging.LoggerAdapter) -> None:
    handler = fatal_exception_handler(logger)
    sys.excepthook = handler

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        handler(args.exc_type, args.exc_value, args.exc_traceback)

    threading.excepthook = _thread_hook  # type: ignore[assignment]
