"""
Excepciones del dominio.

Propósito:
- Distinguir errores de reglas de negocio (dominio) de errores técnicos (DB/CLI).
- Permitir que la capa de aplicación/CLI traduzca errores a mensajes para el usuario.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from consultorio.app.domain.citas import Cita


class DomainError(Exception):
    """Error base del dominio."""


class ValidationError(DomainError):
    """Entidad en estado inválido o violación de invariantes."""


class ConfiguracionInvalidaError(ValidationError):
    """Configuración de agenda mal formada (horas ilegibles, rangos vacíos, duración <= 0)."""


class ConflictoAgendaError(DomainError):
    """Ya existe una cita no cancelada para el mismo médico, fecha y hora."""

    def __init__(self, mensaje: str, cita_existente: Optional["Cita"] = None) -> None:
        super().__init__(mensaje)
        self.cita_existente = cita_existente


class TransicionEstadoError(DomainError):
    """Cambio de estado de cita no permitido por la tabla de transiciones."""


class NotFoundError(DomainError):
    """Registro inexistente."""


class AuthorizationError(DomainError):
    """Operación denegada por falta de permisos del usuario actual."""
