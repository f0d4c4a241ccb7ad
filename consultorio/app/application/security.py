from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from os import getenv

from consultorio.app.domain.exceptions import AuthorizationError

DEFAULT_MEDICO_ID = "medico"


class Role(str, Enum):
    ADMIN = "ADMIN"
    READONLY = "READONLY"


@dataclass(slots=True)
class UserContext:
    """Usuario que actúa. `medico_id` es el propietario de agenda y configuración."""

    role: Role = Role.ADMIN
    medico_id: str = DEFAULT_MEDICO_ID
    run_id: str | None = None

    @property
    def can_write(self) -> bool:
        return self.role == Role.ADMIN

    def require_write(self, operation: str) -> None:
        if self.can_write:
            return
        raise AuthorizationError(
            f"No tienes permisos para ejecutar '{operation}'. "
            "Tu perfil es READONLY."
        )


def user_context_from_env() -> UserContext:
    role_value = getenv("CONSULTORIO_ROLE", Role.ADMIN.value).strip().upper()
    role = Role(role_value) if role_value in {r.value for r in Role} else Role.ADMIN
    medico_id = (getenv("CONSULTORIO_MEDICO_ID") or "").strip() or DEFAULT_MEDICO_ID
    return UserContext(role=role, medico_id=medico_id)
