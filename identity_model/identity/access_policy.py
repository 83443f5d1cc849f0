"""
===============================================================================
TARJETA CRC: identity/access_policy.py
===============================================================================

Módulo:
    Guard de roles (ensure_roles)

Responsabilidades:
    - Convertir los predicados de AccessSubject en una decisión que corta el flujo.
    - Loguear denegaciones con datos mínimos y seguros.

Colaboradores:
    - identity.access_subject.AccessSubject
    - crosscutting.exceptions.AccessDeniedError
    - crosscutting.logger

Reglas:
    - all_of: debe cumplir is_(all_of) (vacío => pasa).
    - any_of: si se pasa, debe cumplir is_any(any_of).
    - Ambos se combinan con AND.
===============================================================================
"""

from __future__ import annotations

from ..crosscutting.exceptions import AccessDeniedError
from ..crosscutting.logger import logger
from ..domain.entities import Role
from .access_subject import AccessSubject, RoleInput


def _as_list(value: RoleInput) -> list:
    if value is None:
        return []
    if isinstance(value, (str, int, Role)):
        return [value]
    return list(value)


def ensure_roles(
    subject: AccessSubject,
    *,
    all_of: RoleInput = (),
    any_of: RoleInput = (),
) -> None:
    """Lanza AccessDeniedError si el sujeto no cumple los roles requeridos."""
    required_all = _as_list(all_of)
    required_any = _as_list(any_of)

    if not subject.is_(required_all):
        logger.warning(
            "Access denied: missing required roles",
            extra={"user_id": str(subject.id), "all_of": [str(r) for r in required_all]},
        )
        raise AccessDeniedError(
            "Missing required roles: " + ", ".join(sorted(str(r) for r in required_all))
        )

    if required_any and not subject.is_any(required_any):
        logger.warning(
            "Access denied: none of the accepted roles",
            extra={"user_id": str(subject.id), "any_of": [str(r) for r in required_any]},
        )
        raise AccessDeniedError(
            "Requires one of: " + ", ".join(sorted(str(r) for r in required_any))
        )
