"""
===============================================================================
USER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Modelos compartidos de resultado y error para los casos de uso de usuarios
    y roles. Los use cases devuelven resultados tipados en lugar de lanzar
    excepciones para los errores de negocio esperables.

    Los fallos de storage (DatabaseError / RoleMutationError) NO se mapean
    acá: se propagan al caller.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Component:
    user_results models (module)

Responsibilities:
    - Definir UserErrorCode (set acotado y estable).
    - Representar UserError (code + message).
    - Representar resultados: UserResult, UserListResult, UserRolesResult,
      NotifyUserResult.

Collaborators:
    - domain.entities.User
    - domain.services.NotificationReceipt
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Union

from ....domain.entities import User
from ....domain.services import NotificationReceipt


class UserErrorCode(str, Enum):
    """
    Códigos de error para casos de uso de usuarios.

      - VALIDATION_ERROR: inputs inválidos o incompletos.
      - NOT_FOUND: usuario inexistente (o soft-deleted).
      - CONFLICT: colisión de unicidad (ej. email ya registrado).
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class UserError:
    code: UserErrorCode
    message: str


@dataclass
class UserResult:
    """
    Resultado con un único User.

    Contrato:
      - error is None => user presente
      - error != None => user None
    """

    user: User | None = None
    error: UserError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    error: UserError | None = None


@dataclass
class UserRolesResult:
    """Set de roles (nombres o ids según RoleIdentity) tras un attach/detach."""

    roles: FrozenSet[Union[int, str]] = frozenset()
    error: UserError | None = None


@dataclass
class NotifyUserResult:
    receipt: NotificationReceipt | None = None
    error: UserError | None = None
