# identity_model/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Errores de usuarios y roles
===============================================================================

Jerarquía
---------
IdentityError
  ├── DatabaseError            storage caído / query inválida / fila corrupta
  │     └── RoleMutationError  attach/detach no persistido
  ├── RoleResolutionError      no hay set de roles confiable (=> fail-closed)
  └── AccessDeniedError        require_roles / require_any_role negados

Cada instancia lleva un error_id (UUID) que se repite en el log, y opcionalmente
el error de bajo nivel en original_error (psycopg, ConnectionError...).

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  IdentityError + subclases

Responsabilidades:
  - Códigos estables para quien consuma los errores
  - Mensajes sin hashes ni tokens

Colaboradores:
  - identity/access_subject.py, identity/access_policy.py
  - infrastructure/repositories/*
  - infrastructure/services/retry.py (clasifica original_error)
===============================================================================
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Vista serializable de un IdentityError."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return asdict(self)


class IdentityError(Exception):
    """Base de los errores del paquete (error_code por subclase)."""

    error_code: str = "IDENTITY_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.error_id = error_id if error_id else str(uuid4())

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(self.error_code, self.message, self.error_id)


class DatabaseError(IdentityError):
    """Falla del storage de usuarios/roles."""

    error_code: str = "DATABASE_ERROR"


class RoleResolutionError(IdentityError):
    """El RoleStore no pudo producir el set de roles de un usuario."""

    error_code: str = "ROLE_RESOLUTION_ERROR"


class RoleMutationError(DatabaseError):
    """El RoleStore no pudo persistir un attach/detach."""

    error_code: str = "ROLE_MUTATION_ERROR"


class AccessDeniedError(IdentityError):
    """El sujeto no tiene los roles requeridos."""

    error_code: str = "ACCESS_DENIED"
