"""
===============================================================================
TARJETA CRC: domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (User, Role, UserStatus)

Responsabilidades:
    - Definir estructuras centrales de identidad (sin infraestructura).
    - Brindar helpers mínimos (soft delete, vista pública) para invariantes simples.
    - Validar el estado de cuenta: solo UNVERIFIED / VERIFIED / SUSPENDED.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - identity.access_subject: opera status y roles sobre un User.
    - infrastructure.repositories: mapean filas -> entidades.

Principios:
    - Sin dependencias a DB/argon2/prometheus.
    - Datos + comportamiento mínimo.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional
from uuid import UUID


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# UserStatus
# ---------------------------------------------------------------------------


class UserStatus(IntEnum):
    """Estado de cuenta persistido como entero (contrato con la tabla users)."""

    UNVERIFIED = 0
    VERIFIED = 1
    SUSPENDED = 63


# ---------------------------------------------------------------------------
# Role
# ---------------------------------------------------------------------------


@dataclass
class Role:
    """
    Rol asignable a usuarios (many-to-many vía user_role).

    Nota:
      - name es requerido pero NO único en esta capa.
      - deleted_at = soft delete; un rol borrado no cuenta en la resolución.
    """

    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise ValueError("Role name is required")
        self.name = name

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, *, at: datetime | None = None) -> None:
        self.deleted_at = at or _utcnow()

    def restore(self) -> None:
        self.deleted_at = None


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


@dataclass
class User:
    """
    Usuario (principal) tal como se persiste.

    Importante:
      - password_hash y remember_token nunca salen en to_public_dict().
      - status se valida contra UserStatus (ValueError si el entero no existe).
    """

    id: UUID
    email: str
    password_hash: str = ""
    fullname: Optional[str] = None
    status: UserStatus = UserStatus.UNVERIFIED
    remember_token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.status = UserStatus(self.status)

    @property
    def is_deleted(self) -> bool:
        """True si está soft-deleted."""
        return self.deleted_at is not None

    def mark_deleted(self, *, at: datetime | None = None) -> None:
        """Marca el usuario como eliminado (soft delete)."""
        self.deleted_at = at or _utcnow()

    def restore(self) -> None:
        """Restaura un usuario soft-deleted."""
        self.deleted_at = None

    def to_public_dict(self) -> Dict[str, Any]:
        """Forma serializable sin atributos ocultos (password, remember_token)."""
        return {
            "id": str(self.id),
            "email": self.email,
            "fullname": self.fullname,
            "status": int(self.status),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }
