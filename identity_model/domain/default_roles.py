"""
===============================================================================
TARJETA CRC: domain/default_roles.py
===============================================================================

Módulo:
    Roles por defecto (admin / member) configurables por despliegue

Responsabilidades:
    - Mapear los roles "bien conocidos" a ids de rol configurables.
    - Permitir overrides al construir (merge), sin estado global mutable.

Colaboradores:
    - crosscutting.config.Settings: default_admin_role_id / default_member_role_id.
    - domain.repositories.RoleStore.find_default_role: recibe este valor al construirse.

Notas:
    - El valor es inmutable: with_overrides() devuelve una instancia nueva.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Literal, Mapping

if TYPE_CHECKING:
    from ..crosscutting.config import Settings

DefaultRoleKind = Literal["admin", "member"]


@dataclass(frozen=True, slots=True)
class DefaultRoles:
    """Ids de los roles admin/member para este despliegue."""

    admin: int = 1
    member: int = 2

    def with_overrides(self, overrides: Mapping[str, int] | None) -> "DefaultRoles":
        """Merge de overrides sobre los valores actuales (None = sin cambios)."""
        if not overrides:
            return self

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown default roles: {sorted(unknown)}")

        return replace(self, **{k: int(v) for k, v in overrides.items()})

    def role_id(self, kind: str) -> int:
        """Id configurado para 'admin' o 'member'."""
        if kind == "admin":
            return self.admin
        if kind == "member":
            return self.member
        raise ValueError(f"Unknown default role: {kind!r}")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DefaultRoles":
        return cls(
            admin=settings.default_admin_role_id,
            member=settings.default_member_role_id,
        )
