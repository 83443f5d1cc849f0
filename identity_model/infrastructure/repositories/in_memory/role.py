"""
============================================================
TARJETA CRC: infrastructure/repositories/in_memory/role.py
============================================================
Class: InMemoryRoleRepository

Responsibilities:
  - Almacenar roles y la tabla user_role en memoria (tests / local dev).
  - Implementar RoleStore (resolve/attach/detach/find_default_role).
  - Implementar RoleRepository (create/rename/soft delete/restore/listados).
  - Mantener ordering determinístico para tests estables.

Collaborators:
  - domain.repositories.RoleStore / RoleRepository (contratos)
  - domain.default_roles.DefaultRoles (admin/member configurables)
  - crosscutting.exceptions.RoleMutationError

Constraints / Notes:
  - Thread-safe: Lock protege las tablas internas.
  - Copias defensivas: nunca se entrega la instancia almacenada.
  - attach de un role_id inexistente => RoleMutationError (replica la FK de Postgres).
  - Roles soft-deleted: siguen en user_role, pero no se resuelven.
  - list_users_for_role oculta usuarios soft-deleted si hay un
    UserRepository enlazado (bind_user_repository), como el JOIN de Postgres.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from ....crosscutting.exceptions import RoleMutationError
from ....crosscutting.metrics import record_role_mutation
from ....domain.default_roles import DefaultRoles
from ....domain.entities import Role
from ....domain.repositories import UserRepository


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRoleRepository:
    """
    Repositorio in-memory, thread-safe, para roles y asignaciones.

    Modelo mental:
    - _roles actúa como tabla roles: id -> Role
    - _assignments actúa como tabla user_role: user_id -> [role_id, ...]
      (lista sin duplicados, orden de inserción)
    """

    def __init__(
        self,
        roles: Iterable[Role] | None = None,
        *,
        default_roles: DefaultRoles | None = None,
    ) -> None:
        self._lock = Lock()
        self._roles: Dict[int, Role] = {role.id: replace(role) for role in roles or []}
        self._assignments: Dict[UUID, List[int]] = {}
        self._default_roles = default_roles or DefaultRoles()
        self._users: Optional[UserRepository] = None

    def bind_user_repository(self, users: UserRepository) -> None:
        """Enlaza la tabla users (se crea después: depende de este store)."""
        self._users = users

    # =========================================================
    # RoleStore
    # =========================================================
    def resolve_roles(self, user_id: UUID) -> List[Role]:
        with self._lock:
            role_ids = self._assignments.get(user_id, [])
            return [
                replace(self._roles[role_id])
                for role_id in role_ids
                if role_id in self._roles and not self._roles[role_id].is_deleted
            ]

    def attach(self, user_id: UUID, role_ids: Iterable[int]) -> None:
        ids = list(role_ids)
        with self._lock:
            missing = [role_id for role_id in ids if role_id not in self._roles]
            if missing:
                record_role_mutation("attach", "error")
                raise RoleMutationError(f"Unknown role ids: {missing}")

            assigned = self._assignments.setdefault(user_id, [])
            for role_id in ids:
                if role_id not in assigned:
                    assigned.append(role_id)
        record_role_mutation("attach", "ok")

    def detach(self, user_id: UUID, role_ids: Iterable[int]) -> None:
        ids = set(role_ids)
        with self._lock:
            assigned = self._assignments.get(user_id)
            if assigned:
                self._assignments[user_id] = [r for r in assigned if r not in ids]
        record_role_mutation("detach", "ok")

    def find_default_role(self, kind: str) -> Optional[Role]:
        return self.get_role(self._default_roles.role_id(kind))

    # =========================================================
    # RoleRepository
    # =========================================================
    def create_role(self, name: str) -> Role:
        with self._lock:
            role_id = max(self._roles, default=0) + 1
            now = _utcnow()
            role = Role(id=role_id, name=name, created_at=now, updated_at=now)
            self._roles[role_id] = role
            return replace(role)

    def get_role(self, role_id: int, *, include_deleted: bool = False) -> Optional[Role]:
        with self._lock:
            role = self._roles.get(role_id)
            if role is None or (role.is_deleted and not include_deleted):
                return None
            return replace(role)

    def list_roles(self, *, include_deleted: bool = False) -> List[Role]:
        with self._lock:
            return [
                replace(role)
                for role_id, role in sorted(self._roles.items())
                if include_deleted or not role.is_deleted
            ]

    def rename_role(self, role_id: int, name: str) -> Optional[Role]:
        with self._lock:
            current = self._roles.get(role_id)
            if current is None or current.is_deleted:
                return None
            updated = replace(current, name=name, updated_at=_utcnow())
            self._roles[role_id] = updated
            return replace(updated)

    def soft_delete_role(self, role_id: int) -> bool:
        with self._lock:
            role = self._roles.get(role_id)
            if role is None or role.is_deleted:
                return False
            role.mark_deleted()
            return True

    def restore_role(self, role_id: int) -> bool:
        with self._lock:
            role = self._roles.get(role_id)
            if role is None or not role.is_deleted:
                return False
            role.restore()
            return True

    def list_users_for_role(self, role_id: int) -> List[UUID]:
        with self._lock:
            user_ids = [
                user_id
                for user_id, assigned in self._assignments.items()
                if role_id in assigned
            ]
        if self._users is not None:
            user_ids = [uid for uid in user_ids if not self._is_trashed(uid)]
        user_ids.sort(key=str)
        return user_ids

    def _is_trashed(self, user_id: UUID) -> bool:
        # Sin fila en users no hay nada que ocultar.
        user = self._users.get_user_by_id(user_id, include_deleted=True)
        return user is not None and user.is_deleted
