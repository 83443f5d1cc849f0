"""
============================================================
TARJETA CRC: infrastructure/repositories/postgres/role.py
============================================================
Class: PostgresRoleRepository

Responsibilities:
- Implementar RoleStore sobre PostgreSQL: resolve/attach/detach/find_default_role.
- Implementar RoleRepository: alta, rename, soft delete/restore, listados.
- Mapear filas crudas -> entidad de dominio `Role`.

Collaborators:
- psycopg_pool.ConnectionPool
- domain.default_roles.DefaultRoles
- infrastructure.services.retry.with_retry (solo lecturas)
- crosscutting.exceptions.DatabaseError / RoleMutationError
- Tablas: roles(id, name, created_at, updated_at, deleted_at),
          user_role(user_id, role_id, created_at, updated_at)

Constraints / Notes:
- Repo puro: NO decide autorización (eso vive en AccessSubject).
- attach idempotente: ON CONFLICT DO NOTHING. role_id inexistente => FK => RoleMutationError.
- detach idempotente: DELETE de lo que exista.
- Escrituras NO se reintentan; lecturas sí (errores transitorios).
- Orden determinístico para respuestas/tests estables.
============================================================
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import RoleMutationError
from ....crosscutting.metrics import record_role_mutation
from ....domain.default_roles import DefaultRoles
from ....domain.entities import Role
from ...services.retry import with_retry
from .base import PostgresRepositoryBase

_ROLE_COLUMNS = "id, name, created_at, updated_at, deleted_at"


def _row_to_role(row: tuple) -> Role:
    return Role(
        id=row[0],
        name=row[1],
        created_at=row[2],
        updated_at=row[3],
        deleted_at=row[4],
    )


class PostgresRoleRepository(PostgresRepositoryBase):
    """Repositorio PostgreSQL para roles y la tabla user_role."""

    # =========================================================
    # SQL Constantes (Privadas)
    # =========================================================
    _SQL_RESOLVE_ROLES = """
        SELECT r.id, r.name, r.created_at, r.updated_at, r.deleted_at
        FROM user_role ur
        JOIN roles r ON r.id = ur.role_id
        WHERE ur.user_id = %s
          AND r.deleted_at IS NULL
        ORDER BY ur.created_at ASC, r.id ASC
    """

    _SQL_ATTACH = """
        INSERT INTO user_role (user_id, role_id)
        SELECT %s, r.role_id
        FROM UNNEST(%s::int[]) AS r(role_id)
        ON CONFLICT (user_id, role_id) DO NOTHING
    """

    _SQL_DETACH = """
        DELETE FROM user_role
        WHERE user_id = %s AND role_id = ANY(%s::int[])
    """

    _SQL_CREATE_ROLE = f"""
        INSERT INTO roles (name)
        VALUES (%s)
        RETURNING {_ROLE_COLUMNS}
    """

    _SQL_GET_ROLE = f"""
        SELECT {_ROLE_COLUMNS}
        FROM roles
        WHERE id = %s AND (%s OR deleted_at IS NULL)
    """

    _SQL_LIST_ROLES = f"""
        SELECT {_ROLE_COLUMNS}
        FROM roles
        WHERE (%s OR deleted_at IS NULL)
        ORDER BY id ASC
    """

    _SQL_RENAME_ROLE = f"""
        UPDATE roles
        SET name = %s, updated_at = now()
        WHERE id = %s AND deleted_at IS NULL
        RETURNING {_ROLE_COLUMNS}
    """

    _SQL_SOFT_DELETE_ROLE = """
        UPDATE roles
        SET deleted_at = now()
        WHERE id = %s AND deleted_at IS NULL
    """

    _SQL_RESTORE_ROLE = """
        UPDATE roles
        SET deleted_at = NULL, updated_at = now()
        WHERE id = %s AND deleted_at IS NOT NULL
    """

    _SQL_LIST_USERS_FOR_ROLE = """
        SELECT ur.user_id
        FROM user_role ur
        JOIN users u ON u.id = ur.user_id AND u.deleted_at IS NULL
        WHERE ur.role_id = %s
        ORDER BY ur.user_id ASC
    """

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        *,
        default_roles: DefaultRoles | None = None,
    ):
        super().__init__(pool)
        self._default_roles = default_roles or DefaultRoles()

    # =========================================================
    # RoleStore
    # =========================================================
    @with_retry
    def resolve_roles(self, user_id: UUID) -> List[Role]:
        rows = self._fetchall(
            query=self._SQL_RESOLVE_ROLES,
            params=[user_id],
            context_msg="PostgresRoleRepository: Failed to resolve roles",
            extra={"user_id": str(user_id)},
        )
        return [_row_to_role(row) for row in rows]

    def attach(self, user_id: UUID, role_ids: Iterable[int]) -> None:
        ids = list(dict.fromkeys(int(r) for r in role_ids))
        if not ids:
            return
        try:
            self._execute(
                query=self._SQL_ATTACH,
                params=[user_id, ids],
                context_msg="PostgresRoleRepository: Failed to attach roles",
                extra={"user_id": str(user_id), "role_ids": ids},
                error_cls=RoleMutationError,
            )
        except RoleMutationError:
            record_role_mutation("attach", "error")
            raise
        record_role_mutation("attach", "ok")

    def detach(self, user_id: UUID, role_ids: Iterable[int]) -> None:
        ids = list(dict.fromkeys(int(r) for r in role_ids))
        if not ids:
            return
        try:
            self._execute(
                query=self._SQL_DETACH,
                params=[user_id, ids],
                context_msg="PostgresRoleRepository: Failed to detach roles",
                extra={"user_id": str(user_id), "role_ids": ids},
                error_cls=RoleMutationError,
            )
        except RoleMutationError:
            record_role_mutation("detach", "error")
            raise
        record_role_mutation("detach", "ok")

    def find_default_role(self, kind: str) -> Optional[Role]:
        return self.get_role(self._default_roles.role_id(kind))

    # =========================================================
    # RoleRepository
    # =========================================================
    def create_role(self, name: str) -> Role:
        # R: valida el nombre antes de tocar la DB.
        Role(id=0, name=name)
        row = self._fetchone(
            query=self._SQL_CREATE_ROLE,
            params=[name.strip()],
            context_msg="PostgresRoleRepository: Failed to create role",
            extra={"name": name},
        )
        if row is None:  # pragma: no cover (RETURNING siempre devuelve fila)
            raise RoleMutationError("Unexpected: RETURNING clause returned no rows")
        return _row_to_role(row)

    @with_retry
    def get_role(self, role_id: int, *, include_deleted: bool = False) -> Optional[Role]:
        row = self._fetchone(
            query=self._SQL_GET_ROLE,
            params=[role_id, include_deleted],
            context_msg="PostgresRoleRepository: Failed to get role",
            extra={"role_id": role_id},
        )
        return _row_to_role(row) if row else None

    @with_retry
    def list_roles(self, *, include_deleted: bool = False) -> List[Role]:
        rows = self._fetchall(
            query=self._SQL_LIST_ROLES,
            params=[include_deleted],
            context_msg="PostgresRoleRepository: Failed to list roles",
            extra={"include_deleted": include_deleted},
        )
        return [_row_to_role(row) for row in rows]

    def rename_role(self, role_id: int, name: str) -> Optional[Role]:
        Role(id=role_id, name=name)
        row = self._fetchone(
            query=self._SQL_RENAME_ROLE,
            params=[name.strip(), role_id],
            context_msg="PostgresRoleRepository: Failed to rename role",
            extra={"role_id": role_id},
        )
        return _row_to_role(row) if row else None

    def soft_delete_role(self, role_id: int) -> bool:
        return (
            self._execute(
                query=self._SQL_SOFT_DELETE_ROLE,
                params=[role_id],
                context_msg="PostgresRoleRepository: Failed to soft delete role",
                extra={"role_id": role_id},
            )
            > 0
        )

    def restore_role(self, role_id: int) -> bool:
        return (
            self._execute(
                query=self._SQL_RESTORE_ROLE,
                params=[role_id],
                context_msg="PostgresRoleRepository: Failed to restore role",
                extra={"role_id": role_id},
            )
            > 0
        )

    @with_retry
    def list_users_for_role(self, role_id: int) -> List[UUID]:
        rows = self._fetchall(
            query=self._SQL_LIST_USERS_FOR_ROLE,
            params=[role_id],
            context_msg="PostgresRoleRepository: Failed to list users for role",
            extra={"role_id": role_id},
        )
        return [row[0] for row in rows]
