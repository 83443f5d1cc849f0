"""
============================================================
TARJETA CRC: infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Cargar usuarios (por id / por email) y crearlos.
  - Persistir atributos mutables (status, fullname, password_hash, remember_token).
  - Soft delete / restore.
  - Búsqueda wildcard sobre email/fullname con filtro opcional por roles.
  - Mapear filas crudas -> entidad `User` validando `UserStatus`.

Collaborators:
  - psycopg_pool.ConnectionPool
  - domain.entities.User / UserStatus
  - infrastructure.services.retry.with_retry (solo lecturas)
  - crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Repositorio puro: NO define reglas de negocio.
  - Retorna None cuando no existe el recurso (no exception por “not found”).
  - Status persistido fuera de {0, 1, 63} => DatabaseError.
  - SQL parametrizado siempre; el keyword se escapa para ILIKE.
  - Orden estable en listados: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....domain.entities import User, UserStatus
from ...services.retry import with_retry
from .base import PostgresRepositoryBase

# R: Lista explícita de columnas; si el esquema cambia se ajusta acá.
_USER_COLUMNS = (
    "id, email, fullname, password_hash, remember_token, status, "
    "created_at, updated_at, deleted_at"
)

# R: Ordering determinístico. Si created_at empata, id ordena estable.
_USER_ORDER_BY = "created_at DESC, id DESC"


def _row_to_user(row: tuple) -> User:
    """
    Convierte una fila de `users` a entidad de dominio `User`.

    Status estricto: si el valor no matchea UserStatus -> DatabaseError.
    """
    try:
        status = UserStatus(row[5])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user status in database: {row[5]!r}") from exc

    return User(
        id=row[0],
        email=row[1],
        fullname=row[2],
        password_hash=row[3] or "",
        remember_token=row[4],
        status=status,
        created_at=row[6],
        updated_at=row[7],
        deleted_at=row[8],
    )


def like_pattern(keyword: str) -> Optional[str]:
    """
    Keyword -> patrón ILIKE.

    - '' => None (sin filtro)
    - con '*' => '*' se traduce a '%' (match del valor completo)
    - sin '*' => '%keyword%'
    """
    keyword = (keyword or "").strip()
    if not keyword:
        return None
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    if "*" in escaped:
        return escaped.replace("*", "%")
    return f"%{escaped}%"


class PostgresUserRepository(PostgresRepositoryBase):
    """Repositorio PostgreSQL para la tabla users."""

    _SQL_GET_BY_ID = f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE id = %s AND (%s OR deleted_at IS NULL)
    """

    _SQL_GET_BY_EMAIL = f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE email = %s AND (%s OR deleted_at IS NULL)
    """

    _SQL_CREATE = f"""
        INSERT INTO users (id, email, fullname, password_hash, status)
        VALUES (%s, %s, %s, %s, %s)
        RETURNING {_USER_COLUMNS}
    """

    _SQL_SAVE = f"""
        UPDATE users
        SET email = %s,
            fullname = %s,
            password_hash = %s,
            remember_token = %s,
            status = %s,
            updated_at = now()
        WHERE id = %s
        RETURNING {_USER_COLUMNS}
    """

    _SQL_SOFT_DELETE = """
        UPDATE users
        SET deleted_at = now()
        WHERE id = %s AND deleted_at IS NULL
    """

    _SQL_RESTORE = """
        UPDATE users
        SET deleted_at = NULL, updated_at = now()
        WHERE id = %s AND deleted_at IS NOT NULL
    """

    _SQL_KEYWORD_FILTER = """
        AND (u.email ILIKE %s OR COALESCE(u.fullname, '') ILIKE %s)
    """

    _SQL_ROLE_FILTER = """
        AND EXISTS (
            SELECT 1
            FROM user_role ur
            JOIN roles r ON r.id = ur.role_id
            WHERE ur.user_id = u.id
              AND r.deleted_at IS NULL
              AND ur.role_id = ANY(%s::int[])
        )
    """

    def __init__(self, pool: Optional[ConnectionPool] = None):
        super().__init__(pool)

    # =========================================================
    # Lectura
    # =========================================================
    @with_retry
    def get_user_by_id(
        self, user_id: UUID, *, include_deleted: bool = False
    ) -> Optional[User]:
        row = self._fetchone(
            query=self._SQL_GET_BY_ID,
            params=[user_id, include_deleted],
            context_msg="PostgresUserRepository: Failed to get user by id",
            extra={"user_id": str(user_id)},
        )
        return _row_to_user(row) if row else None

    @with_retry
    def get_user_by_email(
        self, email: str, *, include_deleted: bool = False
    ) -> Optional[User]:
        row = self._fetchone(
            query=self._SQL_GET_BY_EMAIL,
            params=[email, include_deleted],
            context_msg="PostgresUserRepository: Failed to get user by email",
            extra={"email": email},
        )
        return _row_to_user(row) if row else None

    # =========================================================
    # Escritura (sin retry)
    # =========================================================
    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        fullname: str | None = None,
        status: int = UserStatus.UNVERIFIED,
    ) -> User:
        user_id = uuid4()
        row = self._fetchone(
            query=self._SQL_CREATE,
            params=[user_id, email, fullname, password_hash, int(UserStatus(status))],
            context_msg="PostgresUserRepository: Failed to create user",
            extra={"email": email},
        )
        if row is None:  # pragma: no cover (RETURNING siempre devuelve fila)
            raise DatabaseError("Unexpected: RETURNING clause returned no rows")
        return _row_to_user(row)

    def save_user(self, user: User) -> User:
        row = self._fetchone(
            query=self._SQL_SAVE,
            params=[
                user.email,
                user.fullname,
                user.password_hash,
                user.remember_token,
                int(user.status),
                user.id,
            ],
            context_msg="PostgresUserRepository: Failed to save user",
            extra={"user_id": str(user.id)},
        )
        if row is None:
            raise DatabaseError(f"User not found: {user.id}")
        return _row_to_user(row)

    def soft_delete_user(self, user_id: UUID) -> bool:
        return (
            self._execute(
                query=self._SQL_SOFT_DELETE,
                params=[user_id],
                context_msg="PostgresUserRepository: Failed to soft delete user",
                extra={"user_id": str(user_id)},
            )
            > 0
        )

    def restore_user(self, user_id: UUID) -> bool:
        return (
            self._execute(
                query=self._SQL_RESTORE,
                params=[user_id],
                context_msg="PostgresUserRepository: Failed to restore user",
                extra={"user_id": str(user_id)},
            )
            > 0
        )

    # =========================================================
    # Búsqueda
    # =========================================================
    @with_retry
    def search_users(
        self,
        keyword: str = "",
        role_ids: Iterable[int] | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        if limit <= 0:
            return []

        query = f"SELECT {_USER_COLUMNS} FROM users u WHERE u.deleted_at IS NULL"
        params: list[object] = []

        pattern = like_pattern(keyword)
        if pattern is not None:
            query += self._SQL_KEYWORD_FILTER
            params.extend([pattern, pattern])

        wanted = sorted({int(r) for r in (role_ids or [])})
        if wanted:
            query += self._SQL_ROLE_FILTER
            params.append(wanted)

        query += f" ORDER BY {_USER_ORDER_BY} LIMIT %s OFFSET %s"
        params.extend([limit, max(offset, 0)])

        rows = self._fetchall(
            query=query,
            params=params,
            context_msg="PostgresUserRepository: Failed to search users",
            extra={"keyword": keyword, "role_ids": wanted},
        )
        return [_row_to_user(row) for row in rows]
