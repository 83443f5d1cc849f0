"""
============================================================
TARJETA CRC: infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Implementar UserRepository: lectura, alta, save, soft delete, búsqueda.
  - Búsqueda wildcard sobre email/fullname con filtro opcional por roles.

Collaborators:
  - domain.repositories.UserRepository (contrato)
  - domain.repositories.RoleStore (filtro por roles en search_users)
  - crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Thread-safe: Lock protege el diccionario interno.
  - Email único (replica uq_users_email) => DatabaseError si se repite.
  - Orden determinístico: created_at DESC, id DESC (igual que Postgres).
============================================================
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import DatabaseError
from ....domain.entities import User, UserStatus
from ....domain.repositories import RoleStore

# Columnas buscables (contrato compartido con la versión Postgres)
SEARCHABLE_COLUMNS: tuple[str, ...] = ("email", "fullname")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def keyword_pattern(keyword: str) -> Optional[re.Pattern[str]]:
    """
    Keyword -> regex case-insensitive.

    - '' => None (sin filtro)
    - con '*' => '*' es comodín, match del valor completo
    - sin '*' => match por substring
    """
    keyword = (keyword or "").strip()
    if not keyword:
        return None
    if "*" in keyword:
        parts = [re.escape(p) for p in keyword.split("*")]
        return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE)
    return re.compile(re.escape(keyword), re.IGNORECASE)


class InMemoryUserRepository:
    """Repositorio in-memory, thread-safe, para usuarios."""

    def __init__(self, role_store: RoleStore | None = None) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}
        self._role_store = role_store

    # =========================================================
    # Lectura
    # =========================================================
    def get_user_by_id(
        self, user_id: UUID, *, include_deleted: bool = False
    ) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None or (user.is_deleted and not include_deleted):
                return None
            return replace(user)

    def get_user_by_email(
        self, email: str, *, include_deleted: bool = False
    ) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email and (include_deleted or not user.is_deleted):
                    return replace(user)
        return None

    # =========================================================
    # Escritura
    # =========================================================
    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        fullname: str | None = None,
        status: int = UserStatus.UNVERIFIED,
    ) -> User:
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise DatabaseError(f"User email already exists: {email}")
            now = _utcnow()
            user = User(
                id=uuid4(),
                email=email,
                password_hash=password_hash,
                fullname=fullname,
                status=status,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            return replace(user)

    def save_user(self, user: User) -> User:
        with self._lock:
            current = self._users.get(user.id)
            if current is None:
                raise DatabaseError(f"User not found: {user.id}")
            if any(
                u.email == user.email and u.id != user.id for u in self._users.values()
            ):
                raise DatabaseError(f"User email already exists: {user.email}")
            stored = replace(
                user, created_at=current.created_at, updated_at=_utcnow()
            )
            self._users[user.id] = stored
            return replace(stored)

    def soft_delete_user(self, user_id: UUID) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None or user.is_deleted:
                return False
            user.mark_deleted()
            return True

    def restore_user(self, user_id: UUID) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if user is None or not user.is_deleted:
                return False
            user.restore()
            return True

    # =========================================================
    # Búsqueda
    # =========================================================
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
        offset = max(offset, 0)

        pattern = keyword_pattern(keyword)
        wanted_roles = set(role_ids or [])

        with self._lock:
            candidates = [replace(u) for u in self._users.values() if not u.is_deleted]

        def _matches_keyword(user: User) -> bool:
            if pattern is None:
                return True
            values = (getattr(user, column) or "" for column in SEARCHABLE_COLUMNS)
            return any(pattern.search(value) for value in values)

        def _matches_roles(user: User) -> bool:
            if not wanted_roles:
                return True
            if self._role_store is None:
                return False
            held = {role.id for role in self._role_store.resolve_roles(user.id)}
            return bool(held & wanted_roles)

        result = [u for u in candidates if _matches_keyword(u) and _matches_roles(u)]
        result.sort(
            key=lambda u: (u.created_at or datetime.min.replace(tzinfo=timezone.utc), str(u.id)),
            reverse=True,
        )
        return result[offset : offset + limit]
