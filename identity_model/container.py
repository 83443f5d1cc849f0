"""
===============================================================================
TARJETA CRC: identity_model/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, notifier, use cases) siguiendo DIP.
  - Elegir UNA vez el backend de roles/usuarios (memory | postgres) según Settings.
  - Mantener singletons con caching (lru_cache).

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.* (puertos)
  - infrastructure.* (implementaciones)
  - application.usecases.users.* (casos de uso)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - El backend no se cambia en runtime; reset_container() existe para tests.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases.users import (
    AssignUserRolesUseCase,
    ChangeUserStatusUseCase,
    NotifyUserUseCase,
    RegisterUserUseCase,
    RevokeUserRolesUseCase,
    SearchUsersUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .domain.default_roles import DefaultRoles
from .domain.entities import Role, User
from .domain.repositories import RoleRepository, RoleStore, UserRepository
from .domain.services import Notifier
from .identity.access_subject import AccessSubject, RoleIdentity
from .infrastructure.repositories import (
    InMemoryRoleRepository,
    InMemoryUserRepository,
    PostgresRoleRepository,
    PostgresUserRepository,
)
from .infrastructure.services import LoggingNotifier

# =============================================================================
# Helpers internos
# =============================================================================


def _uses_postgres() -> bool:
    return get_settings().role_store_backend == "postgres"


@lru_cache(maxsize=1)
def _ensure_pool() -> None:
    """Inicializa el pool global una sola vez (solo backend postgres)."""
    from .infrastructure.db.pool import init_pool

    settings = get_settings()
    init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )


# =============================================================================
# Configuración derivada
# =============================================================================


@lru_cache(maxsize=1)
def get_default_roles() -> DefaultRoles:
    return DefaultRoles.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_role_identity() -> RoleIdentity:
    return RoleIdentity(get_settings().role_identity)


# =============================================================================
# Repositorios (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_role_repository() -> RoleRepository:
    """
    Repositorio de roles (también implementa RoleStore).

    memory: se siembra con los roles default (admin / member).
    """
    defaults = get_default_roles()
    if _uses_postgres():
        _ensure_pool()
        logger.info("Role store backend selected", extra={"backend": "postgres"})
        return PostgresRoleRepository(default_roles=defaults)

    logger.info("Role store backend selected", extra={"backend": "memory"})
    return InMemoryRoleRepository(
        [
            Role(id=defaults.admin, name="admin"),
            Role(id=defaults.member, name="member"),
        ],
        default_roles=defaults,
    )


def get_role_store() -> RoleStore:
    return get_role_repository()


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    if _uses_postgres():
        _ensure_pool()
        return PostgresUserRepository()
    roles = get_role_repository()
    users = InMemoryUserRepository(role_store=roles)
    roles.bind_user_repository(users)
    return users


# =============================================================================
# Servicios
# =============================================================================


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    return LoggingNotifier()


def make_access_subject(user: User) -> AccessSubject:
    """Factory User -> AccessSubject con el store y RoleIdentity configurados."""
    return AccessSubject(user, get_role_store(), role_identity=get_role_identity())


# =============================================================================
# Use cases
# =============================================================================


def get_change_user_status_use_case() -> ChangeUserStatusUseCase:
    return ChangeUserStatusUseCase(get_user_repository(), make_access_subject)


def get_assign_user_roles_use_case() -> AssignUserRolesUseCase:
    return AssignUserRolesUseCase(get_user_repository(), make_access_subject)


def get_revoke_user_roles_use_case() -> RevokeUserRolesUseCase:
    return RevokeUserRolesUseCase(get_user_repository(), make_access_subject)


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        get_user_repository(), get_role_store(), make_access_subject
    )


def get_search_users_use_case() -> SearchUsersUseCase:
    return SearchUsersUseCase(
        get_user_repository(), max_limit=get_settings().user_search_max_limit
    )


def get_notify_user_use_case() -> NotifyUserUseCase:
    return NotifyUserUseCase(get_user_repository(), get_notifier(), make_access_subject)


# =============================================================================
# Tests
# =============================================================================


def reset_container() -> None:
    """Limpia singletons (no cierra el pool; usar db.pool.reset_pool)."""
    for factory in (
        _ensure_pool,
        get_default_roles,
        get_role_identity,
        get_role_repository,
        get_user_repository,
        get_notifier,
    ):
        factory.cache_clear()
