"""
===============================================================================
TARJETA CRC: identity/access_subject.py
===============================================================================

Módulo:
    AccessSubject (principal + roles + estado de cuenta)

Responsabilidades:
    - Transiciones de estado: activate / deactivate / suspend (sin guards).
    - Resolver roles del usuario vía RoleStore (lazy) y cachearlos en la instancia.
    - Predicados de membresía: is_ (AND), is_any (OR), is_not, is_not_any.
    - Attach/detach de roles delegando en el RoleStore (invalida el cache).
    - Exponer recipient_email / recipient_name para notificadores.

Colaboradores:
    - domain.entities.User / Role / UserStatus
    - domain.repositories.RoleStore (puerto)
    - crosscutting.exceptions.RoleResolutionError
    - crosscutting.logger / crosscutting.metrics

Decisiones de diseño:
    - Fail-closed: si la resolución de roles falla, is_ / is_any devuelven False
      (y lo logueamos + contamos). Nunca propagan RoleResolutionError.
    - attach_role / detach_role NO atrapan errores: el caller ve el fallo.
    - El cache NO se invalida por cambios externos en el store; reload_roles()
      fuerza la relectura.
    - Persistir el status es responsabilidad del caller (UserRepository.save_user).
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable, Optional, Union
from uuid import UUID

from ..crosscutting.exceptions import RoleResolutionError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_authz_check, record_role_resolution
from ..domain.entities import Role, User, UserStatus
from ..domain.repositories import RoleStore

RoleRef = Union[int, str]
RoleInput = Union[RoleRef, Role, Iterable[Union[RoleRef, Role]], None]


class RoleIdentity(str, Enum):
    """Qué identifica a un rol en los predicados: su nombre o su id."""

    NAME = "name"
    ID = "id"


def as_role_ids(
    role_ids: Union[int, str, Role, Iterable[Union[int, str, Role]]],
) -> list[int]:
    """
    Normaliza int | "12" | Role | iterable -> lista de ids sin duplicados.

    Un str es UN id (no se itera por caracteres). Orden estable.
    """
    if isinstance(role_ids, (int, str, Role)):
        role_ids = [role_ids]

    ids: list[int] = []
    for value in role_ids:
        if isinstance(value, Role):
            role_id = value.id
        else:
            try:
                role_id = int(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Role id expected, got {value!r}") from exc
        if role_id not in ids:
            ids.append(role_id)
    return ids


class AccessSubject:
    """Usuario evaluable por rol (cache de roles propio de cada instancia)."""

    def __init__(
        self,
        user: User,
        role_store: RoleStore,
        *,
        role_identity: RoleIdentity = RoleIdentity.NAME,
    ) -> None:
        self._user = user
        self._store = role_store
        self._identity = RoleIdentity(role_identity)
        self._roles: Optional[FrozenSet[RoleRef]] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def id(self) -> UUID:
        return self._user.id

    @property
    def user(self) -> User:
        return self._user

    @property
    def status(self) -> UserStatus:
        return self._user.status

    @property
    def role_identity(self) -> RoleIdentity:
        return self._identity

    @property
    def recipient_email(self) -> str:
        return self._user.email

    @property
    def recipient_name(self) -> Optional[str]:
        return self._user.fullname

    # ------------------------------------------------------------------
    # Estado de cuenta
    # ------------------------------------------------------------------
    def activate(self) -> "AccessSubject":
        self._user.status = UserStatus.VERIFIED
        return self

    def deactivate(self) -> "AccessSubject":
        self._user.status = UserStatus.UNVERIFIED
        return self

    def suspend(self) -> "AccessSubject":
        self._user.status = UserStatus.SUSPENDED
        return self

    def is_activated(self) -> bool:
        return self._user.status == UserStatus.VERIFIED

    def is_suspended(self) -> bool:
        return self._user.status == UserStatus.SUSPENDED

    # ------------------------------------------------------------------
    # Roles (resolución + cache)
    # ------------------------------------------------------------------
    def _role_ref(self, role: Role) -> RoleRef:
        return role.name if self._identity == RoleIdentity.NAME else role.id

    def roles(self) -> FrozenSet[RoleRef]:
        """
        Set de roles del usuario (nombres o ids según RoleIdentity).

        Carga desde el store en el primer acceso y cachea.

        Raises:
            RoleResolutionError: el store falló o devolvió algo que no es una colección.
        """
        if self._roles is not None:
            record_role_resolution("cache")
            return self._roles

        try:
            resolved = self._store.resolve_roles(self._user.id)
        except RoleResolutionError:
            raise
        except Exception as exc:
            raise RoleResolutionError(
                f"Role resolution failed for user {self._user.id}", original_error=exc
            ) from exc

        if not isinstance(resolved, (list, tuple, set, frozenset)) or not all(
            isinstance(role, Role) for role in resolved
        ):
            raise RoleResolutionError(
                f"Role store returned {type(resolved).__name__} for user {self._user.id}"
            )

        record_role_resolution("store")
        self._roles = frozenset(
            self._role_ref(role) for role in resolved if not role.is_deleted
        )
        return self._roles

    def reload_roles(self) -> FrozenSet[RoleRef]:
        """Descarta el snapshot y vuelve a resolver desde el store."""
        self._roles = None
        return self.roles()

    def forget_roles(self) -> None:
        """Descarta el snapshot sin resolver."""
        self._roles = None

    def _resolved_or_none(self, predicate: str) -> Optional[FrozenSet[RoleRef]]:
        try:
            return self.roles()
        except RoleResolutionError as exc:
            logger.warning(
                "AccessSubject: role resolution failed; failing closed",
                extra={
                    "user_id": str(self._user.id),
                    "predicate": predicate,
                    "error_id": exc.error_id,
                    "error": str(exc.original_error or exc),
                },
            )
            record_authz_check(predicate, "fail_closed")
            return None

    def _required_refs(self, required: RoleInput) -> list[RoleRef]:
        if required is None:
            return []
        if isinstance(required, (str, int, Role)):
            required = [required]
        return [
            self._role_ref(item) if isinstance(item, Role) else item
            for item in required
        ]

    # ------------------------------------------------------------------
    # Predicados
    # ------------------------------------------------------------------
    def is_(self, required: RoleInput) -> bool:
        """True si el usuario tiene TODOS los roles dados (AND). Vacío => True."""
        user_roles = self._resolved_or_none("is")
        if user_roles is None:
            return False

        allowed = all(role in user_roles for role in self._required_refs(required))
        record_authz_check("is", "allow" if allowed else "deny")
        return allowed

    def is_any(self, required: RoleInput) -> bool:
        """True si el usuario tiene AL MENOS UNO de los roles dados (OR). Vacío => False."""
        user_roles = self._resolved_or_none("is_any")
        if user_roles is None:
            return False

        allowed = any(role in user_roles for role in self._required_refs(required))
        record_authz_check("is_any", "allow" if allowed else "deny")
        return allowed

    def is_not(self, required: RoleInput) -> bool:
        return not self.is_(required)

    def is_not_any(self, required: RoleInput) -> bool:
        return not self.is_any(required)

    # ------------------------------------------------------------------
    # Asignación de roles
    # ------------------------------------------------------------------
    def attach_role(
        self, role_ids: Union[int, str, Role, Iterable[Union[int, str, Role]]]
    ) -> None:
        """Asigna roles (idempotente). Los fallos del store se propagan."""
        ids = as_role_ids(role_ids)
        try:
            self._store.attach(self._user.id, ids)
        finally:
            # R: también en fallo; el estado del store queda incierto.
            self._roles = None

    def detach_role(
        self, role_ids: Union[int, str, Role, Iterable[Union[int, str, Role]]]
    ) -> None:
        """Quita roles (ausentes = no-op). Los fallos del store se propagan."""
        ids = as_role_ids(role_ids)
        try:
            self._store.detach(self._user.id, ids)
        finally:
            self._roles = None

    def __repr__(self) -> str:
        return f"AccessSubject(id={self._user.id!s}, status={self._user.status.name})"
