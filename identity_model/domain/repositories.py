"""
CRC: domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for users, roles and the user_role join (ports).
- Keep the identity core independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing (fakes/mocks).

Collaborators
- domain.entities: User, Role
- identity.access_subject: consumes RoleStore
- infrastructure.repositories: postgres/*, in_memory/* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- RoleStore failures: resolve_roles raises (any exception); attach/detach raise
  RoleMutationError and MUST NOT swallow failures.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Role ids are integers; user ids are UUIDs.
"""

from typing import Iterable, List, Optional, Protocol
from uuid import UUID

from .entities import Role, User


class RoleStore(Protocol):
    """
    R: Resolves and mutates principal -> role assignments.

    Implementations must provide:
      - Active (non soft-deleted) roles of a user
      - Idempotent attach/detach over the join table
      - Lookup of the configured default roles (admin/member)
    """

    def resolve_roles(self, user_id: UUID) -> List[Role]:
        """R: Roles currently attached to the user (soft-deleted roles excluded)."""
        ...

    def attach(self, user_id: UUID, role_ids: Iterable[int]) -> None:
        """R: Union semantics: already-attached ids are a no-op."""
        ...

    def detach(self, user_id: UUID, role_ids: Iterable[int]) -> None:
        """R: Removing an id that is not attached is a no-op."""
        ...

    def find_default_role(self, kind: str) -> Optional[Role]:
        """R: Resolve 'admin' / 'member' through the configured DefaultRoles."""
        ...


class RoleRepository(Protocol):
    """R: Administrative lifecycle of roles (create, rename, soft delete)."""

    def create_role(self, name: str) -> Role: ...

    def get_role(self, role_id: int, *, include_deleted: bool = False) -> Optional[Role]: ...

    def list_roles(self, *, include_deleted: bool = False) -> List[Role]: ...

    def rename_role(self, role_id: int, name: str) -> Optional[Role]: ...

    def soft_delete_role(self, role_id: int) -> bool: ...

    def restore_role(self, role_id: int) -> bool: ...

    def list_users_for_role(self, role_id: int) -> List[UUID]:
        """R: Inverse of the user_role relation (ids of non-deleted users holding the role)."""
        ...


class UserRepository(Protocol):
    """R: Persistence of users (the opaque "save" collaborator lives here)."""

    def get_user_by_id(
        self, user_id: UUID, *, include_deleted: bool = False
    ) -> Optional[User]: ...

    def get_user_by_email(
        self, email: str, *, include_deleted: bool = False
    ) -> Optional[User]:
        """R: Soft-deleted users only come back with include_deleted=True."""
        ...

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        fullname: str | None = None,
        status: int = 0,
    ) -> User: ...

    def save_user(self, user: User) -> User:
        """R: Persist mutable attributes (status, fullname, password, token)."""
        ...

    def soft_delete_user(self, user_id: UUID) -> bool: ...

    def restore_user(self, user_id: UUID) -> bool: ...

    def search_users(
        self,
        keyword: str = "",
        role_ids: Iterable[int] | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        """
        R: Wildcard search over email/fullname, optionally filtered by roles.

        - Empty keyword matches every user.
        - '*' inside the keyword acts as a wildcard.
        - role_ids (non-empty): user must hold at least one of them.
        - Soft-deleted users are excluded.
        """
        ...
