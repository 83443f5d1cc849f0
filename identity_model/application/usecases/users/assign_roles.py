"""
===============================================================================
USE CASES: Assign / Revoke User Roles
===============================================================================

Business Goal:
    Asignar (attach) o revocar (detach) roles a un usuario y devolver el set
    de roles resultante.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    AssignUserRolesUseCase, RevokeUserRolesUseCase

Responsibilities:
    - Validar que se pidió al menos un rol.
    - Cargar el usuario (NOT_FOUND si no existe).
    - Delegar attach/detach en AccessSubject (idempotentes).
    - Devolver el set recargado desde el store.

Collaborators:
    - UserRepository: get_user_by_id
    - SubjectFactory: User -> AccessSubject
    - user_results: UserRolesResult / UserError / UserErrorCode

Notas:
    - RoleMutationError se propaga: el caller debe ver el fallo de escritura.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from ....domain.entities import Role
from ....domain.repositories import UserRepository
from ....identity.access_subject import AccessSubject, as_role_ids
from .subject_factory import SubjectFactory
from .user_results import UserError, UserErrorCode, UserRolesResult

logger = logging.getLogger(__name__)


class _RoleChangeUseCase:
    _operation = ""

    def __init__(
        self,
        user_repository: UserRepository,
        subject_factory: SubjectFactory,
    ) -> None:
        self._users = user_repository
        self._subjects = subject_factory

    def _apply(self, subject: AccessSubject, role_ids: list[int]) -> None:
        raise NotImplementedError

    def execute(
        self, user_id: UUID, role_ids: int | str | Role | Iterable[int | str | Role]
    ) -> UserRolesResult:
        try:
            ids = as_role_ids(role_ids)
        except ValueError as exc:
            return UserRolesResult(
                error=UserError(code=UserErrorCode.VALIDATION_ERROR, message=str(exc))
            )
        if not ids:
            return UserRolesResult(
                error=UserError(
                    code=UserErrorCode.VALIDATION_ERROR,
                    message="At least one role id is required.",
                )
            )

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return UserRolesResult(
                error=UserError(code=UserErrorCode.NOT_FOUND, message="User not found.")
            )

        subject = self._subjects(user)
        self._apply(subject, ids)

        logger.info(
            "User roles changed",
            extra={
                "user_id": str(user_id),
                "operation": self._operation,
                "role_ids": ids,
            },
        )
        return UserRolesResult(roles=subject.reload_roles())


class AssignUserRolesUseCase(_RoleChangeUseCase):
    """Attach (unión): ids ya asignados no cambian nada."""

    _operation = "attach"

    def _apply(self, subject: AccessSubject, role_ids: list[int]) -> None:
        subject.attach_role(role_ids)


class RevokeUserRolesUseCase(_RoleChangeUseCase):
    """Detach (diferencia): ids no asignados no cambian nada."""

    _operation = "detach"

    def _apply(self, subject: AccessSubject, role_ids: list[int]) -> None:
        subject.detach_role(role_ids)
