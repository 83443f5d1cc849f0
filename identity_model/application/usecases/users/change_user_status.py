"""
===============================================================================
USE CASE: Change User Status
===============================================================================

Business Goal:
    Aplicar una transición de estado de cuenta (activate / deactivate /
    suspend) y persistirla.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ChangeUserStatusUseCase

Responsibilities:
    - Validar la acción pedida.
    - Cargar el usuario (NOT_FOUND si no existe).
    - Ejecutar la transición vía AccessSubject (sin guards: cualquier estado
      puede ir a cualquier otro).
    - Persistir con UserRepository.save_user.

Collaborators:
    - UserRepository: get_user_by_id, save_user
    - SubjectFactory: User -> AccessSubject
    - user_results: UserResult / UserError / UserErrorCode

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Las transiciones son totales e incondicionales (idempotentes).
R2) El use case persiste; AccessSubject solo muta en memoria.
===============================================================================
"""

from __future__ import annotations

import logging
from enum import Enum
from uuid import UUID

from ....domain.repositories import UserRepository
from .subject_factory import SubjectFactory
from .user_results import UserError, UserErrorCode, UserResult

logger = logging.getLogger(__name__)


class StatusAction(str, Enum):
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    SUSPEND = "suspend"


class ChangeUserStatusUseCase:
    """Orquesta la transición de estado + persistencia."""

    def __init__(
        self,
        user_repository: UserRepository,
        subject_factory: SubjectFactory,
    ) -> None:
        self._users = user_repository
        self._subjects = subject_factory

    def execute(self, user_id: UUID, action: StatusAction | str) -> UserResult:
        try:
            action = StatusAction(action)
        except ValueError:
            return UserResult(
                error=UserError(
                    code=UserErrorCode.VALIDATION_ERROR,
                    message=f"Unknown status action: {action!r}",
                )
            )

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return UserResult(
                error=UserError(code=UserErrorCode.NOT_FOUND, message="User not found.")
            )

        subject = self._subjects(user)
        previous = subject.status
        getattr(subject, action.value)()

        saved = self._users.save_user(subject.user)
        logger.info(
            "User status changed",
            extra={
                "user_id": str(user_id),
                "action": action.value,
                "from_status": int(previous),
                "to_status": int(saved.status),
            },
        )
        return UserResult(user=saved)
