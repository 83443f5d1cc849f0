"""
===============================================================================
USE CASE: Notify User
===============================================================================

Business Goal:
    Enviar una notificación (subject + template opcional + data) a un usuario,
    usando el AccessSubject como destinatario (recipient_email / recipient_name).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    NotifyUserUseCase

Collaborators:
    - UserRepository: get_user_by_id
    - Notifier: send
    - SubjectFactory: User -> AccessSubject

Notas:
    - Un envío fallido (ej. usuario sin email) NO es error del use case:
      se devuelve el receipt con sent=False.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID

from ....domain.repositories import UserRepository
from ....domain.services import NotificationMessage, Notifier
from .subject_factory import SubjectFactory
from .user_results import NotifyUserResult, UserError, UserErrorCode


class NotifyUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        notifier: Notifier,
        subject_factory: SubjectFactory,
    ) -> None:
        self._users = user_repository
        self._notifier = notifier
        self._subjects = subject_factory

    def execute(
        self,
        user_id: UUID,
        subject: str,
        view: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> NotifyUserResult:
        subject = (subject or "").strip()
        if not subject:
            return NotifyUserResult(
                error=UserError(
                    code=UserErrorCode.VALIDATION_ERROR,
                    message="Notification subject is required.",
                )
            )

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return NotifyUserResult(
                error=UserError(code=UserErrorCode.NOT_FOUND, message="User not found.")
            )

        message = NotificationMessage(subject=subject, view=view, data=dict(data or {}))
        receipt = self._notifier.send(self._subjects(user), message)
        return NotifyUserResult(receipt=receipt)
