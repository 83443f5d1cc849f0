"""
===============================================================================
USE CASE: Register User
===============================================================================

Business Goal:
    Alta de un usuario nuevo: estado UNVERIFIED, password hasheado con Argon2
    y rol por defecto "member" (si está configurado y existe).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    RegisterUserUseCase

Responsibilities:
    - Validar email/password.
    - Rechazar emails ya registrados (CONFLICT).
    - Crear el usuario con hash de password.
    - Asignar el rol default "member".

Collaborators:
    - UserRepository: get_user_by_email, create_user
    - RoleStore: find_default_role
    - SubjectFactory: User -> AccessSubject (attach del rol default)
    - identity.passwords.hash_password
===============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ....domain.entities import UserStatus
from ....domain.repositories import RoleStore, UserRepository
from ....identity.passwords import hash_password
from .subject_factory import SubjectFactory
from .user_results import UserError, UserErrorCode, UserResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisterUserInput:
    email: str
    password: str
    fullname: str | None = None


class RegisterUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        role_store: RoleStore,
        subject_factory: SubjectFactory,
    ) -> None:
        self._users = user_repository
        self._roles = role_store
        self._subjects = subject_factory

    def execute(self, input_data: RegisterUserInput) -> UserResult:
        email = (input_data.email or "").strip()
        if not email or "@" not in email:
            return self._validation_error("A valid email is required.")
        if not input_data.password:
            return self._validation_error("Password is required.")

        # uq_users_email también cubre usuarios soft-deleted.
        if self._users.get_user_by_email(email, include_deleted=True) is not None:
            return UserResult(
                error=UserError(
                    code=UserErrorCode.CONFLICT, message="Email already registered."
                )
            )

        fullname = (input_data.fullname or "").strip() or None
        user = self._users.create_user(
            email=email,
            password_hash=hash_password(input_data.password),
            fullname=fullname,
            status=UserStatus.UNVERIFIED,
        )

        member = self._roles.find_default_role("member")
        if member is not None:
            self._subjects(user).attach_role(member)
        else:
            logger.warning(
                "Default member role not found; user registered without roles",
                extra={"user_id": str(user.id)},
            )

        logger.info("User registered", extra={"user_id": str(user.id)})
        return UserResult(user=user)

    @staticmethod
    def _validation_error(message: str) -> UserResult:
        return UserResult(
            error=UserError(code=UserErrorCode.VALIDATION_ERROR, message=message)
        )
