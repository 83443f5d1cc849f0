"""
===============================================================================
USER USE CASES PACKAGE (Public API / Exports)
===============================================================================

Punto único de importación para los casos de uso de usuarios/roles y sus
resultados tipados.
===============================================================================
"""

from __future__ import annotations

from .assign_roles import AssignUserRolesUseCase, RevokeUserRolesUseCase
from .change_user_status import ChangeUserStatusUseCase, StatusAction
from .notify_user import NotifyUserUseCase
from .register_user import RegisterUserInput, RegisterUserUseCase
from .search_users import SearchUsersUseCase
from .subject_factory import SubjectFactory
from .user_results import (
    NotifyUserResult,
    UserError,
    UserErrorCode,
    UserListResult,
    UserResult,
    UserRolesResult,
)

__all__ = [
    # Use cases
    "AssignUserRolesUseCase",
    "RevokeUserRolesUseCase",
    "ChangeUserStatusUseCase",
    "StatusAction",
    "NotifyUserUseCase",
    "RegisterUserInput",
    "RegisterUserUseCase",
    "SearchUsersUseCase",
    "SubjectFactory",
    # Results
    "NotifyUserResult",
    "UserError",
    "UserErrorCode",
    "UserListResult",
    "UserResult",
    "UserRolesResult",
]
