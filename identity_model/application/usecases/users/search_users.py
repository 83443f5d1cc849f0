"""
===============================================================================
USE CASE: Search Users
===============================================================================

Wrapper validado sobre UserRepository.search_users:
    - keyword con '*' como comodín (vacío => todos)
    - filtro opcional por role ids (al menos uno)
    - limit acotado a max_limit (USER_SEARCH_MAX_LIMIT)
===============================================================================
"""

from __future__ import annotations

from typing import Iterable

from ....domain.repositories import UserRepository
from .user_results import UserError, UserErrorCode, UserListResult


class SearchUsersUseCase:
    def __init__(self, user_repository: UserRepository, *, max_limit: int = 200) -> None:
        self._users = user_repository
        self._max_limit = max_limit

    def execute(
        self,
        keyword: str = "",
        role_ids: Iterable[int] | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> UserListResult:
        if limit < 1:
            return self._validation_error("limit must be >= 1")
        if offset < 0:
            return self._validation_error("offset must be >= 0")

        users = self._users.search_users(
            keyword,
            list(role_ids) if role_ids is not None else None,
            limit=min(limit, self._max_limit),
            offset=offset,
        )
        return UserListResult(users=users)

    @staticmethod
    def _validation_error(message: str) -> UserListResult:
        return UserListResult(
            users=[],
            error=UserError(code=UserErrorCode.VALIDATION_ERROR, message=message),
        )
