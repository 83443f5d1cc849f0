"""
============================================================
TARJETA CRC: infrastructure/repositories/postgres/base.py
============================================================
Class: PostgresRepositoryBase

Responsibilities:
  - Resolver el pool (inyectado o global) de forma lazy.
  - Ejecutar SQL parametrizado con logging + DatabaseError consistentes.

Collaborators:
  - psycopg_pool.ConnectionPool
  - infrastructure.db.pool.get_pool
  - crosscutting.exceptions.DatabaseError
  - crosscutting.logger.logger

Constraints:
  - Todas las queries deben ser parametrizadas.
  - La excepción original queda en DatabaseError.original_error
    (el retry la usa para clasificar transitorios).
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional, Type

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger


class PostgresRepositoryBase:
    """Helpers compartidos por los repositorios Postgres."""

    def __init__(self, pool: Optional[ConnectionPool] = None):
        # Pool inyectable para tests. En prod se obtiene por factory global.
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool
        from ...db.pool import get_pool

        return get_pool()

    def _fetchall(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> list[tuple]:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            self._raise(exc, context_msg, extra)

    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except Exception as exc:
            self._raise(exc, context_msg, extra)

    def _execute(
        self,
        *,
        query: str,
        params: Iterable[object],
        context_msg: str,
        extra: dict,
        error_cls: Type[DatabaseError] = DatabaseError,
    ) -> int:
        """Ejecuta un comando y devuelve rowcount."""
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).rowcount or 0
        except Exception as exc:
            self._raise(exc, context_msg, extra, error_cls=error_cls)

    @staticmethod
    def _raise(
        exc: Exception,
        context_msg: str,
        extra: dict,
        *,
        error_cls: Type[DatabaseError] = DatabaseError,
    ):
        logger.exception(context_msg, extra={**extra, "error": str(exc)})
        raise error_cls(f"{context_msg}: {exc}", original_error=exc) from exc
