"""
===============================================================================
CRC CARD: infrastructure/db/pool.py
===============================================================================

Componente:
  ConnectionPool de psycopg compartido por PostgresUserRepository y
  PostgresRoleRepository.

Responsabilidades:
  - Abrir el pool una vez por proceso (container._ensure_pool)
  - Entregarlo a los repos (get_pool)
  - Fijar statement_timeout en cada conexión nueva

Colaboradores:
  - psycopg_pool.ConnectionPool
  - crosscutting.config (db_statement_timeout_ms)

Reglas:
  - Doble init o uso sin init: error tipado (db/errors.py)
  - Todas las transiciones del singleton bajo _lock
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import (
    DatabaseConnectionError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)

_pool: Optional[ConnectionPool] = None
_lock = threading.Lock()


def _configure_connection(conn) -> None:
    """Hook `configure` del pool: corre una vez por conexión física."""
    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms <= 0:
        return
    conn.execute(f"SET statement_timeout = {timeout_ms}")
    conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    global _pool

    sizes = {"min_size": min_size, "max_size": max_size}
    with _lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("Database pool already initialized.")

        try:
            pool = ConnectionPool(
                conninfo=database_url,
                configure=_configure_connection,
                open=True,
                **sizes,
            )
        except Exception as exc:
            # El DSN no se loguea: puede traer la password.
            logger.exception("Identity DB pool failed to open", extra=sizes)
            raise DatabaseConnectionError(
                f"Could not open database pool: {exc}"
            ) from exc

        _pool = pool
        logger.info("Identity DB pool ready", extra=sizes)
        return pool


def get_pool() -> ConnectionPool:
    pool = _pool
    if pool is None:
        raise PoolNotInitializedError(
            "Database pool not initialized. Call init_pool() first."
        )
    return pool


def _discard(*, strict: bool) -> None:
    global _pool

    with _lock:
        pool, _pool = _pool, None
    if pool is None:
        return
    try:
        pool.close()
    except Exception as exc:
        if strict:
            raise
        logger.warning("Identity DB pool close failed", extra={"error": str(exc)})
    else:
        logger.info("Identity DB pool closed")


def close_pool() -> None:
    """Cierra el pool; sin pool abierto no hace nada."""
    _discard(strict=True)


def reset_pool() -> None:
    """Como close_pool pero tolera fallas de close() (fixtures de tests)."""
    _discard(strict=False)
