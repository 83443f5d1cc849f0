"""
===============================================================================
CRC CARD: infrastructure/db/errors.py
===============================================================================

Componente:
  Errores tipados del Pool/Conectividad

Responsabilidades:
  - Evitar RuntimeError genéricos en el ciclo de vida del pool.
  - Semántica clara: "no inicializado", "ya inicializado", "no conecta".
===============================================================================
"""


class DatabasePoolError(RuntimeError):
    """Base de errores del pool de conexiones."""


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() llamado más de una vez (pool already initialized)."""


class PoolNotInitializedError(DatabasePoolError):
    """get_pool() antes de init_pool() (pool not initialized)."""


class DatabaseConnectionError(DatabasePoolError):
    """No se pudo abrir el pool contra DATABASE_URL."""
