"""
PostgreSQL Repository Implementations.

SQL crudo sobre psycopg_pool. Tablas: users, roles, user_role.
"""

from .role import PostgresRoleRepository
from .user import PostgresUserRepository

__all__ = [
    "PostgresRoleRepository",
    "PostgresUserRepository",
]
