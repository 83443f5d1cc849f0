"""
============================================================
TARJETA CRC
============================================================
Class: identity_model.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.

Collaborators:
- Repositorios Postgres (SQL crudo)
- Repositorios InMemory (testing / local dev)
============================================================
"""

# ---------------------------
# In-memory implementations
# No persisten datos tras reiniciar el proceso.
# ---------------------------
from .in_memory import InMemoryRoleRepository, InMemoryUserRepository

# ---------------------------
# Postgres implementations
# ---------------------------
from .postgres import PostgresRoleRepository, PostgresUserRepository

__all__ = [
    # Postgres
    "PostgresRoleRepository",
    "PostgresUserRepository",
    # In-memory
    "InMemoryRoleRepository",
    "InMemoryUserRepository",
]
