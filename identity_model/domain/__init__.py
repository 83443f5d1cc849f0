"""
===============================================================================
TARJETA CRC: domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en identity/application.
    - Mantener estable el “surface area” del dominio.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .default_roles import DefaultRoles
from .entities import Role, User, UserStatus
from .repositories import RoleRepository, RoleStore, UserRepository
from .services import (
    NotificationMessage,
    NotificationReceipt,
    NotificationRecipient,
    Notifier,
)

__all__ = [
    # Entities
    "User",
    "Role",
    "UserStatus",
    "DefaultRoles",
    # Repository Interfaces (Ports)
    "RoleStore",
    "RoleRepository",
    "UserRepository",
    # Service Interfaces (Ports)
    "Notifier",
    "NotificationRecipient",
    "NotificationMessage",
    "NotificationReceipt",
]
