"""
identity-model: capa de acceso User / Role.

- domain: entidades (User, Role, UserStatus), DefaultRoles y puertos.
- identity: AccessSubject (predicados de rol + estado de cuenta), guard y passwords.
- infrastructure: repositorios in-memory / Postgres, pool, retry, notifier.
- application: casos de uso de usuarios/roles.
- container: composition root.
"""

__version__ = "0.1.0"
