"""
Identity layer: AccessSubject (role predicates + account status), role guard and
password hashing.
"""

from .access_policy import ensure_roles
from .access_subject import AccessSubject, RoleIdentity, RoleRef
from .passwords import hash_password, needs_rehash, set_user_password, verify_password

__all__ = [
    "AccessSubject",
    "RoleIdentity",
    "RoleRef",
    "ensure_roles",
    "hash_password",
    "verify_password",
    "needs_rehash",
    "set_user_password",
]
