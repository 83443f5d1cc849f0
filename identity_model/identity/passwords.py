"""
===============================================================================
TARJETA CRC: identity/passwords.py
===============================================================================

Módulo:
    Passwords (Argon2)

Responsabilidades:
    - Hashear/verificar passwords (Argon2).
    - Detectar si un valor necesita (re)hash: texto plano o parámetros viejos.
    - Asignar el password de un User hasheando solo cuando hace falta.

Colaboradores:
    - argon2.PasswordHasher
    - domain.entities.User
    - application.usecases.users.register_user

Notas:
    - La lógica criptográfica vive acá (borde de identidad), NO en dominio.
    - Nunca loguear passwords ni hashes.
===============================================================================
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..domain.entities import User

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(value: str) -> bool:
    """True si value es texto plano (no es hash Argon2) o usa parámetros viejos."""
    try:
        return _password_hasher.check_needs_rehash(value)
    except InvalidHashError:
        return True


def set_user_password(user: User, value: str) -> User:
    """
    Asigna password al usuario.

    - Si value ya es un hash Argon2 vigente, se guarda tal cual.
    - Si no, se hashea.
    """
    user.password_hash = hash_password(value) if needs_rehash(value) else value
    return user
