# identity_model/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logger estructurado (JSON) de la capa de identidad
===============================================================================

Qué loguea este módulo
----------------------
Eventos de autorización (fail-closed, denegaciones), mutaciones de roles,
errores de storage y selección de backend. Todos llevan campos "extra"
(user_id, role_ids, predicate, error_id...) que terminan en el JSON.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  JSONFormatter + setup_logger()

Responsabilidades:
  - Una línea JSON por evento
  - Nunca emitir password / password_hash / remember_token / DSN
  - Serializar ids (UUID) y sets de roles de forma estable

Colaboradores:
  - crosscutting/config.py (log_level, log_json)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

REDACTED = "***REDACTADO***"
TRUNCATED = "***TRUNCADO***"

# Atributos propios de logging.LogRecord: no son "extra".
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

# R: claves cuyo valor nunca se emite (comparación case-insensitive).
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "password_hash",
        "remember_token",
        "token",
        "secret",
        "authorization",
        "credential",
        "database_url",
        "dsn",
    }
)

_MAX_STR = 8_000
_MAX_DEPTH = 4


def redact(value: Any, *, key: str | None = None, depth: int = 0) -> Any:
    """Devuelve una versión JSON-safe de value sin secretos."""
    if key is not None and key.lower() in SENSITIVE_KEYS:
        return REDACTED
    if depth > _MAX_DEPTH:
        return TRUNCATED

    if isinstance(value, str):
        return value if len(value) <= _MAX_STR else value[:_MAX_STR] + "…(truncado)"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes {len(value)}B>"
    if isinstance(value, dict):
        return {str(k): redact(v, key=str(k), depth=depth + 1) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        # Sets de roles: orden estable para poder diffear logs.
        return sorted((redact(v, key=key, depth=depth + 1) for v in value), key=str)
    if isinstance(value, (list, tuple)):
        return [redact(v, key=key, depth=depth + 1) for v in value]
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """LogRecord -> JSON (campos base + extras redactados + excepción)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "pid": os.getpid(),
        }
        payload.update(
            (name, redact(value, key=name))
            for name, value in vars(record).items()
            if name not in _RECORD_ATTRS
        )

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(exc_type, exc, tb),
            }

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def setup_logger(name: str = "identity-model") -> logging.Logger:
    """
    Logger del paquete configurado desde Settings.

    Idempotente: un reimport no duplica handlers.
    """
    from .config import get_settings

    settings = get_settings()

    log = logging.getLogger(name)
    log.setLevel(getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.log_json:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        log.addHandler(handler)

    return log


logger = setup_logger()
