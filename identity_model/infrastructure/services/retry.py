"""identity_model.infrastructure.services.retry

Name: Reintentos de lecturas de roles/usuarios (tenacity)

Las lecturas del storage (resolve_roles, get_user_by_id, list_roles...) se
reintentan ante fallas pasajeras de Postgres. Un corte de red durante un
chequeo de permisos no debería convertirse en un "deny" si al segundo intento
la base responde.

CRC (Component Card)
--------------------
Component: with_retry / create_retry_decorator
Responsibilities:
  - Clasificar la excepción (pasajera vs definitiva)
  - Armar la política tenacity desde Settings
  - Dejar rastro en el log de cada reintento
Collaborators:
  - tenacity, psycopg, psycopg_pool
  - crosscutting.config (retry_max_attempts, retry_*_delay_seconds)
Constraints:
  - attach/detach NO usan este módulo: una escritura reintentada a ciegas
    puede duplicar efectos
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

import psycopg
from psycopg_pool import PoolTimeout
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...crosscutting.config import get_settings
from ...crosscutting.exceptions import IdentityError
from ...crosscutting.logger import logger

T = TypeVar("T")

# SQLSTATE: 08xxx conexión, 57Pxx shutdown/cancel, 40001 serialización, 40P01 deadlock.
_RETRYABLE_SQLSTATES: tuple[str, ...] = ("08", "57P", "40001", "40P01")

_RETRYABLE_TYPES: tuple[type[BaseException], ...] = (
    PoolTimeout,
    TimeoutError,
    ConnectionError,
)


def _root_cause(exception: BaseException) -> BaseException:
    # Los repos envuelven el error de psycopg en DatabaseError(original_error=...).
    if isinstance(exception, IdentityError) and exception.original_error is not None:
        return exception.original_error
    return exception


def is_transient_error(exception: BaseException) -> bool:
    """True si vale la pena reintentar la operación que lanzó `exception`."""
    exc = _root_cause(exception)

    if isinstance(exc, _RETRYABLE_TYPES):
        return True

    sqlstate = getattr(exc, "sqlstate", None)
    if sqlstate:
        return isinstance(sqlstate, str) and sqlstate.startswith(_RETRYABLE_SQLSTATES)

    # OperationalError sin código: la conexión murió antes de tener respuesta.
    return isinstance(exc, psycopg.OperationalError)


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome is not None else None
    sleep = state.next_action.sleep if state.next_action is not None else 0.0

    logger.warning(
        "Retrying storage read",
        extra={
            "function": getattr(state.fn, "__name__", "unknown"),
            "attempt": state.attempt_number,
            "wait_seconds": round(float(sleep), 2),
            "error_type": type(error).__name__ if error else None,
            "error": str(error) if error else None,
        },
    )


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator tenacity: backoff exponencial con jitter, solo errores pasajeros.

    Los argumentos en None toman el valor de Settings. Agotados los intentos
    se relanza la última excepción tal cual.
    """
    settings = get_settings()
    attempts = settings.retry_max_attempts if max_attempts is None else max_attempts
    initial = float(settings.retry_base_delay_seconds if base_delay is None else base_delay)
    ceiling = float(settings.retry_max_delay_seconds if max_delay is None else max_delay)

    if attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if initial < 0:
        raise ValueError("base_delay must be >= 0")
    if ceiling <= 0:
        raise ValueError("max_delay must be > 0")

    return retry(
        retry=retry_if_exception(is_transient_error),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=initial, max=ceiling, jitter=initial),
        before_sleep=_log_retry,
        reraise=True,
    )


def with_retry(func: Callable[..., T]) -> Callable[..., T]:
    """Aplica la política por defecto; se arma en la primera llamada, no al importar."""
    retrying: dict[str, Callable[..., T]] = {}

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        if "fn" not in retrying:
            retrying["fn"] = create_retry_decorator()(func)
        return retrying["fn"](*args, **kwargs)

    return wrapper
