"""Infra services: notifier adapter + retry helper."""

from .logging_notifier import LoggingNotifier
from .retry import create_retry_decorator, is_transient_error, with_retry

__all__ = [
    "LoggingNotifier",
    "create_retry_decorator",
    "is_transient_error",
    "with_retry",
]
