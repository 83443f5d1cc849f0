"""
===============================================================================
TARJETA CRC: infrastructure/services/logging_notifier.py
===============================================================================

Clase:
    LoggingNotifier

Responsabilidades:
    - Implementar el puerto Notifier sin proveedor externo (local / dev / tests).
    - Registrar cada entrega en memoria (outbox) y loguearla.
    - Rechazar destinatarios sin email (receipt con error, sin excepción).

Colaboradores:
    - domain.services.Notifier / NotificationMessage / NotificationReceipt
    - crosscutting.logger

Notas:
    - Thread-safe: Lock protege el outbox.
    - No loguea template data (puede contener tokens de reset).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import List, Tuple

from ...crosscutting.logger import logger
from ...domain.services import (
    NotificationMessage,
    NotificationReceipt,
    NotificationRecipient,
)


class LoggingNotifier:
    """Notifier que loguea y guarda los envíos en memoria."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._outbox: List[Tuple[str, NotificationMessage]] = []

    def send(
        self, recipient: NotificationRecipient, message: NotificationMessage
    ) -> NotificationReceipt:
        email = (recipient.recipient_email or "").strip()
        if not email:
            logger.warning(
                "LoggingNotifier: recipient without email",
                extra={"subject": message.subject},
            )
            return NotificationReceipt(
                sent=False, recipient_email="", error="Recipient has no email"
            )

        with self._lock:
            self._outbox.append((email, message))

        logger.info(
            "Notification sent",
            extra={
                "recipient_email": email,
                "recipient_name": recipient.recipient_name,
                "subject": message.subject,
                "view": message.view,
            },
        )
        return NotificationReceipt(
            sent=True, recipient_email=email, sent_at=datetime.now(timezone.utc)
        )

    @property
    def outbox(self) -> List[Tuple[str, NotificationMessage]]:
        """Copia de los envíos registrados."""
        with self._lock:
            return list(self._outbox)
