"""
CRC: domain/services.py

Name
- Domain Service Interfaces (Notification port)

Responsibilities
- Define the notification delivery contract (port).
- Define the message / receipt value shapes exchanged with the notifier.

Collaborators
- identity.access_subject.AccessSubject: satisfies NotificationRecipient
- application.usecases.users.notify_user: builds messages and calls send()
- infrastructure.services.logging_notifier: concrete adapter

Constraints
- No infrastructure imports; the core never depends on a notifier directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Protocol


class NotificationRecipient(Protocol):
    """R: The two accessor fields a notifier needs."""

    @property
    def recipient_email(self) -> str: ...

    @property
    def recipient_name(self) -> Optional[str]: ...


@dataclass(frozen=True)
class NotificationMessage:
    """R: Subject line + optional template (view) + template data."""

    subject: str
    view: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationReceipt:
    """R: Outcome of a delivery attempt."""

    sent: bool
    recipient_email: str
    sent_at: Optional[datetime] = None
    error: Optional[str] = None


class Notifier(Protocol):
    """R: Delivers a message to a recipient."""

    def send(
        self, recipient: NotificationRecipient, message: NotificationMessage
    ) -> NotificationReceipt: ...
