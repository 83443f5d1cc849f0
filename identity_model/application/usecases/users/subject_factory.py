"""Tipo del factory User -> AccessSubject que reciben los use cases."""

from __future__ import annotations

from typing import Callable

from ....domain.entities import User
from ....identity.access_subject import AccessSubject

SubjectFactory = Callable[[User], AccessSubject]
