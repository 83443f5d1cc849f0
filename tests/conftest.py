"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (no .env)
  - Provide in-memory stores seeded with admin/member/editor
  - Provide user/subject factories

Collaborators:
  - pytest: Test framework
  - identity_model.infrastructure.repositories.in_memory: stores under test
  - identity_model.identity.access_subject: AccessSubject

Notes:
  - Fixtures are function-scoped for per-test isolation
  - Metric counters are process-wide: assert on deltas, not absolutes
"""

import sys
from pathlib import Path
from typing import Callable
from uuid import uuid4

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from identity_model.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None


from identity_model.crosscutting.metrics import get_registry  # noqa: E402
from identity_model.domain.default_roles import DefaultRoles  # noqa: E402
from identity_model.domain.entities import Role, User, UserStatus  # noqa: E402
from identity_model.identity.access_subject import (  # noqa: E402
    AccessSubject,
    RoleIdentity,
)
from identity_model.infrastructure.repositories.in_memory import (  # noqa: E402
    InMemoryRoleRepository,
    InMemoryUserRepository,
)

ADMIN_ID = 1
MEMBER_ID = 2
EDITOR_ID = 3


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require PostgreSQL)"
    )


# ============================================================================
# Metrics helper
# ============================================================================


def _metric_value(name: str, **labels: str) -> float:
    """R: Current sample value for a counter (0.0 if never incremented)."""
    return get_registry().get_sample_value(name, labels) or 0.0


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def default_roles() -> DefaultRoles:
    return DefaultRoles(admin=ADMIN_ID, member=MEMBER_ID)


@pytest.fixture
def seeded_roles() -> list[Role]:
    """R: admin / member / editor role rows."""
    return [
        Role(id=ADMIN_ID, name="admin"),
        Role(id=MEMBER_ID, name="member"),
        Role(id=EDITOR_ID, name="editor"),
    ]


@pytest.fixture
def role_repository(seeded_roles, default_roles) -> InMemoryRoleRepository:
    return InMemoryRoleRepository(seeded_roles, default_roles=default_roles)


@pytest.fixture
def user_repository(role_repository) -> InMemoryUserRepository:
    users = InMemoryUserRepository(role_store=role_repository)
    role_repository.bind_user_repository(users)
    return users


@pytest.fixture
def make_user() -> Callable[..., User]:
    """R: Build a detached User (not stored)."""

    def _make(
        email: str | None = None,
        *,
        fullname: str | None = "Test User",
        status: UserStatus = UserStatus.UNVERIFIED,
    ) -> User:
        return User(
            id=uuid4(),
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            password_hash="hash",
            fullname=fullname,
            status=status,
        )

    return _make


@pytest.fixture
def subject_factory(role_repository) -> Callable[[User], AccessSubject]:
    def _factory(user: User) -> AccessSubject:
        return AccessSubject(user, role_repository, role_identity=RoleIdentity.NAME)

    return _factory


@pytest.fixture
def subject(make_user, subject_factory) -> AccessSubject:
    """R: Subject with no roles and UNVERIFIED status."""
    return subject_factory(make_user())


@pytest.fixture
def metric_value() -> Callable[..., float]:
    return _metric_value
