"""
Name: Composition Root Tests

Responsibilities:
  - Validate backend selection (memory / postgres) from Settings
  - Validate singletons and use case wiring end to end (memory backend)
"""

from unittest.mock import MagicMock, patch

import pytest

from identity_model import container
from identity_model.application.usecases.users import RegisterUserInput
from identity_model.crosscutting.config import get_settings
from identity_model.identity.access_subject import RoleIdentity
from identity_model.infrastructure.db.pool import reset_pool
from identity_model.infrastructure.repositories import (
    InMemoryRoleRepository,
    InMemoryUserRepository,
    PostgresRoleRepository,
    PostgresUserRepository,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def fresh_container():
    get_settings.cache_clear()
    container.reset_container()
    yield
    get_settings.cache_clear()
    container.reset_container()
    reset_pool()


def test_memory_backend_is_default():
    assert isinstance(container.get_role_repository(), InMemoryRoleRepository)
    assert isinstance(container.get_user_repository(), InMemoryUserRepository)


def test_repositories_are_singletons():
    assert container.get_role_repository() is container.get_role_repository()
    assert container.get_role_store() is container.get_role_repository()
    assert container.get_notifier() is container.get_notifier()


def test_memory_backend_is_seeded_with_default_roles(monkeypatch):
    monkeypatch.setenv("DEFAULT_ADMIN_ROLE_ID", "10")
    monkeypatch.setenv("DEFAULT_MEMBER_ROLE_ID", "20")
    get_settings.cache_clear()

    store = container.get_role_store()

    assert store.find_default_role("admin").id == 10
    assert store.find_default_role("member").name == "member"


def test_role_identity_from_settings(monkeypatch, make_user):
    monkeypatch.setenv("ROLE_IDENTITY", "id")
    get_settings.cache_clear()

    subject = container.make_access_subject(make_user())

    assert subject.role_identity is RoleIdentity.ID


def test_postgres_backend_initializes_pool_once(monkeypatch):
    monkeypatch.setenv("ROLE_STORE_BACKEND", "postgres")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/db")
    get_settings.cache_clear()

    with patch("identity_model.infrastructure.db.pool.ConnectionPool") as MockPool:
        MockPool.return_value = MagicMock()

        roles = container.get_role_repository()
        users = container.get_user_repository()

    assert isinstance(roles, PostgresRoleRepository)
    assert isinstance(users, PostgresUserRepository)
    MockPool.assert_called_once()
    assert MockPool.call_args.kwargs["conninfo"] == "postgresql://u:p@localhost/db"


def test_use_cases_share_the_same_store():
    registered = container.get_register_user_use_case().execute(
        RegisterUserInput(email="ana@example.com", password="s3cret")
    )
    user_id = registered.user.id

    assigned = container.get_assign_user_roles_use_case().execute(user_id, [1])
    assert assigned.roles == frozenset({"admin", "member"})

    revoked = container.get_revoke_user_roles_use_case().execute(user_id, [2])
    assert revoked.roles == frozenset({"admin"})

    status = container.get_change_user_status_use_case().execute(user_id, "activate")
    assert status.user.status == 1

    found = container.get_search_users_use_case().execute(role_ids=[1])
    assert [u.id for u in found.users] == [user_id]

    notified = container.get_notify_user_use_case().execute(user_id, "Welcome")
    assert notified.receipt.sent is True
    assert container.get_notifier().outbox[0][0] == "ana@example.com"
