"""
Name: Settings Tests

Responsibilities:
  - Validate field validators and cross-field database requirements
"""

import pytest
from pydantic import ValidationError

from identity_model.crosscutting.config import Settings, get_settings

pytestmark = pytest.mark.unit


def test_defaults():
    settings = Settings()

    assert settings.role_store_backend == "memory"
    assert settings.role_identity == "name"
    assert (settings.default_admin_role_id, settings.default_member_role_id) == (1, 2)


def test_backend_and_identity_are_normalized():
    settings = Settings(role_store_backend=" MEMORY ", role_identity="ID")

    assert settings.role_store_backend == "memory"
    assert settings.role_identity == "id"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"role_store_backend": "redis"},
        {"role_identity": "slug"},
        {"db_pool_min_size": 0},
        {"db_pool_min_size": 5, "db_pool_max_size": 2},
        {"user_search_max_limit": 0},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValidationError):
        Settings(**kwargs)


def test_postgres_requires_database_url():
    with pytest.raises(ValidationError, match="DATABASE_URL is required"):
        Settings(role_store_backend="postgres", database_url=" ")


def test_postgres_with_database_url():
    settings = Settings(
        role_store_backend="postgres", database_url="postgresql://u:p@localhost/db"
    )
    assert settings.role_store_backend == "postgres"


def test_env_vars_are_read(monkeypatch):
    monkeypatch.setenv("ROLE_IDENTITY", "id")
    monkeypatch.setenv("DEFAULT_MEMBER_ROLE_ID", "9")

    settings = Settings()

    assert settings.role_identity == "id"
    assert settings.default_member_role_id == 9


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_default_role_ids_must_differ(monkeypatch):
    monkeypatch.setenv("DEFAULT_MEMBER_ROLE_ID", "1")

    with pytest.raises(ValidationError, match="must differ"):
        Settings()
