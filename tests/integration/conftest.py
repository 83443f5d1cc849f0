"""
Name: Integration Test DB Setup

Responsibilities:
  - Create the users / roles / user_role tables once per session
  - Initialize the global pool for repositories under test
  - Truncate tables between tests

Notes:
  - Only runs when RUN_INTEGRATION=1
  - Uses DATABASE_URL from environment
"""

from __future__ import annotations

import os

import pytest
from psycopg import connect

from identity_model.crosscutting.config import get_settings
from identity_model.infrastructure.db.pool import close_pool, init_pool

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT = os.getenv("POSTGRES_HOST_PORT", "5432")
DB_NAME = os.getenv("POSTGRES_DB", "identity")
DEFAULT_DATABASE_URL = (
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id uuid PRIMARY KEY,
    email varchar(255) NOT NULL,
    fullname varchar(255),
    password_hash varchar(255) NOT NULL DEFAULT '',
    remember_token varchar(100),
    status smallint NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now(),
    deleted_at timestamptz,
    CONSTRAINT uq_users_email UNIQUE (email)
);

CREATE TABLE IF NOT EXISTS roles (
    id serial PRIMARY KEY,
    name varchar(255) NOT NULL,
    created_at timestamptz NOT NULL DEFAULT now(),
    updated_at timestamptz NOT NULL DEFAULT now(),
    deleted_at timestamptz
);

CREATE TABLE IF NOT EXISTS user_role (
    user_id uuid NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    role_id integer NOT NULL REFERENCES roles (id) ON DELETE CASCADE,
    created_at timestamptz NOT NULL DEFAULT clock_timestamp(),
    updated_at timestamptz NOT NULL DEFAULT now(),
    PRIMARY KEY (user_id, role_id)
);
"""

if os.getenv("RUN_INTEGRATION") == "1":
    os.environ.setdefault("DATABASE_URL", DEFAULT_DATABASE_URL)
    get_settings.cache_clear()


@pytest.fixture(scope="session", autouse=True)
def create_schema() -> None:
    """Create tables for integration tests (idempotent)."""
    if os.getenv("RUN_INTEGRATION") != "1":
        return

    with connect(os.environ["DATABASE_URL"], autocommit=True) as conn:
        conn.execute(_SCHEMA)


@pytest.fixture(scope="session", autouse=True)
def init_db_pool(create_schema):
    if os.getenv("RUN_INTEGRATION") != "1":
        yield
        return

    settings = get_settings()
    init_pool(
        database_url=settings.database_url,
        min_size=1,
        max_size=settings.db_pool_max_size,
    )
    yield
    close_pool()


@pytest.fixture(autouse=True)
def clean_tables():
    """Seed admin (1) / member (2) / editor (3) on empty tables."""
    if os.getenv("RUN_INTEGRATION") != "1":
        yield
        return

    with connect(os.environ["DATABASE_URL"], autocommit=True) as conn:
        conn.execute("TRUNCATE user_role, users, roles RESTART IDENTITY CASCADE")
        conn.execute(
            "INSERT INTO roles (name) VALUES ('admin'), ('member'), ('editor')"
        )
    yield
