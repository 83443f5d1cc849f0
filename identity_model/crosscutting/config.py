"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match current behavior

Collaborators:
  - container.py: picks the role/user store backend once at startup
  - domain/default_roles.py: reads the default admin/member role ids
  - infrastructure/db/pool.py: reads pool sizing and statement timeout
  - infrastructure/services/retry.py: reads retry attempts/delays

Constraints:
  - No business logic: pure configuration
  - The store backend is a startup decision; nothing swaps it at runtime

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_STORE_BACKENDS = {"memory", "postgres"}
_ROLE_IDENTITIES = {"name", "id"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        log_level: Root log level for the module logger (default: INFO)
        log_json: Emit JSON log lines (default: True)
        role_store_backend: memory|postgres (default: memory)
        role_identity: name|id, what AccessSubject.roles() yields (default: name)
        default_admin_role_id: Role id treated as "admin" (default: 1)
        default_member_role_id: Role id treated as "member" (default: 2)
        database_url: PostgreSQL connection string (required for postgres)
        db_pool_min_size: Minimum pooled connections (default: 2)
        db_pool_max_size: Maximum pooled connections (default: 10)
        db_statement_timeout_ms: Per-connection statement_timeout (default: 30s)
        retry_max_attempts: Attempts for transient read failures (default: 3)
        retry_base_delay_seconds: Initial backoff (default: 0.2)
        retry_max_delay_seconds: Backoff ceiling (default: 5.0)
        user_search_max_limit: Upper bound for search page size (default: 200)
    """

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Identity / roles
    role_store_backend: str = "memory"
    role_identity: str = "name"
    default_admin_role_id: int = 1
    default_member_role_id: int = 2

    # Database - Connection Pool
    database_url: str = ""
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Retry/Resilience
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.2
    retry_max_delay_seconds: float = 5.0

    # Search
    user_search_max_limit: int = 200

    @field_validator("role_store_backend")
    @classmethod
    def role_store_backend_valid(cls, v: str) -> str:
        backend = (v or "memory").strip().lower()
        if backend not in _STORE_BACKENDS:
            raise ValueError("role_store_backend must be memory or postgres")
        return backend

    @field_validator("role_identity")
    @classmethod
    def role_identity_valid(cls, v: str) -> str:
        identity = (v or "name").strip().lower()
        if identity not in _ROLE_IDENTITIES:
            raise ValueError("role_identity must be name or id")
        return identity

    @field_validator("db_pool_min_size", "db_pool_max_size")
    @classmethod
    def pool_size_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("pool sizes must be greater than 0")
        return v

    @field_validator("user_search_max_limit")
    @classmethod
    def search_limit_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("user_search_max_limit must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_cross_field_requirements(self):
        if self.role_store_backend == "postgres" and not self.database_url.strip():
            raise ValueError(
                "DATABASE_URL is required when ROLE_STORE_BACKEND=postgres"
            )
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must not exceed "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )
        if self.default_admin_role_id == self.default_member_role_id:
            raise ValueError(
                "default_admin_role_id and default_member_role_id must differ "
                f"(both are {self.default_admin_role_id})"
            )
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
