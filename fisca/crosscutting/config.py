"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the original deployment (admin bypass, editor roles)

Collaborators:
  - identity.access_resolver: reads full_access_roles
  - identity.rbac: reads role_hierarchy_config
  - identity.user_policy: reads user_editor_roles
  - container.py / infrastructure.db.pool: database settings
  - crosscutting.logger: log_level / log_json

Constraints:
  - Lives in the crosscutting layer, NOT in domain
  - No business logic, pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache
  - Role lists are comma-separated env values normalised to lower-case tuples
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_roles(raw: str) -> tuple[str, ...]:
    seen: list[str] = []
    for item in (raw or "").split(","):
        name = item.strip().lower()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production/test)
        log_level: Root log level for the "fisca" logger (default: INFO)
        log_json: Emit JSON lines instead of plain text (default: True)
        database_url: PostgreSQL connection string (empty = in-memory stores)
        db_pool_min_size: Minimum pool connections (default: 1)
        db_pool_max_size: Maximum pool connections (default: 5)
        db_statement_timeout_ms: Statement timeout applied per connection
        full_access_roles: Comma-separated role names that bypass scope
        user_editor_roles: Roles allowed to update users they did not create
        role_hierarchy_config: JSON override for the role creation hierarchy
    """

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Database - optional, in-memory stores when empty
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_statement_timeout_ms: int = 30000

    # Access control
    full_access_roles: str = "admin"
    user_editor_roles: str = "responsable_localidad"
    role_hierarchy_config: str = ""

    @field_validator("full_access_roles", "user_editor_roles")
    @classmethod
    def normalize_role_list(cls, v: str) -> str:
        return ",".join(_split_roles(v))

    @field_validator("log_level")
    @classmethod
    def log_level_valid(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return level

    @field_validator("db_pool_min_size", "db_pool_max_size")
    @classmethod
    def pool_size_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("pool sizes must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must be <= "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )
        return self

    @model_validator(mode="after")
    def validate_production_requirements(self):
        if not self.is_production():
            return self
        if not self.database_url.strip():
            raise ValueError("DATABASE_URL is required in production")
        if not self.get_full_access_roles():
            raise ValueError("FULL_ACCESS_ROLES must name at least one role in production")
        return self

    def get_full_access_roles(self) -> tuple[str, ...]:
        """Parse FULL_ACCESS_ROLES into a tuple of role names."""
        return _split_roles(self.full_access_roles)

    def get_user_editor_roles(self) -> tuple[str, ...]:
        """Parse USER_EDITOR_ROLES into a tuple of role names."""
        return _split_roles(self.user_editor_roles)

    def uses_database(self) -> bool:
        return bool(self.database_url.strip())

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

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
