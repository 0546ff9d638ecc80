"""Configuration for the data repository layer."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class RepositorySettings(BaseSettings):
    """Settings for data managers and repositories."""

    model_config = {"env_prefix": "DATAREPO_", "case_sensitive": False}

    service_name: str = Field(
        default="datarepo",
        description="Service name bound to every log entry",
    )

    # Database Settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///./datarepo.db",
        description="SQLAlchemy async database URL",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements",
    )
    database_pool_size: int = Field(
        default=10,
        description="Database connection pool size (ignored for SQLite)",
    )
    database_max_overflow: int = Field(
        default=20,
        description="Connections allowed above the pool size (ignored for SQLite)",
    )

    # Repository Settings
    default_fetch_plan: str = Field(
        default="_local",
        description="Fetch plan used by query methods without an explicit one",
    )
    apply_constraints_by_default: bool = Field(
        default=True,
        description="Apply access constraints when no method or interface says otherwise",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Log level",
    )
    log_json: bool = Field(
        default=True,
        description="Render log entries as JSON",
    )


@lru_cache
def get_settings() -> RepositorySettings:
    """Get cached repository settings."""
    return RepositorySettings()
