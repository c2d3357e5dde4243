"""Application configuration from environment variables."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.enums import OneRepMaxFormula


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Fitness Records API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Database (PostgreSQL)
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "postgres"
    database_password: str = ""  # Set in .env - never commit
    database_name: str = "fitness"
    database_ssl_mode: str = "disable"
    # Full async URL (e.g. sqlite+aiosqlite:///./fitness.db); overrides the parts above
    database_dsn: str = ""

    # Pool (production tuning)
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # No migration tooling: create tables on startup unless disabled
    auto_create_tables: bool = True

    # CORS: comma-separated list of allowed origins in production
    cors_origins: str = ""

    # Records / analytics
    record_update_max_retries: int = 3
    default_volume_weeks: int = 12
    default_trend_limit: int = 12
    one_rm_formula: OneRepMaxFormula = OneRepMaxFormula.EPLEY

    def _build_db_url(self, scheme: str = "postgresql", ssl_query: str = "") -> str:
        user = quote_plus(self.database_user)
        password = quote_plus(self.database_password)
        url = (
            f"{scheme}://{user}:{password}@{self.database_host}:{self.database_port}"
            f"/{self.database_name}"
        )
        return f"{url}?{ssl_query}" if ssl_query else url

    @property
    def async_database_url(self) -> str:
        """Async URL for FastAPI (asyncpg driver)."""
        if self.database_dsn:
            return self.database_dsn
        ssl_query = "ssl=require" if self.database_ssl_mode == "require" else ""
        return self._build_db_url(scheme="postgresql+asyncpg", ssl_query=ssl_query)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
