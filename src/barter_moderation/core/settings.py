"""Application settings and configuration.

This module defines all configuration options for the moderation service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Barter Moderation", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./moderation.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    db_statement_timeout_ms: int = Field(default=5_000, alias="DB_STATEMENT_TIMEOUT_MS")

    # Report intake
    report_sla_hours: int = Field(default=24, alias="REPORT_SLA_HOURS")
    strict_report_categories: bool = Field(default=False, alias="STRICT_REPORT_CATEGORIES")

    # Content filter
    filter_preview_length: int = Field(default=200, alias="FILTER_PREVIEW_LENGTH")

    # Escalation sweep
    escalation_batch_size: int = Field(default=50, alias="ESCALATION_BATCH_SIZE")
    escalation_interval_seconds: float = Field(
        default=300.0,
        alias="ESCALATION_INTERVAL_SECONDS",
    )
    escalation_worker_enabled: bool = Field(default=False, alias="ESCALATION_WORKER_ENABLED")
    cron_secret: str | None = Field(default=None, alias="CRON_SECRET")
    system_moderator_id: str = Field(default="system", alias="SYSTEM_MODERATOR_ID")

    # Moderator notification side-channel
    moderator_notify_url: str | None = Field(default=None, alias="MODERATOR_NOTIFY_URL")
    moderator_notify_token: str | None = Field(default=None, alias="MODERATOR_NOTIFY_TOKEN")
    moderator_notify_channel: str = Field(
        default="private-moderators",
        alias="MODERATOR_NOTIFY_CHANNEL",
    )
    moderator_notify_event: str = Field(
        default="report-escalation",
        alias="MODERATOR_NOTIFY_EVENT",
    )
    moderator_notify_timeout_seconds: float = Field(
        default=5.0,
        alias="MODERATOR_NOTIFY_TIMEOUT_SECONDS",
    )

    # CORS configuration for web and mobile clients
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["authorization", "content-type", "x-cron-secret"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()  # type: ignore[call-arg]
