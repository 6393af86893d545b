"""Application settings and configuration.

This module defines all configuration options for the Campus Wellness
application. Settings are loaded from environment variables with sensible
defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Campus Wellness", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./wellness.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Identity provider tokens (sub + verified email)
    identity_token_secret: str | None = Field(default=None, alias="IDENTITY_TOKEN_SECRET")
    identity_token_algorithm: str = Field(default="HS256", alias="IDENTITY_TOKEN_ALGORITHM")
    identity_token_audience: str | None = Field(default=None, alias="IDENTITY_TOKEN_AUDIENCE")
    identity_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="IDENTITY_TOKEN_EXPIRE_MINUTES",
    )

    # Access context caching and resolution
    access_context_max_age_seconds: int = Field(
        default=300,
        alias="ACCESS_CONTEXT_MAX_AGE_SECONDS",
    )
    resolution_retry_attempts: int = Field(default=3, alias="RESOLUTION_RETRY_ATTEMPTS")
    resolution_retry_backoff_seconds: float = Field(
        default=0.05,
        alias="RESOLUTION_RETRY_BACKOFF_SECONDS",
    )

    # Voting
    vote_conflict_retries: int = Field(default=3, alias="VOTE_CONFLICT_RETRIES")
    allow_self_votes: bool = Field(default=False, alias="ALLOW_SELF_VOTES")

    # Activities
    default_max_participants: int = Field(default=10, alias="DEFAULT_MAX_PARTICIPANTS")
    activity_cleanup_enabled: bool = Field(default=True, alias="ACTIVITY_CLEANUP_ENABLED")
    activity_cleanup_interval_seconds: float = Field(
        default=24 * 60 * 60,
        alias="ACTIVITY_CLEANUP_INTERVAL_SECONDS",
    )

    # Outbound complaint notifications (messaging bot webhook)
    notifier_url: str | None = Field(default=None, alias="NOTIFIER_URL")
    notifier_token: str | None = Field(default=None, alias="NOTIFIER_TOKEN")
    notifier_timeout_seconds: float = Field(default=10.0, alias="NOTIFIER_TIMEOUT_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def effective_identity_secret(self) -> str:
        """Return the key used to verify identity tokens.

        Falls back to the application secret when the identity provider
        shares it.
        """
        return self.identity_token_secret or self.secret_key


settings = Settings()  # type: ignore[call-arg]
