"""Application settings and configuration.

This module defines all configuration options for the QckTlk forum backend.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="QckTlk Forum", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="plain", alias="LOG_FORMAT")

    # Shared secret used to verify locally issued identity tokens
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")

    # Database configuration
    database_url: str = Field(default="sqlite:///./qcktlk.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Post quota and vote/settlement transaction behaviour
    free_post_limit: int = Field(default=5, ge=0, alias="FREE_POST_LIMIT")
    vote_max_retries: int = Field(default=3, ge=1, alias="VOTE_MAX_RETRIES")
    settlement_max_retries: int = Field(default=3, ge=1, alias="SETTLEMENT_MAX_RETRIES")

    # External identity provider (ID tokens)
    identity_jwks_url: str | None = Field(default=None, alias="IDENTITY_JWKS_URL")
    identity_audience: str | None = Field(default=None, alias="IDENTITY_AUDIENCE")
    identity_issuer: str | None = Field(default=None, alias="IDENTITY_ISSUER")
    identity_algorithm: str = Field(default="HS256", alias="IDENTITY_ALGORITHM")
    identity_jwks_cache_seconds: int = Field(default=3600, alias="IDENTITY_JWKS_CACHE_SECONDS")
    identity_http_timeout_seconds: float = Field(
        default=5.0,
        alias="IDENTITY_HTTP_TIMEOUT_SECONDS",
    )
    identity_token_ttl_seconds: int = Field(default=3600, alias="IDENTITY_TOKEN_TTL_SECONDS")

    # Payment processor (Stripe-compatible API)
    payment_gateway_key: str | None = Field(default=None, alias="PAYMENT_GATEWAY_KEY")
    payment_api_base_url: str = Field(
        default="https://api.stripe.com",
        alias="PAYMENT_API_BASE_URL",
    )
    payment_currency: str = Field(default="usd", alias="PAYMENT_CURRENCY")
    payment_http_timeout_seconds: float = Field(
        default=10.0,
        alias="PAYMENT_HTTP_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
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
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def payments_enabled(self) -> bool:
        """Return True when a payment processor key is configured."""
        return bool(self.payment_gateway_key)


settings = Settings()  # type: ignore[call-arg]
