"""Application settings and configuration.

This module defines all configuration options for the Inkwell application.
Settings are loaded from environment variables (or a `.env` file) with
sensible defaults. `SECRET_KEY` has no default, so a missing value aborts the
process at import time instead of failing individual requests.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Inkwell", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_issuer: str = Field(default="inkwell", alias="JWT_ISSUER")
    jwt_audience: str = Field(default="inkwell-ui", alias="JWT_AUDIENCE")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # The first account (or the account matching this address) becomes admin.
    owner_email: str | None = Field(default=None, alias="OWNER_EMAIL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./inkwell.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")
    seed_demo_content: bool = Field(default=False, alias="SEED_DEMO_CONTENT")

    # Google federated sign-in
    google_client_ids: list[str] = Field(default=[], alias="GOOGLE_CLIENT_IDS")
    google_certs_url: str = Field(default=GOOGLE_CERTS_URL, alias="GOOGLE_CERTS_URL")
    google_http_timeout_seconds: float = Field(
        default=5.0,
        alias="GOOGLE_HTTP_TIMEOUT_SECONDS",
    )

    # CORS configuration for the browser client
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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

    @field_validator("owner_email")
    @classmethod
    def _normalize_owner_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    @field_validator("google_client_ids")
    @classmethod
    def _strip_client_ids(cls, value: list[str]) -> list[str]:
        return [client_id.strip() for client_id in value if client_id and client_id.strip()]

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+psycopg://", 1)
        return url

    @property
    def google_sign_in_enabled(self) -> bool:
        """Return True when at least one Google OAuth client ID is configured."""
        return bool(self.google_client_ids)


settings = Settings()  # type: ignore[call-arg]
