"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="NameDrop API")
    app_version: str = Field(default="1.0.0")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/namedrop",
        description="PostgreSQL connection URL with asyncpg driver",
    )
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    database_pool_recycle_seconds: int = Field(
        default=1800,
        description="Recycle pooled connections older than this",
    )

    # Supabase (identity provider)
    supabase_url: str = Field(
        default="",
        description="Supabase project URL (e.g. https://xyzabc.supabase.co)",
    )

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="CHANGE-ME-IN-PRODUCTION",
        description="Secret key for JWT signing (used for HS256 fallback and tests)",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def supabase_jwks_url(self) -> str:
        """JWKS endpoint for ES256 token verification."""
        if self.supabase_url:
            return f"{self.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
        return ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Render and other providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    # Profiles
    profile_base_domain: str = Field(
        default="namedrop.cv",
        description="Apex domain whose subdomains map to profile slugs",
    )
    slug_change_cooldown_days: int = Field(
        default=30,
        description="Minimum number of days between two slug changes",
    )
    qr_code_service_url: str = Field(
        default="https://api.qrserver.com/v1/create-qr-code/",
    )

    # Custom domains
    cname_target: str = Field(
        default="custom.namedrop.cv",
        description="Host that every custom domain must CNAME to",
    )
    dns_timeout_seconds: float = Field(default=5.0)
    dns_max_consecutive_failures: int = Field(
        default=5,
        description="Unresolved rechecks before a pending domain is marked failed",
    )
    ssl_authority_url: str = Field(
        default="",
        description="Base URL of the certificate issuance API",
    )
    ssl_authority_token: str = Field(default="")
    ssl_timeout_seconds: float = Field(default=10.0)
    domain_recheck_enabled: bool = Field(
        default=False,
        description="Run the periodic domain recheck loop inside the API process",
    )
    domain_recheck_interval_seconds: int = Field(default=900)
    domain_recheck_batch_size: int = Field(default=50)

    # Analytics
    analytics_reconcile_enabled: bool = Field(
        default=False,
        description="Periodically raise lagging counters to the recorded event totals",
    )
    analytics_reconcile_interval_seconds: int = Field(default=86400)

    # Billing
    billing_webhook_secret: str = Field(
        default="",
        description="Shared secret expected in the X-Webhook-Secret header",
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
