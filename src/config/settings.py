"""
Storefront settings (pydantic-settings).

Values come from the environment or a `.env` file at the project root.
List settings (CORS_ORIGINS, ADMIN_EMAILS) accept comma separated strings.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """
    Required: SUPABASE_URL, SUPABASE_SERVICE_KEY. SUPABASE_JWT_SECRET is
    needed for any signed-in endpoint; RESEND_API_KEY turns order emails on.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=4, description="Number of uvicorn workers")

    # CORS Configuration
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=[
            "https://nowiht.com",
            "https://www.nowiht.com",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # ==========================================================================
    # Supabase Configuration
    # ==========================================================================
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")
    supabase_jwt_secret: str = Field(
        default="",
        description="JWT secret for token verification (from Supabase dashboard)"
    )

    # ==========================================================================
    # Admin Access
    # ==========================================================================
    admin_emails: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Emails granted admin access in addition to the JWT role claim"
    )

    @field_validator("admin_emails", mode="before")
    @classmethod
    def parse_admin_emails(cls, v):
        if isinstance(v, str):
            return [email.strip().lower() for email in v.split(",") if email.strip()]
        return [email.lower() for email in v]

    # ==========================================================================
    # Transactional Email (Resend)
    # ==========================================================================
    resend_api_key: str = Field(default="", description="Resend API key")
    resend_api_url: str = Field(
        default="https://api.resend.com/emails",
        description="Resend send-email endpoint"
    )
    email_from_address: str = Field(
        default="noreply@updates.nowiht.com",
        description="Sender address for order emails"
    )
    email_brand_name: str = Field(default="NOWIHT", description="Sender display name")
    email_timeout_seconds: int = Field(
        default=10,
        description="Timeout for email API requests (seconds)"
    )

    @property
    def email_enabled(self) -> bool:
        return bool(self.resend_api_key)

    # ==========================================================================
    # Payments (Stripe)
    # ==========================================================================
    stripe_secret_key: str = Field(default="", description="Stripe secret API key")
    stripe_webhook_secret: str = Field(
        default="",
        description="Signing secret of the Stripe webhook endpoint (whsec_...)"
    )
    stripe_webhook_tolerance_seconds: int = Field(
        default=300,
        description="Maximum age of a signed webhook timestamp (seconds)"
    )

    @property
    def payments_enabled(self) -> bool:
        return bool(self.stripe_secret_key)

    # ==========================================================================
    # Store Rules
    # ==========================================================================
    store_currency: str = Field(default="TRY", description="Display currency code")
    return_window_days: int = Field(
        default=30,
        description="Days after delivery during which a return can be requested"
    )
    catalog_max_products: int = Field(
        default=5000,
        description="Upper bound on products loaded into memory per request"
    )


@lru_cache
def get_settings() -> Settings:
    """Cached settings; raises ValidationError when Supabase vars are missing."""
    env_file = PROJECT_ROOT / ".env"
    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """Uncached settings with test placeholders; keyword overrides win."""
    test_defaults = {
        "supabase_url": "https://test.supabase.co",
        "supabase_service_key": "test-key",
        "supabase_jwt_secret": "test-jwt-secret",
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(**test_defaults)
