"""Application configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="eip712-authn", description="Application name")
    app_version: str = Field(
        default="1", description="Version string placed in the EIP-712 domain"
    )
    environment: Literal["development", "testing", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )
    debug: bool = Field(default=False, description="Debug mode flag")
    secret_key: str = Field(
        default="dev-secret-key-change-in-production",
        description="Secret key for signing challenge tokens",
    )

    # API
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="CORS allowed origins",
    )

    # Challenge tokens
    jwt_algorithm: str = Field(default="HS256", description="Challenge JWT algorithm")
    challenge_ttl_seconds: int = Field(
        default=30, gt=0, description="Challenge token lifetime in seconds"
    )

    # EIP-712 domain
    default_chain_id: int = Field(
        default=1, description="Chain ID used when the client sends none"
    )
    verifying_contract: str | None = Field(
        default=None, description="Optional verifyingContract for the domain"
    )

    # Wallet client
    reconnect_grace_seconds: float = Field(
        default=0.5,
        gt=0,
        description="How long reconnect waits for late provider announcements",
    )
    challenge_url: str = Field(
        default="http://localhost:8000/api/v1/auth/challenge",
        description="Challenge endpoint used by the auth client",
    )
    auth_url: str = Field(
        default="http://localhost:8000/api/v1/auth/verify",
        description="Verification endpoint used by the auth client",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["keyvalue", "console"] = Field(
        default="console", description="Log output format"
    )

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check whether running in production."""
        return self.environment == "production"

    def require_production_secret(self) -> None:
        """Refuse to run production with the development secret.

        Raises:
            ValueError: Production environment uses the default secret key
        """
        if self.is_production and self.secret_key.startswith("dev-"):
            raise ValueError(
                "SECRET_KEY must be set to a non-default value in production"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
