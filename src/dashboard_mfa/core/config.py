from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", case_sensitive=True, extra="ignore"
    )

    # Application
    APP_NAME: str = "Dashboard"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Project dashboard two-factor verification API"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Security
    SECRET_KEY: str = Field(..., min_length=32)

    # Database URLs
    POSTGRES_URL: str = Field(..., description="PostgreSQL connection URL")
    REDIS_URL: str = Field(..., description="Redis connection URL")

    # PostgreSQL specific
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_MAX_OVERFLOW: int = 10

    # Redis specific
    REDIS_MAX_CONNECTIONS: int = 50

    # JWT Settings (tokens are issued by the account service)
    JWT_SECRET_KEY: str = Field(..., min_length=32)
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "dashboard"
    JWT_AUDIENCE: str = "dashboard-api"

    # Session Management
    SESSION_TIMEOUT_MINUTES: int = 60

    # Time-based codes
    TOTP_VERIFY_WINDOW: int = 2
    TOTP_ENROLL_WINDOW: int = 8
    TOTP_SECRET_LENGTH: int = 32

    # YubiCloud validation service
    YUBICO_CLIENT_ID: str = ""
    YUBICO_SECRET_KEY: str = ""
    YUBICO_API_URL: str = "https://api.yubico.com/wsapi/2.0/verify"
    YUBICO_TIMEOUT_SECONDS: float = 2.0

    # CORS
    CORS_ORIGINS: str | list[str] = ["http://localhost:3000", "http://localhost:8000"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: str | list[str] = ["*"]
    CORS_ALLOW_HEADERS: str | list[str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                import json

                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("CORS_ALLOW_METHODS", "CORS_ALLOW_HEADERS", mode="before")
    @classmethod
    def parse_lists(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


# Global settings instance
settings = Settings()
