"""
Configuration management using Pydantic settings.
Handles the database URL, session signing, SaaS credentials and shared secrets.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    # Application configuration
    app_name: str = "Property Portal API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/property_portal"

    # Session token configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"

    # Payment processor
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Transactional email
    sendgrid_api_key: str = ""
    email_from: str = "admin@propertyportal.example"
    operator_email: str = "admin@propertyportal.example"

    # Blob storage
    blob_backend: str = "local"
    blob_read_write_token: str = ""
    blob_api_url: str = "https://blob.vercel-storage.com"
    upload_dir: str = "./uploads"
    public_upload_base_url: str = "/uploads"
    max_image_size: int = int(4.5 * 1024 * 1024)  # 4.5MB
    max_document_size: int = 10 * 1024 * 1024  # 10MB

    # Shared secrets
    admin_setup_key: str = ""
    cron_secret: str = "default-secret-change-in-production"

    # Workflow
    deleted_request_retention_days: int = 14
    password_reset_token_minutes: int = 60
    frontend_url: str = "http://localhost:3000"

    # API configuration
    api_prefix: str = ""
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("blob_backend")
    @classmethod
    def validate_blob_backend(cls, v):
        """Validate blob storage backend name."""
        if v not in ("local", "vercel"):
            raise ValueError("BLOB_BACKEND must be 'local' or 'vercel'")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
