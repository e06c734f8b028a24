"""
Application configuration management using Pydantic settings.
"""
import json
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "Data Catalog"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "local"  # local, test, staging, production

    # API
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from environment variable.

        Supports:
        - JSON array: '["https://example.com","https://app.example.com"]'
        - Comma-separated: 'https://example.com,https://app.example.com'
        - Single string: 'https://example.com'
        """
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass

            if ',' in v:
                return [origin.strip() for origin in v.split(',') if origin.strip()]

            return [v.strip()] if v.strip() else []

        return v

    # Security (tokens are issued by the external identity provider)
    SECRET_KEY: str = "your-secret-key-here-change-in-production"  # Change in production!
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/catalog_db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    # Monitoring and Observability
    SENTRY_DSN: Optional[str] = None
    ENABLE_METRICS: bool = True
    ENABLE_USAGE_TRACKING: bool = True
    USAGE_QUOTA_COST_PER_REQUEST: int = 1

    # Provisioning
    SEED_DEMO_DATA: bool = False


settings = Settings()
