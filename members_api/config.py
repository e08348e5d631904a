"""Application configuration"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Members API"
    debug: bool = False
    log_level: str = "INFO"

    # Security
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    # Database
    database_path: str = "./data/members.json"

    # Credential seeded on startup (both must be set)
    initial_username: Optional[str] = None
    initial_password: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def validate_production_settings(settings: Settings) -> list:
    """Validate that security-relevant settings differ from their defaults"""
    errors = []

    if settings.secret_key == DEFAULT_SECRET_KEY:
        errors.append("SECRET_KEY must be changed from default value")

    if settings.initial_password and len(settings.initial_password) < 8:
        errors.append("INITIAL_PASSWORD should be at least 8 characters")

    return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    base_settings = Settings()

    if not base_settings.debug:
        for error in validate_production_settings(base_settings):
            logger.warning(f"Config warning: {error}")

    return base_settings


# Convenience access
settings = get_settings()
