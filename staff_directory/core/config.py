"""
Configuration settings for the application.
"""
import logging
import os
from pydantic_settings import BaseSettings
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with default values.
    Values can be overridden by environment variables.
    """
    # API settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Staff Directory"

    # Security settings
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "your-secret-key-change-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS settings
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # MongoDB settings
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "staff_directory"
    MONGODB_TIMEOUT_MS: int = 5000

    # Directory listing
    DEFAULT_PAGE_SIZE: int = 10

    # Seeded administrator account
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "admin123"  # Change this in production
    ADMIN_NAME: str = "Admin User"

    # Logging settings
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Create settings instance
settings = Settings()


def print_config_info():
    """Log configuration information at startup."""
    logger.info(f"API Version: {settings.API_V1_STR}")
    logger.info(f"Project Name: {settings.PROJECT_NAME}")
    logger.info(f"MongoDB URL: {settings.MONGODB_URL}")
    logger.info(f"MongoDB Database: {settings.MONGODB_DB}")
    logger.info(f"CORS Origins: {settings.BACKEND_CORS_ORIGINS}")
    logger.info(f"Log Level: {settings.LOG_LEVEL}")
