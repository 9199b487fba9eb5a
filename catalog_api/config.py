"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

from catalog_api.logging_utils import configure_logging

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Relational store
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./catalog.db")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    # Redis / cache settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX: str = os.getenv("CACHE_KEY_PREFIX", "catalog:")
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))

    # Product business rules
    DAILY_PRODUCT_LIMIT: int = int(os.getenv("DAILY_PRODUCT_LIMIT", "500"))
    PRODUCT_RULES_FILE: str | None = os.getenv("PRODUCT_RULES_FILE")

    # Book catalog paging
    BOOKS_DEFAULT_PAGE_SIZE: int = int(os.getenv("BOOKS_DEFAULT_PAGE_SIZE", "10"))
    BOOKS_MAX_PAGE_SIZE: int = int(os.getenv("BOOKS_MAX_PAGE_SIZE", "100"))

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    def __init__(self):
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        configure_logging(self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with env={self.ENVIRONMENT}, debug={self.debug}, "
            f"log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
