from pydantic_settings import BaseSettings, SettingsConfigDict
from decimal import Decimal
import os
from functools import lru_cache


class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "Catalog Admin API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "True").lower() == "true"  # Default to True for development
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Remote catalog backend (products, discounts)
    # Every admin call is forwarded here with the caller's bearer token
    API_BASE_URL: str = os.getenv("API_BASE_URL", "https://backend-project-r734.onrender.com")
    API_TIMEOUT_SECONDS: float = 20.0

    # Bulk discount
    # Seconds the success summary stays visible before the batch is closed
    BULK_SUCCESS_CLOSE_DELAY: float = 1.5
    DEFAULT_BULK_DISCOUNT: Decimal = Decimal("10")
    # Finished jobs nobody dismissed are dropped after this many seconds
    BULK_JOB_RETENTION_SECONDS: float = 3600

    # CORS
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"  # Ignore extra fields in .env file
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
