"""
Application configuration management using Pydantic Settings
Handles all environment variables and application settings
"""

from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    """Main application settings"""

    # Application Settings
    APP_NAME: str = "Storefront API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Storage: "database" (SQLAlchemy) or "file" (JSON collections)
    STORAGE_BACKEND: str = "database"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DATABASE_ECHO: bool = False

    # File store
    DATA_DIR: str = "data"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10

    # Real-time channel
    REALTIME_PAGE_SIZE: int = 10
    REALTIME_VIEW_LIMIT: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url_async(self) -> str:
        """Convert sync database URL to async"""
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")
        elif self.DATABASE_URL.startswith("sqlite://"):
            return self.DATABASE_URL.replace("sqlite://", "sqlite+aiosqlite://")
        return self.DATABASE_URL

    @property
    def use_file_storage(self) -> bool:
        return self.STORAGE_BACKEND.lower() == "file"

@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance
    This ensures settings are loaded only once
    """
    return Settings()

# Global settings instance
settings = get_settings()
