from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # 🎯 Application
    APP_NAME: str = "Rapphim API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False  # ⚠️ Must be False in production
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api/v1"

    # 🌐 Server
    HOST: str = '0.0.0.0'
    PORT: int = 8000

    # 🗄️ Database - PostgreSQL (sqlite+aiosqlite for local runs)
    DATABASE_URL: str  # ⚠️ No default, must come from env
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5

    # 🔴 Redis (optional - list caching is skipped when unset)
    REDIS_URL: Optional[str] = None
    REDIS_CACHE_EXPIRATION: int = 3600
    MOVIE_LIST_CACHE_SECONDS: int = 120

    # 🔒 CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # 📄 Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MESSAGES_PAGE_SIZE: int = 10

    # 🔐 Security Headers
    HTTPS_ONLY: bool = False

    # 📊 Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = 'ignore'

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',')]

    @property
    def is_redis_enabled(self) -> bool:
        """Check if Redis caching is configured"""
        return bool(self.REDIS_URL)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

settings = Settings()
