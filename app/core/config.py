from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DATABASE_USER: str = "portal"
    DATABASE_PASSWORD: str = "portal"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_NAME: str = "procurement"
    # Full SQLAlchemy URL, takes precedence over the parts above (sqlite for local runs)
    DATABASE_URL_OVERRIDE: Optional[str] = None

    LOG_LEVEL: str = "INFO"
    # Optional rotating log file next to the console output
    LOG_FILE: Optional[str] = None

    # JWT
    SECRET_KEY: str = Field(default="change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7 # 7 days
    DOCUMENT_TOKEN_EXPIRE_MINUTES: int = 15

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_CONNECT_TIMEOUT_SECONDS: float = 2.0
    CATALOG_CACHE_TTL_SECONDS: int = 30 * 60

    DOCUMENTS_DIR: str = "./var/documents"

    CORS_ORIGINS_STR: str = Field(default="http://localhost:3000,http://localhost:5173", alias="CORS_ORIGINS")

    RATE_LIMIT_ENABLED: bool = True
    # None -> same Redis as the cache
    RATE_LIMIT_STORAGE_URI: Optional[str] = None
    FEEDBACK_RATE_LIMIT: str = "10/minute"
    DOCUMENT_TOKEN_RATE_LIMIT: str = "30/minute"

    DELETE_READ_NOTIFICATIONS_AFTER_DAYS: int = 30
    DELETE_ANY_NOTIFICATION_AFTER_DAYS: int = 90
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "Asia/Riyadh"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(',') if origin.strip()]

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}"

    @property
    def LIMITER_STORAGE_URI(self) -> str:
        return self.RATE_LIMIT_STORAGE_URI or self.REDIS_URL

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+psycopg2://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    model_config = SettingsConfigDict(env_file=".env", populate_by_name=True, extra="ignore")

settings = Settings()
