from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator
from urllib.parse import quote_plus
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment Configuration
    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    PROJECT_NAME: str = "pecal"
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    DATABASE_URL: Optional[str] = None

    # Redis (coordination store). Leaving both URL and host unset disables reminders.
    REDIS_URL: Optional[str] = None
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_KEY_PREFIX: str = "pecal:v1"

    # Cron endpoint bearer secret
    CRON_SECRET: Optional[str] = None

    # Naive task times are read under this fixed offset (minutes east of UTC)
    REMINDER_DEFAULT_TZ_OFFSET_MINUTES: int = 540

    @model_validator(mode="after")
    def _finalize_and_validate(self) -> "Settings":
        # Derive DATABASE_URL if not provided
        if not self.DATABASE_URL:
            if self.POSTGRES_USER and self.POSTGRES_SERVER and self.POSTGRES_DB:
                safe_user = quote_plus(self.POSTGRES_USER)
                auth = safe_user
                if self.POSTGRES_PASSWORD:
                    auth = f"{safe_user}:{quote_plus(self.POSTGRES_PASSWORD)}"
                self.DATABASE_URL = (
                    f"postgresql://{auth}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                )
            else:
                self.DATABASE_URL = "sqlite:///./pecal.db"

        # Derive REDIS_URL from host parts
        if not self.REDIS_URL and self.REDIS_HOST and self.REDIS_HOST.strip():
            auth_part = f":{quote_plus(self.REDIS_PASSWORD)}@" if self.REDIS_PASSWORD else ""
            self.REDIS_URL = f"redis://{auth_part}{self.REDIS_HOST.strip()}:{self.REDIS_PORT}/{self.REDIS_DB}"
        if self.REDIS_URL is not None and not self.REDIS_URL.strip():
            self.REDIS_URL = None
        return self


settings = Settings()
