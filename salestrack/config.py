from pydantic import AnyUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    SERVICE_PORT: int = 3001
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Store adapter selection: "memory" or "redis"
    STORE_ADAPTER: Literal["memory", "redis"] = "memory"
    REDIS_URL: AnyUrl | None = None
    REDIS_KEY_PREFIX: str = "salestrack"
    MAX_EVENT_SIZE: int = 65536
    # Zone used to turn calendar-date filters into instants
    TIMEZONE: str = "UTC"
    CORS_ORIGINS: str = "*"  # Comma-separated list of origins

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
