import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "Ride Earnings API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # Database Settings
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "3306"))
    DB_USER: str = os.getenv("DB_USER", "earnings")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_NAME: str = os.getenv("DB_NAME", "earnings")
    # Full SQLAlchemy URL, takes precedence over the DB_* values (e.g. "sqlite://")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Redis (empty URL disables caching)
    REDIS_URL: str = os.getenv("REDIS_URL", "")

    # CORS Settings
    CORS_ORIGINS: List[str] = ["*"]

    # Goals
    DEFAULT_DAILY_GOAL: int = 3000

    # Fuel tracking
    DEFAULT_CONSUMPTION_PER_100KM: float = 7.0
    MIN_SAVED_TRIP_KM: float = 0.1
    FUEL_PRICE_API_URL: str = "https://api.collectapi.com/gasPrice/turkeyGasoline"
    COLLECTAPI_KEY: str = os.getenv("COLLECTAPI_KEY", "")
    FUEL_PRICE_CITY: str = "istanbul"
    FUEL_PRICE_FALLBACK: float = 48.50
    FUEL_PRICE_CACHE_TTL: int = 60 * 60  # 1 hour
    HTTP_TIMEOUT_SEC: float = 8.0

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def REDIS_ENABLED(self) -> bool:
        return bool(self.REDIS_URL)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
