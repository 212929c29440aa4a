# storeapi/config.py
from datetime import timedelta
from enum import Enum
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Runtime configuration, read from the environment (and .env when present).
    """

    # --- Application Meta ---
    APP_NAME: str = "api-store"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    HOST: str = "0.0.0.0"
    PORT: int = 8085

    # --- Persistence ---
    MONGODB_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "api_store"
    MONGODB_TIMEOUT_MS: int = 5000

    # --- Security ---
    # no default: tokens must be signed with a key only the deployment knows
    JWT_SECRET: str = Field(..., min_length=1)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: timedelta = timedelta(hours=1)
    BCRYPT_ROUNDS: int = Field(10, ge=4, le=31)

    # --- HTTP ---
    CORS_ORIGINS: List[str] = ["*"]

    # --- Logging ---
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "console"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


settings = Settings()
