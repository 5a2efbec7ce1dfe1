"""
Application configuration management with environment-based settings.
"""
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ============= Application Settings =============
    APP_NAME: str = "QBank Admin"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Question bank administration API"
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    API_PREFIX: str = "/api"

    # ============= Server Settings =============
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # ============= Database Settings =============
    # Unset means the instance has not been provisioned yet
    DATABASE_URL: Optional[str] = None
    DATABASE_ECHO: bool = False
    AUTO_CREATE_SCHEMA: bool = False

    # ============= Session Gate =============
    ADMIN_USERNAME: str = "raptor"
    ADMIN_PASSWORD: str = "0424"
    SESSION_COOKIE_NAME: str = "session"
    SESSION_VALUE: str = "raptor-session"
    SESSION_MAX_AGE: int = 60 * 60 * 8  # 8 hours
    PUBLIC_PATHS: Annotated[List[str], NoDecode] = ["/login", "/api/auth/login", "/api/auth/me", "/health"]
    PUBLIC_PREFIXES: Annotated[List[str], NoDecode] = ["/static", "/favicon"]

    # CORS Settings
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000", "http://localhost:8000"]

    # ============= Logging Settings =============
    LOG_LEVEL: str = "INFO"

    @field_validator("CORS_ORIGINS", "PUBLIC_PATHS", "PUBLIC_PREFIXES", mode="before")
    @classmethod
    def split_csv(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
