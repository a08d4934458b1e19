from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings

from .errors import ConfigurationError


class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = False

    # JWT settings
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    # Integer seconds or a number with an s/m/h/d suffix
    JWT_EXPIRES_IN: str = "7d"

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Project settings
    SERVICE_NAME: str = "task-manager-api"
    API_PREFIX: str = "/api"

    class Config:
        env_file = ".env"
        # Unrelated variables in .env are ignored instead of rejected.
        extra = "ignore"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def check_required(self) -> None:
        """Raise ConfigurationError if a variable needed to serve is unset."""
        missing = [
            name
            for name in ("DATABASE_URL", "JWT_SECRET")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()
