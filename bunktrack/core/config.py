from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class AppSettings(BaseSettings):
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    DEFAULT_REQUIRED_PERCENT: float = Field(75, gt=0, le=100)
    # What the store does when attended exceeds total
    ATTENDED_OVER_TOTAL: Literal["allow", "reject", "clamp"] = "allow"
    # SQLAlchemy URL, e.g. sqlite:///subjects.db; unset keeps subjects in memory
    DATABASE_URL: Optional[str] = None
    ENABLE_BACKEND_WEB: bool = True
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=[".env", ".env.example"],
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def load_app_settings(**overrides) -> AppSettings:
    try:
        return AppSettings(**overrides)
    except Exception as error:
        raise ConfigurationError(f"Failed to load application settings: {error}")


# load config on module import
try:
    settings = load_app_settings()
except ConfigurationError as e:
    # Re-raise with additional context for easier debugging
    raise ConfigurationError(f"Failed to initialize configuration: {e}") from e
