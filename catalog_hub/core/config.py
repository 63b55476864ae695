from functools import lru_cache
from typing import Annotated, Any, Dict, List, Optional
import json
import os

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Catalog Hub"
    DEBUG: bool = False

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # Database settings
    DATABASE_URI: str = "sqlite:///./catalog_hub.db"

    # Cache settings
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    CACHE_TTL: int = 60  # Snapshot cache TTL in seconds

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True

    # External API timeout settings
    DEFAULT_TIMEOUT: int = 10  # seconds
    MAX_RETRIES: int = 3
    RETRY_BACKOFF_FACTOR: float = 0.3

    # Adaptor settings
    ENABLED_ADAPTORS: Annotated[List[str], NoDecode] = ["cde", "abc"]
    ADAPTOR_FETCH_TIMEOUT: float = 15.0  # Upper bound for one partner catalog read

    # Reconciliation settings
    RECONCILE_INTERVAL_SECONDS: int = 0  # 0 disables the background loop
    SNAPSHOT_SOURCE_URL: Optional[str] = None  # Remote hub to pull the snapshot from

    # Partner endpoints
    CDE_SERVICE_URL: str = "http://localhost:5011"
    CDE_REMOTE_ORDERS: bool = False
    ABC_SERVICE_URL: str = "http://localhost:5012"
    ABC_REMOTE_ORDERS: bool = False

    @field_validator("BACKEND_CORS_ORIGINS", "ENABLED_ADAPTORS", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> List[str]:
        """Parse comma separated values from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    def get_adaptor_config(self, adaptor_type: str) -> Dict[str, Any]:
        """
        Build the configuration dictionary for one partner adaptor.

        Args:
            adaptor_type: Adaptor type identifier (e.g. "cde")

        Returns:
            Dictionary consumed by the adaptor factory
        """
        prefix = adaptor_type.upper()
        return {
            "base_url": getattr(self, f"{prefix}_SERVICE_URL", None),
            "remote_orders": getattr(self, f"{prefix}_REMOTE_ORDERS", False),
            "timeout": self.DEFAULT_TIMEOUT,
            "max_retries": self.MAX_RETRIES,
            "backoff_factor": self.RETRY_BACKOFF_FACTOR,
        }


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching for efficiency.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
