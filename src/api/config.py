"""API configuration using Pydantic Settings."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """Configuration for the FastAPI service hosting the QA components."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        extra="ignore"
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8009
    debug: bool = False

    # CORS settings
    cors_origins: List[str] = ["*"]

    # Component configuration file (YAML, optional)
    config_path: str = "config/components.yaml"

    # Components started with the application
    enable_qanswer: bool = True
    enable_rubq: bool = True


# Global settings instance
settings = APISettings()
