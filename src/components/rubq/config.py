"""Configuration management for the RuBQ component."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from ..common.config import ComponentSettings, ConfigurationLoader


class RuBQSettings(ComponentSettings):
    """Environment-based configuration for the RuBQ component.

    The default language is not required to be supported: the component then
    skips questions instead of failing at start-up.
    """

    model_config = SettingsConfigDict(env_prefix="RUBQ_")

    endpoint_url: str = Field(default="http://localhost:8080/rubq/query")
    supported_languages: List[str] = Field(default_factory=lambda: ["en", "ru"])
    application_name: str = Field(default="RuBQQueryBuilder")


def load_rubq_settings(config_path: Optional[str] = None) -> RuBQSettings:
    """Load RuBQ settings from the `rubq` section of a YAML file and the environment."""
    return ConfigurationLoader(RuBQSettings, "rubq", config_path).load_config()
