"""Configuration shared by the QA components.

Each component has its own settings class (environment prefix) built on
ComponentSettings. Values can additionally come from a YAML file; environment
variables take precedence over the file.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

import yaml
from pydantic import Field, ValidationError as PydanticValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.communications.cache import CacheConfig
from src.communications.fingerprint import DEFAULT_KEY_HEADERS

from .exceptions import ConfigurationError

SettingsT = TypeVar("SettingsT", bound="ComponentSettings")


class ComponentSettings(BaseSettings):
    """Settings common to every QA component."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Service endpoint
    endpoint_url: str = Field(..., description="URL of the external QA web service")
    request_timeout_seconds: float = Field(default=60.0, gt=0)

    # Question handling
    threshold: float = Field(default=0.5, ge=0.0, description="Minimum named entity score")
    lang_default: str = Field(default="en")
    supported_languages: List[str] = Field(default_factory=lambda: ["en"])

    # Annotation service identifier (urn:qanary:<application_name>)
    application_name: str = Field(default="QAComponent")

    # Cache Settings
    cache_enabled: bool = Field(default=True)
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_size: int = Field(default=1000, ge=1)
    cache_key_headers: List[str] = Field(default_factory=lambda: list(DEFAULT_KEY_HEADERS))

    # Logging Settings
    log_level: str = Field(default="INFO")

    @field_validator("lang_default")
    @classmethod
    def validate_lang_default(cls, v: str) -> str:
        """Validate the default language is a 2-letter code."""
        if v is None or len(v.strip()) != 2:
            raise ValueError(
                f"lang_default is invalid (requires exactly 2 characters, e.g., 'en'), was '{v}'"
            )
        return v.strip()

    @field_validator("supported_languages", mode="before")
    @classmethod
    def split_supported_languages(cls, v: Any) -> Any:
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            return [lang.strip() for lang in v.split(",") if lang.strip()]
        return v

    @field_validator("supported_languages")
    @classmethod
    def validate_supported_languages(cls, v: List[str]) -> List[str]:
        invalid = [lang for lang in v if len(lang) != 2]
        if invalid:
            raise ValueError(f"supported languages must be 2-letter codes, got {invalid}")
        if not v:
            raise ValueError("at least one supported language is required")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is supported."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v.upper()

    def cache_config(self) -> CacheConfig:
        """Build the response cache configuration."""
        return CacheConfig(
            enabled=self.cache_enabled,
            ttl_seconds=self.cache_ttl_seconds,
            max_size=self.cache_max_size
        )


class LanguageCheckedSettings(ComponentSettings):
    """Component settings whose default language must be supported."""

    @model_validator(mode="after")
    def validate_default_supported(self):
        if self.lang_default not in self.supported_languages:
            raise ValueError(
                f"lang_default '{self.lang_default}' is not one of {self.supported_languages}"
            )
        return self


class ConfigurationLoader:
    """Loads component settings from a YAML file and environment variables."""

    # nested YAML sections flattened into prefixed field names
    NESTED_SECTIONS = ("cache",)

    def __init__(self, settings_cls: Type[SettingsT], section: str, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            settings_cls: Settings class to instantiate
            section: Top-level YAML key holding this component's values
            config_path: Path to YAML configuration file (optional)
        """
        self.settings_cls = settings_cls
        self.section = section
        self.config_path = config_path or "config/components.yaml"

    def load_config(self) -> SettingsT:
        """Load configuration from YAML file and environment variables.

        Environment variables take precedence over YAML configuration.

        Raises:
            ConfigurationError: If configuration validation fails
        """
        yaml_config = self._load_yaml_config().get(self.section) or {}
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                f"Section '{self.section}' in {self.config_path} must be a mapping"
            )

        values = {
            key: value
            for key, value in self._flatten_yaml_config(yaml_config).items()
            if not self._set_in_environment(key)
        }

        try:
            return self.settings_cls(**values)
        except PydanticValidationError as e:
            missing_keys = [
                ".".join(str(part) for part in err["loc"])
                for err in e.errors() if err["type"] == "missing"
            ]
            invalid_values = {
                ".".join(str(part) for part in err["loc"]): err["msg"]
                for err in e.errors() if err["type"] != "missing"
            }
            raise ConfigurationError(
                f"Configuration validation failed for '{self.section}': {e.error_count()} error(s)",
                missing_keys=missing_keys,
                invalid_values=invalid_values
            ) from e

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: If YAML file is invalid
        """
        config_file = Path(self.config_path)
        if not config_file.exists():
            return {}  # Use defaults if no config file

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                content = yaml.safe_load(f)
                return content or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration in {self.config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file {self.config_path}: {e}") from e

    def _flatten_yaml_config(self, yaml_config: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten nested sections, e.g. cache.ttl_seconds -> cache_ttl_seconds."""
        flattened = {}
        for key, value in yaml_config.items():
            if key in self.NESTED_SECTIONS and isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    flattened[f"{key}_{sub_key}"] = sub_value
            else:
                flattened[key] = value
        return flattened

    def _set_in_environment(self, field_name: str) -> bool:
        prefix = self.settings_cls.model_config.get("env_prefix", "")
        return f"{prefix}{field_name}".upper() in {name.upper() for name in os.environ}
