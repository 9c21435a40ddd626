"""Configuration management for the QAnswer component."""

from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from ..common.config import ConfigurationLoader, LanguageCheckedSettings

DEFAULT_KNOWLEDGE_GRAPH_ENDPOINTS = {
    "wikidata": "https://query.wikidata.org/bigdata/namespace/wdq/sparql",
    "dbpedia": "https://dbpedia.org/sparql",
}


class QAnswerSettings(LanguageCheckedSettings):
    """Environment-based configuration for the QAnswer component."""

    model_config = SettingsConfigDict(env_prefix="QANSWER_")

    endpoint_url: str = Field(default="https://qanswer-core1.univ-st-etienne.fr/api/gerbil")
    supported_languages: List[str] = Field(
        default_factory=lambda: ["en", "de", "fr", "it", "es", "pt", "nl", "zh", "ar", "ja"]
    )
    knowledge_base_default: str = Field(default="wikidata")
    user_default: str = Field(default="open")
    knowledge_graph_endpoints: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_KNOWLEDGE_GRAPH_ENDPOINTS)
    )
    application_name: str = Field(default="QAnswerQueryBuilderAndExecutor")

    @field_validator("knowledge_base_default", "user_default")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()


def load_qanswer_settings(config_path: Optional[str] = None) -> QAnswerSettings:
    """Load QAnswer settings from the `qanswer` section of a YAML file and the environment."""
    return ConfigurationLoader(QAnswerSettings, "qanswer", config_path).load_config()
