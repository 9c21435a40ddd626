"""Building blocks shared by the QA components."""

from .component import QanaryComponent
from .config import ComponentSettings, ConfigurationLoader
from .exceptions import (
    ComponentError,
    QuestionNotFoundError,
    LanguageNotSupportedError,
    ResultFormatError,
    TriplestoreError,
)
from .models import QanaryMessage, QanaryQuestion, NamedEntity, AnswerResult
from .query_builder import QueryBuilder, QueryBuilderConfig, PreparedRequest
from .triplestore import TriplestoreConnector, SparqlEndpointConnector

__all__ = [
    "QanaryComponent",
    "ComponentSettings",
    "ConfigurationLoader",
    "ComponentError",
    "QuestionNotFoundError",
    "LanguageNotSupportedError",
    "ResultFormatError",
    "TriplestoreError",
    "QanaryMessage",
    "QanaryQuestion",
    "NamedEntity",
    "AnswerResult",
    "QueryBuilder",
    "QueryBuilderConfig",
    "PreparedRequest",
    "TriplestoreConnector",
    "SparqlEndpointConnector",
]
