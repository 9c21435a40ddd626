"""
Base query builder for external QA web services.

A query builder validates the requested language, turns a question into the
request the service expects, sends it through the cached HTTP client and
parses the JSON response into an AnswerResult.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from src.communications.cache import CachedResponse
from src.communications.client import CachedHttpClient

from .exceptions import LanguageNotSupportedError, ResultFormatError
from .logging import ComponentLoggerMixin, log_component_operation
from .models import AnswerResult


@dataclass
class QueryBuilderConfig:
    """Configuration for a query builder."""

    endpoint_url: str
    lang_default: str = "en"
    supported_languages: List[str] = field(default_factory=lambda: ["en"])


@dataclass
class PreparedRequest:
    """Outbound request built from a question."""

    method: str
    uri: str
    headers: Dict[str, str]
    body: Any = None


class QueryBuilder(ComponentLoggerMixin, ABC):
    """Calls an external QA web service for a question.

    Subclasses implement build_request() and parse_response(); everything
    else (language handling, dispatch, JSON decoding) is shared.
    """

    service_name = "qa-service"

    def __init__(self, config: QueryBuilderConfig, client: CachedHttpClient):
        """
        Initialize the query builder.

        Args:
            config: QueryBuilderConfig with endpoint and language settings
            client: Cached HTTP client used for all outbound requests
        """
        self.config = config
        self.client = client

    def is_lang_supported(self, lang: str) -> bool:
        """Check a language code against the allow-list (case-sensitive)."""
        return lang in self.config.supported_languages

    def resolve_language(self, lang: Optional[str]) -> str:
        """Return the language to use, falling back to the configured default.

        Raises:
            LanguageNotSupportedError: If the language is not in the allow-list
        """
        if lang is None or not lang.strip():
            lang = self.config.lang_default
        if not self.is_lang_supported(lang):
            raise LanguageNotSupportedError(lang, self.config.supported_languages)
        return lang

    @log_component_operation("query")
    def query(
        self,
        question: str,
        lang: Optional[str] = None,
        extra_params: Optional[Mapping[str, Any]] = None,
        endpoint_url: Optional[str] = None
    ) -> AnswerResult:
        """
        Send a question to the service and parse its answer.

        Args:
            question: Question text
            lang: Language code (default language if omitted)
            extra_params: Service specific parameters
            endpoint_url: Overrides the configured endpoint

        Returns:
            AnswerResult parsed from the service response

        Raises:
            LanguageNotSupportedError: If the language is not supported
            RequestFailedError: If the request fails
            ResultFormatError: If the response cannot be parsed
        """
        lang = self.resolve_language(lang)
        params = dict(extra_params or {})
        endpoint = endpoint_url or self.config.endpoint_url

        request = self.build_request(endpoint, question, lang, params)
        self.logger.info(f"Request to {request.uri} for question: {question}")

        response = self.client.execute(
            request.method,
            request.uri,
            headers=request.headers,
            body=request.body
        )

        payload = self.decode_json(response)
        return self.parse_response(payload, response.text, endpoint, question, lang, params)

    def decode_json(self, response: CachedResponse) -> Any:
        """Decode a response body as JSON.

        Raises:
            ResultFormatError: If the body is not valid JSON
        """
        try:
            return response.json()
        except ValueError as e:
            raise ResultFormatError(
                f"Response of {self.service_name} is not valid JSON: {e}",
                service=self.service_name,
                payload=response.text
            ) from e

    @abstractmethod
    def build_request(
        self,
        endpoint: str,
        question: str,
        lang: str,
        params: Dict[str, Any]
    ) -> PreparedRequest:
        raise NotImplementedError

    @abstractmethod
    def parse_response(
        self,
        payload: Any,
        raw_json: str,
        endpoint: str,
        question: str,
        lang: str,
        params: Dict[str, Any]
    ) -> AnswerResult:
        raise NotImplementedError

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.client.cache.get_stats()
