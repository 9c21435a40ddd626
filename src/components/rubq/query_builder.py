"""Query builder for the RuBQ web service."""

from typing import Any, Dict

from src.communications.client import CachedHttpClient, JSON_CONTENT_TYPE

from ..common.models import AnswerResult
from ..common.query_builder import PreparedRequest, QueryBuilder, QueryBuilderConfig
from .config import RuBQSettings
from .models import RuBQResult, SERVICE_NAME


class RuBQQueryBuilder(QueryBuilder):
    """Sends questions to RuBQ as a JSON POST of {question, lang}."""

    service_name = SERVICE_NAME

    @classmethod
    def from_settings(cls, settings: RuBQSettings, client: CachedHttpClient) -> "RuBQQueryBuilder":
        config = QueryBuilderConfig(
            endpoint_url=settings.endpoint_url,
            lang_default=settings.lang_default,
            supported_languages=list(settings.supported_languages)
        )
        return cls(config, client)

    def build_request(
        self,
        endpoint: str,
        question: str,
        lang: str,
        params: Dict[str, Any]
    ) -> PreparedRequest:
        return PreparedRequest(
            method="POST",
            uri=endpoint,
            headers={
                "Content-Type": JSON_CONTENT_TYPE,
                "Accept": "application/json",
                "User-Agent": f"Qanary/{self.__class__.__name__}",
            },
            body={"question": question, "lang": lang, **params}
        )

    def parse_response(
        self,
        payload: Any,
        raw_json: str,
        endpoint: str,
        question: str,
        lang: str,
        params: Dict[str, Any]
    ) -> AnswerResult:
        result = RuBQResult.from_response(payload, raw_json, question=question, endpoint=endpoint, language=lang)
        self.logger.info(f"RuBQ result for '{question}': sparql={result.sparql!r}")
        return result
