"""Query builder for the QAnswer web service."""

from typing import Any, Dict

from src.communications.client import CachedHttpClient, FORM_CONTENT_TYPE

from ..common.models import AnswerResult
from ..common.query_builder import PreparedRequest, QueryBuilder, QueryBuilderConfig
from .config import QAnswerSettings
from .models import QAnswerResult, SERVICE_NAME


class QAnswerQueryBuilder(QueryBuilder):
    """
    Sends questions to QAnswer.

    The request is a form-encoded POST with the parameters query, lang, kb
    and user. kb and user come from the extra parameters (keys
    "knowledge_base" and "user") or the configured defaults.
    """

    service_name = SERVICE_NAME

    def __init__(
        self,
        config: QueryBuilderConfig,
        client: CachedHttpClient,
        knowledge_base_default: str = "wikidata",
        user_default: str = "open"
    ):
        super().__init__(config, client)
        self.knowledge_base_default = knowledge_base_default
        self.user_default = user_default

    @classmethod
    def from_settings(cls, settings: QAnswerSettings, client: CachedHttpClient) -> "QAnswerQueryBuilder":
        config = QueryBuilderConfig(
            endpoint_url=settings.endpoint_url,
            lang_default=settings.lang_default,
            supported_languages=list(settings.supported_languages)
        )
        return cls(
            config,
            client,
            knowledge_base_default=settings.knowledge_base_default,
            user_default=settings.user_default
        )

    def build_request(
        self,
        endpoint: str,
        question: str,
        lang: str,
        params: Dict[str, Any]
    ) -> PreparedRequest:
        params.setdefault("knowledge_base", self.knowledge_base_default)
        params.setdefault("user", self.user_default)
        return PreparedRequest(
            method="POST",
            uri=endpoint,
            headers={
                "Content-Type": FORM_CONTENT_TYPE,
                "Accept": "application/json",
                "User-Agent": f"Qanary/{self.__class__.__name__}",
            },
            body={
                "query": question,
                "lang": lang,
                "kb": params["knowledge_base"],
                "user": params["user"],
            }
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
        result = QAnswerResult.from_response(
            payload,
            raw_json,
            question=question,
            endpoint=endpoint,
            language=lang,
            knowledge_base=params["knowledge_base"],
            user=params["user"]
        )
        self.logger.info(
            f"QAnswer result for '{question}': sparql={result.sparql!r} "
            f"values={len(result.values)} confidence={result.confidence}"
        )
        return result
