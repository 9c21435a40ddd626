"""
RuBQ query builder component.

Sends the question text to a RuBQ web service and stores the generated
SPARQL query (and the raw JSON response) as annotations.
"""

from typing import Optional

import httpx

from src.communications.cache import ResponseCache
from src.communications.client import CachedHttpClient

from ..common.annotations import ANSWER_JSON, SPARQL_QUERY, build_insert_query
from ..common.component import ConnectorFactory, QanaryComponent
from ..common.logging import log_component_operation
from ..common.models import QanaryMessage
from .config import RuBQSettings
from .query_builder import RuBQQueryBuilder


class RuBQComponent(QanaryComponent):
    """Builds SPARQL queries for questions with RuBQ."""

    def __init__(
        self,
        settings: RuBQSettings,
        query_builder: RuBQQueryBuilder,
        connector_factory: Optional[ConnectorFactory] = None,
        http_client: Optional[httpx.Client] = None
    ):
        super().__init__(settings.application_name, connector_factory, http_client)
        self.settings = settings
        self.query_builder = query_builder

    @classmethod
    def from_settings(cls, settings: RuBQSettings, cache: Optional[ResponseCache] = None) -> "RuBQComponent":
        if cache is None:
            cache = ResponseCache(settings.cache_config())
        client = CachedHttpClient(
            cache,
            key_headers=settings.cache_key_headers,
            timeout=settings.request_timeout_seconds,
            component_name=settings.application_name
        )
        return cls(settings, RuBQQueryBuilder.from_settings(settings, client))

    @log_component_operation("process")
    def process(self, message: QanaryMessage) -> QanaryMessage:
        """
        Annotate the question of a pipeline run with the RuBQ query.

        Questions in an unsupported default language are skipped: a warning
        is logged and nothing is written.
        """
        self.logger.info(f"process: {message}")
        lang = self.settings.lang_default
        if not self.query_builder.is_lang_supported(lang):
            self.logger.warning(f"Language '{lang}' is not supported by RuBQ, question skipped")
            return message

        connector = self.get_connector(message)
        question = self.get_question(message, connector)

        result = self.query_builder.query(question.text, lang=lang)
        if not result.sparql:
            self.logger.warning(f"RuBQ generated no query for '{question.text}'")

        connector.update(build_insert_query(
            question,
            result,
            self.application_name,
            sections=(SPARQL_QUERY, ANSWER_JSON)
        ))
        return message
