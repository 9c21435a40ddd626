"""
QAnswer query builder and executor component.

The component retrieves the named entities of the question from the pipeline
triplestore, replaces entity spans by entity URIs, fetches the answer of the
enriched question from the QAnswer API and stores the result as annotations.
"""

from typing import List, Optional

import httpx

from src.communications.cache import ResponseCache
from src.communications.client import CachedHttpClient

from ..common.annotations import ALL_SECTIONS, build_insert_query, build_named_entities_query
from ..common.component import ConnectorFactory, QanaryComponent
from ..common.exceptions import TriplestoreError
from ..common.logging import log_component_operation
from ..common.models import AnswerResult, NamedEntity, QanaryMessage, QanaryQuestion
from ..common.triplestore import TriplestoreConnector, binding_value
from .config import QAnswerSettings
from .enricher import EntityEnricher
from .query_builder import QAnswerQueryBuilder


class QAnswerComponent(QanaryComponent):
    """Enriches a question with named entities and answers it with QAnswer."""

    def __init__(
        self,
        settings: QAnswerSettings,
        query_builder: QAnswerQueryBuilder,
        enricher: Optional[EntityEnricher] = None,
        connector_factory: Optional[ConnectorFactory] = None,
        http_client: Optional[httpx.Client] = None
    ):
        """
        Initialize the component.

        Args:
            settings: QAnswerSettings instance
            query_builder: Builder sending questions to QAnswer
            enricher: Entity enricher (a default one is created if omitted)
            connector_factory: Creates triplestore connectors per endpoint
            http_client: httpx client for triplestore and question text requests
        """
        super().__init__(settings.application_name, connector_factory, http_client)
        self.settings = settings
        self.threshold = settings.threshold
        self.query_builder = query_builder
        self.enricher = enricher or EntityEnricher()

    @classmethod
    def from_settings(
        cls,
        settings: QAnswerSettings,
        cache: Optional[ResponseCache] = None
    ) -> "QAnswerComponent":
        """
        Create the component and its collaborators from settings.

        Args:
            settings: QAnswerSettings instance
            cache: Shared response cache (a new one is created if omitted)
        """
        if cache is None:
            cache = ResponseCache(settings.cache_config())
        client = CachedHttpClient(
            cache,
            key_headers=settings.cache_key_headers,
            timeout=settings.request_timeout_seconds,
            component_name=settings.application_name
        )
        return cls(settings, QAnswerQueryBuilder.from_settings(settings, client))

    @log_component_operation("process")
    def process(self, message: QanaryMessage) -> QanaryMessage:
        """
        Annotate the question of a pipeline run.

        Any failure of the QAnswer request or of parsing its result aborts
        processing before anything is written to the triplestore.
        """
        self.logger.info(f"process: {message}")
        connector = self.get_connector(message)

        # STEP 1: question and named entities from the triplestore
        question = self.get_question(message, connector)
        entities = self.get_named_entities(question, connector)

        # STEP 2: enrich the question and ask QAnswer
        enriched_question = self.enricher.enrich(question.text, entities, self.threshold)
        result = self.query_builder.query(
            enriched_question,
            lang=self.settings.lang_default,
            extra_params={
                "knowledge_base": self.settings.knowledge_base_default,
                "user": self.settings.user_default,
            }
        )

        # STEP 3: store the result as annotations
        connector.update(self.build_insert_query(question, result))
        return message

    def get_named_entities(self, question: QanaryQuestion, connector: TriplestoreConnector) -> List[NamedEntity]:
        """
        Read the named entities already recognized for a question.

        Raises:
            TriplestoreError: If a binding lacks a mandatory value
        """
        entities = []
        for binding in connector.select(build_named_entities_query(question)):
            resource = binding_value(binding, "entityResource")
            start = binding_value(binding, "start")
            end = binding_value(binding, "end")
            score = binding_value(binding, "annotationScore")
            try:
                entity = NamedEntity(
                    resource=resource,
                    start=int(start),
                    end=int(end),
                    score=float(score) if score is not None else None
                )
            except (TypeError, ValueError) as e:
                raise TriplestoreError(f"Invalid named entity annotation {binding}: {e}") from e
            self.logger.info(
                f"found entity in triplestore: position=({entity.start},{entity.end}) "
                f"score={entity.score} resource={entity.resource}"
            )
            entities.append(entity)

        if not entities:
            self.logger.warning(f"no named entities exist for '{question.text}'")
        return entities

    def build_insert_query(self, question: QanaryQuestion, result: AnswerResult) -> str:
        """Create the SPARQL INSERT for all QAnswer annotations."""
        knowledge_graph = self.settings.knowledge_graph_endpoints.get(result.knowledge_base or "")
        return build_insert_query(
            question,
            result,
            self.application_name,
            sections=ALL_SECTIONS,
            knowledge_graph=knowledge_graph
        )
