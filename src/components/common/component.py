"""
Base class of the pipeline components.

A component is invoked once per pipeline run with a QanaryMessage. It reads
what it needs from the input graph of the pipeline triplestore and writes its
annotations to the output graph.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

import httpx

from .annotations import build_question_query
from .exceptions import ComponentError, QuestionNotFoundError
from .logging import ComponentLoggerMixin
from .models import QanaryMessage, QanaryQuestion
from .triplestore import SparqlEndpointConnector, TriplestoreConnector, binding_value

ConnectorFactory = Callable[[str], TriplestoreConnector]


class QanaryComponent(ComponentLoggerMixin, ABC):
    """Common behaviour of the QA components."""

    def __init__(
        self,
        application_name: str,
        connector_factory: Optional[ConnectorFactory] = None,
        http_client: Optional[httpx.Client] = None
    ):
        """
        Initialize the component.

        Args:
            application_name: Name used as annotation service identifier
            connector_factory: Creates a triplestore connector for an endpoint URL
            http_client: httpx client used for the triplestore and question texts
        """
        self.application_name = application_name
        self.http_client = http_client if http_client is not None else httpx.Client(timeout=30.0)
        self.connector_factory = connector_factory or (
            lambda endpoint: SparqlEndpointConnector(endpoint, client=self.http_client)
        )

    @abstractmethod
    def process(self, message: QanaryMessage) -> QanaryMessage:
        """Annotate the question of one pipeline run."""

    def get_connector(self, message: QanaryMessage) -> TriplestoreConnector:
        return self.connector_factory(message.endpoint)

    def get_question(self, message: QanaryMessage, connector: TriplestoreConnector) -> QanaryQuestion:
        """
        Resolve the question of a pipeline run.

        The input graph must hold exactly one qa:Question; its text is served
        by the pipeline at <question-uri>/raw.

        Raises:
            QuestionNotFoundError: If there is no question or more than one
            ComponentError: If the question text cannot be fetched
        """
        bindings = connector.select(build_question_query(message.in_graph))
        uris = [binding_value(binding, "question") for binding in bindings]
        uris = [uri for uri in uris if uri]
        if len(uris) != 1:
            raise QuestionNotFoundError(
                f"Expected exactly one question in graph {message.in_graph}, found {len(uris)}",
                graph=message.in_graph,
                found=len(uris)
            )

        question_uri = uris[0]
        return QanaryQuestion(
            uri=question_uri,
            text=self.fetch_question_text(question_uri),
            in_graph=message.in_graph,
            out_graph=message.out_graph
        )

    def fetch_question_text(self, question_uri: str) -> str:
        """Fetch the textual representation of a question."""
        raw_url = question_uri.rstrip("/") + "/raw"
        try:
            response = self.http_client.get(raw_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ComponentError(
                f"Could not fetch question text from {raw_url}: {e}",
                error_code="QUESTION_TEXT_UNAVAILABLE",
                details={"url": raw_url}
            ) from e
        return response.text
