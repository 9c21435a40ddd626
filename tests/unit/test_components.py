"""Unit tests for the QAnswer and RuBQ components.

The pipeline triplestore is replaced by an in-memory connector, the question
text and the QA services by httpx.MockTransport handlers.
"""

import json

import httpx
import pytest

from src.communications.cache import CacheConfig, ResponseCache
from src.communications.client import CachedHttpClient
from src.communications.exceptions import RequestFailedError
from src.components.common.component import QanaryComponent
from src.components.common.exceptions import ComponentError, QuestionNotFoundError, TriplestoreError
from src.components.common.models import QanaryMessage
from src.components.qanswer.component import QAnswerComponent
from src.components.qanswer.config import QAnswerSettings
from src.components.qanswer.query_builder import QAnswerQueryBuilder
from src.components.rubq.component import RuBQComponent
from src.components.rubq.config import RuBQSettings
from src.components.rubq.query_builder import RuBQQueryBuilder

GRAPH = "urn:graph:run-1"
QUESTION_URI = "http://pipeline.example.org/question/q1"
QUESTION_TEXT = "Where was Albert Einstein born?"
EINSTEIN = "http://www.wikidata.org/entity/Q937"
SPARQL = "SELECT ?o WHERE { wd:Q937 wdt:P19 ?o }"

QANSWER_PAYLOAD = {
    "questions": [{
        "question": {
            "language": [{"SPARQL": SPARQL, "confidence": 0.9}],
            "answers": json.dumps({
                "head": {"vars": ["o"]},
                "results": {"bindings": [{"o": {"type": "uri", "value": "http://www.wikidata.org/entity/Q3012"}}]}
            })
        }
    }]
}


class InMemoryConnector:
    """Triplestore connector answering SELECTs from canned bindings."""

    def __init__(self, questions=None, entities=None):
        if questions is None:
            questions = [QUESTION_URI]
        self.questions = [{"question": {"type": "uri", "value": uri}} for uri in questions]
        self.entities = entities or []
        self.selects = []
        self.updates = []

    def select(self, query):
        self.selects.append(query)
        if "?entityResource" in query:
            return self.entities
        return self.questions

    def update(self, query):
        self.updates.append(query)


def entity_binding(resource, start, end, score=None):
    binding = {
        "entityResource": {"type": "uri", "value": resource},
        "start": {"type": "literal", "value": str(start)},
        "end": {"type": "literal", "value": str(end)},
    }
    if score is not None:
        binding["annotationScore"] = {"type": "literal", "value": str(score)}
    return binding


class ServiceStub:

    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload, request=request)


def pipeline_client(text=QUESTION_TEXT, status_code=200):
    """httpx client serving the raw question text."""
    def handler(request):
        assert str(request.url) == QUESTION_URI + "/raw"
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Client(transport=httpx.MockTransport(handler))


def service_client(stub):
    return CachedHttpClient(ResponseCache(CacheConfig()), client=httpx.Client(transport=httpx.MockTransport(stub)))


@pytest.fixture
def message():
    return QanaryMessage(endpoint="http://pipeline.example.org/sparql", inGraph=GRAPH, outGraph=GRAPH)


@pytest.fixture
def qanswer_settings():
    return QAnswerSettings(endpoint_url="https://qanswer.example.org/api", lang_default="en",
                           supported_languages=["en", "fr"])


def make_qanswer_component(settings, stub, connector, http_client=None):
    builder = QAnswerQueryBuilder.from_settings(settings, service_client(stub))
    return QAnswerComponent(
        settings,
        builder,
        connector_factory=lambda endpoint: connector,
        http_client=http_client or pipeline_client()
    )


class TestQuestionResolution:
    """Test reading the question of a pipeline run."""

    def test_base_component_is_abstract(self):
        with pytest.raises(TypeError):
            QanaryComponent("urn:test", connector_factory=lambda endpoint: InMemoryConnector())

    def test_missing_question(self, qanswer_settings, message):
        connector = InMemoryConnector(questions=[])
        component = make_qanswer_component(qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector)

        with pytest.raises(QuestionNotFoundError) as exc_info:
            component.process(message)

        assert exc_info.value.found == 0
        assert connector.updates == []

    def test_more_than_one_question(self, qanswer_settings, message):
        connector = InMemoryConnector(questions=[QUESTION_URI, QUESTION_URI + "2"])
        component = make_qanswer_component(qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector)

        with pytest.raises(QuestionNotFoundError) as exc_info:
            component.get_question(message, connector)

        assert exc_info.value.found == 2

    def test_question_text_unavailable(self, qanswer_settings, message):
        connector = InMemoryConnector()
        component = make_qanswer_component(
            qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector, http_client=pipeline_client(status_code=404)
        )

        with pytest.raises(ComponentError) as exc_info:
            component.get_question(message, connector)

        assert exc_info.value.error_code == "QUESTION_TEXT_UNAVAILABLE"

    def test_question_resolved(self, qanswer_settings, message):
        connector = InMemoryConnector()
        component = make_qanswer_component(qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector)

        question = component.get_question(message, connector)

        assert question.uri == QUESTION_URI
        assert question.text == QUESTION_TEXT
        assert question.out_graph == GRAPH
        assert f"FROM <{GRAPH}>" in connector.selects[0]


class TestQAnswerComponent:
    """Test QAnswerComponent.process."""

    def test_process_writes_one_update(self, qanswer_settings, message):
        stub = ServiceStub(QANSWER_PAYLOAD)
        connector = InMemoryConnector(entities=[entity_binding(EINSTEIN, 10, 25, 0.9)])
        component = make_qanswer_component(qanswer_settings, stub, connector)

        result = component.process(message)

        assert result is message
        assert len(stub.requests) == 1
        assert f"query=Where+was+{EINSTEIN.replace(':', '%3A').replace('/', '%2F')}+born%3F" in (
            stub.requests[0].content.decode()
        )
        assert len(connector.updates) == 1
        update = connector.updates[0]
        assert f"GRAPH <{GRAPH}>" in update
        assert f'"Where was {EINSTEIN} born?"^^xsd:string' in update
        assert "rdf:_1 <http://www.wikidata.org/entity/Q3012>" in update
        assert "qa:overKnowledgeGraph ?knowledgeGraph" in update
        assert "urn:qanary:QAnswerQueryBuilderAndExecutor" in update

    def test_low_scored_entity_not_applied(self, qanswer_settings, message):
        connector = InMemoryConnector(entities=[entity_binding(EINSTEIN, 10, 25, 0.1)])
        component = make_qanswer_component(qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector)

        component.process(message)

        assert f'"{QUESTION_TEXT}"^^xsd:string' in connector.updates[0]

    def test_unscored_entity_applied(self, qanswer_settings, message):
        connector = InMemoryConnector(entities=[entity_binding(EINSTEIN, 10, 25)])
        component = make_qanswer_component(qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector)

        entities = component.get_named_entities(component.get_question(message, connector), connector)

        assert entities[0].score is None
        assert entities[0].resource == EINSTEIN

    def test_invalid_entity_binding(self, qanswer_settings, message):
        binding = entity_binding(EINSTEIN, 10, 25)
        binding["start"]["value"] = "ten"
        connector = InMemoryConnector(entities=[binding])
        component = make_qanswer_component(qanswer_settings, ServiceStub(QANSWER_PAYLOAD), connector)

        with pytest.raises(TriplestoreError):
            component.process(message)
        assert connector.updates == []

    def test_service_failure_writes_nothing(self, qanswer_settings, message):
        connector = InMemoryConnector()
        component = make_qanswer_component(qanswer_settings, ServiceStub({}, status_code=502), connector)

        with pytest.raises(RequestFailedError):
            component.process(message)
        assert connector.updates == []

    def test_repeated_run_uses_cache(self, qanswer_settings, message):
        stub = ServiceStub(QANSWER_PAYLOAD)
        connector = InMemoryConnector()
        component = make_qanswer_component(qanswer_settings, stub, connector)

        component.process(message)
        component.process(message)

        assert len(stub.requests) == 1
        assert len(connector.updates) == 2

    def test_from_settings_uses_shared_cache(self, qanswer_settings):
        cache = ResponseCache(CacheConfig(ttl_seconds=5))

        component = QAnswerComponent.from_settings(qanswer_settings, cache)

        assert component.query_builder.client.cache is cache
        assert component.query_builder.knowledge_base_default == "wikidata"


class TestRuBQComponent:
    """Test RuBQComponent.process."""

    def make_component(self, settings, stub, connector):
        builder = RuBQQueryBuilder.from_settings(settings, service_client(stub))
        return RuBQComponent(
            settings,
            builder,
            connector_factory=lambda endpoint: connector,
            http_client=pipeline_client()
        )

    def test_process_writes_sparql_and_json(self, message):
        settings = RuBQSettings(endpoint_url="http://rubq.example.org/query")
        stub = ServiceStub({"queries": [SPARQL], "answers": ["Ulm"]})
        connector = InMemoryConnector()

        self.make_component(settings, stub, connector).process(message)

        assert json.loads(stub.requests[0].content) == {"question": QUESTION_TEXT, "lang": "en"}
        assert len(connector.updates) == 1
        update = connector.updates[0]
        assert "qa:AnnotationOfAnswerSPARQL" in update
        assert "qa:AnnotationOfAnswerJson" in update
        assert "qa:AnnotationAnswer " not in update
        assert "urn:qanary:RuBQQueryBuilder" in update

    def test_no_query_writes_json_only(self, message):
        settings = RuBQSettings(endpoint_url="http://rubq.example.org/query")
        connector = InMemoryConnector()

        self.make_component(settings, ServiceStub({"queries": []}), connector).process(message)

        assert "qa:AnnotationOfAnswerSPARQL" not in connector.updates[0]
        assert "qa:AnnotationOfAnswerJson" in connector.updates[0]

    def test_unsupported_default_language_skips(self, message):
        settings = RuBQSettings(endpoint_url="http://rubq.example.org/query", lang_default="de")
        stub = ServiceStub({"queries": [SPARQL]})
        connector = InMemoryConnector()

        result = self.make_component(settings, stub, connector).process(message)

        assert result is message
        assert stub.requests == []
        assert connector.selects == []
        assert connector.updates == []

    def test_from_settings_uses_shared_cache(self):
        settings = RuBQSettings(endpoint_url="http://rubq.example.org/query")
        cache = ResponseCache(CacheConfig(ttl_seconds=5))

        component = RuBQComponent.from_settings(settings, cache)

        assert len(cache) == 0
        assert component.query_builder.client.cache is cache
