"""Unit tests for the FastAPI endpoints."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import QANSWER, RUBQ, set_component
from src.api.main import app, status_code_for
from src.communications.cache import CacheConfig, ResponseCache
from src.communications.client import CachedHttpClient
from src.communications.exceptions import RequestFailedError
from src.components.common.exceptions import (
    ComponentError,
    LanguageNotSupportedError,
    QuestionNotFoundError,
    ResultFormatError,
)
from src.components.qanswer.component import QAnswerComponent
from src.components.qanswer.config import QAnswerSettings
from src.components.qanswer.query_builder import QAnswerQueryBuilder
from src.components.rubq.component import RuBQComponent
from src.components.rubq.config import RuBQSettings
from src.components.rubq.query_builder import RuBQQueryBuilder
from src.utils.exceptions import BaseAppException

QUESTION_URI = "http://pipeline.example.org/question/q1"
SPARQL = "ASK { wd:Q64 wdt:P31 wd:Q515 }"

QANSWER_PAYLOAD = {
    "questions": [{
        "question": {
            "language": [{"SPARQL": SPARQL, "confidence": 0.8}],
            "answers": json.dumps({"boolean": True})
        }
    }]
}

MESSAGE = {
    "endpoint": "http://pipeline.example.org/sparql",
    "inGraph": "urn:graph:run-1",
    "outGraph": "urn:graph:run-1",
}


class InMemoryConnector:

    def __init__(self, questions=(QUESTION_URI,)):
        self.questions = [{"question": {"type": "uri", "value": uri}} for uri in questions]
        self.updates = []

    def select(self, query):
        return [] if "?entityResource" in query else self.questions

    def update(self, query):
        self.updates.append(query)


def json_service(payload, status_code=200):
    def handler(request):
        return httpx.Response(status_code, json=payload, request=request)
    return CachedHttpClient(ResponseCache(CacheConfig()), client=httpx.Client(transport=httpx.MockTransport(handler)))


def raw_question_client():
    def handler(request):
        return httpx.Response(200, text="Is Berlin a city?", request=request)
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def connector():
    return InMemoryConnector()


@pytest.fixture
def register(connector):
    """Register components backed by stubbed services; removed afterwards."""
    def _register(qanswer_payload=QANSWER_PAYLOAD, qanswer_status=200, rubq_payload=None):
        qanswer_settings = QAnswerSettings(endpoint_url="https://qanswer.example.org/api",
                                           supported_languages=["en", "fr"])
        set_component(QANSWER, QAnswerComponent(
            qanswer_settings,
            QAnswerQueryBuilder.from_settings(qanswer_settings, json_service(qanswer_payload, qanswer_status)),
            connector_factory=lambda endpoint: connector,
            http_client=raw_question_client()
        ))
        rubq_settings = RuBQSettings(endpoint_url="http://rubq.example.org/query")
        set_component(RUBQ, RuBQComponent(
            rubq_settings,
            RuBQQueryBuilder.from_settings(rubq_settings, json_service(rubq_payload or {"queries": [SPARQL]})),
            connector_factory=lambda endpoint: connector,
            http_client=raw_question_client()
        ))

    yield _register
    set_component(QANSWER, None)
    set_component(RUBQ, None)


@pytest.fixture
def client():
    return TestClient(app)


class TestErrorMapping:
    """Test the exception to status code mapping."""

    @pytest.mark.parametrize("error,status_code", [
        (LanguageNotSupportedError("de", ["en"]), 400),
        (ResultFormatError("bad"), 502),
        (RequestFailedError("down"), 502),
        (ComponentError("failed"), 422),
        (QuestionNotFoundError("none"), 422),
        (BaseAppException("other"), 500),
    ])
    def test_status_code_for(self, error, status_code):
        assert status_code_for(error) == status_code


class TestHealth:
    """Test the health endpoint."""

    def test_unhealthy_without_components(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["services"] == {"api": "up", "qanswer": "down", "rubq": "down"}

    def test_cache_statistics(self, client, register):
        register()
        client.post("/api/qanswer/query", json={"question": "Is Berlin a city?"})
        client.post("/api/qanswer/query", json={"question": "Is Berlin a city?"})

        body = client.get("/api/health").json()

        assert body["status"] == "healthy"
        assert body["caches"]["qanswer"]["executed_requests"] == 1
        assert body["caches"]["qanswer"]["hits"] == 1
        assert body["caches"]["rubq"]["size"] == 0


class TestAnnotate:
    """Test the annotatequestion endpoints."""

    def test_qanswer_annotate(self, client, register, connector):
        register()

        response = client.post("/api/qanswer/annotatequestion", json=MESSAGE)

        assert response.status_code == 200
        assert response.json() == MESSAGE
        assert len(connector.updates) == 1

    def test_rubq_annotate(self, client, register, connector):
        register()

        response = client.post("/api/rubq/annotatequestion", json=MESSAGE)

        assert response.status_code == 200
        assert "qa:AnnotationOfAnswerSPARQL" in connector.updates[0]

    def test_component_unavailable(self, client):
        response = client.post("/api/qanswer/annotatequestion", json=MESSAGE)

        assert response.status_code == 503

    def test_question_not_found(self, client, register, connector):
        register()
        connector.questions = []

        response = client.post("/api/qanswer/annotatequestion", json=MESSAGE)

        assert response.status_code == 422
        assert response.json()["error_code"] == "QUESTION_NOT_FOUND"

    def test_invalid_message(self, client, register):
        register()

        response = client.post("/api/qanswer/annotatequestion", json={"endpoint": "x"})

        assert response.status_code == 422


class TestQuery:
    """Test the direct query endpoints."""

    def test_qanswer_query(self, client, register):
        register()

        response = client.post("/api/qanswer/query", json={
            "question": "Is Berlin a city?",
            "language": "fr",
            "knowledge_base_id": "dbpedia"
        })

        assert response.status_code == 200
        body = response.json()
        assert body["sparql"] == SPARQL
        assert body["values"] == ["true"]
        assert body["language"] == "fr"
        assert body["knowledge_base"] == "dbpedia"

    def test_unsupported_language(self, client, register):
        register()

        response = client.post("/api/qanswer/query", json={"question": "q", "language": "de"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "LANGUAGE_NOT_SUPPORTED"
        assert response.json()["details"]["supported_languages"] == ["en", "fr"]

    def test_malformed_service_response(self, client, register):
        register(qanswer_payload={"unexpected": True})

        response = client.post("/api/qanswer/query", json={"question": "q"})

        assert response.status_code == 502
        assert response.json()["error_code"] == "RESULT_FORMAT"

    def test_ill_typed_bindings_are_a_bad_gateway(self, client, register):
        answers = {"head": {"vars": ["o"]}, "results": {"bindings": [{"o": "plain"}]}}
        payload = json.loads(json.dumps(QANSWER_PAYLOAD))
        payload["questions"][0]["question"]["answers"] = json.dumps(answers)
        register(qanswer_payload=payload)

        response = client.post("/api/qanswer/query", json={"question": "q"})

        assert response.status_code == 502
        assert response.json()["error_code"] == "RESULT_FORMAT"
        assert set(response.json()) == {"error_code", "message", "details"}

    def test_failed_service_request(self, client, register):
        register(qanswer_status=500)

        response = client.post("/api/qanswer/query", json={"question": "q"})

        assert response.status_code == 502
        assert response.json()["error_code"] == "REQUEST_FAILED"

    def test_rubq_query(self, client, register):
        register(rubq_payload={"queries": [SPARQL], "confidence": 0.6})

        response = client.post("/api/rubq/query", json={"question": "Is Berlin a city?"})

        assert response.status_code == 200
        assert response.json()["sparql"] == SPARQL
        assert response.json()["confidence"] == 0.6

    def test_empty_question_rejected(self, client, register):
        register()

        response = client.post("/api/rubq/query", json={"question": ""})

        assert response.status_code == 422
