"""
Request and result models of the QAnswer web service.

QAnswer answers with a JSON document of the form

    {"questions": [{"question": {
        "language": [{"SPARQL": "...", "confidence": 0.87, ...}],
        "answers": "<SPARQL JSON results, serialized as a string>"
    }}]}

The embedded answers are either an ASK result ({"boolean": true}) or a SELECT
result whose first projected variable carries the answer values.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..common.exceptions import ResultFormatError
from ..common.models import AnswerResult, XSD_ANY_URI, XSD_BOOLEAN, XSD_STRING

SERVICE_NAME = "qanswer"


class QAnswerRequest(BaseModel):
    """Direct request to the QAnswer web service."""

    question: str = Field(..., min_length=1, description="Question text")
    language: Optional[str] = Field(default=None, description="2-letter language code")
    knowledge_base_id: Optional[str] = Field(default=None, description="Knowledge base, e.g. wikidata")
    user: Optional[str] = Field(default=None, description="QAnswer user")
    qanswer_endpoint_url: Optional[str] = Field(default=None, description="Overrides the configured endpoint")


class QAnswerResult(AnswerResult):
    """Parsed QAnswer response."""

    @classmethod
    def from_response(
        cls,
        payload: Any,
        raw_json: str,
        question: str,
        endpoint: str,
        language: str,
        knowledge_base: str,
        user: str
    ) -> "QAnswerResult":
        """
        Build a result from a decoded QAnswer response.

        Raises:
            ResultFormatError: If an expected field is missing or ill-typed
        """
        try:
            question_data = payload["questions"][0]["question"]
            language_item = question_data["language"][0]
            sparql = language_item["SPARQL"]
            confidence = float(language_item["confidence"])
            answers = question_data["answers"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ResultFormatError(
                f"Unexpected QAnswer response structure: {e!r}",
                service=SERVICE_NAME,
                payload=raw_json
            ) from e

        if not isinstance(sparql, str):
            raise ResultFormatError("QAnswer SPARQL field is not a string", service=SERVICE_NAME, payload=raw_json)

        values, datatype, is_resource_type = parse_answers(answers, raw_json)

        return cls(
            question=question,
            sparql=sparql,
            values=values,
            datatype=datatype,
            confidence=confidence,
            is_resource_type=is_resource_type,
            raw_json=raw_json,
            endpoint=endpoint,
            language=language,
            knowledge_base=knowledge_base,
            user=user
        )


def parse_answers(answers: Any, raw_json: str) -> Tuple[List[str], str, bool]:
    """
    Extract answer values from QAnswer's embedded SPARQL JSON results.

    Returns:
        (values, datatype, is_resource_type)

    Raises:
        ResultFormatError: If the answers cannot be interpreted
    """
    if isinstance(answers, str):
        try:
            answers = json.loads(answers)
        except ValueError as e:
            raise ResultFormatError(
                f"QAnswer answers field is not valid JSON: {e}",
                service=SERVICE_NAME,
                payload=raw_json
            ) from e

    if not isinstance(answers, dict):
        raise ResultFormatError("QAnswer answers field is not an object", service=SERVICE_NAME, payload=raw_json)

    if "boolean" in answers:
        return [str(bool(answers["boolean"])).lower()], XSD_BOOLEAN, False

    try:
        variables = answers["head"]["vars"]
        bindings: List[Dict[str, Dict[str, str]]] = answers["results"]["bindings"]
    except (KeyError, TypeError) as e:
        raise ResultFormatError(
            f"QAnswer answers carry neither a boolean nor SELECT results: {e!r}",
            service=SERVICE_NAME,
            payload=raw_json
        ) from e

    if (
        not isinstance(variables, list)
        or not all(isinstance(name, str) for name in variables)
        or not isinstance(bindings, list)
    ):
        raise ResultFormatError(
            "QAnswer SELECT results need a list of variable names and a list of bindings",
            service=SERVICE_NAME,
            payload=raw_json
        )
    if not variables:
        return [], XSD_STRING, False

    variable = variables[0]
    values: List[str] = []
    datatype = XSD_STRING
    is_resource_type = False

    for binding in bindings:
        if not isinstance(binding, dict):
            raise ResultFormatError(
                "QAnswer binding is not an object", service=SERVICE_NAME, payload=raw_json
            )
        term = binding.get(variable)
        if term is None:
            continue
        if not isinstance(term, dict):
            raise ResultFormatError(
                f"QAnswer binding of ?{variable} is not an RDF term object", service=SERVICE_NAME, payload=raw_json
            )
        # one consistent type is expected for all answers; the last one wins
        if term.get("type") == "uri":
            is_resource_type = True
            datatype = XSD_ANY_URI
        else:
            datatype = term.get("datatype", XSD_STRING)
        if "value" not in term:
            raise ResultFormatError(
                f"QAnswer binding of ?{variable} has no value", service=SERVICE_NAME, payload=raw_json
            )
        values.append(term["value"])

    return values, datatype, is_resource_type
