"""
Result model of the RuBQ web service.

RuBQ answers with {"queries": [...], "answers": [...], "confidence": ...};
the first query is the generated SPARQL, an empty list means no query could
be built. answers and confidence are optional.
"""

from typing import Any

from ..common.exceptions import ResultFormatError
from ..common.models import AnswerResult, XSD_STRING

SERVICE_NAME = "rubq"


class RuBQResult(AnswerResult):
    """Parsed RuBQ response."""

    @classmethod
    def from_response(
        cls,
        payload: Any,
        raw_json: str,
        question: str,
        endpoint: str,
        language: str
    ) -> "RuBQResult":
        """
        Build a result from a decoded RuBQ response.

        Raises:
            ResultFormatError: If queries is missing or a field is ill-typed
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("queries"), list):
            raise ResultFormatError("RuBQ response has no 'queries' list", service=SERVICE_NAME, payload=raw_json)

        queries = payload["queries"]
        if not all(isinstance(query, str) for query in queries):
            raise ResultFormatError("RuBQ queries must be strings", service=SERVICE_NAME, payload=raw_json)

        answers = payload.get("answers", [])
        if not isinstance(answers, list):
            raise ResultFormatError("RuBQ 'answers' must be a list", service=SERVICE_NAME, payload=raw_json)

        try:
            confidence = float(payload.get("confidence", 1.0))
        except (TypeError, ValueError) as e:
            raise ResultFormatError(
                f"RuBQ confidence is not a number: {e}", service=SERVICE_NAME, payload=raw_json
            ) from e

        return cls(
            question=question,
            sparql=queries[0] if queries else None,
            values=[str(answer) for answer in answers],
            datatype=XSD_STRING if answers else None,
            confidence=confidence,
            is_resource_type=False,
            raw_json=raw_json,
            endpoint=endpoint,
            language=language
        )
