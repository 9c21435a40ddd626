"""
Pydantic models shared by the QA components.

This module defines the pipeline message exchanged with the Qanary pipeline,
the question and named entity records read from the triplestore, and the
result structure produced by parsing a QA web service response.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema#"
XSD_STRING = XSD_NAMESPACE + "string"
XSD_BOOLEAN = XSD_NAMESPACE + "boolean"
XSD_ANY_URI = XSD_NAMESPACE + "anyURI"


class QanaryMessage(BaseModel):
    """Message the pipeline sends to a component for one question."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "endpoint": "http://localhost:8890/sparql",
                "inGraph": "urn:graph:5b2e7e0c-9f1d-4c1f-a3a1-0d3a7c7e1f01",
                "outGraph": "urn:graph:5b2e7e0c-9f1d-4c1f-a3a1-0d3a7c7e1f01"
            }
        }
    )

    endpoint: str = Field(..., description="SPARQL endpoint of the pipeline triplestore")
    in_graph: str = Field(..., alias="inGraph", description="Graph to read annotations from")
    out_graph: str = Field(..., alias="outGraph", description="Graph to write annotations to")


class QanaryQuestion(BaseModel):
    """A question resolved from the pipeline triplestore."""

    uri: str
    text: str
    in_graph: str
    out_graph: str


class NamedEntity(BaseModel):
    """Named entity annotation of a question.

    Offsets are a half-open character range [start, end) into the question.
    """

    model_config = ConfigDict(frozen=True)

    resource: str = Field(..., description="Canonical resource URI of the entity")
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    score: Optional[float] = Field(default=None, description="Extraction confidence, if provided")

    @model_validator(mode="after")
    def validate_offsets(self):
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must not be before start ({self.start})")
        return self


class AnswerResult(BaseModel):
    """Parsed response of an external QA web service."""

    question: str = Field(..., description="Question text sent to the service")
    sparql: Optional[str] = Field(default=None, description="Generated SPARQL query")
    values: List[str] = Field(default_factory=list, description="Answer values in service order")
    datatype: Optional[str] = Field(default=None, description="Datatype URI of the answer values")
    confidence: float = Field(default=0.0, description="Confidence reported by the service")
    is_resource_type: bool = Field(default=False, description="Whether answers are resource URIs")
    raw_json: str = Field(..., description="Raw JSON payload as received")
    endpoint: str
    language: str
    knowledge_base: Optional[str] = None
    user: Optional[str] = None
