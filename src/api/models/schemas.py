"""Pydantic schemas for API request/response models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class QuestionRequest(BaseModel):
    """Request model for the direct RuBQ query endpoint."""

    question: str = Field(..., min_length=1, description="Question text")
    language: Optional[str] = Field(default=None, description="2-letter language code")


class AnswerResponse(BaseModel):
    """Parsed answer of a QA web service."""

    question: str
    sparql: Optional[str] = None
    values: List[str] = Field(default_factory=list)
    datatype: Optional[str] = None
    confidence: float = 0.0
    is_resource_type: bool = False
    language: str
    knowledge_base: Optional[str] = None
    raw_json: str = Field(..., description="Raw JSON payload as received")


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(..., description="Overall health status: healthy or unhealthy")
    services: Dict[str, str] = Field(default_factory=dict, description="Individual component statuses")
    caches: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Response cache statistics")
    response_time_ms: Optional[float] = Field(None, description="Response time in milliseconds")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
