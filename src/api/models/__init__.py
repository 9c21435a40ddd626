"""API data models."""

from .schemas import (
    QuestionRequest,
    AnswerResponse,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "QuestionRequest",
    "AnswerResponse",
    "HealthResponse",
    "ErrorResponse",
]
