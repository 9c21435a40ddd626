"""Custom exceptions for the QA components."""

from typing import Any, Dict, List, Optional

from src.utils.exceptions import BaseAppException, ConfigurationError, ValidationError
from src.communications.exceptions import RequestFailedError


class ComponentError(BaseAppException):
    """Base exception for component processing errors."""
    pass


class QuestionNotFoundError(ComponentError):
    """Raised when the input graph holds no question or more than one."""

    def __init__(self, message: str, graph: Optional[str] = None, found: int = 0):
        self.graph = graph
        self.found = found
        super().__init__(
            message,
            error_code="QUESTION_NOT_FOUND",
            details={"graph": graph, "found": found}
        )


class LanguageNotSupportedError(ValidationError):
    """Raised when a language is not in the configured allow-list."""

    def __init__(self, language: Optional[str], supported_languages: List[str]):
        self.language = language
        self.supported_languages = list(supported_languages)
        super().__init__(
            f"Language '{language}' is not supported",
            error_code="LANGUAGE_NOT_SUPPORTED",
            details={
                "language": language,
                "supported_languages": self.supported_languages
            }
        )


class ResultFormatError(BaseAppException):
    """Raised when a QA service response cannot be parsed."""

    def __init__(self, message: str, service: Optional[str] = None, payload: Optional[str] = None):
        self.service = service
        self.payload = payload
        details: Dict[str, Any] = {"service": service}
        if payload is not None:
            details["payload_excerpt"] = payload[:200]
        super().__init__(message, error_code="RESULT_FORMAT", details=details)


class TriplestoreError(BaseAppException):
    """Raised when a SPARQL select or update against the triplestore fails."""

    def __init__(self, message: str, endpoint: Optional[str] = None, status_code: Optional[int] = None):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(
            message,
            error_code="TRIPLESTORE_ERROR",
            details={"endpoint": endpoint, "status_code": status_code}
        )


__all__ = [
    "ComponentError",
    "QuestionNotFoundError",
    "LanguageNotSupportedError",
    "ResultFormatError",
    "TriplestoreError",
    "RequestFailedError",
    "ConfigurationError",
]
