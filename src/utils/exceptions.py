"""Custom exception classes for the application."""

from typing import Any, Dict, Optional


class BaseAppException(Exception):
    """Base exception class for application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Optional machine-readable error code
        details: Optional dictionary with additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(BaseAppException):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        invalid_values: Optional[Dict[str, Any]] = None
    ) -> None:
        self.missing_keys = missing_keys or []
        self.invalid_values = invalid_values or {}
        details = {}
        if self.missing_keys:
            details["missing_keys"] = self.missing_keys
        if self.invalid_values:
            details["invalid_values"] = self.invalid_values
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details)


class ValidationError(BaseAppException):
    """Raised when data validation fails."""
    pass


class CommunicationError(BaseAppException):
    """Raised when talking to an external service fails."""
    pass
