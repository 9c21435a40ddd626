"""Logging utilities for the QA components."""

import time
from functools import wraps
from typing import Callable
import logging

from src.utils.logging import get_logger, LoggerMixin


class ComponentLoggerMixin(LoggerMixin):
    """Logger mixin for QA component classes."""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this component."""
        if not hasattr(self, '_logger'):
            component_name = self.__class__.__name__
            self._logger = get_logger(
                f"{self.__class__.__module__}.{component_name}",
                context={'component': component_name}
            )
        return self._logger

    def log_operation_start(self, operation: str, **context) -> None:
        """Log the start of an operation with context."""
        self.logger.info(
            f"Starting {operation}",
            extra={
                'extra_fields': {
                    'operation': operation,
                    'operation_status': 'started',
                    **context
                }
            }
        )

    def log_operation_success(self, operation: str, duration_ms: float, **context) -> None:
        """Log successful completion of an operation."""
        self.logger.info(
            f"Completed {operation} in {duration_ms:.2f}ms",
            extra={
                'extra_fields': {
                    'operation': operation,
                    'operation_status': 'completed',
                    'duration_ms': duration_ms,
                    **context
                }
            }
        )

    def log_operation_error(self, operation: str, error: Exception, duration_ms: float, **context) -> None:
        """Log operation failure with error details."""
        self.logger.error(
            f"Failed {operation} after {duration_ms:.2f}ms: {error}",
            extra={
                'extra_fields': {
                    'operation': operation,
                    'operation_status': 'failed',
                    'duration_ms': duration_ms,
                    'error_type': type(error).__name__,
                    'error_message': str(error),
                    **context
                }
            }
        )


def log_component_operation(operation_name: str):
    """Decorator to log component operations with timing and error handling.

    The decorated method must belong to a ComponentLoggerMixin subclass.

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            self.log_operation_start(operation_name)

            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                self.log_operation_error(operation_name, e, (time.time() - start_time) * 1000)
                raise

            self.log_operation_success(operation_name, (time.time() - start_time) * 1000)
            return result

        return wrapper
    return decorator
