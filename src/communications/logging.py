"""Logging utilities for the HTTP communication layer."""

from typing import Optional

from src.utils.logging import get_logger


class CommunicationMetricsLogger:
    """Specialized logger for cache and request metrics."""

    def __init__(self, component_name: str):
        """Initialize metrics logger.

        Args:
            component_name: Name of the component generating metrics
        """
        self.component_name = component_name
        self.logger = get_logger(
            "src.communications.metrics",
            context={
                'layer': 'communications',
                'metrics_logger': True
            }
        )

    def log_cache_operation(
        self,
        operation: str,  # "hit", "miss", "set"
        key: str,
        cache_size: Optional[int] = None,
        executed_requests: Optional[int] = None
    ) -> None:
        """Log cache operations."""
        self.logger.debug(
            f"Cache {operation}",
            extra={
                'extra_fields': {
                    'metric_type': 'cache_operation',
                    'component': self.component_name,
                    'cache_operation': operation,
                    'key_hash': key[:8],
                    'cache_size': cache_size,
                    'executed_requests': executed_requests
                }
            }
        )

    def log_request(
        self,
        method: str,
        uri: str,
        status_code: Optional[int],
        request_time_ms: float,
        error: Optional[str] = None
    ) -> None:
        """Log an outbound request that reached the network."""
        level_method = self.logger.warning if error else self.logger.info
        level_method(
            f"{method} {uri} -> {status_code if status_code is not None else 'failed'} "
            f"in {request_time_ms:.2f}ms",
            extra={
                'extra_fields': {
                    'metric_type': 'outbound_request',
                    'component': self.component_name,
                    'method': method,
                    'uri': uri,
                    'status_code': status_code,
                    'request_time_ms': request_time_ms,
                    'error': error
                }
            }
        )
