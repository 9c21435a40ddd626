"""HTTP client with response caching.

CachedHttpClient wraps an httpx.Client. Before dispatching a request it
computes the request fingerprint and consults the shared ResponseCache; a
fresh entry is returned without any network I/O. On a miss the request is
executed, counted, and a successful response is stored.
"""

import json
import time
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

import httpx

from src.utils.logging import LoggerMixin

from .cache import CachedResponse, ResponseCache
from .exceptions import RequestFailedError
from .fingerprint import DEFAULT_KEY_HEADERS, RequestBody, fingerprint, normalize_uri
from .logging import CommunicationMetricsLogger

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


def encode_body(body: RequestBody, headers: Dict[str, str]) -> Optional[bytes]:
    """Encode a request body into the bytes put on the wire.

    Mappings are form-encoded when the content type says so and sent as JSON
    otherwise; a missing content type is then set to application/json.
    """
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")

    content_type = _header_value(headers, "content-type")
    if content_type and content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE:
        return urlencode(list(body.items()), doseq=True).encode("utf-8")

    if content_type is None:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


def _header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    for header_name, value in headers.items():
        if header_name.lower() == name:
            return value
    return None


class CachedHttpClient(LoggerMixin):
    """Executes HTTP requests through a ResponseCache."""

    def __init__(
        self,
        cache: ResponseCache,
        client: Optional[httpx.Client] = None,
        key_headers=DEFAULT_KEY_HEADERS,
        timeout: float = 30.0,
        component_name: str = "CachedHttpClient"
    ):
        """Initialize the cached client.

        Args:
            cache: Response cache, usually shared by all clients of a process
            client: httpx client used for real requests (created if omitted)
            key_headers: Header names taking part in the request fingerprint
            timeout: Timeout in seconds for a client created here
            component_name: Name reported in metrics logs
        """
        self.cache = cache
        self.key_headers = tuple(key_headers)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)
        self.metrics_logger = CommunicationMetricsLogger(component_name)

    @property
    def number_of_executed_requests(self) -> int:
        return self.cache.number_of_executed_requests

    def execute(
        self,
        method: str,
        uri: Union[str, httpx.URL],
        headers: Optional[Mapping[str, str]] = None,
        body: RequestBody = None
    ) -> CachedResponse:
        """Execute a request, answering from the cache when possible.

        Args:
            method: HTTP method
            uri: Target URI
            headers: Request headers
            body: Request body (bytes, text or a mapping of parameters)

        Returns:
            The stored or freshly received response

        Raises:
            RequestFailedError: If the request fails or the status is not 2xx
        """
        method = method.upper()
        uri = normalize_uri(uri)
        request_headers = dict(headers or {})
        content = encode_body(body, request_headers)

        key = fingerprint(method, uri, body, request_headers, self.key_headers)

        entry = self.cache.get(key)
        if entry is not None:
            self.metrics_logger.log_cache_operation(
                "hit", key,
                cache_size=self.cache.size(),
                executed_requests=self.cache.number_of_executed_requests
            )
            return entry.response

        self.metrics_logger.log_cache_operation("miss", key, cache_size=self.cache.size())

        response = self._dispatch(method, uri, request_headers, content)

        self.cache.put(key, response)
        self.metrics_logger.log_cache_operation(
            "set", key,
            cache_size=self.cache.size(),
            executed_requests=self.cache.number_of_executed_requests
        )
        return response

    def get(self, uri: Union[str, httpx.URL], headers: Optional[Mapping[str, str]] = None) -> CachedResponse:
        return self.execute("GET", uri, headers=headers)

    def post(
        self,
        uri: Union[str, httpx.URL],
        headers: Optional[Mapping[str, str]] = None,
        body: RequestBody = None
    ) -> CachedResponse:
        return self.execute("POST", uri, headers=headers, body=body)

    def _dispatch(
        self,
        method: str,
        uri: str,
        headers: Dict[str, str],
        content: Optional[bytes]
    ) -> CachedResponse:
        """Send the request over the network."""
        start_time = time.time()
        self.cache.record_executed_request()

        try:
            response = self._client.request(method, uri, headers=headers, content=content)
        except httpx.HTTPError as e:
            self.metrics_logger.log_request(
                method, uri, None, (time.time() - start_time) * 1000, error=str(e)
            )
            raise RequestFailedError(
                f"Request to {uri} failed: {e}",
                method=method,
                uri=uri
            ) from e

        request_time_ms = (time.time() - start_time) * 1000

        if not response.is_success:
            self.metrics_logger.log_request(
                method, uri, response.status_code, request_time_ms,
                error=f"HTTP {response.status_code}"
            )
            raise RequestFailedError(
                f"Request to {uri} returned HTTP {response.status_code}",
                method=method,
                uri=uri,
                status_code=response.status_code
            )

        self.metrics_logger.log_request(method, uri, response.status_code, request_time_ms)

        return CachedResponse(
            status_code=response.status_code,
            headers=tuple(response.headers.multi_items()),
            content=response.content,
            url=str(response.url)
        )

    def close(self) -> None:
        """Close the underlying httpx client if it was created here."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "CachedHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
