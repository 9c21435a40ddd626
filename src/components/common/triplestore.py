"""
Connector for the pipeline triplestore.

Components read previous annotations with SPARQL SELECT queries and write
their own with SPARQL UPDATE requests, both following the SPARQL 1.1 protocol.
Triplestore calls are never cached: the graphs change with every pipeline run.
"""

from typing import Dict, List, Optional, Protocol

import httpx

from .exceptions import TriplestoreError
from .logging import ComponentLoggerMixin

SPARQL_RESULTS_JSON = "application/sparql-results+json"

Binding = Dict[str, Dict[str, str]]


class TriplestoreConnector(Protocol):
    """Read/write access to the pipeline triplestore."""

    def select(self, query: str) -> List[Binding]:
        """Run a SELECT query and return its result bindings."""
        ...

    def update(self, query: str) -> None:
        """Run an UPDATE request."""
        ...


class SparqlEndpointConnector(ComponentLoggerMixin):
    """TriplestoreConnector talking to a SPARQL 1.1 endpoint over HTTP."""

    def __init__(
        self,
        endpoint: str,
        client: Optional[httpx.Client] = None,
        update_endpoint: Optional[str] = None,
        timeout: float = 30.0
    ):
        """
        Initialize the connector.

        Args:
            endpoint: SPARQL query endpoint
            client: httpx client to use (created if omitted)
            update_endpoint: SPARQL update endpoint (defaults to endpoint)
            timeout: Timeout in seconds for a client created here
        """
        self.endpoint = endpoint
        self.update_endpoint = update_endpoint or endpoint
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def select(self, query: str) -> List[Binding]:
        """Run a SELECT query.

        Returns:
            The `results.bindings` list of the SPARQL JSON result

        Raises:
            TriplestoreError: If the request fails or the result is malformed
        """
        self.logger.debug(f"SPARQL SELECT on {self.endpoint}:\n{query}")
        response = self._post(self.endpoint, {"query": query}, accept=SPARQL_RESULTS_JSON)

        try:
            return response.json()["results"]["bindings"]
        except (ValueError, KeyError, TypeError) as e:
            raise TriplestoreError(
                f"Malformed SPARQL result from {self.endpoint}: {e}",
                endpoint=self.endpoint,
                status_code=response.status_code
            ) from e

    def update(self, query: str) -> None:
        """Run an UPDATE request.

        Raises:
            TriplestoreError: If the request fails
        """
        self.logger.debug(f"SPARQL UPDATE on {self.update_endpoint}:\n{query}")
        self._post(self.update_endpoint, {"update": query})

    def _post(self, url: str, data: Dict[str, str], accept: Optional[str] = None) -> httpx.Response:
        headers = {"Accept": accept} if accept else {}
        try:
            response = self._client.post(url, data=data, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TriplestoreError(
                f"Triplestore request to {url} returned HTTP {e.response.status_code}",
                endpoint=url,
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise TriplestoreError(f"Triplestore request to {url} failed: {e}", endpoint=url) from e
        return response


def binding_value(binding: Binding, name: str) -> Optional[str]:
    """Return the plain value of a variable in a result binding, if bound."""
    term = binding.get(name)
    if term is None:
        return None
    return term.get("value")
