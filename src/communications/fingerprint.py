"""Cache key derivation for outbound HTTP requests.

A fingerprint identifies a cacheable request by its method, target URI,
request body and a declared subset of its headers. Anything not part of the
fingerprint (other headers, object identity, mapping insertion order) has no
influence on the key.
"""

import hashlib
import json
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

import httpx

RequestBody = Union[bytes, str, Mapping[str, Any], None]

DEFAULT_KEY_HEADERS: Tuple[str, ...] = ("content-type", "accept", "accept-language")


def normalize_uri(uri: Union[str, httpx.URL]) -> str:
    """Return the canonical string form of a URI."""
    return str(httpx.URL(str(uri)))


def canonical_body(body: RequestBody) -> str:
    """Serialize a request body into a stable, order-independent string."""
    if body is None:
        return ""
    if isinstance(body, bytes):
        return "sha256:" + hashlib.sha256(body).hexdigest()
    if isinstance(body, str):
        return body
    return json.dumps(body, sort_keys=True, ensure_ascii=False, default=str)


def select_headers(
    headers: Optional[Mapping[str, str]],
    key_headers: Iterable[str] = DEFAULT_KEY_HEADERS
) -> Tuple[Tuple[str, str], ...]:
    """Pick the headers taking part in the fingerprint.

    Header names are compared case-insensitively and values are stripped.
    """
    if not headers:
        return ()
    wanted = {name.lower() for name in key_headers}
    selected = {
        name.lower(): str(value).strip()
        for name, value in headers.items()
        if name.lower() in wanted
    }
    return tuple(sorted(selected.items()))


def fingerprint(
    method: str,
    uri: Union[str, httpx.URL],
    body: RequestBody = None,
    headers: Optional[Mapping[str, str]] = None,
    key_headers: Iterable[str] = DEFAULT_KEY_HEADERS
) -> str:
    """Compute the cache key of a request.

    Args:
        method: HTTP method, compared case-insensitively
        uri: Target URI
        body: Request body (bytes, text or a mapping of parameters)
        headers: Request headers
        key_headers: Names of the headers that distinguish requests;
            content-type always counts once there is a body

    Returns:
        Hex encoded SHA-256 digest
    """
    key_headers = tuple(key_headers)
    if body is not None:
        # one body mapping is serialized differently per content type
        key_headers += ("content-type",)

    key_data = {
        'method': method.upper(),
        'uri': normalize_uri(uri),
        'body': canonical_body(body),
        'headers': select_headers(headers, key_headers),
    }
    key_string = json.dumps(key_data, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(key_string.encode('utf-8')).hexdigest()
