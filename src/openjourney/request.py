"""
Request construction: URL, headers, and body for a single API call.

No I/O occurs here; every function turns a route plus options into a
:class:`PreparedRequest` that a transport can send.

Design notes:
- Routes are either relative paths, joined under ``base_url`` as if it were a
  directory, or absolute http(s) URLs used unchanged.
- Multipart bodies (:class:`FormData`) drop the JSON ``Content-Type`` so the
  transport can emit the boundary-bearing value itself.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import IO, Any, Mapping
from urllib.parse import urlencode, urlsplit, urlunsplit

from .config import ClientConfig

JSON_CONTENT_TYPE = "application/json"

# Methods safe to repeat after a server error
IDEMPOTENT_METHODS: frozenset[str] = frozenset({"GET"})


# ---------------------------------------------------------------------------
# Multipart payloads
# ---------------------------------------------------------------------------

@dataclass
class FormData:
    """
    Ordered multipart/form-data payload.

    ``fields`` holds plain ``(name, value)`` pairs and ``files`` holds
    ``(name, (filename, content, content_type))`` tuples, the shapes
    ``requests`` accepts for its ``data=`` and ``files=`` arguments.
    """

    fields: list[tuple[str, str]] = field(default_factory=list)
    files: list[tuple[str, tuple[str | None, Any, str | None]]] = field(
        default_factory=list
    )

    def append(self, name: str, value: Any) -> FormData:
        self.fields.append((name, str(value)))
        return self

    def append_file(
        self,
        name: str,
        content: bytes | IO[bytes],
        filename: str | None = None,
        content_type: str | None = None,
    ) -> FormData:
        self.files.append((name, (filename or name, content, content_type)))
        return self


# ---------------------------------------------------------------------------
# Prepared request
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PreparedRequest:
    """Fully-formed description of an HTTP request; nothing has been sent."""

    method: str
    url: str
    headers: dict[str, str]
    body: str | FormData | None = None

    @property
    def is_idempotent(self) -> bool:
        return self.method in IDEMPOTENT_METHODS


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_url(
    base_url: str,
    route: str,
    params: Mapping[str, Any] | None = None,
) -> str:
    """
    Resolve ``route`` against ``base_url`` and append query parameters.

    Args:
        base_url: API root, e.g. ``'https://api.opj.app'``.
        route: Relative path (``'/job/abc'`` or ``'job/abc'``) or an absolute
               ``http(s)://`` URL.
        params: Query parameters appended in iteration order.  ``None``
                values are skipped; booleans are sent as ``true``/``false``.

    Returns:
        The complete URL string.

    Example:
        >>> build_url("https://api.opj.app", "/x", {"a": "1", "b": "2"})
        'https://api.opj.app/x?a=1&b=2'
    """
    if urlsplit(route).scheme in ("http", "https"):
        url = route
    else:
        root = base_url if base_url.endswith("/") else f"{base_url}/"
        url = root + route.lstrip("/")

    if not params:
        return url

    pairs = [
        (key, query_value(value)) for key, value in params.items() if value is not None
    ]
    if not pairs:
        return url

    scheme, netloc, path, query, fragment = urlsplit(url)
    extra = urlencode(pairs)
    query = f"{query}&{extra}" if query else extra
    return urlunsplit((scheme, netloc, path, query, fragment))


def query_value(value: Any) -> str:
    """Render one query parameter value; booleans are lower-cased."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_headers(
    config: ClientConfig,
    data: Any = None,
    headers: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Construct request headers from defaults, auth, and caller overrides.

    Args:
        config: Client configuration (token and user agent).
        data: The request payload; a :class:`FormData` suppresses the JSON
              ``Content-Type`` header.
        headers: Extra headers; these override the defaults.

    Returns:
        Dict of HTTP header name → value pairs.
    """
    result = {
        "Content-Type": JSON_CONTENT_TYPE,
        "User-Agent": config.user_agent,
    }

    if config.auth:
        result["Authorization"] = f"Bearer {config.auth}"

    if headers:
        result.update(headers)

    if isinstance(data, FormData):
        result.pop("Content-Type", None)

    return result


def build_body(data: Any) -> str | FormData | None:
    """
    Serialize a payload for the wire.

    Args:
        data: JSON-serializable structure, a :class:`FormData`, or ``None``.

    Returns:
        JSON text (an empty dict becomes ``"{}"``), the unchanged
        ``FormData``, or ``None`` when ``data`` is ``None``.

    Raises:
        TypeError: If ``data`` is not JSON serializable.
    """
    if isinstance(data, FormData):
        return data
    if data is None:
        return None
    return json.dumps(data)


def build_request(
    config: ClientConfig,
    route: str,
    method: str = "GET",
    params: Mapping[str, Any] | None = None,
    data: Any = None,
    headers: Mapping[str, str] | None = None,
) -> PreparedRequest:
    """
    Build the complete description of one API call.

    Args:
        config: Client configuration.
        route: Relative path or absolute URL.
        method: HTTP method (case-insensitive).
        params: Query parameters.
        data: JSON payload or :class:`FormData`.
        headers: Extra headers overriding the defaults.

    Returns:
        A :class:`PreparedRequest` ready for a transport.
    """
    return PreparedRequest(
        method=method.upper(),
        url=build_url(config.base_url, route, params),
        headers=build_headers(config, data, headers),
        body=build_body(data),
    )
