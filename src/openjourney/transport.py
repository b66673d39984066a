"""
HTTP transport: the single seam where bytes leave the process.

The client only depends on the :class:`Transport` protocol, so tests and
applications can inject any object with a matching ``send`` coroutine.  The
default :class:`RequestsTransport` runs ``requests`` in a worker thread so the
event loop keeps running while a call is in flight.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

import requests

from .config import REQUEST_TIMEOUT_SECONDS
from .errors import TransportError
from .request import FormData, PreparedRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """
    Anything that can perform a :class:`PreparedRequest`.

    The returned object must expose the ``requests.Response`` surface used by
    the client: ``status_code``, ``reason``, ``headers`` (a
    case-insensitive mapping), ``text`` and ``json()``.  Network failures are
    raised as :class:`~openjourney.errors.TransportError`.
    """

    async def send(self, request: PreparedRequest) -> Any: ...


class RequestsTransport:
    """
    Default transport backed by a ``requests.Session``.

    Calls run in ``asyncio.to_thread`` workers that share the one session.
    ``requests`` does not promise that ``Session`` is thread-safe; pass a
    transport per client, or keep concurrent calls on one client modest.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    async def send(self, request: PreparedRequest) -> requests.Response:
        return await asyncio.to_thread(self._send, request)

    def _send(self, request: PreparedRequest) -> requests.Response:
        kwargs: dict[str, Any] = {
            "headers": request.headers,
            "timeout": self.timeout,
        }
        if isinstance(request.body, FormData):
            kwargs["data"] = request.body.fields
            kwargs["files"] = request.body.files or None
        elif request.body is not None:
            kwargs["data"] = request.body.encode("utf-8")

        logger.debug("%s %s", request.method, request.url)
        try:
            return self.session.request(request.method, request.url, **kwargs)
        except requests.RequestException as exc:
            response = exc.response
            retry_after = (
                response.headers.get("Retry-After") if response is not None else None
            )
            raise TransportError(
                f"{request.method} {request.url} failed: {exc}",
                response=response,
                retry_after=retry_after,
            ) from exc

    def close(self) -> None:
        self.session.close()

    async def aclose(self) -> None:
        self.close()

    async def __aenter__(self) -> RequestsTransport:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
