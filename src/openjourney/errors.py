"""
Exception hierarchy raised by the Openjourney client.

Transient failures (:class:`TransportError`, 429 and idempotent 5xx
responses) are retried inside :mod:`openjourney.retry`; everything that
survives the retry budget propagates to the caller as one of these types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Job
    from .request import PreparedRequest


class OpenjourneyError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(OpenjourneyError):
    """Invalid client configuration."""


class TransportError(OpenjourneyError):
    """
    The HTTP call itself failed (connection refused, DNS, timeout, ...).

    Attributes:
        response: Partial response attached by the transport, if any.
        retry_after: Raw ``Retry-After`` value supplied with the failure.
    """

    def __init__(
        self,
        message: str,
        response: Any = None,
        retry_after: str | None = None,
    ) -> None:
        super().__init__(message)
        self.response = response
        self.retry_after = retry_after


class HTTPError(OpenjourneyError):
    """
    A completed response with a non-2xx status, after retries.

    Attributes:
        status: HTTP status code.
        reason: HTTP status text.
        body: Response body text.
        request: The :class:`~openjourney.request.PreparedRequest` that was sent.
        response: The transport's response object.
    """

    def __init__(
        self,
        request: PreparedRequest,
        response: Any,
        body: str,
    ) -> None:
        self.request = request
        self.response = response
        self.status: int = response.status_code
        self.reason: str = getattr(response, "reason", "") or ""
        self.body = body
        super().__init__(
            f"Request to {request.url} failed with status "
            f"{self.status} {self.reason}: {body}."
        )


class InvalidJobError(OpenjourneyError, ValueError):
    """A job response that cannot be parsed (missing fields, unknown status)."""


class JobFailedError(OpenjourneyError):
    """A job reached the ``failed`` or ``cancelled`` status."""

    def __init__(self, job: Job, message: str) -> None:
        super().__init__(message)
        self.job = job
