"""
Retry predicates, exponential backoff, ``Retry-After`` parsing, and the
automatic retry wrapper.

Backoff schedule for attempt *n* (0-indexed)::

    delay = interval * 2**n + uniform(0, jitter)

A ``Retry-After`` value (seconds or an HTTP-date) replaces the computed
delay for that attempt.  After ``max_retries`` attempts one final,
unconditional attempt is made and its result returned as-is.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable

from .config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_INTERVAL_SECONDS,
    DEFAULT_RETRY_JITTER_SECONDS,
)
from .errors import TransportError

logger = logging.getLogger(__name__)

RetryPredicate = Callable[[Any], bool]

RATE_LIMIT_STATUS = 429
SERVER_ERROR_MIN_STATUS = 500


# ---------------------------------------------------------------------------
# Retry predicates
# ---------------------------------------------------------------------------

def is_rate_limited(response: Any) -> bool:
    return response.status_code == RATE_LIMIT_STATUS


def is_rate_limited_or_server_error(response: Any) -> bool:
    return (
        response.status_code == RATE_LIMIT_STATUS
        or response.status_code >= SERVER_ERROR_MIN_STATUS
    )


def is_success(response: Any) -> bool:
    """``True`` for 2xx statuses only; redirects and 1xx are not successes."""
    return 200 <= response.status_code < 300


def never_retry(response: Any) -> bool:  # noqa: ARG001
    return False


def retry_predicate_for(method: str) -> RetryPredicate:
    """
    Return the default retry predicate for an HTTP method.

    429 is retried for every method.  Server errors are retried for GET only,
    since repeating a mutating request could duplicate its side effects.

    Args:
        method: HTTP method name (case-insensitive).

    Returns:
        Callable taking a response and returning ``True`` to retry.
    """
    if method.upper() == "GET":
        return is_rate_limited_or_server_error
    return is_rate_limited


# ---------------------------------------------------------------------------
# Backoff helpers
# ---------------------------------------------------------------------------

def backoff_delay(
    attempt: int,
    interval: float = DEFAULT_RETRY_INTERVAL_SECONDS,
    jitter: float = DEFAULT_RETRY_JITTER_SECONDS,
    rng: random.Random | None = None,
) -> float:
    """
    Return the wait in seconds before retrying after ``attempt``.

    Args:
        attempt: 0-based index of the attempt that just failed.
        interval: Base delay in seconds.
        jitter: Upper bound of the uniform random jitter in seconds.
        rng: Random source; the module-level generator by default.

    Returns:
        A delay in ``[interval * 2**attempt, interval * 2**attempt + jitter]``.
    """
    source = rng or random
    return interval * 2 ** attempt + source.uniform(0, jitter)


def parse_retry_after(value: Any, now: datetime | None = None) -> float | None:
    """
    Interpret a ``Retry-After`` header value as a delay in seconds.

    Args:
        value: Header value, either a number of seconds (``'120'``) or an
               HTTP-date (``'Wed, 21 Oct 2015 07:28:00 GMT'``).
        now: Reference time for HTTP-dates; the current UTC time by default.

    Returns:
        Seconds to wait (negative when the date is in the past), or ``None``
        if the value is missing or unparseable.
    """
    if value is None:
        return None

    text = str(value).strip()
    if not text:
        return None

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return seconds if math.isfinite(seconds) else None

    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    return (when - now).total_seconds()


def retry_after_from_error(error: TransportError) -> Any:
    """Return the ``Retry-After`` value carried by a transport error, if any."""
    if error.retry_after is not None:
        return error.retry_after
    response = error.response
    if response is not None and getattr(response, "headers", None) is not None:
        return response.headers.get("Retry-After")
    return None


# ---------------------------------------------------------------------------
# Main retry wrapper
# ---------------------------------------------------------------------------

async def with_automatic_retries(
    request: Callable[[], Awaitable[Any]],
    should_retry: RetryPredicate | None = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    interval: float = DEFAULT_RETRY_INTERVAL_SECONDS,
    jitter: float = DEFAULT_RETRY_JITTER_SECONDS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    rng: random.Random | None = None,
) -> Any:
    """
    Execute ``request`` with automatic retry on transient failures.

    Returns as soon as a response is successful (2xx, see
    :func:`is_success`) or ``should_retry`` rejects it.  :class:`TransportError` raised by
    ``request`` is retried within the same budget.  Once ``max_retries``
    attempts are spent, one last attempt is made and whatever it produces is
    returned (or raised, for a transport error); exhausting retries never
    raises on its own.

    Args:
        request: Zero-argument coroutine function performing one call.
        should_retry: Predicate deciding whether a failed response is worth
                      retrying; without one no response is retried.
        max_retries: Attempts before the final unconditional one.
        interval: Base backoff delay in seconds.
        jitter: Maximum random jitter in seconds.
        sleep: Coroutine used to wait; ``asyncio.sleep`` by default.
        rng: Random source for the jitter.

    Returns:
        The response of the last attempt made.

    Raises:
        TransportError: If the final attempt fails at the transport level.
    """
    should_retry = should_retry or never_retry

    for attempt in range(max_retries):
        delay = backoff_delay(attempt, interval, jitter, rng)
        retry_after = None

        try:
            response = await request()
        except TransportError as exc:
            retry_after = retry_after_from_error(exc)
            reason = str(exc)
        else:
            if is_success(response) or not should_retry(response):
                return response
            headers = getattr(response, "headers", None)
            retry_after = headers.get("Retry-After") if headers is not None else None
            reason = f"status {response.status_code}"

        override = parse_retry_after(retry_after)
        if override is not None:
            delay = override

        logger.warning(
            "Attempt %d/%d failed (%s); retrying in %.2fs",
            attempt + 1,
            max_retries,
            reason,
            max(delay, 0.0),
        )
        if delay > 0:
            await sleep(delay)

    return await request()
