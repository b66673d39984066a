"""
Client configuration, default constants, and the environment lookup.

All constants used across the client modules are centralized here so that
config is separated from logic.  :func:`load_config` is the only place the
process environment is read; every other module receives an explicit
:class:`ClientConfig`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping
from urllib.parse import urlsplit

from .errors import ConfigError

if TYPE_CHECKING:
    from .transport import Transport

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

VERSION = "1.0.1"
DEFAULT_USER_AGENT = f"openjourney-python/{VERSION}"

# ---------------------------------------------------------------------------
# API defaults
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://api.opj.app"

# Environment variables consulted by load_config()
TOKEN_ENV_VAR = "OPENJOURNEY_API_TOKEN"
BASE_URL_ENV_VAR = "OPENJOURNEY_BASE_URL"

# ---------------------------------------------------------------------------
# Polling and retry parameters (seconds)
# ---------------------------------------------------------------------------

DEFAULT_WAIT_INTERVAL_SECONDS: float = 5.0  # between job status checks
DEFAULT_MAX_RETRIES: int = 5                # retries before the final attempt
DEFAULT_RETRY_INTERVAL_SECONDS: float = 0.5 # base of the exponential backoff
DEFAULT_RETRY_JITTER_SECONDS: float = 0.1   # max random jitter per attempt
REQUEST_TIMEOUT_SECONDS: float = 60.0       # default transport HTTP timeout


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings shared by every call an :class:`Openjourney` client makes.

    Attributes:
        auth: API token sent as ``Authorization: Bearer <auth>``; ``None``
              sends no authorization header.
        user_agent: Value of the ``User-Agent`` header.
        base_url: Root that relative routes are resolved against.
        transport: Object implementing :class:`~openjourney.transport.Transport`;
                   ``None`` lets the client create a ``RequestsTransport``.
        wait_interval: Seconds between job status checks in ``run``.
        max_retries: Retries allowed before the final unconditional attempt.
        retry_interval: Base backoff in seconds (doubled every attempt).
        retry_jitter: Upper bound of the random jitter added to each delay.
    """

    auth: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    base_url: str = DEFAULT_BASE_URL
    transport: Transport | None = None
    wait_interval: float = DEFAULT_WAIT_INTERVAL_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_interval: float = DEFAULT_RETRY_INTERVAL_SECONDS
    retry_jitter: float = DEFAULT_RETRY_JITTER_SECONDS

    def __post_init__(self) -> None:
        validate_config(self)

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        auth = "'***'" if self.auth else "None"
        return (
            f"ClientConfig(auth={auth}, user_agent={self.user_agent!r}, "
            f"base_url={self.base_url!r}, wait_interval={self.wait_interval!r}, "
            f"max_retries={self.max_retries!r})"
        )


def validate_config(config: ClientConfig) -> None:
    """
    Check a configuration for values the client cannot work with.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If the base URL is not an absolute http(s) URL, the wait
                     interval is not positive, or a retry setting is negative.
    """
    parts = urlsplit(config.base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(
            f"base_url must be an absolute http(s) URL, got {config.base_url!r}"
        )

    if config.wait_interval <= 0:
        raise ConfigError(
            f"wait_interval must be positive, got {config.wait_interval!r}"
        )

    for name in ("max_retries", "retry_interval", "retry_jitter"):
        value = getattr(config, name)
        if value < 0:
            raise ConfigError(f"{name} must not be negative, got {value!r}")


def load_config(
    auth: str | None = None,
    user_agent: str | None = None,
    base_url: str | None = None,
    transport: Transport | None = None,
    wait_interval: float | None = None,
    max_retries: int | None = None,
    retry_interval: float | None = None,
    retry_jitter: float | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """
    Resolve constructor options into a :class:`ClientConfig`.

    Precedence is explicit argument, then environment variable, then the
    module default.  Only ``auth`` (``OPENJOURNEY_API_TOKEN``) and
    ``base_url`` (``OPENJOURNEY_BASE_URL``) have environment fallbacks.

    Args:
        auth: API token.
        user_agent: ``User-Agent`` override.
        base_url: API root override.
        transport: Custom transport.
        wait_interval: Seconds between job status checks.
        max_retries: Retry budget per request.
        retry_interval: Base backoff in seconds.
        retry_jitter: Maximum jitter in seconds.
        environ: Mapping to read instead of ``os.environ`` (useful in tests).

    Returns:
        A validated, immutable configuration.

    Raises:
        ConfigError: If the resolved values fail :func:`validate_config`.
    """
    env = os.environ if environ is None else environ

    return ClientConfig(
        auth=auth or env.get(TOKEN_ENV_VAR) or None,
        user_agent=user_agent or DEFAULT_USER_AGENT,
        base_url=base_url or env.get(BASE_URL_ENV_VAR) or DEFAULT_BASE_URL,
        transport=transport,
        wait_interval=(
            DEFAULT_WAIT_INTERVAL_SECONDS if wait_interval is None else wait_interval
        ),
        max_retries=DEFAULT_MAX_RETRIES if max_retries is None else max_retries,
        retry_interval=(
            DEFAULT_RETRY_INTERVAL_SECONDS if retry_interval is None else retry_interval
        ),
        retry_jitter=(
            DEFAULT_RETRY_JITTER_SECONDS if retry_jitter is None else retry_jitter
        ),
    )
