"""
Shared pytest fixtures for the Openjourney client tests.

``ScriptedTransport`` replays a fixed list of responses (or exceptions) and
records every :class:`PreparedRequest` it is asked to send, so tests can
assert on both the outgoing wire format and the number of calls made.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from requests.structures import CaseInsensitiveDict

from openjourney import ClientConfig, Openjourney


# ---------------------------------------------------------------------------
# Fake responses
# ---------------------------------------------------------------------------

REASONS = {
    200: "OK",
    201: "Created",
    204: "No Content",
    404: "Not Found",
    422: "Unprocessable Entity",
    429: "Too Many Requests",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = REASONS.get(status_code, "")
        self.headers = CaseInsensitiveDict(headers or {})
        if text is None:
            text = "" if payload is None else json.dumps(payload)
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


def job_response(job_id: str = "job_123", status: str = "starting", **extra) -> FakeResponse:
    """200 response carrying a job object."""
    return FakeResponse(200, {"id": job_id, "status": status, **extra})


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------

class ScriptedTransport:
    """Transport returning (or raising) scripted outcomes in order."""

    def __init__(self, outcomes: list[Any]) -> None:
        self.outcomes = list(outcomes)
        self.requests: list = []

    async def send(self, request):
        self.requests.append(request)
        if not self.outcomes:
            raise AssertionError(f"Unexpected extra request: {request.method} {request.url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def calls(self) -> int:
        return len(self.requests)


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------

def make_client(outcomes: list[Any], **overrides) -> tuple[Openjourney, ScriptedTransport]:
    """Build a fast client (no backoff, tiny poll interval) over a scripted transport."""
    transport = ScriptedTransport(outcomes)
    settings = {
        "auth": "test-token",
        "user_agent": "test-agent/0.0.1",
        "base_url": "https://api.test.local",
        "transport": transport,
        "wait_interval": 0.001,
        "max_retries": 5,
        "retry_interval": 0,
        "retry_jitter": 0,
    }
    settings.update(overrides)
    return Openjourney(config=ClientConfig(**settings)), transport


@pytest.fixture
def config():
    """Configuration with a token and a non-default base URL."""
    return ClientConfig(
        auth="test-token",
        user_agent="test-agent/0.0.1",
        base_url="https://api.test.local",
    )


@pytest.fixture
def anonymous_config():
    """Configuration without a token."""
    return ClientConfig(auth=None, base_url="https://api.test.local")
