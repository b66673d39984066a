"""
The :class:`Openjourney` facade: single API calls and job orchestration.

Example::

    import asyncio
    from openjourney import Openjourney

    async def main():
        async with Openjourney(user_agent="my-app/1.2.3") as client:
            job = await client.run("variant/model", {"input": {"text": "Hello, world!"}})
            print(job.output)

    asyncio.run(main())

The token is read from ``OPENJOURNEY_API_TOKEN`` unless ``auth`` is given.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from .config import ClientConfig, load_config
from .errors import HTTPError, JobFailedError
from .models import Job
from .request import PreparedRequest, build_request
from .retry import is_success, retry_predicate_for, with_automatic_retries
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

# Raised for failed/cancelled jobs that report no error of their own
DEFAULT_FAILURE_MESSAGE = "Failed to process image"


class Openjourney:
    """
    Client for the Openjourney REST API.

    Args:
        auth: API token; falls back to ``OPENJOURNEY_API_TOKEN``.
        user_agent: ``User-Agent`` header value.
        base_url: API root; falls back to ``OPENJOURNEY_BASE_URL`` and then
                  ``https://api.opj.app``.
        transport: Custom :class:`~openjourney.transport.Transport`.
        wait_interval: Seconds between status checks while waiting on a job.
        max_retries: Retries per request before the final attempt.
        retry_interval: Base backoff in seconds.
        retry_jitter: Maximum backoff jitter in seconds.
        config: Ready-made :class:`ClientConfig`; when given, the keyword
                options above are ignored and the environment is not read.
    """

    def __init__(
        self,
        auth: str | None = None,
        user_agent: str | None = None,
        base_url: str | None = None,
        transport: Transport | None = None,
        wait_interval: float | None = None,
        max_retries: int | None = None,
        retry_interval: float | None = None,
        retry_jitter: float | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self.config = config or load_config(
            auth=auth,
            user_agent=user_agent,
            base_url=base_url,
            transport=transport,
            wait_interval=wait_interval,
            max_retries=max_retries,
            retry_interval=retry_interval,
            retry_jitter=retry_jitter,
        )
        self._owns_transport = self.config.transport is None
        self.transport: Transport = self.config.transport or RequestsTransport()

    def __repr__(self) -> str:
        return f"Openjourney(base_url={self.config.base_url!r})"

    # -----------------------------------------------------------------------
    # Job orchestration
    # -----------------------------------------------------------------------

    async def run(self, ref: str, payload: Mapping[str, Any] | None = None) -> Job:
        """
        Submit a job and wait until it reaches a terminal status.

        Args:
            ref: Model reference, e.g. ``'variant/model'``; posted to ``/{ref}``.
            payload: Request body, e.g. ``{'input': {'text': 'hi'}}``.

        Returns:
            The succeeded :class:`Job`, including its ``output``.

        Raises:
            JobFailedError: If the job ends ``failed`` or ``cancelled``.
            HTTPError: If any API call returns a non-2xx status.
            TransportError: If the network fails beyond the retry budget.
        """
        job = await self.create_job(ref, payload)
        return await self.wait(job)

    async def create_job(
        self,
        ref: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Job:
        """Submit a job without waiting for it."""
        response = await self.request(
            f"/{ref.lstrip('/')}",
            method="POST",
            data=dict(payload or {}),
        )
        job = Job.from_dict(response)
        logger.info("Created job %s for %s (%s)", job.id, ref, job.status.value)
        return job

    async def get_job(self, job_id: str) -> Job:
        """Fetch the current snapshot of a job."""
        return Job.from_dict(await self.request(f"/job/{job_id}"))

    async def wait(self, job: Job) -> Job:
        """
        Poll ``job`` every ``wait_interval`` seconds until it is terminal.

        The wait is a suspension inside this coroutine, so abandoning the
        call (e.g. via ``asyncio.wait_for``) leaves no timer behind.  A job
        that is already terminal is not polled.

        Args:
            job: Snapshot to start from.

        Returns:
            The succeeded :class:`Job`.

        Raises:
            JobFailedError: If the job ends ``failed`` or ``cancelled``.
        """
        polls = 0
        while not job.is_terminal:
            await asyncio.sleep(self.config.wait_interval)
            job = await self.get_job(job.id)
            polls += 1
            logger.debug("Job %s is %s after %d polls", job.id, job.status.value, polls)

        if job.status.is_failure:
            logger.info("Job %s ended %s: %s", job.id, job.status.value, job.error)
            raise JobFailedError(job, job.error or DEFAULT_FAILURE_MESSAGE)

        logger.info("Job %s succeeded after %d polls", job.id, polls)
        return job

    # -----------------------------------------------------------------------
    # Single API call
    # -----------------------------------------------------------------------

    async def request(
        self,
        route: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Send one API request, retrying transient failures.

        Args:
            route: Path relative to ``base_url`` or an absolute URL.
            method: HTTP method.
            params: Query parameters, appended in iteration order.
            data: JSON-serializable body or :class:`~openjourney.request.FormData`.
            headers: Extra headers overriding the defaults.

        Returns:
            The decoded JSON body, or ``None`` for an empty body.

        Raises:
            HTTPError: If the final response has a non-2xx status.
            TransportError: If the network fails beyond the retry budget.
        """
        prepared = build_request(self.config, route, method, params, data, headers)
        config = self.config

        response = await with_automatic_retries(
            lambda: self.transport.send(prepared),
            should_retry=retry_predicate_for(prepared.method),
            max_retries=config.max_retries,
            interval=config.retry_interval,
            jitter=config.retry_jitter,
        )
        return self._handle_response(prepared, response)

    @staticmethod
    def _handle_response(prepared: PreparedRequest, response: Any) -> Any:
        if not is_success(response):
            raise HTTPError(prepared, response, response.text)

        if not response.text:
            return None
        return response.json()

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> Openjourney:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
