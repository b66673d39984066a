"""
Job status values and the immutable job snapshot returned by the API.

No I/O occurs here; :meth:`Job.from_dict` is a pure transformation of the
decoded JSON body so it can be unit tested in isolation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import InvalidJobError


class JobStatus(str, Enum):
    """Lifecycle states a job moves through on the server."""

    STARTING = "starting"
    BOOTING = "booting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """``True`` once no further transitions can occur."""
        return self in TERMINAL_STATUSES

    @property
    def is_failure(self) -> bool:
        return self in (JobStatus.FAILED, JobStatus.CANCELLED)


TERMINAL_STATUSES: frozenset[JobStatus] = frozenset({
    JobStatus.SUCCEEDED,
    JobStatus.FAILED,
    JobStatus.CANCELLED,
})


@dataclass(frozen=True)
class Job:
    """
    Snapshot of a remote job as last fetched.

    Attributes:
        id: Opaque job identifier.
        status: Current :class:`JobStatus`.
        output: Result payload, present once the job succeeded.
        error: Error message reported for failed jobs.
        raw: The full decoded response, including fields not modelled here.
    """

    id: str
    status: JobStatus
    output: Any = None
    error: str | None = None
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, payload: dict) -> Job:
        """
        Build a snapshot from a decoded API response.

        Args:
            payload: Dict with at least ``'id'`` and ``'status'``.

        Returns:
            The parsed :class:`Job`.

        Raises:
            InvalidJobError: If ``payload`` is not a dict, lacks ``id`` or
                             ``status``, or carries an unknown status.
        """
        if not isinstance(payload, dict):
            raise InvalidJobError(
                f"Expected a job object, got {type(payload).__name__}"
            )

        missing = [key for key in ("id", "status") if key not in payload]
        if missing:
            raise InvalidJobError(
                f"Job response is missing required fields: {', '.join(missing)}. "
                f"Keys present: {list(payload.keys())}"
            )

        try:
            status = JobStatus(payload["status"])
        except ValueError:
            raise InvalidJobError(
                f"Unknown job status {payload['status']!r} for job {payload['id']!r}"
            ) from None

        return cls(
            id=str(payload["id"]),
            status=status,
            output=payload.get("output"),
            error=payload.get("error"),
            raw=dict(payload),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
