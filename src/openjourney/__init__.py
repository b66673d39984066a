"""
openjourney: asynchronous Python client for the Openjourney REST API.

Module layout
-------------
config.py     : ClientConfig, load_config, defaults and environment lookup
errors.py     : OpenjourneyError hierarchy
models.py     : JobStatus, Job snapshot
request.py    : URL, header and body construction (no I/O)
transport.py  : Transport protocol, default requests-backed transport
retry.py      : retry predicates, exponential backoff, Retry-After handling
client.py     : Openjourney facade: request, run, create_job, get_job, wait

Public interface
----------------
Run a model and wait for the result:
    job = await Openjourney().run("variant/model", {"input": {...}})

Make a single API call:
    await Openjourney().request("/job/abc123")
"""

from .client import Openjourney
from .config import VERSION, ClientConfig, load_config
from .errors import (
    ConfigError,
    HTTPError,
    InvalidJobError,
    JobFailedError,
    OpenjourneyError,
    TransportError,
)
from .models import Job, JobStatus
from .request import FormData, PreparedRequest
from .retry import with_automatic_retries
from .transport import RequestsTransport, Transport

__version__ = VERSION

__all__ = [
    # Client
    "Openjourney",
    "ClientConfig",
    "load_config",
    # Jobs
    "Job",
    "JobStatus",
    # Requests and transport
    "FormData",
    "PreparedRequest",
    "Transport",
    "RequestsTransport",
    "with_automatic_retries",
    # Errors
    "OpenjourneyError",
    "ConfigError",
    "TransportError",
    "HTTPError",
    "InvalidJobError",
    "JobFailedError",
]
