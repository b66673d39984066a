"""
Unit tests for openjourney/config.py and openjourney/models.py.

Covers load_config precedence (argument > environment > default),
ClientConfig validation, and Job / JobStatus parsing.
"""

from __future__ import annotations

import pytest

from openjourney.config import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_INTERVAL_SECONDS,
    DEFAULT_RETRY_JITTER_SECONDS,
    DEFAULT_USER_AGENT,
    DEFAULT_WAIT_INTERVAL_SECONDS,
    VERSION,
    ClientConfig,
    load_config,
)
from openjourney.errors import ConfigError, InvalidJobError, OpenjourneyError
from openjourney.models import TERMINAL_STATUSES, Job, JobStatus


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------

class TestLoadConfig:

    def test_defaults_with_empty_environment(self):
        config = load_config(environ={})
        assert config.auth is None
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.base_url == DEFAULT_BASE_URL
        assert config.transport is None
        assert config.wait_interval == DEFAULT_WAIT_INTERVAL_SECONDS
        assert config.max_retries == DEFAULT_MAX_RETRIES
        assert config.retry_interval == DEFAULT_RETRY_INTERVAL_SECONDS
        assert config.retry_jitter == DEFAULT_RETRY_JITTER_SECONDS

    def test_default_values(self):
        assert DEFAULT_BASE_URL == "https://api.opj.app"
        assert DEFAULT_USER_AGENT == f"openjourney-python/{VERSION}"
        assert DEFAULT_WAIT_INTERVAL_SECONDS == 5.0
        assert DEFAULT_MAX_RETRIES == 5
        assert DEFAULT_RETRY_INTERVAL_SECONDS == 0.5
        assert DEFAULT_RETRY_JITTER_SECONDS == 0.1

    def test_environment_fallbacks(self):
        config = load_config(environ={
            "OPENJOURNEY_API_TOKEN": "env-token",
            "OPENJOURNEY_BASE_URL": "https://staging.opj.app",
        })
        assert config.auth == "env-token"
        assert config.base_url == "https://staging.opj.app"

    def test_arguments_win_over_environment(self):
        config = load_config(
            auth="arg-token",
            base_url="https://local.test",
            environ={
                "OPENJOURNEY_API_TOKEN": "env-token",
                "OPENJOURNEY_BASE_URL": "https://staging.opj.app",
            },
        )
        assert config.auth == "arg-token"
        assert config.base_url == "https://local.test"

    def test_empty_token_treated_as_missing(self):
        assert load_config(environ={"OPENJOURNEY_API_TOKEN": ""}).auth is None

    def test_zero_retry_settings_kept(self):
        config = load_config(max_retries=0, retry_interval=0, retry_jitter=0, environ={})
        assert (config.max_retries, config.retry_interval, config.retry_jitter) == (0, 0, 0)

    def test_config_is_immutable(self):
        config = load_config(environ={})
        with pytest.raises(AttributeError):
            config.auth = "changed"


# ---------------------------------------------------------------------------
# ClientConfig validation
# ---------------------------------------------------------------------------

class TestClientConfigValidation:

    @pytest.mark.parametrize("base_url", ["api.opj.app", "ftp://api.opj.app", "https://"])
    def test_bad_base_url_rejected(self, base_url):
        with pytest.raises(ConfigError, match="base_url"):
            ClientConfig(base_url=base_url)

    @pytest.mark.parametrize("interval", [0, -1])
    def test_non_positive_wait_interval_rejected(self, interval):
        with pytest.raises(ConfigError, match="wait_interval"):
            ClientConfig(wait_interval=interval)

    @pytest.mark.parametrize("field", ["max_retries", "retry_interval", "retry_jitter"])
    def test_negative_retry_settings_rejected(self, field):
        with pytest.raises(ConfigError, match=field):
            ClientConfig(**{field: -1})


# ---------------------------------------------------------------------------
# Job / JobStatus
# ---------------------------------------------------------------------------

class TestJobStatus:

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {
            JobStatus.SUCCEEDED,
            JobStatus.FAILED,
            JobStatus.CANCELLED,
        }

    @pytest.mark.parametrize("status", ["starting", "booting", "processing"])
    def test_in_flight_statuses_not_terminal(self, status):
        assert not JobStatus(status).is_terminal

    def test_failure_statuses(self):
        assert JobStatus.FAILED.is_failure
        assert JobStatus.CANCELLED.is_failure
        assert not JobStatus.SUCCEEDED.is_failure


class TestJobFromDict:

    def test_full_payload(self):
        payload = {
            "id": "j1",
            "status": "succeeded",
            "output": ["https://cdn.opj.app/1.png"],
            "error": None,
            "metrics": {"predict_time": 3.2},
        }
        job = Job.from_dict(payload)
        assert job.id == "j1"
        assert job.status is JobStatus.SUCCEEDED
        assert job.output == ["https://cdn.opj.app/1.png"]
        assert job.error is None
        assert job.raw == payload
        assert job.is_terminal

    def test_optional_fields_default_to_none(self):
        job = Job.from_dict({"id": "j1", "status": "starting"})
        assert job.output is None
        assert job.error is None
        assert not job.is_terminal

    def test_numeric_id_stringified(self):
        assert Job.from_dict({"id": 42, "status": "starting"}).id == "42"

    def test_missing_fields_rejected(self):
        with pytest.raises(ValueError, match="status"):
            Job.from_dict({"id": "j1"})

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidJobError, match="Unknown job status 'queued'") as exc_info:
            Job.from_dict({"id": "j1", "status": "queued"})
        assert isinstance(exc_info.value, OpenjourneyError)
        assert isinstance(exc_info.value, ValueError)

    def test_non_dict_rejected(self):
        with pytest.raises(ValueError, match="list"):
            Job.from_dict([])
