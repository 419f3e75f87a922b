"""Client library for the CloudSight image recognition API."""

from __future__ import annotations

from .auth import RequestSigner, SignedRequest
from .client import USER_AGENT, CloudSightClient
from .config import BASE_URL, ClientConfig, load_config
from .errors import (
    ApiError,
    CloudSightError,
    ConfigurationError,
    DecodeError,
    InvalidRepostStatusError,
    MissingKeyError,
    MissingSecretError,
    PollTimeoutError,
    TransportError,
    UnexpectedStatusError,
)
from .job import Job
from .params import DEFAULT_LOCALE, Params
from .poller import POLL_INTERVAL, POLL_MIN_WAIT, JobPoller
from .types import JobStatus, SkipReason

__version__ = "1.0.0"

__all__ = [
    "ApiError",
    "BASE_URL",
    "ClientConfig",
    "CloudSightClient",
    "CloudSightError",
    "ConfigurationError",
    "DEFAULT_LOCALE",
    "DecodeError",
    "InvalidRepostStatusError",
    "Job",
    "JobPoller",
    "JobStatus",
    "MissingKeyError",
    "MissingSecretError",
    "POLL_INTERVAL",
    "POLL_MIN_WAIT",
    "Params",
    "PollTimeoutError",
    "RequestSigner",
    "SignedRequest",
    "SkipReason",
    "TransportError",
    "USER_AGENT",
    "UnexpectedStatusError",
    "load_config",
]
