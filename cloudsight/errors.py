from __future__ import annotations

from typing import Any


class CloudSightError(RuntimeError):
    """Base class for every error raised by the client."""


class ConfigurationError(CloudSightError):
    pass


class MissingKeyError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("API key cannot be empty")


class MissingSecretError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("API secret cannot be empty")


class TransportError(CloudSightError):
    """The HTTP request could not be completed. The original exception is chained."""


class DecodeError(CloudSightError):
    """The response body was not the JSON document the API is expected to send."""


class ApiError(CloudSightError):
    """The API reported a failure, either through the ``error`` field or a bad status code."""

    def __init__(self, message: str, *, status_code: int, detail: Any = None) -> None:
        super().__init__(f"{message} (status code: {status_code})")
        self.status_code = status_code
        self.detail = detail


class UnexpectedStatusError(ApiError):
    pass


class PollTimeoutError(CloudSightError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"Poll timed out after {timeout:g} seconds")
        self.timeout = timeout


class InvalidRepostStatusError(CloudSightError):
    def __init__(self, status: Any) -> None:
        value = getattr(status, "value", status)
        super().__init__(f"Only jobs with the timeout status can be reposted (status: {value!r})")
        self.status = status


__all__ = [
    "CloudSightError",
    "ConfigurationError",
    "MissingKeyError",
    "MissingSecretError",
    "TransportError",
    "DecodeError",
    "ApiError",
    "UnexpectedStatusError",
    "PollTimeoutError",
    "InvalidRepostStatusError",
]
