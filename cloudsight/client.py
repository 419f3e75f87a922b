from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import IO, Any, Callable, Dict, Mapping, Union

import requests
from pydantic import ValidationError

from .auth import RequestSigner
from .config import BASE_URL, ClientConfig
from .errors import (
    ApiError,
    DecodeError,
    MissingSecretError,
    TransportError,
    UnexpectedStatusError,
)
from .job import Job
from .params import DEFAULT_LOCALE, REMOTE_IMAGE_URL_KEY, Params
from .poller import JobPoller
from .schemas import ApiResponse

logger = logging.getLogger(__name__)

USER_AGENT = "cloudsight-python/1.0"
IMAGE_FIELD = "image_request[image]"

ImageSource = Union[bytes, IO[bytes]]


@dataclass
class CloudSightClient:
    """Submit images to the CloudSight API and track the resulting jobs."""

    signer: RequestSigner
    base_url: str = BASE_URL
    timeout: float = 20.0
    strict_status: bool = False
    locale: str = DEFAULT_LOCALE
    session: requests.Session = field(default_factory=requests.Session, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    poller: JobPoller = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        self.poller = JobPoller(self, clock=self.clock, sleep=self.sleep)

    @classmethod
    def simple(cls, key: str, **kwargs: Any) -> "CloudSightClient":
        """Client authenticating with the static ``CloudSight <key>`` header."""
        return cls(signer=RequestSigner(key), **kwargs)

    @classmethod
    def oauth(cls, key: str, secret: str, **kwargs: Any) -> "CloudSightClient":
        """Client signing every request with OAuth1."""
        signer = RequestSigner(key, secret)
        if not secret:
            raise MissingSecretError()
        return cls(signer=signer, **kwargs)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "CloudSightClient":
        options: Dict[str, Any] = {
            "base_url": config.base_url,
            "timeout": config.timeout,
            "strict_status": config.strict_status,
            "locale": config.locale,
        }
        options.update(kwargs)
        if config.api_secret:
            return cls.oauth(config.api_key, config.api_secret, **options)
        return cls.simple(config.api_key, **options)

    @property
    def requests_url(self) -> str:
        return f"{self.base_url}/image_requests"

    def responses_url(self, token: str) -> str:
        return f"{self.base_url}/image_responses/{token}"

    def repost_url(self, token: str) -> str:
        return f"{self.requests_url}/{token}/repost"

    def image_request(
        self,
        image: ImageSource,
        filename: str,
        params: Mapping[str, str] | None = None,
    ) -> Job:
        """Upload an image for classification.

        Returns immediately with a job whose status is usually ``not
        completed``. Use :meth:`wait_job` (or poll with :meth:`update_job`)
        to get the annotation.
        """
        merged = Params(params or {}).with_defaults(self.locale)
        response = self.send(
            "POST",
            self.requests_url,
            sign_params=merged,
            data=dict(merged),
            files={IMAGE_FIELD: (filename, image)},
        )
        job = self._job_from_submission(response)
        logger.info("Submitted image %s as job %s", filename, job.token)
        return job

    def remote_image_request(self, image_url: str, params: Mapping[str, str] | None = None) -> Job:
        """Ask the API to fetch and classify the image at ``image_url``."""
        merged = Params(params or {}).with_defaults(self.locale)
        merged[REMOTE_IMAGE_URL_KEY] = image_url
        response = self.send(
            "POST",
            self.requests_url,
            sign_params=merged,
            data=dict(merged),
        )
        job = self._job_from_submission(response)
        logger.info("Submitted remote image %s as job %s", image_url, job.token)
        return job

    def update_job(self, job: Job) -> Job:
        return self.poller.update(job)

    def wait_job(self, job: Job, timeout: float = 0.0) -> Job:
        return self.poller.wait(job, timeout)

    def repost_job(self, job: Job) -> Job:
        return self.poller.repost(job)

    def send(
        self,
        method: str,
        url: str,
        *,
        sign_params: Mapping[str, str] | None = None,
        data: Any = None,
        files: Any = None,
    ) -> requests.Response:
        headers = {
            "User-Agent": USER_AGENT,
            "Authorization": self.signer.authorization(method, url, sign_params),
        }
        logger.debug("%s %s", method, url)
        try:
            return self.session.request(
                method,
                url,
                headers=headers,
                data=data,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"HTTP error: {exc}") from exc

    def decode(self, response: requests.Response) -> ApiResponse:
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(f"JSON error: {exc}") from exc
        if not isinstance(payload, dict):
            raise DecodeError(f"JSON error: expected an object, got {type(payload).__name__}")
        try:
            parsed = ApiResponse.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"Unexpected response format: {exc}") from exc
        if parsed.has_error:
            raise ApiError(
                f"api error: {json.dumps(parsed.error)}",
                status_code=response.status_code,
                detail=parsed.error,
            )
        return parsed

    def _job_from_submission(self, response: requests.Response) -> Job:
        parsed = self.decode(response)
        if response.status_code != 200:
            if self.strict_status:
                raise UnexpectedStatusError(
                    "unexpected response status",
                    status_code=response.status_code,
                    detail=response.text,
                )
            logger.warning(
                "Image request answered with status code %s; accepting response",
                response.status_code,
            )
        return Job.from_response(parsed, created_at=self.clock())


__all__ = ["CloudSightClient", "BASE_URL", "USER_AGENT"]
