from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from .errors import ApiError, InvalidRepostStatusError, PollTimeoutError
from .job import Job
from .types import JobStatus

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .client import CloudSightClient

logger = logging.getLogger(__name__)

# It usually takes 6-12 seconds for the API to annotate an image. Polling
# starts 4 seconds after submission and then runs once per second.
POLL_MIN_WAIT: float = 4.0
POLL_INTERVAL: float = 1.0


class JobPoller:
    """Refreshes jobs from the API and blocks until they finish."""

    def __init__(
        self,
        client: "CloudSightClient",
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        min_wait: float = POLL_MIN_WAIT,
        interval: float = POLL_INTERVAL,
    ) -> None:
        self._client = client
        self._clock = clock
        self._sleep = sleep
        self.min_wait = min_wait
        self.interval = interval

    def update(self, job: Job) -> Job:
        """Poll the API once and refresh ``job`` in place.

        Does nothing when the job already left the ``not completed`` state.
        A service-reported error is raised as :class:`ApiError` and leaves
        the job unchanged.
        """
        with job.lock:
            if job.status is not JobStatus.NOT_COMPLETED:
                return job
            url = self._client.responses_url(job.token)
            response = self._client.send("GET", url)
            update = self._client.decode(response)
            job.apply(update)
            logger.debug("Job %s polled: status=%s", job.token, job.status.value)
        return job

    def wait(self, job: Job, timeout: float = 0.0) -> Job:
        """Block until the job reaches a terminal status.

        ``timeout`` is the maximum total wait in seconds; ``0`` waits forever.
        Raises :class:`PollTimeoutError` when the deadline passes, leaving
        the job in the state observed by the last poll.
        """
        deadline = self._clock() + timeout

        wait_until = job.created_at + self.min_wait
        now = self._clock()
        if now < wait_until:
            self._sleep(wait_until - now)

        while True:
            if timeout > 0 and self._clock() > deadline:
                logger.info("Gave up waiting for job %s after %.1fs", job.token, timeout)
                raise PollTimeoutError(timeout)
            self.update(job)
            if job.status.is_terminal:
                logger.info("Job %s finished with status %s", job.token, job.status.value)
                return job
            self._sleep(self.interval)

    def repost(self, job: Job) -> Job:
        """Resubmit a timed-out job and poll it once."""
        with job.lock:
            if job.status is not JobStatus.TIMEOUT:
                raise InvalidRepostStatusError(job.status)
            url = self._client.repost_url(job.token)
            response = self._client.send("POST", url)
            if response.status_code != 200:
                raise ApiError(
                    f"error reposting job: {response.text}",
                    status_code=response.status_code,
                    detail=response.text,
                )
            job.status = JobStatus.NOT_COMPLETED
            job.created_at = self._clock()
            logger.info("Job %s reposted", job.token)
        return self.update(job)


__all__ = ["JobPoller", "POLL_MIN_WAIT", "POLL_INTERVAL"]
