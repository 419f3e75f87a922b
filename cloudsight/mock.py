from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .config import BASE_URL
from .types import JobStatus

_RESPONSES_PATH = re.compile(r"/image_responses/(?P<token>[^/]+)$")
_REPOST_PATH = re.compile(r"/image_requests/(?P<token>[^/]+)/repost$")
_REQUESTS_PATH = re.compile(r"/image_requests$")


@dataclass
class MockResponse:
    status_code: int
    payload: Any = None

    @property
    def text(self) -> str:
        if self.payload is None:
            return ""
        return json.dumps(self.payload)

    def json(self) -> Any:
        if self.payload is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: Dict[str, str]
    data: Any = None
    files: Any = None


@dataclass
class _MockJob:
    token: str
    url: str
    polls: int = 0
    status: str = JobStatus.NOT_COMPLETED.value


@dataclass
class MockCloudSightSession:
    """In-memory stand-in for the CloudSight API, used in place of ``requests.Session``.

    Submitted jobs complete after ``polls_to_complete`` status polls with
    ``final_status`` and the configured annotation.
    """

    base_url: str = BASE_URL
    polls_to_complete: int = 1
    final_status: str = JobStatus.COMPLETED.value
    name: str = "a cat"
    categories: List[str] = field(default_factory=lambda: ["cat", "animal"])
    skip_reason: str = ""
    ttl: float = 0.0
    calls: List[RecordedCall] = field(default_factory=list)
    jobs: Dict[str, _MockJob] = field(default_factory=dict)

    def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str] | None = None,
        data: Any = None,
        files: Any = None,
        timeout: float | None = None,
    ) -> MockResponse:
        self.calls.append(
            RecordedCall(method=method, url=url, headers=dict(headers or {}), data=data, files=files)
        )
        if not url.startswith(self.base_url.rstrip("/")):
            return MockResponse(404, {"error": f"unknown host for {url}"})
        path = url[len(self.base_url.rstrip("/")):]

        if method == "POST" and _REQUESTS_PATH.search(path):
            return self._submit(data or {}, files)
        match = _REPOST_PATH.search(path)
        if method == "POST" and match:
            return self._repost(match.group("token"))
        match = _RESPONSES_PATH.search(path)
        if method == "GET" and match:
            return self._poll(match.group("token"))
        return MockResponse(404, {"error": f"no route for {method} {path}"})

    def expire(self, token: str) -> None:
        """Force a job into the timeout status so it can be reposted."""
        self.jobs[token].status = JobStatus.TIMEOUT.value

    def _submit(self, data: Dict[str, Any], files: Any) -> MockResponse:
        token = uuid.uuid4().hex[:22]
        if files:
            image_url = f"//images.cloudsight.example/{token}.jpg"
        else:
            image_url = str(data.get("image_request[remote_image_url]", ""))
        self.jobs[token] = _MockJob(token=token, url=image_url)
        return MockResponse(
            200,
            {
                "token": token,
                "url": image_url,
                "ttl": self.ttl,
                "status": JobStatus.NOT_COMPLETED.value,
            },
        )

    def _poll(self, token: str) -> MockResponse:
        job = self.jobs.get(token)
        if job is None:
            return MockResponse(404, {"status": JobStatus.NOT_FOUND.value, "token": token})
        if job.status == JobStatus.NOT_COMPLETED.value:
            job.polls += 1
            if job.polls >= self.polls_to_complete:
                job.status = self.final_status
        payload: Dict[str, Any] = {
            "token": token,
            "url": job.url,
            "ttl": self.ttl,
            "status": job.status,
        }
        if job.status == JobStatus.COMPLETED.value:
            payload["name"] = self.name
            payload["categories"] = list(self.categories)
        elif job.status == JobStatus.SKIPPED.value:
            payload["reason"] = self.skip_reason
        return MockResponse(200, payload)

    def _repost(self, token: str) -> MockResponse:
        job = self.jobs.get(token)
        if job is None:
            return MockResponse(404, {"error": "not found"})
        if job.status != JobStatus.TIMEOUT.value:
            return MockResponse(422, {"error": "job has not timed out"})
        job.status = JobStatus.NOT_COMPLETED.value
        job.polls = 0
        return MockResponse(200)


__all__ = ["MockCloudSightSession", "MockResponse", "RecordedCall"]
