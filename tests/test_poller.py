from __future__ import annotations

import json
import threading
from typing import Any, Dict, List
from unittest.mock import Mock

import pytest

from cloudsight.client import CloudSightClient
from cloudsight.errors import ApiError, InvalidRepostStatusError, PollTimeoutError
from cloudsight.job import Job
from cloudsight.poller import POLL_MIN_WAIT
from cloudsight.types import JobStatus

NOT_COMPLETED = {"status": "not completed", "token": "abc", "ttl": 0}
COMPLETED = {"status": "completed", "name": "a cat", "categories": ["cat", "animal"]}


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class _StopLoop(Exception):
    pass


def _response(payload: Any, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = json.dumps(payload)
    return response


def _client(session: Mock, clock: FakeClock) -> CloudSightClient:
    return CloudSightClient.simple("key", session=session, clock=clock, sleep=clock.sleep)


def _recording_session(clock: FakeClock, payloads: List[Dict[str, Any]]) -> tuple[Mock, List[float]]:
    """Session answering GETs with ``payloads`` (last one repeats) and recording poll times."""
    poll_times: List[float] = []
    remaining = list(payloads)

    def request(method: str, url: str, **kwargs: Any) -> Mock:
        poll_times.append(clock.now)
        payload = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return _response(payload)

    session = Mock()
    session.request.side_effect = request
    return session, poll_times


@pytest.mark.parametrize(
    "status",
    [JobStatus.COMPLETED, JobStatus.NOT_FOUND, JobStatus.SKIPPED, JobStatus.TIMEOUT, JobStatus.UNRECOGNIZED],
)
def test_update_of_terminal_job_makes_no_request(status: JobStatus) -> None:
    session = Mock()
    client = _client(session, FakeClock())
    job = Job(token="abc", status=status, name="kept")

    assert client.update_job(job) is job

    session.request.assert_not_called()
    assert job.status is status
    assert job.name == "kept"


def test_update_polls_status_endpoint_and_refreshes_job() -> None:
    session = Mock()
    session.request.return_value = _response(COMPLETED)
    client = _client(session, FakeClock())
    job = Job(token="abc", url="https://cdn.example/abc.jpg")

    client.update_job(job)

    method, url = session.request.call_args.args
    assert method == "GET"
    assert url == "https://api.cloudsightapi.com/image_responses/abc"
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "CloudSight key"
    assert job.status is JobStatus.COMPLETED
    assert job.name == "a cat"
    assert job.categories == ["cat", "animal"]
    assert job.url == "https://cdn.example/abc.jpg"


def test_service_error_leaves_job_untouched() -> None:
    session = Mock()
    session.request.return_value = _response(
        {"error": "invalid token", "status": "completed", "name": "x"}, status_code=404
    )
    client = _client(session, FakeClock())
    job = Job(token="abc")

    with pytest.raises(ApiError) as excinfo:
        client.update_job(job)

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == "invalid token"
    assert job.status is JobStatus.NOT_COMPLETED
    assert job.name == ""


def test_concurrent_updates_are_serialized() -> None:
    entered = threading.Event()
    release = threading.Event()

    def request(method: str, url: str, **kwargs: Any) -> Mock:
        entered.set()
        release.wait(5)
        return _response(COMPLETED)

    session = Mock()
    session.request.side_effect = request
    client = _client(session, FakeClock())
    job = Job(token="abc")

    first = threading.Thread(target=client.update_job, args=(job,))
    first.start()
    assert entered.wait(5)
    second = threading.Thread(target=client.update_job, args=(job,))
    second.start()
    release.set()
    first.join(5)
    second.join(5)

    assert session.request.call_count == 1
    assert job.status is JobStatus.COMPLETED


def test_wait_respects_quiet_period_after_submission() -> None:
    clock = FakeClock(start=500.0)
    session, poll_times = _recording_session(clock, [NOT_COMPLETED, NOT_COMPLETED, COMPLETED])
    client = _client(session, clock)
    job = Job(token="abc", created_at=499.0)

    client.wait_job(job)

    assert poll_times[0] == pytest.approx(499.0 + POLL_MIN_WAIT)
    assert all(t >= 499.0 + POLL_MIN_WAIT for t in poll_times)
    assert poll_times == pytest.approx([503.0, 504.0, 505.0])
    assert clock.sleeps == pytest.approx([3.0, 1.0, 1.0])
    assert job.status is JobStatus.COMPLETED


def test_wait_skips_quiet_period_for_old_jobs() -> None:
    clock = FakeClock(start=500.0)
    session, poll_times = _recording_session(clock, [COMPLETED])
    client = _client(session, clock)
    job = Job(token="abc", created_at=100.0)

    client.wait_job(job, timeout=10)

    assert poll_times == [500.0]
    assert clock.sleeps == []


def test_wait_times_out_with_job_in_last_state() -> None:
    clock = FakeClock(start=500.0)
    session, poll_times = _recording_session(clock, [NOT_COMPLETED])
    client = _client(session, clock)
    job = Job(token="abc", created_at=0.0)

    with pytest.raises(PollTimeoutError):
        client.wait_job(job, timeout=3.5)

    assert poll_times == [500.0, 501.0, 502.0, 503.0]
    assert job.status is JobStatus.NOT_COMPLETED


def test_wait_without_timeout_never_times_out() -> None:
    clock = FakeClock(start=500.0)
    session, _ = _recording_session(clock, [NOT_COMPLETED])

    def sleep(seconds: float) -> None:
        clock.now += 10_000.0
        clock.sleeps.append(seconds)
        if len(clock.sleeps) >= 50:
            raise _StopLoop()

    client = CloudSightClient.simple("key", session=session, clock=clock, sleep=sleep)
    job = Job(token="abc", created_at=0.0)

    with pytest.raises(_StopLoop):
        client.wait_job(job, timeout=0)

    assert session.request.call_count == 50


def test_wait_propagates_poll_errors() -> None:
    clock = FakeClock()
    session = Mock()
    session.request.return_value = _response({"error": {"code": 500}}, status_code=500)
    client = _client(session, clock)
    job = Job(token="abc", created_at=0.0)

    with pytest.raises(ApiError):
        client.wait_job(job, timeout=30)

    assert session.request.call_count == 1


@pytest.mark.parametrize(
    "status",
    [JobStatus.NOT_COMPLETED, JobStatus.COMPLETED, JobStatus.NOT_FOUND, JobStatus.SKIPPED],
)
def test_repost_rejects_non_timeout_status(status: JobStatus) -> None:
    session = Mock()
    client = _client(session, FakeClock())
    job = Job(token="abc", status=status)

    with pytest.raises(InvalidRepostStatusError):
        client.repost_job(job)

    session.request.assert_not_called()
    assert job.status is status


def test_repost_restarts_job_and_polls_once() -> None:
    clock = FakeClock(start=800.0)
    session = Mock()
    session.request.side_effect = [_response(None), _response(NOT_COMPLETED)]
    client = _client(session, clock)
    job = Job(token="abc", status=JobStatus.TIMEOUT, created_at=10.0)

    client.repost_job(job)

    calls = [call.args for call in session.request.call_args_list]
    assert calls == [
        ("POST", "https://api.cloudsightapi.com/image_requests/abc/repost"),
        ("GET", "https://api.cloudsightapi.com/image_responses/abc"),
    ]
    assert job.status is JobStatus.NOT_COMPLETED
    assert job.created_at == 800.0


def test_repost_failure_carries_body_and_status() -> None:
    session = Mock()
    failure = Mock(status_code=500, text="boom")
    session.request.return_value = failure
    client = _client(session, FakeClock())
    job = Job(token="abc", status=JobStatus.TIMEOUT)

    with pytest.raises(ApiError) as excinfo:
        client.repost_job(job)

    assert excinfo.value.status_code == 500
    assert excinfo.value.detail == "boom"
    assert "boom" in str(excinfo.value)
    assert job.status is JobStatus.TIMEOUT
    assert session.request.call_count == 1
