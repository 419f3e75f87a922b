from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .schemas import ApiResponse
from .types import JobStatus, SkipReason


@dataclass
class Job:
    """Result of sending an image to the API.

    The job is refreshed in place by :meth:`CloudSightClient.update_job`.
    Once the status leaves ``not completed`` the job no longer changes,
    unless a timed-out job is explicitly reposted.
    """

    token: str
    status: JobStatus = JobStatus.NOT_COMPLETED
    categories: List[str] = field(default_factory=list)
    name: str = ""
    ttl: float = 0.0
    url: str = ""
    skip_reason: SkipReason = SkipReason.NONE
    created_at: float = field(default=0.0, repr=False, compare=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "token" and "token" in self.__dict__ and value != self.__dict__["token"]:
            raise AttributeError("job token cannot be changed once assigned")
        super().__setattr__(name, value)

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    @property
    def done(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_response(cls, response: ApiResponse, created_at: float) -> "Job":
        return cls(
            token=response.token,
            status=JobStatus.parse(response.status),
            categories=list(response.categories),
            name=response.name,
            ttl=response.ttl,
            url=response.url,
            skip_reason=SkipReason.parse(response.reason),
            created_at=created_at,
        )

    def apply(self, response: ApiResponse) -> None:
        """Overwrite the annotation fields from a poll response. ``url`` is kept."""
        self.categories = list(response.categories)
        self.name = response.name
        self.status = JobStatus.parse(response.status)
        self.ttl = response.ttl
        self.skip_reason = SkipReason.parse(response.reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "status": self.status.value,
            "categories": list(self.categories),
            "name": self.name,
            "ttl": self.ttl,
            "url": self.url,
            "skip_reason": self.skip_reason.value,
        }


__all__ = ["Job"]
