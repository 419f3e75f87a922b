from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """Current status of a recognition job as reported by the API."""

    NOT_COMPLETED = "not completed"
    COMPLETED = "completed"
    NOT_FOUND = "not found"
    SKIPPED = "skipped"
    TIMEOUT = "timeout"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, value: str | None) -> "JobStatus":
        if not value:
            return cls.UNRECOGNIZED
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unrecognized job status from API: %r", value)
            return cls.UNRECOGNIZED

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.NOT_COMPLETED

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    JobStatus.NOT_COMPLETED: (
        "Recognition has not yet been completed for this image. "
        "Continue polling until response has been marked completed."
    ),
    JobStatus.COMPLETED: (
        "Recognition has been completed. Annotation can be found in the name "
        "and categories of the job."
    ),
    JobStatus.NOT_FOUND: "Token supplied on URL does not match an image.",
    JobStatus.SKIPPED: (
        "Image couldn't be recognized because of a specific reason. "
        "Check the skip reason."
    ),
    JobStatus.TIMEOUT: "Recognition process exceeded the allowed TTL setting.",
    JobStatus.UNRECOGNIZED: "The API returned a status this client does not know.",
}


class SkipReason(str, Enum):
    """Why the API declined to annotate an image. Only meaningful for skipped jobs."""

    NONE = ""
    OFFENSIVE = "offensive"
    BLURRY = "blurry"
    CLOSE = "close"
    DARK = "dark"
    BRIGHT = "bright"
    UNSURE = "unsure"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, value: str | None) -> "SkipReason":
        if not value:
            return cls.NONE
        try:
            return cls(value)
        except ValueError:
            logger.warning("Unrecognized skip reason from API: %r", value)
            return cls.UNRECOGNIZED

    @property
    def description(self) -> str:
        return _REASON_DESCRIPTIONS[self]


_REASON_DESCRIPTIONS = {
    SkipReason.NONE: "The image hasn't been skipped.",
    SkipReason.OFFENSIVE: "Offensive image content.",
    SkipReason.BLURRY: "Too blurry to identify.",
    SkipReason.CLOSE: "Too close to identify.",
    SkipReason.DARK: "Too dark to identify.",
    SkipReason.BRIGHT: "Too bright to identify.",
    SkipReason.UNSURE: "Content could not be identified.",
    SkipReason.UNRECOGNIZED: "The API returned a skip reason this client does not know.",
}


__all__ = ["JobStatus", "SkipReason"]
