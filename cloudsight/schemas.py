from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_image_url(value: str) -> str:
    """Protocol-relative URLs returned by the API are served over HTTPS."""
    if value.startswith("//"):
        return "https:" + value
    return value


class ApiResponse(BaseModel):
    """JSON body shared by image request submissions and status polls."""

    model_config = ConfigDict(extra="ignore")

    categories: List[str] = Field(default_factory=list)
    error: Any = None
    name: str = ""
    reason: str = ""
    status: str = ""
    ttl: float = 0.0
    token: str = ""
    url: str = ""

    @field_validator("categories", mode="before")
    @classmethod
    def _null_categories(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("name", "reason", "status", "token", mode="before")
    @classmethod
    def _null_strings(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("ttl", mode="before")
    @classmethod
    def _null_ttl(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return normalize_image_url(value)
        return value

    @property
    def has_error(self) -> bool:
        return self.error is not None


__all__ = ["ApiResponse", "normalize_image_url"]
