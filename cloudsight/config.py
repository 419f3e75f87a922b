"""Client configuration loaded from a JSON file and the environment.

Environment variables (optionally provided through a ``.env`` file) take
precedence over the file:

- ``CLOUDSIGHT_API_KEY`` / ``CLOUDSIGHT_API_SECRET``
- ``CLOUDSIGHT_BASE_URL``
- ``CLOUDSIGHT_TIMEOUT`` (seconds, per HTTP request)
- ``CLOUDSIGHT_STRICT_STATUS`` (reject non-200 submissions)
- ``CLOUDSIGHT_LOCALE``
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .params import DEFAULT_LOCALE

logger = logging.getLogger(__name__)

BASE_URL = "https://api.cloudsightapi.com"
DEFAULT_TIMEOUT = 20.0

_ENV_KEYS = {
    "api_key": "CLOUDSIGHT_API_KEY",
    "api_secret": "CLOUDSIGHT_API_SECRET",
    "base_url": "CLOUDSIGHT_BASE_URL",
    "timeout": "CLOUDSIGHT_TIMEOUT",
    "strict_status": "CLOUDSIGHT_STRICT_STATUS",
    "locale": "CLOUDSIGHT_LOCALE",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class ClientConfig:
    api_key: str = ""
    api_secret: str | None = None
    base_url: str = BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    strict_status: bool = False
    locale: str = DEFAULT_LOCALE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientConfig":
        """Create a config from loosely typed values, dropping invalid ones."""
        api_key = data.get("api_key")
        api_secret = data.get("api_secret")
        base_url = data.get("base_url")
        locale = data.get("locale")
        return cls(
            api_key=api_key.strip() if isinstance(api_key, str) else "",
            api_secret=api_secret.strip() or None if isinstance(api_secret, str) else None,
            base_url=base_url.strip() if isinstance(base_url, str) and base_url.strip() else BASE_URL,
            timeout=_sanitize_timeout(data.get("timeout")),
            strict_status=_sanitize_bool(data.get("strict_status"), "strict_status"),
            locale=locale.strip() if isinstance(locale, str) and locale.strip() else DEFAULT_LOCALE,
        )


def _sanitize_timeout(value: Any) -> float:
    if value is None:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid timeout %r; using %.1fs", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    if timeout <= 0:
        logger.warning("Ignoring non-positive timeout %r; using %.1fs", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return timeout


def _sanitize_bool(value: Any, name: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text not in _FALSE_VALUES:
        logger.warning("Ignoring invalid %s value %r", name, value)
    return False


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> ClientConfig:
    """Load configuration from ``path`` (if given) and environment overrides.

    A missing or unreadable file is logged and treated as empty.
    """
    data: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            logger.warning("Config file %s not found; using environment and defaults", path)
        else:
            try:
                loaded = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Failed to read config file %s: %s", path, exc)
            else:
                if isinstance(loaded, dict):
                    data.update(loaded)
                else:
                    logger.warning("Config file %s does not contain a JSON object", path)

    env = os.environ if environ is None else environ
    for field_name, env_key in _ENV_KEYS.items():
        value = env.get(env_key)
        if value is not None:
            data[field_name] = value

    return ClientConfig.from_dict(data)


__all__ = ["ClientConfig", "load_config", "BASE_URL", "DEFAULT_TIMEOUT"]
