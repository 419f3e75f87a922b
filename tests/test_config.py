from __future__ import annotations

import json

from cloudsight.config import BASE_URL, DEFAULT_TIMEOUT, ClientConfig, load_config
from cloudsight.params import DEFAULT_LOCALE


def test_defaults_without_file_or_env() -> None:
    config = load_config(None, environ={})
    assert config == ClientConfig()
    assert config.base_url == BASE_URL
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.locale == DEFAULT_LOCALE
    assert config.api_secret is None


def test_file_values_are_overridden_by_environment(tmp_path) -> None:
    path = tmp_path / "cloudsight.json"
    path.write_text(
        json.dumps(
            {
                "api_key": "file-key",
                "api_secret": "file-secret",
                "timeout": 5,
                "locale": "pl-PL",
            }
        ),
        encoding="utf-8",
    )

    config = load_config(
        path,
        environ={
            "CLOUDSIGHT_API_KEY": "env-key",
            "CLOUDSIGHT_STRICT_STATUS": "yes",
            "CLOUDSIGHT_BASE_URL": "https://staging.example",
        },
    )

    assert config.api_key == "env-key"
    assert config.api_secret == "file-secret"
    assert config.timeout == 5.0
    assert config.locale == "pl-PL"
    assert config.strict_status is True
    assert config.base_url == "https://staging.example"


def test_invalid_values_fall_back_to_defaults(tmp_path, caplog) -> None:
    path = tmp_path / "cloudsight.json"
    path.write_text(
        json.dumps({"api_key": 42, "timeout": "soon", "strict_status": "maybe", "base_url": "  "}),
        encoding="utf-8",
    )

    with caplog.at_level("WARNING"):
        config = load_config(path, environ={"CLOUDSIGHT_API_SECRET": "   "})

    assert config.api_key == ""
    assert config.api_secret is None
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.strict_status is False
    assert config.base_url == BASE_URL
    assert "timeout" in caplog.text
    assert "strict_status" in caplog.text


def test_missing_or_broken_file_is_ignored(tmp_path, caplog) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with caplog.at_level("WARNING"):
        missing = load_config(tmp_path / "absent.json", environ={"CLOUDSIGHT_API_KEY": "k"})
        unreadable = load_config(broken, environ={})

    assert missing.api_key == "k"
    assert unreadable == ClientConfig()
    assert "absent.json" in caplog.text
    assert "broken.json" in caplog.text


def test_non_positive_timeout_is_rejected() -> None:
    config = load_config(None, environ={"CLOUDSIGHT_TIMEOUT": "0"})
    assert config.timeout == DEFAULT_TIMEOUT
