from __future__ import annotations

import pytest

from ferry_client_sdk.config import ConfigError, load_config

FERRY_VARS = (
    "FERRY_ENV",
    "FERRY_API_BASE_URL",
    "FERRY_API_BASE_URL_DEV",
    "FERRY_API_BASE_URL_STAGING",
    "FERRY_TIMEOUT_SECONDS",
    "FERRY_VERIFY_SSL",
    "FERRY_CHAT_POLL_SECONDS",
    "FERRY_CHAT_MAX_LENGTH",
    "FERRY_STORAGE_APP_NAME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in FERRY_VARS:
        monkeypatch.delenv(key, raising=False)


def test_load_config_requires_base_url() -> None:
    with pytest.raises(ConfigError, match="FERRY_API_BASE_URL"):
        load_config()


def test_load_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FERRY_API_BASE_URL", "https://api.example.com/")
    cfg = load_config()
    assert cfg.env_name == "dev"
    assert cfg.api_base_url == "https://api.example.com"
    assert cfg.timeout_seconds == 10.0
    assert cfg.verify_ssl is True
    assert cfg.chat_poll_seconds == 3.0
    assert cfg.chat_max_length == 1000
    assert cfg.storage_app_name == "ferry-client"


def test_load_config_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FERRY_ENV", "staging")
    monkeypatch.setenv("FERRY_API_BASE_URL", "https://fallback.example.com")
    monkeypatch.setenv("FERRY_API_BASE_URL_STAGING", "https://staging.example.com")
    monkeypatch.setenv("FERRY_VERIFY_SSL", "false")
    cfg = load_config()
    assert cfg.api_base_url == "https://staging.example.com"
    assert cfg.env_name == "staging"
    assert cfg.verify_ssl is False


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("FERRY_TIMEOUT_SECONDS", "0"),
        ("FERRY_CHAT_POLL_SECONDS", "-1"),
        ("FERRY_CHAT_MAX_LENGTH", "0"),
        ("FERRY_TIMEOUT_SECONDS", "abc"),
        ("FERRY_CHAT_MAX_LENGTH", "1.5"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv("FERRY_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigError, match=key):
        load_config()


def test_load_config_rejects_unrecognised_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FERRY_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("FERRY_VERIFY_SSL", "sometimes")

    with pytest.raises(ConfigError, match="FERRY_VERIFY_SSL"):
        load_config()
