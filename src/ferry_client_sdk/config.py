from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

T = TypeVar("T", int, float)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    timeout_seconds: float = 10.0
    verify_ssl: bool = True
    chat_poll_seconds: float = 3.0
    chat_max_length: int = 1000
    storage_app_name: str = "ferry-client"


def _env_text(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _env_number(name: str, default: T, cast: Callable[[str], T], minimum: T, exclusive: bool) -> T:
    raw = _env_text(name)
    if not raw:
        value = default
    else:
        try:
            value = cast(raw)
        except ValueError as exc:
            kind = "an integer" if cast is int else "a number"
            raise ConfigError(f"Invalid {name}: expected {kind}, got {raw!r}") from exc
    if value < minimum or (exclusive and value == minimum):
        bound = f"> {minimum}" if exclusive else f">= {minimum}"
        raise ConfigError(f"Invalid {name}: expected {bound}, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_text(name).lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid {name}: expected a boolean, got {raw!r}")


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    env_name = _env_text("FERRY_ENV") or "dev"
    api_base_url = _env_text(f"FERRY_API_BASE_URL_{env_name.upper()}") or _env_text("FERRY_API_BASE_URL")
    if not api_base_url:
        raise ConfigError("Missing required config values: FERRY_API_BASE_URL")

    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url.rstrip("/"),
        timeout_seconds=_env_number("FERRY_TIMEOUT_SECONDS", 10.0, float, 0.0, exclusive=True),
        verify_ssl=_env_bool("FERRY_VERIFY_SSL", True),
        chat_poll_seconds=_env_number("FERRY_CHAT_POLL_SECONDS", 3.0, float, 0.0, exclusive=True),
        chat_max_length=_env_number("FERRY_CHAT_MAX_LENGTH", 1000, int, 1, exclusive=False),
        storage_app_name=_env_text("FERRY_STORAGE_APP_NAME") or "ferry-client",
    )
