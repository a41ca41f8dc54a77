from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

_FORBIDDEN_CONTEXT_KEYS = {
    "email",
    "password",
    "phone",
    "full_name",
    "name",
    "token",
    "staff_token",
    "authorization",
    "body",
}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def _validate_context(context: dict[str, Any]) -> None:
    illegal = sorted(key for key in context if key.lower() in _FORBIDDEN_CONTEXT_KEYS)
    if illegal:
        raise ValueError(f"PII-like keys are forbidden in log context: {illegal}")


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    outcome: str,
    role: str | None = None,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    _validate_context(context)
    record = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "role": role,
        "outcome": outcome,
    }
    record.update(context)
    logger.log(level, json.dumps(record, default=str))
