from __future__ import annotations

import logging
from dataclasses import dataclass

from .error_mapper import backend_message
from .exceptions import (
    ApiError,
    AuthenticationError,
    ChatStateError,
    ProtocolError,
    TransportError,
    UnknownRoleError,
    ValidationError,
)
from .logging_utils import get_logger, log_action

logger = get_logger(__name__)

GENERIC_RETRY_MESSAGE = "Something went wrong. Please try again."
TRANSPORT_MESSAGE = "Could not reach the server. Check your connection and try again."
AUTH_MESSAGE = "Your sign-in was not accepted. Please log in and try again."


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    retryable: bool = False

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def to_user_facing_error(exc: Exception, module: str = "app") -> UserFacingError:
    """Turn any core failure into the single notification shown to the user."""
    if isinstance(exc, ValidationError):
        return UserFacingError(message=str(exc), retryable=False)
    if isinstance(exc, UnknownRoleError):
        return UserFacingError(
            message=f"Your account role ({exc.raw_role or 'none'}) is not supported by this app.",
            retryable=False,
        )
    if isinstance(exc, ChatStateError):
        return UserFacingError(message=str(exc), retryable=True)

    if isinstance(exc, ApiError):
        details = f"{exc.code} (HTTP {exc.status_code})"
        if exc.details:
            details = f"{details}: {exc.details}"
        log_action(
            logger,
            module,
            "error",
            type(exc).__name__,
            level=logging.WARNING,
            code=exc.code,
            status_code=exc.status_code,
            detail=exc.message,
        )
        if isinstance(exc, TransportError):
            return UserFacingError(message=TRANSPORT_MESSAGE, details=details, retryable=True)
        if isinstance(exc, AuthenticationError):
            return UserFacingError(message=backend_message(exc) or AUTH_MESSAGE, details=details, retryable=True)
        if isinstance(exc, ProtocolError):
            return UserFacingError(message=GENERIC_RETRY_MESSAGE, details=details, retryable=True)
        message = exc.message.strip() or GENERIC_RETRY_MESSAGE
        return UserFacingError(message=message, details=details, retryable=True)

    log_action(logger, module, "error", "unexpected", level=logging.ERROR, error_type=type(exc).__name__)
    return UserFacingError(message=GENERIC_RETRY_MESSAGE, details=str(exc) or None, retryable=True)
