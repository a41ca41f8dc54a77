from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .clients.auth import AuthClient
from .error_mapper import backend_message
from .exceptions import (
    ApiError,
    AuthenticationError,
    ProtocolError,
    TransportError,
    UnknownRoleError,
    ValidationError,
    ValidationIssue,
)
from .logging_utils import get_logger, log_action
from .models import LoginResponse, Session
from .roles import LoginChannel, NavigationTarget, home_for_role, resolve_role
from .session_store import SessionStore

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def _validate_credentials(email: str | None, password: str | None) -> None:
    missing = [name for name, value in (("email", email), ("password", password)) if not value or not value.strip()]
    if missing:
        raise ValidationError(
            [ValidationIssue(field=name, reason="Please enter both email and password") for name in missing]
        )


def _parse_login(payload: Any) -> LoginResponse:
    if not isinstance(payload, dict):
        raise AuthenticationError(code="LOGIN_FAILED", message=INVALID_CREDENTIALS, raw_payload=payload)
    try:
        return LoginResponse.model_validate(payload)
    except PydanticValidationError as exc:
        message = payload.get("message")
        raise AuthenticationError(
            code="LOGIN_FAILED",
            message=message if isinstance(message, str) and message.strip() else INVALID_CREDENTIALS,
            raw_payload=payload,
        ) from exc


@dataclass
class LoginOrchestrator:
    """Runs one login attempt end to end and decides where the user lands.

    Failures are raised to the caller and never retried; submitting
    credentials again is always an explicit user action.
    """

    auth_client: AuthClient
    session_store: SessionStore = field(default_factory=SessionStore)

    async def login(self, channel: LoginChannel, email: str, password: str) -> NavigationTarget:
        _validate_credentials(email, password)
        try:
            payload = await self.auth_client.login(channel, email, password)
        except (TransportError, ProtocolError) as exc:
            log_action(logger, "auth", "login", type(exc).__name__, level=logging.WARNING, channel=channel.value, code=exc.code)
            raise
        except ApiError as exc:
            log_action(logger, "auth", "login", "rejected", level=logging.WARNING, channel=channel.value, status_code=exc.status_code)
            raise AuthenticationError(
                code=exc.code if exc.code != "HTTP_ERROR" else "LOGIN_FAILED",
                message=backend_message(exc) or INVALID_CREDENTIALS,
                details=exc.details,
                status_code=exc.status_code,
                raw_payload=exc.raw_payload,
            ) from exc

        response = _parse_login(payload)
        user = response.user
        try:
            role = resolve_role(user.role, user.category, channel)
        except UnknownRoleError:
            log_action(logger, "auth", "login", "unknown_role", level=logging.WARNING, channel=channel.value)
            raise

        raw_user = payload.get("user") if isinstance(payload.get("user"), dict) else user.model_dump()
        session = Session(
            raw_role=user.role or user.category,
            canonical_role=role,
            token=response.token,
            display_name=user.display_name,
            user=raw_user,
        )
        self.session_store.set(session)
        destination = home_for_role(role)
        log_action(
            logger,
            "auth",
            "login",
            "success",
            role=role.value,
            channel=channel.value,
            token_scope=session.token_scope.value,
            destination=destination.value,
        )
        return destination

    def current_session(self) -> Session | None:
        return self.session_store.get()

    def logout(self) -> None:
        session = self.session_store.get()
        self.session_store.clear()
        log_action(logger, "auth", "logout", "success", role=session.canonical_role.value if session else None)
