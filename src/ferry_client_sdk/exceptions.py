from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None = None
    status_code: int = 0
    raw_payload: object | None = None

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"


class AuthenticationError(ApiError):
    """Credentials or session rejected by the backend."""


class ProtocolError(ApiError):
    """The backend answered, but not with the expected content type or shape."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class BadRequestError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class ServerError(ApiError):
    """5xx server-side failures."""


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    reason: str


class ValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        return "; ".join(dict.fromkeys(issue.reason for issue in self.issues))

    @classmethod
    def single(cls, field: str, reason: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, reason=reason)])


class UnknownRoleError(ValueError):
    def __init__(self, raw_role: str) -> None:
        self.raw_role = raw_role
        super().__init__(f"Unknown role: {raw_role}")


class ChatStateError(RuntimeError):
    pass


class ReconciliationWarning(UserWarning):
    pass

